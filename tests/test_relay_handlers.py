"""Unit tests for ingest (handle_post) and query (handle_get) over a MemoryStore."""

from unittest.mock import MagicMock

import pytest

from colorrelay.exceptions import BadRequestError, StoreError
from colorrelay.relay import DEVICE_CLIENT, handle_get, handle_post
from colorrelay.relay.common import DEFAULT_COLOR
from colorrelay.store.base import LATEST_COLOR_KEY, SCAN_CONTROL_KEY


class TestIngest:
    def test_color_post_upserts_latest_color(self, memory_store):
        status, payload = handle_post(memory_store, {"red": 255, "green": 0, "blue": 17})
        assert status == 201
        assert payload == {"message": "Data saved successfully"}
        doc = memory_store.get(LATEST_COLOR_KEY)
        assert (doc["red"], doc["green"], doc["blue"]) == (255, 0, 17)
        assert doc["timestamp"]

    def test_color_post_replaces_previous(self, memory_store):
        handle_post(memory_store, {"red": 1, "green": 2, "blue": 3})
        handle_post(memory_store, {"red": 4, "green": 5, "blue": 6})
        assert handle_get(memory_store) == {"red": 4, "green": 5, "blue": 6}

    def test_zero_values_are_present(self, memory_store):
        status, _ = handle_post(memory_store, {"red": 0, "green": 0, "blue": 0})
        assert status == 201

    def test_scan_post_sets_flag(self, memory_store):
        status, payload = handle_post(memory_store, {"scan": True})
        assert status == 200
        assert payload == {"message": "Scan requested"}
        assert memory_store.get(SCAN_CONTROL_KEY)["scan_requested"] is True

    def test_scan_takes_precedence_over_color(self, memory_store):
        status, _ = handle_post(memory_store, {"scan": True, "red": 1, "green": 2, "blue": 3})
        assert status == 200
        assert memory_store.get(LATEST_COLOR_KEY) is None

    def test_missing_blue_rejected(self, memory_store):
        with pytest.raises(BadRequestError, match="blue"):
            handle_post(memory_store, {"red": 10, "green": 20})
        assert memory_store.get(LATEST_COLOR_KEY) is None

    def test_null_field_rejected(self, memory_store):
        with pytest.raises(BadRequestError):
            handle_post(memory_store, {"red": 10, "green": None, "blue": 30})

    @pytest.mark.parametrize("body", [{"scan": "true"}, {"scan": 1}, {"scan": False}, {}])
    def test_non_true_scan_without_color_rejected(self, memory_store, body):
        with pytest.raises(BadRequestError):
            handle_post(memory_store, body)
        assert memory_store.get(SCAN_CONTROL_KEY) is None

    @pytest.mark.parametrize("body", [None, [1, 2, 3], "red", 42])
    def test_non_object_body_rejected(self, memory_store, body):
        with pytest.raises(BadRequestError):
            handle_post(memory_store, body)

    def test_store_error_propagates(self):
        store = MagicMock()
        store.upsert.side_effect = StoreError("connection refused")
        with pytest.raises(StoreError):
            handle_post(store, {"red": 1, "green": 2, "blue": 3})


class TestQuery:
    def test_frontend_default_before_any_post(self, memory_store):
        assert handle_get(memory_store) == DEFAULT_COLOR
        assert handle_get(memory_store, client="browser") == {"red": 128, "green": 128, "blue": 128}

    def test_frontend_strips_timestamp(self, memory_store):
        handle_post(memory_store, {"red": 12, "green": 34, "blue": 56})
        assert handle_get(memory_store) == {"red": 12, "green": 34, "blue": 56}

    def test_frontend_partial_document_falls_back(self, memory_store):
        memory_store.upsert(LATEST_COLOR_KEY, {"red": 7})
        assert handle_get(memory_store) == {"red": 7, "green": 128, "blue": 128}

    def test_device_without_request(self, memory_store):
        assert handle_get(memory_store, client=DEVICE_CLIENT) == {"scan_requested": False}

    def test_device_consumes_scan_once(self, memory_store):
        handle_post(memory_store, {"scan": True})
        assert handle_get(memory_store, client="esp32") == {"scan_requested": True}
        assert handle_get(memory_store, client="esp32") == {"scan_requested": False}
        assert memory_store.get(SCAN_CONTROL_KEY)["scan_requested"] is False

    def test_device_client_case_insensitive(self, memory_store):
        handle_post(memory_store, {"scan": True})
        assert handle_get(memory_store, client="ESP32") == {"scan_requested": True}

    def test_rescan_after_consume(self, memory_store):
        handle_post(memory_store, {"scan": True})
        handle_get(memory_store, client="esp32")
        handle_post(memory_store, {"scan": True})
        assert handle_get(memory_store, client="esp32") == {"scan_requested": True}

    def test_frontend_read_does_not_consume_scan(self, memory_store):
        handle_post(memory_store, {"scan": True})
        handle_get(memory_store)
        assert handle_get(memory_store, client="esp32") == {"scan_requested": True}

    def test_store_error_propagates(self):
        store = MagicMock()
        store.get.side_effect = StoreError("timeout")
        with pytest.raises(StoreError):
            handle_get(store)
