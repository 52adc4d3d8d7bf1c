"""Exception hierarchy for the color relay."""

from __future__ import annotations


class RelayError(Exception):
    """Base exception for all color relay errors."""


class ConfigError(RelayError):
    """Invalid or missing configuration. Fatal at startup."""


class StoreError(RelayError):
    """Failure reaching or querying the document store."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class BadRequestError(RelayError):
    """Request body does not have a supported shape."""

    status_code = 400
