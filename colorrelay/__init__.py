"""Color Relay: single-slot color and scan-flag relay between an ESP32 color sensor and a web frontend."""

__version__ = "0.1.0"
