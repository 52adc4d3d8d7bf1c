"""Logging helpers shared by the store and relay handlers."""
