"""Blob storage round-trip demo."""

__version__ = "0.1.0"
