"""Schema versioning and migration engine for the photobooth kiosk store."""

__version__ = "0.1.0"
