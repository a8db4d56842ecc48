"""pantilt - Bluetooth serial client for a servo pan/tilt controller."""

__version__ = "0.1.0"
