"""Byte-stream transports to the device."""

from pantilt.transport.base import Transport
from pantilt.transport.discovery import (
    BondedDevice,
    DeviceConnector,
    check_permission,
    list_devices,
    resolve_device,
)
from pantilt.transport.serial_port import SerialTransport

__all__ = [
    "BondedDevice",
    "DeviceConnector",
    "SerialTransport",
    "Transport",
    "check_permission",
    "list_devices",
    "resolve_device",
]
