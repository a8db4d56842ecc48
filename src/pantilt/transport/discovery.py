"""Bonded-device discovery, permission checks, and transport opening."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from serial.tools.list_ports import comports

from pantilt.config import SessionConfig
from pantilt.exceptions import DeviceNotFoundError, PermissionDeniedError
from pantilt.transport.base import Transport
from pantilt.transport.serial_port import SerialTransport
from pantilt.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BondedDevice:
    """A device the host can open a serial link to."""

    name: str
    port: str
    description: str = ""


def _is_url(selector: str) -> bool:
    return "://" in selector


def _port_names(info) -> list[str]:
    """Names a port may be matched by, from pyserial's ListPortInfo."""
    names = [
        getattr(info, "name", None),
        getattr(info, "description", None),
        getattr(info, "product", None),
        getattr(info, "interface", None),
    ]
    return [n for n in names if n and n != "n/a"]


def list_devices(aliases: Mapping[str, str] | None = None) -> list[BondedDevice]:
    """List configured aliases followed by the host's serial ports."""
    devices = [
        BondedDevice(name=name, port=port, description="alias")
        for name, port in (aliases or {}).items()
    ]
    for info in comports():
        names = _port_names(info)
        devices.append(BondedDevice(
            name=names[0] if names else info.device,
            port=info.device,
            description=getattr(info, "description", "") or "",
        ))
    return devices


def resolve_device(selector: str, aliases: Mapping[str, str] | None = None) -> BondedDevice:
    """Resolve *selector* to a device.

    Lookup order: configured alias, pyserial URL, exact port device, name
    match against port description/product/interface, existing path.

    Raises:
        DeviceNotFoundError: If nothing matches.
    """
    if not selector:
        raise DeviceNotFoundError("No device selector given")

    aliases = aliases or {}
    if selector in aliases:
        return BondedDevice(name=selector, port=aliases[selector], description="alias")

    if _is_url(selector):
        return BondedDevice(name=selector, port=selector, description="url")

    wanted = selector.lower()
    ports = list(comports())
    for info in ports:
        if info.device == selector:
            return BondedDevice(
                name=selector, port=info.device,
                description=getattr(info, "description", "") or "",
            )
    for info in ports:
        if any(wanted == n.lower() or wanted in n.lower() for n in _port_names(info)):
            logger.debug("device_matched", selector=selector, port=info.device)
            return BondedDevice(
                name=selector, port=info.device,
                description=getattr(info, "description", "") or "",
            )

    if os.path.exists(selector):
        return BondedDevice(name=selector, port=selector, description="path")

    raise DeviceNotFoundError(f"{selector} not found. Please pair first.")


def check_permission(device: BondedDevice) -> None:
    """Require read/write access to local device paths.

    URLs and ports that are not filesystem paths (e.g. ``COM7``) are left to
    the open call.

    Raises:
        PermissionDeniedError: If the path exists but is not accessible.
    """
    if _is_url(device.port) or not os.path.exists(device.port):
        return
    if not os.access(device.port, os.R_OK | os.W_OK):
        raise PermissionDeniedError(
            f"Permission to open {device.port} not granted."
        )


class DeviceConnector:
    """Resolves a selector and opens a SerialTransport to it."""

    def __init__(self, config: SessionConfig | None = None) -> None:
        self._config = config or SessionConfig()

    def open(self, selector: str) -> Transport:
        device = resolve_device(selector, self._config.aliases)
        check_permission(device)
        logger.info("device_resolved", selector=selector, port=device.port)
        return SerialTransport.open(
            device.port,
            baudrate=self._config.baudrate,
            poll_interval=self._config.read_poll_interval,
            write_timeout=self._config.write_timeout,
        )
