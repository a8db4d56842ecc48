"""Runtime configuration for the session manager and device discovery."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DEVICE_NAME = "PanTilt"


def parse_device_map(value: str) -> dict[str, str]:
    """Parse ``Name=/dev/rfcomm0;Other=COM7`` into an alias mapping.

    Empty entries are ignored; entries without ``=`` raise ValueError.
    """
    aliases: dict[str, str] = {}
    for entry in value.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, port = entry.partition("=")
        if not sep or not name.strip() or not port.strip():
            raise ValueError(f"Invalid device map entry: {entry!r}")
        aliases[name.strip()] = port.strip()
    return aliases


class SessionConfig(BaseModel):
    """Connection and session tuning.

    ``aliases`` maps friendly device names to serial ports or pyserial URLs
    and stands in for the platform's bonded-device list.
    """

    model_config = ConfigDict(frozen=True)

    device_name: str = DEFAULT_DEVICE_NAME
    baudrate: int = Field(default=115200, gt=0)
    read_poll_interval: float = Field(default=0.1, gt=0)
    write_timeout: float | None = Field(default=None, gt=0)
    teardown_timeout: float = Field(default=2.0, gt=0)
    log_cache_size: int = Field(default=500, ge=1)
    aliases: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_env(cls) -> SessionConfig:
        """Build a config from ``PANTILT_*`` environment variables."""
        values: dict[str, object] = {}
        env_fields = {
            "PANTILT_DEVICE": "device_name",
            "PANTILT_BAUDRATE": "baudrate",
            "PANTILT_POLL_INTERVAL": "read_poll_interval",
            "PANTILT_WRITE_TIMEOUT": "write_timeout",
            "PANTILT_TEARDOWN_TIMEOUT": "teardown_timeout",
            "PANTILT_LOG_CACHE": "log_cache_size",
        }
        for env_name, field_name in env_fields.items():
            raw = os.getenv(env_name)
            if raw:
                values[field_name] = raw
        device_map = os.getenv("PANTILT_DEVICE_MAP")
        if device_map:
            values["aliases"] = parse_device_map(device_map)
        return cls.model_validate(values)
