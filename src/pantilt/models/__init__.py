"""Pydantic data models for pantilt."""

from pantilt.models.session import ConnectionState, ConnectionStatus
from pantilt.models.settings import (
    PARAMETER_SPECS,
    SETTING_ORDER,
    DeviceSettings,
    ParameterSpec,
    SettingKey,
    SettingsSnapshot,
    coerce_key,
)
from pantilt.models.telemetry import LineKind, TelemetryLine

__all__ = [
    "PARAMETER_SPECS",
    "SETTING_ORDER",
    "ConnectionState",
    "ConnectionStatus",
    "DeviceSettings",
    "LineKind",
    "ParameterSpec",
    "SettingKey",
    "SettingsSnapshot",
    "TelemetryLine",
    "coerce_key",
]
