"""Decoded inbound line model."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from pantilt.models.settings import SettingsSnapshot


class LineKind(StrEnum):
    MESSAGE = "message"
    SETTINGS = "settings"


class TelemetryLine(BaseModel):
    """One line received from the device, without its terminator."""

    model_config = ConfigDict(frozen=True)

    text: str
    kind: LineKind = LineKind.MESSAGE
    snapshot: SettingsSnapshot | None = None

    @property
    def is_settings(self) -> bool:
        return self.kind is LineKind.SETTINGS
