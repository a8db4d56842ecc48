"""Encode outbound commands and decode inbound lines.

Outbound commands are text plus a single LF. Inbound lines beginning with
``CAL_X`` are settings dumps of the form ``KEY:VALUE,KEY:VALUE,...``; every
other line is an opaque status message passed through verbatim.
"""

from __future__ import annotations

from pantilt.models.settings import SettingKey, SettingsSnapshot
from pantilt.models.telemetry import LineKind, TelemetryLine
from pantilt.protocol.types import (
    KEY_VALUE_SEPARATOR,
    LINE_TERMINATOR,
    PAIR_SEPARATOR,
    TELEMETRY_PREFIX,
)

_KNOWN_KEYS = {key.value: key for key in SettingKey}


def encode(command: str) -> bytes:
    """Return the wire bytes for *command*: the text followed by LF."""
    return (command + LINE_TERMINATOR).encode("utf-8")


def _parse_value(value: str) -> int | None:
    if value and value.isascii() and value.isdigit():
        return int(value)
    return None


def parse_settings(line: str) -> SettingsSnapshot:
    """Parse a ``KEY:VALUE`` list into a partial snapshot.

    Segments without a separator, non-integer values and unknown keys are
    dropped. A repeated key keeps its last value.
    """
    values: dict[SettingKey, int] = {}
    for segment in line.split(PAIR_SEPARATOR):
        key, sep, raw_value = segment.partition(KEY_VALUE_SEPARATOR)
        if not sep:
            continue
        setting = _KNOWN_KEYS.get(key.strip())
        value = _parse_value(raw_value.strip())
        if setting is None or value is None:
            continue
        values[setting] = value
    return SettingsSnapshot(values=values)


def decode(line: str) -> TelemetryLine:
    """Classify and decode one inbound line. Never raises."""
    text = line.rstrip("\r\n")
    if text.startswith(TELEMETRY_PREFIX):
        return TelemetryLine(
            text=text,
            kind=LineKind.SETTINGS,
            snapshot=parse_settings(text),
        )
    return TelemetryLine(text=text)


def decode_bytes(raw: bytes) -> TelemetryLine:
    """Decode raw line bytes; invalid UTF-8 is replaced, not rejected."""
    return decode(raw.decode("utf-8", errors="replace"))
