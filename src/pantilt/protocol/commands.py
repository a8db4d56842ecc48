"""Builders for the command shapes the device recognizes."""

from __future__ import annotations

from pantilt.exceptions import InvalidParameterError
from pantilt.models.settings import SettingKey, coerce_key
from pantilt.protocol.types import (
    ANGLE_PREFIX,
    KEY_VALUE_SEPARATOR,
    MAX_ANGLE,
    MIN_ANGLE,
    Command,
)


def set_angle(angle: int) -> str:
    """``P<angle>``: move to an absolute angle in degrees."""
    if isinstance(angle, bool) or not isinstance(angle, int):
        raise InvalidParameterError(f"Angle must be an integer, got {angle!r}")
    if not MIN_ANGLE <= angle <= MAX_ANGLE:
        raise InvalidParameterError(
            f"Angle {angle} out of range ({MIN_ANGLE}-{MAX_ANGLE})"
        )
    return f"{ANGLE_PREFIX}{angle}"


def nudge_left() -> str:
    return Command.LEFT.value


def nudge_right() -> str:
    return Command.RIGHT.value


def autopan() -> str:
    return Command.AUTOPAN.value


def reset() -> str:
    return Command.RESET.value


def request_info() -> str:
    """Ask the device to dump its settings as a ``CAL_X...`` line."""
    return Command.INFO.value


def set_parameter(key: SettingKey | str, value: int) -> str:
    """``<KEY>:<value>``: write one setting on the device."""
    setting = coerce_key(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidParameterError(
            f"Value for {setting.value} must be a non-negative integer, got {value!r}"
        )
    return f"{setting.value}{KEY_VALUE_SEPARATOR}{value}"
