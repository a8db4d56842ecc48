"""Wire constants and command names for the pan/tilt line protocol."""

from __future__ import annotations

from enum import StrEnum

# Every command and every inbound line ends with a single LF.
LINE_TERMINATOR = "\n"
LINE_TERMINATOR_BYTES = b"\n"

# Inbound lines starting with this prefix carry a settings dump.
TELEMETRY_PREFIX = "CAL_X"

PAIR_SEPARATOR = ","
KEY_VALUE_SEPARATOR = ":"

# Absolute angle command prefix: P<angle>
ANGLE_PREFIX = "P"
MIN_ANGLE = 0
MAX_ANGLE = 180
NEUTRAL_ANGLE = 90


class Command(StrEnum):
    """Fixed-text commands understood by the device."""

    LEFT = "LEFT"
    RIGHT = "RIGHT"
    AUTOPAN = "AUTOPAN"
    RESET = "RESET"
    INFO = "INFO"
