"""Newline-delimited command/telemetry protocol."""

from pantilt.protocol import commands
from pantilt.protocol.codec import decode, decode_bytes, encode, parse_settings
from pantilt.protocol.types import Command

__all__ = [
    "Command",
    "commands",
    "decode",
    "decode_bytes",
    "encode",
    "parse_settings",
]
