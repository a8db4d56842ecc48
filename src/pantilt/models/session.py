"""Connection state models published by the session manager."""

from __future__ import annotations

import time
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ConnectionState(StrEnum):
    """Lifecycle state of a session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class ConnectionStatus(BaseModel):
    """Immutable snapshot of the connection state.

    ``reason`` and ``error_code`` are only set for ``ERROR``.
    """

    model_config = ConfigDict(frozen=True)

    state: ConnectionState = ConnectionState.DISCONNECTED
    reason: str | None = None
    error_code: str | None = None
    device: str | None = None
    timestamp: float = Field(default_factory=time.time)

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def is_error(self) -> bool:
        return self.state is ConnectionState.ERROR
