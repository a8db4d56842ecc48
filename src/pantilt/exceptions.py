"""Exception hierarchy for session, transport, and protocol failures."""

from __future__ import annotations


class PanTiltError(Exception):
    """Base exception for all pantilt errors."""

    code = "pantilt_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(message)


class InvalidParameterError(PanTiltError):
    """An invalid parameter name or value was passed."""

    code = "invalid_parameter"


class TransportError(PanTiltError):
    """Error in the byte-stream transport layer."""

    code = "transport_error"


class ConnectError(TransportError):
    """Failed to establish a session."""

    code = "connect_error"


class PermissionDeniedError(ConnectError):
    """The caller lacks authorization to open the transport."""

    code = "permission_denied"


class DeviceNotFoundError(ConnectError):
    """No bonded device matches the selector."""

    code = "device_not_found"


class TransportOpenError(ConnectError):
    """I/O error while opening the transport."""

    code = "transport_open_failed"


class ConnectionLostError(TransportError):
    """The reader observed stream closure or a read error."""

    code = "connection_lost"


class SendError(PanTiltError):
    """A command could not be sent."""

    code = "send_error"


class NotConnectedError(SendError):
    """A command was issued while no session is live."""

    code = "not_connected"


class WriteFailedError(SendError):
    """I/O error while writing a command."""

    code = "write_failed"
