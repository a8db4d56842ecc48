"""Connection session manager.

Owns the transport for at most one live session, serializes writes, runs
the inbound reader thread, and publishes state, telemetry, and errors on
separate channels.

Locking:
    _lifecycle_lock  serializes connect() and disconnect(); held across the
                     transport open.
    _lock            guards the session reference and status; state events
                     are published while it is held so they keep
                     transition order.
    _write_lock      serializes transport writes.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from typing import Protocol

from pantilt.config import SessionConfig
from pantilt.core.events import EventChannel
from pantilt.core.message_log import MessageLog
from pantilt.core.settings import SettingsModel
from pantilt.exceptions import (
    ConnectionLostError,
    NotConnectedError,
    PanTiltError,
    TransportError,
    TransportOpenError,
    WriteFailedError,
)
from pantilt.models.session import ConnectionState, ConnectionStatus
from pantilt.models.telemetry import TelemetryLine
from pantilt.protocol.codec import decode_bytes, encode
from pantilt.transport.base import Transport
from pantilt.transport.discovery import DeviceConnector
from pantilt.utils.logging import get_logger

logger = get_logger(__name__)

# Process-wide so reader thread names stay unique across managers.
_session_ids = itertools.count(1)


class Connector(Protocol):
    """Anything that can turn a device selector into an open transport."""

    def open(self, selector: str) -> Transport: ...


@dataclass
class _Session:
    session_id: int
    device: str
    transport: Transport
    cancelled: threading.Event = field(default_factory=threading.Event)
    reader: threading.Thread | None = None


class SessionManager:
    """Manages one connection to the pan/tilt device.

    ``connect()`` while connected or connecting is a no-op. ``disconnect()``
    is idempotent. A write failure is reported to the caller and on
    ``errors`` but never changes the connection state; only the reader
    declares the connection lost.

    Usage:
        manager = SessionManager()
        states = manager.state_changes.subscribe()
        manager.connect("PanTilt")
        manager.send_command("INFO")
        line = manager.telemetry.subscribe().get(timeout=1.0)
        manager.disconnect()
    """

    def __init__(
        self,
        connector: Connector | None = None,
        settings: SettingsModel | None = None,
        message_log: MessageLog | None = None,
        config: SessionConfig | None = None,
    ) -> None:
        self._config = config or SessionConfig()
        self._connector = connector or DeviceConnector(self._config)
        self._settings = (
            settings if settings is not None
            else SettingsModel(self._config.log_cache_size)
        )
        self._message_log = (
            message_log if message_log is not None
            else MessageLog(self._config.log_cache_size)
        )

        self._lifecycle_lock = threading.Lock()
        self._lock = threading.RLock()
        self._write_lock = threading.Lock()
        self._session: _Session | None = None
        self._status = ConnectionStatus()

        # Subscriptions are bounded by log_cache_size and drop their oldest event.
        queue_size = self._config.log_cache_size
        self.state_changes: EventChannel[ConnectionStatus] = EventChannel("state", queue_size)
        self.telemetry: EventChannel[TelemetryLine] = EventChannel("telemetry", queue_size)
        self.errors: EventChannel[PanTiltError] = EventChannel("errors", queue_size)

    # --- Properties ---

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def settings(self) -> SettingsModel:
        return self._settings

    @property
    def message_log(self) -> MessageLog:
        return self._message_log

    @property
    def status(self) -> ConnectionStatus:
        with self._lock:
            return self._status

    @property
    def state(self) -> ConnectionState:
        return self.status.state

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def session_id(self) -> int | None:
        with self._lock:
            return self._session.session_id if self._session else None

    @property
    def reader_alive(self) -> bool:
        with self._lock:
            session = self._session
        return bool(session and session.reader and session.reader.is_alive())

    # --- Lifecycle ---

    def connect(self, selector: str | None = None) -> None:
        """Open a session to *selector* (default: the configured device name).

        Raises:
            PermissionDeniedError: Access to the transport was refused.
            DeviceNotFoundError: No bonded device matches *selector*.
            TransportOpenError: The transport could not be opened.
        """
        device = selector or self._config.device_name
        with self._lifecycle_lock:
            with self._lock:
                if self._status.state in (ConnectionState.CONNECTED, ConnectionState.CONNECTING):
                    logger.debug(
                        "session_connect_ignored",
                        device=device,
                        state=self._status.state.value,
                    )
                    return
                self._transition(ConnectionState.CONNECTING, device=device)

            logger.info("session_connecting", device=device)
            try:
                transport = self._connector.open(device)
            except PanTiltError as exc:
                self._fail_connect(device, exc)
                raise
            except Exception as exc:
                error = TransportOpenError(f"Error connecting to {device}: {exc}")
                self._fail_connect(device, error)
                raise error from exc

            session = _Session(
                session_id=next(_session_ids),
                device=device,
                transport=transport,
            )
            session.reader = threading.Thread(
                target=self._read_loop,
                args=(session,),
                name=f"pantilt-reader-{session.session_id}",
                daemon=True,
            )
            with self._lock:
                self._session = session
                self._transition(ConnectionState.CONNECTED, device=device)
            session.reader.start()
            logger.info("session_connected", device=device, session_id=session.session_id)

    def disconnect(self) -> None:
        """Stop the reader, close the transport, and go to DISCONNECTED."""
        with self._lifecycle_lock:
            with self._lock:
                session = self._session
                self._session = None
                if session is None:
                    if self._status.state is ConnectionState.ERROR:
                        self._transition(ConnectionState.DISCONNECTED, device=self._status.device)
                    return
                session.cancelled.set()

            logger.info("session_disconnecting", device=session.device, session_id=session.session_id)
            self._close_transport(session)
            self._join_reader(session)
            with self._lock:
                self._transition(ConnectionState.DISCONNECTED, device=session.device)
            logger.info("session_disconnected", device=session.device)

    def __enter__(self) -> SessionManager:
        return self

    def __exit__(self, *args: object) -> None:
        self.disconnect()

    # --- Commands ---

    def send_command(self, text: str) -> None:
        """Write one command line to the device.

        Raises:
            NotConnectedError: No live session; nothing is written.
            WriteFailedError: The transport write failed.
        """
        with self._lock:
            session = self._session
        if session is None:
            error = NotConnectedError("Not connected.")
            self._report_error(error)
            raise error

        payload = encode(text)
        with self._write_lock:
            try:
                session.transport.write(payload)
            except TransportError as exc:
                error = WriteFailedError(f"Error sending command: {exc}")
                self._report_error(error)
                logger.warning("command_write_failed", command=text, error=str(exc))
                raise error from exc
        logger.debug("command_sent", command=text)

    # --- Internals ---

    def _transition(
        self,
        state: ConnectionState,
        device: str | None = None,
        reason: str | None = None,
        error_code: str | None = None,
    ) -> None:
        # Caller holds self._lock.
        previous = self._status.state
        self._status = ConnectionStatus(
            state=state, device=device, reason=reason, error_code=error_code,
        )
        logger.debug(
            "session_state_changed",
            previous=previous.value,
            state=state.value,
            reason=reason,
        )
        self.state_changes.publish(self._status)

    def _fail_connect(self, device: str, error: PanTiltError) -> None:
        with self._lock:
            self._transition(
                ConnectionState.ERROR,
                device=device,
                reason=error.message,
                error_code=error.code,
            )
        logger.warning("session_connect_failed", device=device, code=error.code, error=error.message)
        self._report_error(error)

    def _report_error(self, error: PanTiltError) -> None:
        self._message_log.append_error(error.message)
        self.errors.publish(error)

    def _close_transport(self, session: _Session) -> None:
        try:
            session.transport.close()
        except Exception as exc:
            logger.warning(
                "transport_close_failed",
                device=session.device,
                session_id=session.session_id,
                error=str(exc),
            )

    def _join_reader(self, session: _Session) -> None:
        reader = session.reader
        if reader is None or reader is threading.current_thread() or not reader.is_alive():
            return
        reader.join(self._config.teardown_timeout)
        if reader.is_alive():
            logger.warning(
                "session_reader_join_timeout",
                session_id=session.session_id,
                timeout=self._config.teardown_timeout,
            )

    def _read_loop(self, session: _Session) -> None:
        logger.debug("reader_started", session_id=session.session_id)
        while not session.cancelled.is_set():
            try:
                raw = session.transport.readline()
            except Exception as exc:
                if not isinstance(exc, TransportError):
                    logger.exception("reader_unexpected_error", session_id=session.session_id)
                self._connection_lost(session, f"Connection lost: {exc}")
                break
            if session.cancelled.is_set():
                break
            if not raw:
                self._connection_lost(session, "Connection lost: stream closed by device")
                break
            self._dispatch(raw)
        logger.debug("reader_stopped", session_id=session.session_id)

    def _dispatch(self, raw: bytes) -> None:
        line = decode_bytes(raw)
        logger.debug("line_received", kind=line.kind.value, text=line.text)
        if line.snapshot is not None:
            self._settings.merge_snapshot(line.snapshot)
        self._message_log.append(line.text)
        self.telemetry.publish(line)

    def _connection_lost(self, session: _Session, reason: str) -> None:
        with self._lock:
            if session.cancelled.is_set() or self._session is not session:
                return
            session.cancelled.set()
            self._session = None
            error = ConnectionLostError(reason)
            self._transition(
                ConnectionState.ERROR,
                device=session.device,
                reason=reason,
                error_code=error.code,
            )
        logger.warning("session_connection_lost", device=session.device, reason=reason)
        self._close_transport(session)
        self._report_error(error)
