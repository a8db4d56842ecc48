"""Serial-port transport built on pyserial.

Bluetooth SPP links appear to the host as serial ports (``/dev/rfcomm0``,
``COM7``). Any pyserial URL (``socket://``, ``loop://``, ``rfc2217://``) is
accepted as well.
"""

from __future__ import annotations

import errno
import threading

import serial

from pantilt.exceptions import PermissionDeniedError, TransportError, TransportOpenError
from pantilt.protocol.types import LINE_TERMINATOR_BYTES
from pantilt.transport.base import Transport
from pantilt.utils.logging import get_logger

logger = get_logger(__name__)

_PERMISSION_ERRNOS = {errno.EACCES, errno.EPERM}


class SerialTransport(Transport):
    """Line-oriented wrapper around an open pyserial port.

    Reads poll with the port timeout so that ``close()`` from another thread
    unblocks ``readline()`` within one poll interval.
    """

    def __init__(self, port: serial.SerialBase, name: str | None = None) -> None:
        self._serial = port
        self._name = name or str(getattr(port, "port", "") or "")
        self._buffer = bytearray()
        self._closed = threading.Event()

    @classmethod
    def open(
        cls,
        url: str,
        baudrate: int = 115200,
        poll_interval: float = 0.1,
        write_timeout: float | None = None,
    ) -> SerialTransport:
        """Open *url* and return a transport for it.

        Raises:
            PermissionDeniedError: If the OS refuses access to the port.
            TransportOpenError: On any other open failure.
        """
        logger.info("serial_opening", port=url, baudrate=baudrate)
        try:
            port = serial.serial_for_url(
                url,
                baudrate=baudrate,
                timeout=poll_interval,
                write_timeout=write_timeout,
            )
        except serial.SerialException as exc:
            if getattr(exc, "errno", None) in _PERMISSION_ERRNOS:
                raise PermissionDeniedError(f"Permission denied opening {url}: {exc}") from exc
            raise TransportOpenError(f"Error connecting to {url}: {exc}") from exc
        except (OSError, ValueError) as exc:
            raise TransportOpenError(f"Error connecting to {url}: {exc}") from exc
        logger.info("serial_opened", port=url)
        return cls(port, name=url)

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_open(self) -> bool:
        return not self._closed.is_set() and bool(self._serial.is_open)

    def write(self, data: bytes) -> None:
        if self._closed.is_set():
            raise TransportError(f"{self._name} is closed")
        try:
            self._serial.write(data)
            self._serial.flush()
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"Write to {self._name} failed: {exc}") from exc

    def readline(self) -> bytes:
        while True:
            end = self._buffer.find(LINE_TERMINATOR_BYTES)
            if end >= 0:
                line = bytes(self._buffer[: end + 1])
                del self._buffer[: end + 1]
                return line
            if self._closed.is_set():
                return b""
            try:
                chunk = self._serial.read(self._serial.in_waiting or 1)
            except (serial.SerialException, OSError) as exc:
                if self._closed.is_set():
                    return b""
                raise TransportError(f"Read from {self._name} failed: {exc}") from exc
            except (TypeError, AttributeError):
                # pyserial tears down its handle without locking on close()
                if self._closed.is_set():
                    return b""
                raise
            if chunk:
                self._buffer.extend(chunk)

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        cancel_read = getattr(self._serial, "cancel_read", None)
        if cancel_read is not None:
            try:
                cancel_read()
            except (serial.SerialException, OSError):
                logger.debug("serial_cancel_read_failed", port=self._name)
        try:
            self._serial.close()
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"Close of {self._name} failed: {exc}") from exc
        finally:
            logger.info("serial_closed", port=self._name)
