"""Abstract byte-stream transport to the pan/tilt device."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Transport(ABC):
    """Bidirectional byte stream owned by exactly one session.

    Implementations must allow ``close()`` to be called from another thread
    while ``readline()`` is blocked; the blocked call then returns ``b""``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable port or URL."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True until ``close()`` has been called or the stream failed."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write *data* completely.

        Raises:
            TransportError: On any I/O failure.
        """

    @abstractmethod
    def readline(self) -> bytes:
        """Block until one line arrives and return it including the LF.

        Returns ``b""`` at end-of-stream or once the transport is closed.

        Raises:
            TransportError: On a read failure while still open.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the stream. Idempotent."""

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
