"""Application-level handle for driving the pan/tilt head."""

from __future__ import annotations

import threading

from pantilt.config import SessionConfig
from pantilt.core.message_log import MessageLog
from pantilt.core.session import Connector, SessionManager
from pantilt.core.settings import SettingsModel
from pantilt.exceptions import InvalidParameterError
from pantilt.models.settings import SettingKey
from pantilt.protocol import commands
from pantilt.protocol.types import MAX_ANGLE, MIN_ANGLE, NEUTRAL_ANGLE
from pantilt.utils.logging import get_logger

logger = get_logger(__name__)


class PanTiltController:
    """Session, settings, and client-side pan state in one object.

    Created once by whatever owns the application lifecycle and passed to
    the UI layer by reference. Send errors from the session manager
    propagate unchanged.

    Usage:
        with PanTiltController() as pantilt:
            pantilt.connect()
            pantilt.set_angle(45)
            pantilt.adjust("PAN_MP", +1)
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        connector: Connector | None = None,
        session: SessionManager | None = None,
    ) -> None:
        if session is None:
            config = config or SessionConfig()
            session = SessionManager(
                connector=connector,
                settings=SettingsModel(config.log_cache_size),
                message_log=MessageLog(config.log_cache_size),
                config=config,
            )
        self._session = session
        self._pan_lock = threading.Lock()
        self._angle = NEUTRAL_ANGLE
        self._autopan = False

    @property
    def session(self) -> SessionManager:
        return self._session

    @property
    def settings(self) -> SettingsModel:
        return self._session.settings

    @property
    def angle(self) -> int:
        return self._angle

    @property
    def autopan_active(self) -> bool:
        return self._autopan

    # --- Connection ---

    def connect(self, selector: str | None = None) -> None:
        self._session.connect(selector)

    def disconnect(self) -> None:
        self._session.disconnect()

    def __enter__(self) -> PanTiltController:
        return self

    def __exit__(self, *args: object) -> None:
        self.disconnect()

    # --- Pan control ---
    # _pan_lock covers check, send and update. Angle and autopan change only
    # after a successful send.

    def set_angle(self, angle: int) -> None:
        with self._pan_lock:
            self._session.send_command(commands.set_angle(angle))
            self._angle = angle

    def nudge(self, direction: int) -> int:
        """Send one LEFT (-1) or RIGHT (+1) step; returns the tracked angle."""
        if direction not in (-1, 1):
            raise InvalidParameterError(f"Direction must be -1 or 1, got {direction!r}")
        command = commands.nudge_left() if direction < 0 else commands.nudge_right()
        with self._pan_lock:
            self._session.send_command(command)
            target = self._angle + direction
            if MIN_ANGLE <= target <= MAX_ANGLE:
                self._angle = target
            return self._angle

    def toggle_autopan(self) -> bool:
        """Enter or leave automatic sweep; returns the new autopan flag.

        Leaving re-sends the last manual angle so the head stops there.
        """
        with self._pan_lock:
            if self._autopan:
                self._session.send_command(commands.set_angle(self._angle))
                self._autopan = False
            else:
                self._session.send_command(commands.autopan())
                self._autopan = True
            active = self._autopan
        logger.debug("autopan_toggled", active=active)
        return active

    def stop(self) -> None:
        """Leave autopan and return the head to neutral."""
        with self._pan_lock:
            self._session.send_command(commands.reset())
            self._autopan = False
            self._angle = NEUTRAL_ANGLE

    # --- Settings ---

    def request_settings(self) -> None:
        self._session.send_command(commands.request_info())

    def adjust(self, key: SettingKey | str, delta: int) -> int:
        value = self.settings.apply_local_delta(key, delta)
        self._session.send_command(commands.set_parameter(key, value))
        return value

    def set_parameter(self, key: SettingKey | str, value: int) -> int:
        stored = self.settings.set_local(key, value)
        self._session.send_command(commands.set_parameter(key, stored))
        return stored

    def reset_settings(self) -> list[tuple[SettingKey, int]]:
        pairs = self.settings.reset_to_defaults()
        for key, value in pairs:
            self._session.send_command(commands.set_parameter(key, value))
        return pairs
