"""Authoritative in-memory store of the device settings."""

from __future__ import annotations

import threading

from pantilt.core.events import EventChannel
from pantilt.models.settings import (
    PARAMETER_SPECS,
    SETTING_ORDER,
    DeviceSettings,
    SettingKey,
    SettingsSnapshot,
    coerce_key,
)
from pantilt.utils.logging import get_logger

logger = get_logger(__name__)


class SettingsModel:
    """Five clamped integer parameters with partial-merge semantics.

    Local edits are clamped to each parameter's range. Values reported by the
    device are merged unclamped and only for the keys present. The model
    performs no I/O; callers echo changes to the device themselves.

    Every mutation publishes the resulting DeviceSettings on ``changes``;
    *queue_size* bounds each subscription (0 is unbounded).
    """

    def __init__(self, queue_size: int = 0) -> None:
        self._lock = threading.Lock()
        self._values: dict[SettingKey, int] = {
            key: spec.default for key, spec in PARAMETER_SPECS.items()
        }
        self.changes: EventChannel[DeviceSettings] = EventChannel("settings", queue_size)

    def get(self, key: SettingKey | str) -> int:
        setting = coerce_key(key)
        with self._lock:
            return self._values[setting]

    def current(self) -> DeviceSettings:
        with self._lock:
            return DeviceSettings.from_values(self._values)

    def apply_local_delta(self, key: SettingKey | str, delta: int) -> int:
        """Adjust one parameter by *delta*, clamp it, and return the new value."""
        setting = coerce_key(key)
        spec = PARAMETER_SPECS[setting]
        with self._lock:
            value = spec.clamp(self._values[setting] + delta)
            self._values[setting] = value
            self._publish_locked()
        logger.debug("settings_local_delta", key=setting.value, delta=delta, value=value)
        return value

    def set_local(self, key: SettingKey | str, value: int) -> int:
        """Store a clamped absolute value and return what was stored."""
        setting = coerce_key(key)
        spec = PARAMETER_SPECS[setting]
        with self._lock:
            stored = spec.clamp(value)
            self._values[setting] = stored
            self._publish_locked()
        logger.debug("settings_local_set", key=setting.value, requested=value, value=stored)
        return stored

    def merge_snapshot(self, snapshot: SettingsSnapshot) -> None:
        """Overwrite only the keys present in *snapshot*."""
        if snapshot.is_empty:
            return
        with self._lock:
            for key, value in snapshot.items():
                self._values[key] = value
            self._publish_locked()
        logger.debug(
            "settings_merged",
            keys=[key.value for key in snapshot.keys()],
        )

    def reset_to_defaults(self) -> list[tuple[SettingKey, int]]:
        """Restore every default; return the pairs in fixed order."""
        with self._lock:
            for key in SETTING_ORDER:
                self._values[key] = PARAMETER_SPECS[key].default
            pairs = [(key, self._values[key]) for key in SETTING_ORDER]
            self._publish_locked()
        logger.info("settings_reset_to_defaults")
        return pairs

    def _publish_locked(self) -> None:
        self.changes.publish(DeviceSettings.from_values(self._values))
