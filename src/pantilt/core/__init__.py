"""Core session, settings, and event layer."""

from pantilt.core.controller import PanTiltController
from pantilt.core.events import EventChannel, Subscription
from pantilt.core.message_log import MessageLog
from pantilt.core.session import SessionManager
from pantilt.core.settings import SettingsModel

__all__ = [
    "EventChannel",
    "MessageLog",
    "PanTiltController",
    "SessionManager",
    "SettingsModel",
    "Subscription",
]
