"""Notification dispatcher factory.

Provides get_dispatcher() / set_dispatcher() to swap implementations:
- LoggingDispatcher (default) writes notifications to the log
- FakeDispatcher records notifications in memory for tests

The default is chosen with the NOTIFICATION_DISPATCHER environment variable
(``logging`` or ``fake``).
"""

import os

from aftersales.notification.port import NotificationDispatcher

_current_dispatcher: NotificationDispatcher | None = None


def get_dispatcher() -> NotificationDispatcher:
    """Return the configured dispatcher (singleton)."""
    global _current_dispatcher
    if _current_dispatcher is None:
        adapter = os.environ.get("NOTIFICATION_DISPATCHER", "logging")
        if adapter == "logging":
            from aftersales.notification.logging_dispatcher import LoggingDispatcher

            _current_dispatcher = LoggingDispatcher()
        elif adapter == "fake":
            from aftersales.notification.fake_dispatcher import FakeDispatcher

            _current_dispatcher = FakeDispatcher()
        else:
            raise ValueError(f"Unknown notification dispatcher: {adapter}")
    return _current_dispatcher


def set_dispatcher(dispatcher: NotificationDispatcher) -> None:
    """Override the active dispatcher (useful for tests)."""
    global _current_dispatcher
    _current_dispatcher = dispatcher


def reset_dispatcher() -> None:
    global _current_dispatcher
    _current_dispatcher = None
