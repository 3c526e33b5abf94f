"""Change notifier factory.

Provides get_notifier() / reset_notifier(). The buffer size of every new
subscription comes from ``NOTIFIER_QUEUE_SIZE``.
"""

import os

from tracking.notifier.notifier import DEFAULT_QUEUE_SIZE, ChangeNotifier, Subscription, event_payload

__all__ = ["ChangeNotifier", "Subscription", "event_payload", "get_notifier", "reset_notifier", "set_notifier"]

_current_notifier: ChangeNotifier | None = None


def get_notifier() -> ChangeNotifier:
    """Return the process-wide notifier (singleton)."""
    global _current_notifier
    if _current_notifier is None:
        _current_notifier = ChangeNotifier(int(os.environ.get("NOTIFIER_QUEUE_SIZE", DEFAULT_QUEUE_SIZE)))
    return _current_notifier


def set_notifier(notifier: ChangeNotifier) -> None:
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    """Close every live subscription and forget the notifier."""
    global _current_notifier
    if _current_notifier is not None:
        _current_notifier.close()
    _current_notifier = None
