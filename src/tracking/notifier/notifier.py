"""Change notifier — fans committed package events out to live subscribers.

Customers only ever receive events for packages they own; administrators
receive everything. The subscriber table is guarded by one lock and
delivery happens outside it, so a slow or broken subscriber cannot hold up
publication to the others. A subscriber whose buffer is full, or whose
delivery raises, is dropped.
"""

import queue
import threading
from datetime import datetime

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_QUEUE_SIZE = 100

# Wakes consumers blocked in Subscription.get once the subscription closes
_CLOSED = object()


class Subscription:
    """A bounded, per-subscriber buffer of package events.

    ``close()`` is idempotent; once it returns, nothing more is delivered and
    ``get`` returns ``None``.
    """

    def __init__(self, notifier, account_id: str, is_admin: bool, maxsize: int = DEFAULT_QUEUE_SIZE):
        self._notifier = notifier
        self.account_id = account_id
        self.is_admin = is_admin
        self._queue = queue.Queue(maxsize=maxsize)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, event) -> bool:
        """Buffer ``event``; ``False`` when closed or full."""
        with self._lock:
            if self._closed:
                return False
            try:
                self._queue.put_nowait(event)
            except queue.Full:
                return False
            return True

    def get(self, timeout: float | None = None):
        """Next event, or ``None`` on timeout or once closed."""
        if self._closed:
            return None
        try:
            event = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if event is _CLOSED:
            self._wake_next()
            return None
        return None if self._closed else event

    def drain(self) -> list:
        """Everything currently buffered, without blocking."""
        events = []
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return events
            if event is not _CLOSED:
                events.append(event)

    def __iter__(self):
        while not self._closed:
            event = self.get(timeout=0.5)
            if event is not None:
                yield event

    def close(self) -> None:
        self._notifier.unsubscribe(self)

    def _shutdown(self) -> None:
        with self._lock:
            self._closed = True
            self.drain()
            self._wake_next()

    def _wake_next(self) -> None:
        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class ChangeNotifier:
    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self._queue_size = queue_size
        self._lock = threading.Lock()
        self._by_account: dict[str, set[Subscription]] = {}
        self._admins: set[Subscription] = set()

    def subscribe(self, account) -> Subscription:
        subscription = Subscription(self, str(account.id), account.is_admin, self._queue_size)
        with self._lock:
            if subscription.is_admin:
                self._admins.add(subscription)
            else:
                self._by_account.setdefault(subscription.account_id, set()).add(subscription)
        logger.debug("Subscriber added", account_id=subscription.account_id, admin=subscription.is_admin)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            self._admins.discard(subscription)
            owned = self._by_account.get(subscription.account_id)
            if owned is not None:
                owned.discard(subscription)
                if not owned:
                    del self._by_account[subscription.account_id]
        subscription._shutdown()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._admins) + sum(len(subs) for subs in self._by_account.values())

    def publish(self, event) -> int:
        """Deliver ``event`` to every subscriber allowed to see it; returns the delivery count."""
        with self._lock:
            targets = list(self._by_account.get(str(event.owner_id), ())) + list(self._admins)

        delivered = 0
        for subscription in targets:
            try:
                accepted = subscription.offer(event)
            except Exception as exc:
                logger.warning("Dropping failing subscriber", account_id=subscription.account_id, error=str(exc))
                self.unsubscribe(subscription)
                continue
            if accepted:
                delivered += 1
            elif not subscription.closed:
                logger.warning("Dropping subscriber with full buffer", account_id=subscription.account_id)
                self.unsubscribe(subscription)
        return delivered

    def close(self) -> None:
        with self._lock:
            everyone = list(self._admins) + [sub for subs in self._by_account.values() for sub in subs]
            self._admins.clear()
            self._by_account.clear()
        for subscription in everyone:
            subscription._shutdown()


def event_payload(event) -> dict:
    """JSON-ready dict for a package event, tagged with its event type."""
    payload = {"type": type(event).__name__}
    for name in (
        "package_id",
        "owner_id",
        "recipient_name",
        "recipient_address",
        "weight",
        "method_id",
        "cost",
        "status",
        "previous_status",
        "created_at",
        "changed_by",
        "changed_at",
    ):
        value = getattr(event, name, None)
        if isinstance(value, datetime):
            value = value.isoformat()
        elif value is not None and (name.endswith("_id") or name == "changed_by"):
            value = str(value)
        payload[name] = value
    return payload
