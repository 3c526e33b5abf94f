"""Fan-out, ownership filtering and subscriber lifecycle of the change notifier."""

import threading
from datetime import UTC, datetime
from types import SimpleNamespace

from tracking.notifier import event_payload
from tracking.notifier.notifier import ChangeNotifier

alice = SimpleNamespace(id="alice", is_admin=False)
bob = SimpleNamespace(id="bob", is_admin=False)
root = SimpleNamespace(id="root", is_admin=True)


def _event(owner_id="alice", status="InTransit", package_id="pkg-1"):
    return SimpleNamespace(package_id=package_id, owner_id=owner_id, status=status)


def test_customers_only_see_their_own_packages():
    notifier = ChangeNotifier()
    alice_sub = notifier.subscribe(alice)
    bob_sub = notifier.subscribe(bob)

    notifier.publish(_event(owner_id="alice"))

    assert alice_sub.get(timeout=0.1).owner_id == "alice"
    assert bob_sub.get(timeout=0.05) is None


def test_admins_see_everything():
    notifier = ChangeNotifier()
    admin_sub = notifier.subscribe(root)

    notifier.publish(_event(owner_id="alice"))
    notifier.publish(_event(owner_id="bob"))

    assert [e.owner_id for e in admin_sub.drain()] == ["alice", "bob"]


def test_publish_returns_delivery_count():
    notifier = ChangeNotifier()
    notifier.subscribe(alice)
    notifier.subscribe(alice)
    notifier.subscribe(root)
    notifier.subscribe(bob)

    assert notifier.publish(_event(owner_id="alice")) == 3


def test_per_package_order_is_preserved():
    notifier = ChangeNotifier()
    sub = notifier.subscribe(alice)
    for status in ("PickedUp", "InTransit", "OutForDelivery", "Delivered"):
        notifier.publish(_event(status=status))

    assert [e.status for e in sub.drain()] == ["PickedUp", "InTransit", "OutForDelivery", "Delivered"]


def test_close_is_idempotent_and_stops_delivery():
    notifier = ChangeNotifier()
    sub = notifier.subscribe(alice)
    notifier.publish(_event())

    sub.close()
    sub.close()

    assert sub.closed
    assert sub.get(timeout=0.01) is None
    assert notifier.publish(_event()) == 0
    assert notifier.subscriber_count == 0


def test_full_subscriber_is_dropped_without_affecting_others():
    notifier = ChangeNotifier(queue_size=1)
    slow = notifier.subscribe(alice)
    fast = notifier.subscribe(alice)

    notifier.publish(_event(status="PickedUp"))
    fast.drain()
    notifier.publish(_event(status="InTransit"))

    assert slow.closed
    assert not fast.closed
    assert [e.status for e in fast.drain()] == ["InTransit"]


def test_failing_subscriber_is_dropped():
    notifier = ChangeNotifier()
    broken = notifier.subscribe(alice)
    healthy = notifier.subscribe(alice)

    def explode(event):
        raise RuntimeError("socket gone")

    broken.offer = explode

    assert notifier.publish(_event()) == 1
    assert notifier.subscriber_count == 1
    assert healthy.get(timeout=0.1) is not None


def test_notifier_close_tears_down_every_subscription():
    notifier = ChangeNotifier()
    subs = [notifier.subscribe(alice), notifier.subscribe(root)]

    notifier.close()

    assert all(sub.closed for sub in subs)
    assert notifier.subscriber_count == 0


def test_iteration_ends_when_closed_from_another_thread():
    notifier = ChangeNotifier()
    sub = notifier.subscribe(alice)
    notifier.publish(_event(status="PickedUp"))
    received = []

    def consume():
        for event in sub:
            received.append(event.status)
            sub.close()

    worker = threading.Thread(target=consume)
    worker.start()
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert received == ["PickedUp"]


def test_blocked_get_wakes_when_closed():
    notifier = ChangeNotifier()
    sub = notifier.subscribe(alice)
    received = []
    waiting = threading.Event()

    def consume():
        waiting.set()
        received.append(sub.get())

    worker = threading.Thread(target=consume)
    worker.start()
    waiting.wait(timeout=2)
    sub.close()
    worker.join(timeout=2)

    assert not worker.is_alive()
    assert received == [None]
    assert sub.drain() == []


def test_event_payload_is_json_ready():
    changed_at = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    event = SimpleNamespace(package_id="pkg-1", owner_id="alice", status="Delivered", changed_at=changed_at)

    payload = event_payload(event)

    assert payload["type"] == "SimpleNamespace"
    assert payload["package_id"] == "pkg-1"
    assert payload["changed_at"] == "2024-01-01T12:00:00+00:00"
    assert payload["cost"] is None
