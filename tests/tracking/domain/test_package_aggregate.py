from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError

from tracking.package.events import PackageCreated, PackageStatusChanged
from tracking.package.package import Package, PackageStatus


def _package(**overrides):
    fields = {
        "owner_id": "owner-1",
        "recipient_name": "John Smith",
        "recipient_address": "42 Harbour Rd",
        "weight": 2.5,
        "method_id": "method-1",
        "cost": 10.0,
    }
    fields.update(overrides)
    return Package.create(**fields)


class TestCreation:
    def test_starts_pending(self):
        package = _package()
        assert package.status == PackageStatus.PENDING.value
        assert package.created_at is not None
        assert package.created_at == package.updated_at
        assert package.is_terminal is False

    def test_raises_created_event_with_snapshot(self):
        package = _package()
        assert len(package._events) == 1
        event = package._events[0]
        assert isinstance(event, PackageCreated)
        assert event.package_id == package.id
        assert event.owner_id == "owner-1"
        assert event.cost == 10.0
        assert event.status == "Pending"

    @pytest.mark.parametrize("weight", [0, -1.5])
    def test_rejects_non_positive_weight(self, weight):
        with pytest.raises(ValidationError) as exc:
            _package(weight=weight)
        assert "weight" in exc.value.messages


class TestStatusChange:
    def test_change_updates_status_and_timestamp(self):
        package = _package()
        created_at = package.created_at
        package._events.clear()

        package.change_status(PackageStatus.PICKED_UP, changed_by="admin-1")

        assert package.status == "PickedUp"
        assert package.created_at == created_at
        assert package.updated_at >= created_at

    def test_change_raises_event_with_previous_status(self):
        package = _package()
        package._events.clear()

        package.change_status("InTransit", changed_by="admin-1")

        event = package._events[-1]
        assert isinstance(event, PackageStatusChanged)
        assert event.previous_status == "Pending"
        assert event.status == "InTransit"
        assert event.changed_by == "admin-1"
        assert event.recipient_name == "John Smith"

    def test_same_status_rejected(self):
        package = _package()
        with pytest.raises(ValidationError):
            package.change_status("Pending", changed_by="admin-1")

    def test_unknown_status_rejected(self):
        package = _package()
        with pytest.raises(ValidationError) as exc:
            package.change_status("Lost", changed_by="admin-1")
        assert "status" in exc.value.messages

    @pytest.mark.parametrize("status", ["Delivered", "Returned", "Cancelled"])
    def test_terminal_statuses(self, status):
        package = _package()
        package.change_status(status, changed_by="admin-1")
        assert package.is_terminal


def test_created_at_is_utc_now():
    before = datetime.now(UTC)
    package = _package()
    created = package.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=UTC)
    assert created >= before.replace(microsecond=0)
