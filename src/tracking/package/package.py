"""Package aggregate — one shipment owned by one customer account.

Status lifecycle:
    Pending → PickedUp → InTransit → OutForDelivery → Delivered
    (FailedDelivery, Returned and Cancelled are reachable by administrators)

Customers may only cancel a Pending package. Administrators may set any
status other than the current one. Delivered, Returned and Cancelled are
terminal for customers; administrators can still override them.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from tracking.domain import tracking


class PackageStatus(Enum):
    PENDING = "Pending"
    PICKED_UP = "PickedUp"
    IN_TRANSIT = "InTransit"
    OUT_FOR_DELIVERY = "OutForDelivery"
    DELIVERED = "Delivered"
    FAILED_DELIVERY = "FailedDelivery"
    RETURNED = "Returned"
    CANCELLED = "Cancelled"


TERMINAL_STATUSES = frozenset({PackageStatus.DELIVERED, PackageStatus.RETURNED, PackageStatus.CANCELLED})

_CUSTOMER_TRANSITIONS = {
    PackageStatus.PENDING: {PackageStatus.CANCELLED},
}


def parse_status(value) -> PackageStatus:
    """Coerce a status name into ``PackageStatus``; ``ValidationError`` if unknown."""
    if isinstance(value, PackageStatus):
        return value
    try:
        return PackageStatus(value)
    except ValueError as exc:
        allowed = ", ".join(s.value for s in PackageStatus)
        raise ValidationError({"status": [f"Unknown status {value!r}; expected one of {allowed}"]}) from exc


def is_transition_allowed(current, target, admin: bool) -> bool:
    current, target = parse_status(current), parse_status(target)
    if current == target:
        return False
    if admin:
        return True
    return target in _CUSTOMER_TRANSITIONS.get(current, set())


@tracking.aggregate
class Package:
    owner_id = Identifier(required=True)
    recipient_name = String(required=True, max_length=200)
    recipient_address = Text(required=True)
    weight = Float(required=True)
    method_id = Identifier(required=True)
    cost = Float(required=True, min_value=0.0)
    status = String(choices=PackageStatus, default=PackageStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, owner_id, recipient_name, recipient_address, weight, method_id, cost):
        from tracking.package.events import PackageCreated

        if weight is None or weight <= 0:
            raise ValidationError({"weight": ["Weight must be greater than zero"]})

        now = datetime.now(UTC)
        package = cls(
            owner_id=owner_id,
            recipient_name=recipient_name,
            recipient_address=recipient_address,
            weight=weight,
            method_id=method_id,
            cost=float(cost),
            status=PackageStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        package.raise_(PackageCreated(**package._snapshot(changed_by=owner_id, changed_at=now)))
        return package

    @property
    def is_terminal(self) -> bool:
        return PackageStatus(self.status) in TERMINAL_STATUSES

    def change_status(self, target, changed_by):
        """Move to ``target`` and record who did it.

        Role legality is decided by the caller; this only refuses values that
        are not a status or equal the current one.
        """
        from tracking.package.events import PackageStatusChanged

        target = parse_status(target)
        previous = PackageStatus(self.status)
        if target == previous:
            raise ValidationError({"status": [f"Package is already {previous.value}"]})

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            PackageStatusChanged(
                **self._snapshot(changed_by=changed_by, changed_at=now),
                previous_status=previous.value,
            )
        )

    def _snapshot(self, changed_by, changed_at) -> dict:
        return {
            "package_id": self.id,
            "owner_id": self.owner_id,
            "recipient_name": self.recipient_name,
            "recipient_address": self.recipient_address,
            "weight": self.weight,
            "method_id": self.method_id,
            "cost": self.cost,
            "status": self.status,
            "created_at": self.created_at,
            "changed_by": changed_by,
            "changed_at": changed_at,
        }
