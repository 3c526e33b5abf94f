"""Account aggregate — a registered identity with a role.

The external id is the stable principal issued by the identity provider;
the aggregate id is what packages reference as their owner.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, String, ValueObject

from tracking.domain import tracking
from tracking.shared.email import EmailAddress

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class Role(Enum):
    CUSTOMER = "Customer"
    ADMIN = "Admin"


@tracking.aggregate
class Account:
    external_id = String(required=True, max_length=255, unique=True)
    name = String(required=True, max_length=200)
    email = ValueObject(EmailAddress, required=True)
    address = String(max_length=500)
    role = String(choices=Role, default=Role.CUSTOMER.value)
    registered_at = DateTime()

    @classmethod
    def register(cls, external_id, name, email, address=None, role=Role.CUSTOMER.value):
        from tracking.account.events import AccountRegistered

        now = datetime.now(UTC)
        account = cls(
            external_id=external_id,
            name=name,
            email=EmailAddress(address=email),
            address=address,
            role=role,
            registered_at=now,
        )
        account.raise_(
            AccountRegistered(
                account_id=account.id,
                external_id=external_id,
                name=name,
                email=email,
                role=role,
                registered_at=now,
            )
        )
        return account

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def email_address(self) -> str:
        return self.email.address if self.email else ""

    def update_profile(self, name=_UNSET, address=_UNSET):
        """Owner-editable fields only: display name and mailing address."""
        from tracking.account.events import ProfileUpdated

        if name is not _UNSET:
            if not name:
                raise ValidationError({"name": ["Name cannot be empty"]})
            self.name = name
        if address is not _UNSET:
            self.address = address

        self.raise_(
            ProfileUpdated(
                account_id=self.id,
                name=self.name,
                address=self.address,
            )
        )

    def update_by_admin(self, updated_by, email=_UNSET, role=_UNSET, address=_UNSET):
        from tracking.account.events import AccountUpdated

        previous_role = self.role
        if email is not _UNSET:
            self.email = EmailAddress(address=email)
        if role is not _UNSET:
            self.role = role
        if address is not _UNSET:
            self.address = address

        self.raise_(
            AccountUpdated(
                account_id=self.id,
                email=self.email_address,
                role=self.role,
                previous_role=previous_role,
                address=self.address,
                updated_by=updated_by,
            )
        )
