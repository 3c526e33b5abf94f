"""Domain events for the Account aggregate."""

from protean.fields import DateTime, Identifier, String

from tracking.domain import tracking


@tracking.event(part_of="Account")
class AccountRegistered:
    """A caller signed up and received a customer account."""

    __version__ = 1

    account_id = Identifier(required=True)
    external_id = String(required=True)
    name = String(required=True)
    email = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)


@tracking.event(part_of="Account")
class ProfileUpdated:
    """An account holder changed their own name or mailing address."""

    __version__ = 1

    account_id = Identifier(required=True)
    name = String(required=True)
    address = String()


@tracking.event(part_of="Account")
class AccountUpdated:
    """An administrator changed an account's email, role or address."""

    __version__ = 1

    account_id = Identifier(required=True)
    email = String(required=True)
    role = String(required=True)
    previous_role = String(required=True)
    address = String()
    updated_by = Identifier(required=True)
