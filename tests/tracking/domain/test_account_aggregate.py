import pytest
from protean.exceptions import ValidationError

from tracking.account.account import Account, Role
from tracking.account.events import AccountRegistered, AccountUpdated, ProfileUpdated


def _account(**overrides):
    fields = {"external_id": "ext-1", "name": "Alice", "email": "alice@example.com"}
    fields.update(overrides)
    return Account.register(**fields)


class TestRegistration:
    def test_defaults_to_customer(self):
        account = _account()
        assert account.role == Role.CUSTOMER.value
        assert account.is_admin is False
        assert account.email_address == "alice@example.com"
        assert account.registered_at is not None

    def test_raises_account_registered(self):
        account = _account(address="1 Main St")
        assert len(account._events) == 1
        event = account._events[0]
        assert isinstance(event, AccountRegistered)
        assert event.account_id == account.id
        assert event.role == "Customer"

    def test_admin_role(self):
        assert _account(role=Role.ADMIN.value).is_admin is True

    def test_rejects_unknown_role(self):
        with pytest.raises(ValidationError):
            _account(role="Superuser")

    def test_rejects_malformed_email(self):
        with pytest.raises(ValidationError):
            _account(email="not-an-email")


class TestProfileUpdates:
    def test_update_name_and_address(self):
        account = _account()
        account._events.clear()

        account.update_profile(name="Alicia", address="2 High St")

        assert account.name == "Alicia"
        assert account.address == "2 High St"
        assert isinstance(account._events[-1], ProfileUpdated)

    def test_unset_fields_are_left_alone(self):
        account = _account(address="1 Main St")
        account.update_profile(name="Alicia")
        assert account.address == "1 Main St"

    def test_empty_name_rejected(self):
        account = _account()
        with pytest.raises(ValidationError) as exc:
            account.update_profile(name="")
        assert "name" in exc.value.messages


class TestAdminUpdates:
    def test_promote_to_admin_records_previous_role(self):
        account = _account()
        account._events.clear()

        account.update_by_admin(updated_by="admin-1", role=Role.ADMIN.value)

        assert account.is_admin
        event = account._events[-1]
        assert isinstance(event, AccountUpdated)
        assert event.previous_role == "Customer"
        assert event.role == "Admin"
        assert event.updated_by == "admin-1"

    def test_change_email(self):
        account = _account()
        account.update_by_admin(updated_by="admin-1", email="new@example.com")
        assert account.email_address == "new@example.com"
