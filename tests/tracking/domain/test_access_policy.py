from types import SimpleNamespace

import pytest

from tracking.access.policy import Action, authorize, is_allowed
from tracking.shared.errors import ForbiddenError

alice = SimpleNamespace(id="alice", role="Customer", is_admin=False)
bob = SimpleNamespace(id="bob", role="Customer", is_admin=False)
root = SimpleNamespace(id="root", role="Admin", is_admin=True)
alices_package = SimpleNamespace(id="pkg-1", owner_id="alice")


@pytest.mark.parametrize("action", [Action.LIST_PACKAGES, Action.VIEW_SHIPPING_METHODS, Action.SUBSCRIBE_EVENTS])
def test_open_actions(action):
    assert is_allowed(alice, action)
    assert is_allowed(root, action)


@pytest.mark.parametrize("action", [Action.MANAGE_SHIPPING_METHODS, Action.MANAGE_ACCOUNTS, Action.VIEW_DASHBOARD])
def test_admin_actions(action):
    assert is_allowed(root, action)
    assert not is_allowed(alice, action)


def test_only_customers_create_packages():
    assert is_allowed(alice, Action.CREATE_PACKAGE)
    assert not is_allowed(root, Action.CREATE_PACKAGE)


def test_read_package_owner_or_admin():
    assert is_allowed(alice, Action.READ_PACKAGE, alices_package)
    assert is_allowed(root, Action.READ_PACKAGE, alices_package)
    assert not is_allowed(bob, Action.READ_PACKAGE, alices_package)


def test_cancel_is_owner_only():
    assert is_allowed(alice, Action.CANCEL_PACKAGE, alices_package)
    assert not is_allowed(root, Action.CANCEL_PACKAGE, alices_package)
    assert not is_allowed(bob, Action.CANCEL_PACKAGE, alices_package)


def test_owner_actions_need_a_resource():
    assert not is_allowed(alice, Action.READ_PACKAGE)


def test_package_denials_are_keyed_by_package():
    with pytest.raises(ForbiddenError) as exc:
        authorize(bob, Action.READ_PACKAGE, alices_package)
    assert "package_id" in exc.value.messages


def test_action_denials_are_keyed_by_action():
    with pytest.raises(ForbiddenError) as exc:
        authorize(alice, Action.MANAGE_ACCOUNTS)
    assert exc.value.kind == "Forbidden"
    assert "action" in exc.value.messages
