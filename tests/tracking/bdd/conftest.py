"""Shared BDD fixtures and step definitions for the tracking domain."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from tracking.account.account import Role
from tracking.shared.errors import TrackingError
from tracking.shipping_method.shipping_method import ShippingMethod


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def people():
    """Login name to ``(token, account)``."""
    return {}


@pytest.fixture()
def shipping_methods():
    return {}


@pytest.fixture()
def error():
    """Container for the captured engine error."""
    return {"exc": None}


@pytest.fixture()
def state():
    return {"package": None, "subscriptions": {}}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a shipping method "{label}" at {rate:f} per kg'))
def shipping_method(label, rate, shipping_methods):
    method = ShippingMethod.create(label=label, rate=rate)
    current_domain.repository_for(ShippingMethod).add(method)
    shipping_methods[label] = method


@given(parsers.cfparse('a customer "{name}"'))
def a_customer(name, make_account, people):
    people[name] = make_account(name.title())


@given(parsers.cfparse('an administrator "{name}"'))
def an_administrator(name, make_account, people):
    people[name] = make_account(name.title(), role=Role.ADMIN.value)


@given(parsers.cfparse('"{name}" has a package weighing {weight:g} kg via "{label}"'))
def has_package(name, weight, label, service, people, shipping_methods, state):
    state["package"] = service.create_package(
        people[name][0],
        recipient_name="John Smith",
        recipient_address="42 Harbour Rd",
        weight=weight,
        method_id=str(shipping_methods[label].id),
    )


@given(parsers.cfparse('the package has been moved to "{status}" by "{name}"'))
def moved_to(status, name, service, people, state):
    service.set_package_status(people[name][0], state["package"].id, status)


@given(parsers.cfparse('"{name}" is subscribed to package events'))
def subscribed(name, service, people, state):
    state["subscriptions"][name] = service.subscribe(people[name][0])


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" sees the package as "{status}"'))
def sees_status(name, status, service, people, state):
    assert service.get_package(people[name][0], state["package"].id).status == status


@then(parsers.cfparse('the attempt fails with "{kind}"'))
def attempt_fails(kind, error):
    assert isinstance(error["exc"], TrackingError)
    assert error["exc"].kind == kind
