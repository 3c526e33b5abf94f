import pytest
from protean.integrations.pytest import DomainFixture

from tracking.account.account import Account, Role
from tracking.identity import reset_identity_provider, set_identity_provider
from tracking.identity.fake_adapter import FakeIdentityProvider
from tracking.notifier import reset_notifier
from tracking.service import TrackingService
from tracking.shipping_method.shipping_method import ShippingMethod


@pytest.fixture(scope="session")
def tracking_bed():
    from tracking.domain import tracking

    bed = DomainFixture(tracking)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(tracking_bed):
    with tracking_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def identity_provider():
    provider = FakeIdentityProvider()
    set_identity_provider(provider)
    reset_notifier()
    yield provider
    reset_notifier()
    reset_identity_provider()


@pytest.fixture()
def service(identity_provider):
    from tracking.domain import tracking

    return TrackingService(tracking, identity_provider=identity_provider)


@pytest.fixture()
def make_account(identity_provider):
    """Persist an account and return ``(token, account)`` for it."""
    from protean import current_domain

    counter = {"n": 0}

    def _make(name="Customer", role=Role.CUSTOMER.value, email=None):
        counter["n"] += 1
        external_id = f"{role.lower()}-{counter['n']}"
        account = Account.register(
            external_id=external_id,
            name=name,
            email=email or f"{external_id}@example.com",
            role=role,
        )
        current_domain.repository_for(Account).add(account)
        return identity_provider.issue_token(external_id), account

    return _make


@pytest.fixture()
def customer(make_account):
    return make_account("Alice")


@pytest.fixture()
def other_customer(make_account):
    return make_account("Bob")


@pytest.fixture()
def admin(make_account):
    return make_account("Root", role=Role.ADMIN.value)


@pytest.fixture()
def methods():
    """Standard at 4.00/kg and Express at 9.50/kg."""
    from protean import current_domain

    repo = current_domain.repository_for(ShippingMethod)
    standard = ShippingMethod.create(label="Standard", rate=4.00)
    express = ShippingMethod.create(label="Express", rate=9.50)
    repo.add(standard)
    repo.add(express)
    return {"standard": standard, "express": express}
