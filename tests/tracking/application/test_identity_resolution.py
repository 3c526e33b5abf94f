"""Token resolution at the trust boundary."""

import pytest

from tracking.service import TrackingService
from tracking.shared.errors import UnauthenticatedError, UnavailableError


def test_resolves_token_to_account(service, customer):
    token, account = customer
    assert service.resolve(token).id == account.id


def test_unknown_token(service):
    with pytest.raises(UnauthenticatedError):
        service.resolve("nope")


def test_revoked_token(service, identity_provider, customer):
    token, _ = customer
    identity_provider.revoke(token)
    with pytest.raises(UnauthenticatedError):
        service.resolve(token)


def test_principal_without_account(service, identity_provider):
    token = identity_provider.issue_token("stranger")
    with pytest.raises(UnauthenticatedError) as exc:
        service.resolve(token)
    assert "account" in exc.value.messages


def test_provider_outage_is_unavailable_without_leaking_details(service, identity_provider, customer):
    identity_provider.configure(available=False, failure_reason="upstream 10.0.0.7 refused connection")
    with pytest.raises(UnavailableError) as exc:
        service.resolve(customer[0])
    assert "10.0.0.7" not in str(exc.value.messages)


def test_closed_service_refuses_calls(identity_provider, customer):
    from tracking.domain import tracking

    service = TrackingService(tracking, identity_provider=identity_provider)
    subscription = service.subscribe(customer[0])
    service.close()

    assert subscription.closed
    with pytest.raises(UnavailableError):
        service.resolve(customer[0])
