"""TrackingService — the entry point for every caller-facing operation.

Each call resolves the caller token into an Account, runs inside the
tracking domain's context and surfaces failures only as ``TrackingError``
subclasses. Creation and administration go through commands; status changes
go through the status state machine so that the compare-and-set spans the
whole read-to-commit window.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean.exceptions import ObjectNotFoundError

from tracking.access.policy import Action, authorize
from tracking.access.resolver import IdentityResolver
from tracking.account.account import Account
from tracking.account.administration import DeleteAccount, UpdateAccount
from tracking.account.profile import UpdateProfile
from tracking.account.registration import RegisterAccount
from tracking.identity import get_identity_provider
from tracking.notifier import get_notifier, set_notifier
from tracking.package.creation import CreatePackage
from tracking.package.lifecycle import StatusStateMachine
from tracking.package.package import Package
from tracking.package.queries import PackageFilter, apply_filter, summarize
from tracking.projections.package_history import PackageHistory, timeline
from tracking.shared.errors import InvalidInputError, UnavailableError, translated_errors
from tracking.shipping_method.management import CreateShippingMethod, RemoveShippingMethod, UpdateShippingRate
from tracking.shipping_method.shipping_method import ShippingMethod

logger = structlog.get_logger(__name__)

DASHBOARD_DAYS = 7


class TrackingService:
    def __init__(self, domain, identity_provider=None, notifier=None):
        self._domain = domain
        self._resolver = IdentityResolver(identity_provider or get_identity_provider())
        if notifier is not None:
            set_notifier(notifier)
        self._notifier = notifier or get_notifier()
        self._state_machine = StatusStateMachine()
        self._closed = False

    def _run(self, operation, *args, **kwargs):
        if self._closed:
            raise UnavailableError({"service": ["Tracking service has been shut down"]})
        with self._domain.domain_context(), translated_errors():
            return operation(*args, **kwargs)

    def _process(self, command):
        return self._domain.process(command, asynchronous=False)

    # Accounts

    def resolve(self, token: str) -> Account:
        return self._run(self._resolver.resolve, token)

    def register(self, token: str, name: str, email: str, address: str | None = None) -> Account:
        def _register():
            principal = self._resolver.authenticate(token)
            account_id = self._process(
                RegisterAccount(external_id=principal, name=name, email=email, address=address)
            )
            return self._domain.repository_for(Account).get(account_id)

        return self._run(_register)

    def update_profile(self, token: str, name: str | None = None, address: str | None = None) -> Account:
        def _update():
            requester = self._resolver.resolve(token)
            self._process(UpdateProfile(requester_id=str(requester.id), name=name, address=address))
            return self._domain.repository_for(Account).get(requester.id)

        return self._run(_update)

    def list_accounts(self, token: str) -> list[Account]:
        def _list():
            requester = self._resolver.resolve(token)
            authorize(requester, Action.MANAGE_ACCOUNTS)
            accounts = self._domain.repository_for(Account).list_all()
            return sorted(accounts, key=lambda a: a.registered_at or datetime.min)

        return self._run(_list)

    def update_account(self, token: str, account_id: str, email=None, role=None, address=None) -> Account:
        def _update():
            requester = self._resolver.resolve(token)
            self._process(
                UpdateAccount(
                    requester_id=str(requester.id), account_id=account_id, email=email, role=role, address=address
                )
            )
            return self._domain.repository_for(Account).get(account_id)

        return self._run(_update)

    def delete_account(self, token: str, account_id: str) -> None:
        def _delete():
            requester = self._resolver.resolve(token)
            self._process(DeleteAccount(requester_id=str(requester.id), account_id=account_id))

        self._run(_delete)

    # Packages

    def create_package(self, token: str, recipient_name, recipient_address, weight, method_id) -> Package:
        def _create():
            requester = self._resolver.resolve(token)
            package_id = self._process(
                CreatePackage(
                    requester_id=str(requester.id),
                    recipient_name=recipient_name,
                    recipient_address=recipient_address,
                    weight=weight,
                    method_id=method_id,
                )
            )
            return self._domain.repository_for(Package).get_package(package_id)

        return self._run(_create)

    def get_package(self, token: str, package_id: str) -> Package:
        def _get():
            requester = self._resolver.resolve(token)
            package = self._domain.repository_for(Package).get_package(package_id)
            authorize(requester, Action.READ_PACKAGE, package)
            return package

        return self._run(_get)

    def list_packages(self, token: str, flt: PackageFilter | None = None) -> list[Package]:
        def _list():
            requester = self._resolver.resolve(token)
            authorize(requester, Action.LIST_PACKAGES)
            repo = self._domain.repository_for(Package)
            packages = repo.list_all() if requester.is_admin else repo.find_for_owner(requester.id)
            owner_emails = None
            if flt is not None and flt.search:
                owner_emails = self._domain.repository_for(Account).emails_by_id({p.owner_id for p in packages})
            return apply_filter(packages, flt, owner_emails)

        return self._run(_list)

    def cancel_package(self, token: str, package_id: str, expected_status=None) -> Package:
        def _cancel():
            requester = self._resolver.resolve(token)
            return self._state_machine.cancel(requester, package_id, expected_status=expected_status)

        return self._run(_cancel)

    def set_package_status(self, token: str, package_id: str, status, expected_status=None) -> Package:
        def _set():
            requester = self._resolver.resolve(token)
            return self._state_machine.set_status(requester, package_id, status, expected_status=expected_status)

        return self._run(_set)

    def package_history(self, token: str, package_id: str) -> list[dict]:
        def _history():
            requester = self._resolver.resolve(token)
            package = self._domain.repository_for(Package).get_package(package_id)
            authorize(requester, Action.READ_PACKAGE, package)
            try:
                return timeline(self._domain.repository_for(PackageHistory).get(package_id))
            except ObjectNotFoundError:
                return []

        return self._run(_history)

    def dashboard_summary(self, token: str, days: int = DASHBOARD_DAYS) -> dict:
        def _summary():
            requester = self._resolver.resolve(token)
            authorize(requester, Action.VIEW_DASHBOARD)
            if days < 1:
                raise InvalidInputError({"days": ["Must cover at least one day"]})
            since = datetime.now(UTC) - timedelta(days=days)
            return {"days": days, **summarize(self._domain.repository_for(Package).list_all(), since)}

        return self._run(_summary)

    # Shipping methods

    def list_shipping_methods(self, token: str) -> list[ShippingMethod]:
        def _list():
            requester = self._resolver.resolve(token)
            authorize(requester, Action.VIEW_SHIPPING_METHODS)
            return self._domain.repository_for(ShippingMethod).list_all()

        return self._run(_list)

    def create_shipping_method(self, token: str, label: str, rate) -> ShippingMethod:
        def _create():
            requester = self._resolver.resolve(token)
            method_id = self._process(CreateShippingMethod(requester_id=str(requester.id), label=label, rate=rate))
            return self._domain.repository_for(ShippingMethod).get(method_id)

        return self._run(_create)

    def update_shipping_rate(self, token: str, method_id: str, rate) -> ShippingMethod:
        def _update():
            requester = self._resolver.resolve(token)
            self._process(UpdateShippingRate(requester_id=str(requester.id), method_id=method_id, rate=rate))
            return self._domain.repository_for(ShippingMethod).get(method_id)

        return self._run(_update)

    def remove_shipping_method(self, token: str, method_id: str) -> None:
        def _remove():
            requester = self._resolver.resolve(token)
            self._process(RemoveShippingMethod(requester_id=str(requester.id), method_id=method_id))

        self._run(_remove)

    # Live updates

    def subscribe(self, token: str):
        """Open a live feed of package events visible to the caller."""

        def _subscribe():
            requester = self._resolver.resolve(token)
            authorize(requester, Action.SUBSCRIBE_EVENTS)
            return self._notifier.subscribe(requester)

        return self._run(_subscribe)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._notifier.close()
        logger.info("Tracking service closed")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
