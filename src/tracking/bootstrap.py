"""Startup seeding: default shipping methods and the first administrator.

Runs once per process start, after ``tracking.init()``. Both steps are
idempotent so restarts never duplicate records.
"""

import os
from decimal import Decimal, InvalidOperation

import structlog

from tracking.account.account import Account, Role
from tracking.shipping_method.shipping_method import ShippingMethod

logger = structlog.get_logger(__name__)

DEFAULT_RATES = "Standard=4.00,Express=9.50"


def parse_rates(raw: str) -> dict[str, float]:
    """Parse ``Label=rate,Label=rate``; malformed pairs are skipped with a warning."""
    rates = {}
    for pair in raw.split(","):
        label, sep, rate = pair.strip().partition("=")
        if not pair.strip():
            continue
        try:
            value = Decimal(rate.strip()) if sep else None
        except InvalidOperation:
            value = None
        if not label.strip() or value is None or value < 0:
            logger.warning("Ignoring malformed default rate", entry=pair.strip())
            continue
        rates[label.strip()] = float(value)
    return rates


def seed_shipping_methods(domain, raw: str | None = None) -> int:
    """Create the configured methods when the registry is empty; returns how many were added."""
    raw = raw if raw is not None else os.environ.get("TRACKING_DEFAULT_RATES", DEFAULT_RATES)
    with domain.domain_context():
        repo = domain.repository_for(ShippingMethod)
        if repo.list_all():
            return 0
        rates = parse_rates(raw)
        for label, rate in rates.items():
            repo.add(ShippingMethod.create(label=label, rate=rate))
    logger.info("Seeded shipping methods", count=len(rates))
    return len(rates)


def ensure_admin(domain, external_id: str | None = None, email: str | None = None, name: str | None = None):
    """Create or promote the bootstrap administrator named by ``TRACKING_ADMIN_*``."""
    external_id = external_id or os.environ.get("TRACKING_ADMIN_EXTERNAL_ID")
    if not external_id:
        return None
    email = email or os.environ.get("TRACKING_ADMIN_EMAIL", "admin@example.com")
    name = name or os.environ.get("TRACKING_ADMIN_NAME", "Administrator")

    with domain.domain_context():
        repo = domain.repository_for(Account)
        account = repo.find_by_external_id(external_id)
        if account is None:
            account = Account.register(
                external_id=external_id, name=name, email=email, role=Role.ADMIN.value
            )
            repo.add(account)
            logger.info("Bootstrap administrator created", account_id=str(account.id))
        elif not account.is_admin:
            account.update_by_admin(updated_by=str(account.id), role=Role.ADMIN.value)
            repo.add(account)
            logger.info("Bootstrap administrator promoted", account_id=str(account.id))
        return account


def bootstrap(domain) -> None:
    seed_shipping_methods(domain)
    ensure_admin(domain)
