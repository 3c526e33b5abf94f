"""Tracking bounded context — Package Lifecycle, Shipping Rates and Access Control.

Customers create and follow their own packages; administrators move packages
through their lifecycle, maintain shipping rates and manage accounts. Uses
CQRS: aggregates are persisted as current state and every committed package
change is published as a domain event for projections and live subscribers.
"""

from protean.domain import Domain

from tracking.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

tracking = Domain(name="tracking")
