"""Forwards committed package events to the change notifier."""

import structlog
from protean.utils.mixins import handle

from tracking.domain import tracking
from tracking.notifier import get_notifier
from tracking.package.events import PackageCreated, PackageStatusChanged
from tracking.package.package import Package

logger = structlog.get_logger(__name__)


@tracking.event_handler(part_of=Package)
class PackageChangeBroadcaster:
    @handle(PackageCreated)
    def on_package_created(self, event: PackageCreated) -> None:
        self._broadcast(event)

    @handle(PackageStatusChanged)
    def on_package_status_changed(self, event: PackageStatusChanged) -> None:
        self._broadcast(event)

    def _broadcast(self, event) -> None:
        delivered = get_notifier().publish(event)
        logger.debug(
            "Package event broadcast",
            event_type=type(event).__name__,
            package_id=str(event.package_id),
            delivered=delivered,
        )
