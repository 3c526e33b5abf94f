"""Status state machine.

Every status change follows the same five steps: fresh read, authorization,
role legality, compare-and-set on the read status, and event emission on
commit. There are no automatic retries; a lost race surfaces as a conflict.
"""

import structlog
from protean.utils.globals import current_domain

from tracking.access.policy import Action, authorize
from tracking.package.package import Package, PackageStatus, is_transition_allowed, parse_status
from tracking.shared.errors import InvalidTransitionError

logger = structlog.get_logger(__name__)


class StatusStateMachine:
    def cancel(self, requester, package_id, expected_status=None) -> Package:
        """Owner-only shortcut for ``Pending → Cancelled``."""
        return self._transition(
            requester, package_id, PackageStatus.CANCELLED, Action.CANCEL_PACKAGE, expected_status
        )

    def set_status(self, requester, package_id, target, expected_status=None) -> Package:
        return self._transition(requester, package_id, target, Action.SET_PACKAGE_STATUS, expected_status)

    def _transition(self, requester, package_id, target, action, expected_status) -> Package:
        target = parse_status(target)
        repo = current_domain.repository_for(Package)

        package = repo.get_package(package_id)
        authorize(requester, action, package)

        observed = parse_status(expected_status) if expected_status is not None else PackageStatus(package.status)
        if not is_transition_allowed(observed, target, admin=requester.is_admin):
            logger.info(
                "Status transition refused",
                package_id=str(package.id),
                current=observed.value,
                target=target.value,
                role=requester.role,
            )
            raise InvalidTransitionError(
                {"status": [f"{requester.role} may not change a {observed.value} package to {target.value}"]}
            )

        updated = repo.compare_and_set_status(package.id, observed, target, changed_by=str(requester.id))
        logger.info(
            "Package status changed",
            package_id=str(updated.id),
            previous=observed.value,
            status=updated.status,
            changed_by=str(requester.id),
        )
        return updated
