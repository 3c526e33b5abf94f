"""Repository for the Package aggregate.

Status writes go through ``compare_and_set_status``, which holds a lock
stripe keyed on the package id across read, compare, write and commit. The
commit dispatches events synchronously, so per-package event order equals
commit order.
"""

import threading
import zlib

import structlog
from protean.exceptions import ObjectNotFoundError

from tracking.domain import tracking
from tracking.package.package import Package, PackageStatus, parse_status
from tracking.shared.errors import ConflictError, NotFoundError

logger = structlog.get_logger(__name__)

LISTING_LIMIT = 10_000
_STRIPES = 64
_LOCKS = tuple(threading.Lock() for _ in range(_STRIPES))


def _lock_for(package_id) -> threading.Lock:
    return _LOCKS[zlib.crc32(str(package_id).encode()) % _STRIPES]


@tracking.repository(part_of=Package)
class PackageRepository:
    def get_package(self, package_id) -> Package:
        try:
            return self.get(str(package_id))
        except ObjectNotFoundError as exc:
            raise NotFoundError({"package_id": [f"Package {package_id} does not exist"]}) from exc

    def find_for_owner(self, owner_id) -> list[Package]:
        """The owner's newest packages, up to ``LISTING_LIMIT``."""
        query = self._dao.query.filter(owner_id=str(owner_id))
        return query.order_by("-created_at").limit(LISTING_LIMIT).all().items

    def list_all(self) -> list[Package]:
        return self._dao.query.order_by("-created_at").limit(LISTING_LIMIT).all().items

    def count_for_owner(self, owner_id) -> int:
        return len(self._dao.query.filter(owner_id=str(owner_id)).limit(LISTING_LIMIT).all().items)

    def references_method(self, method_id) -> bool:
        return bool(self._dao.query.filter(method_id=str(method_id)).limit(1).all().items)

    def compare_and_set_status(self, package_id, expected, target, changed_by) -> Package:
        """Apply ``target`` only if the stored status still equals ``expected``.

        Raises ``ConflictError`` when another writer got there first. Never
        retries.
        """
        expected = parse_status(expected)
        with _lock_for(package_id):
            package = self.get_package(package_id)
            if PackageStatus(package.status) != expected:
                logger.info(
                    "Status compare-and-set lost",
                    package_id=str(package_id),
                    expected=expected.value,
                    actual=package.status,
                )
                raise ConflictError(
                    {"status": [f"Package status changed to {package.status} (expected {expected.value})"]}
                )

            package.change_status(target, changed_by=changed_by)
            self.add(package)
            return package
