"""PackageHistory — status timeline of each package, oldest entry first."""

import json

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Text
from protean.utils.globals import current_domain

from tracking.domain import tracking
from tracking.package.events import PackageCreated, PackageStatusChanged
from tracking.package.package import Package


@tracking.projection
class PackageHistory:
    package_id: Identifier(identifier=True, required=True)
    owner_id: Identifier(required=True)
    entries: Text(default="[]")  # JSON list of {status, previous_status, changed_by, changed_at}
    updated_at: DateTime()


def timeline(history) -> list[dict]:
    return json.loads(history.entries or "[]")


def _entry(event, previous_status=None) -> dict:
    return {
        "status": event.status,
        "previous_status": previous_status,
        "changed_by": str(event.changed_by) if event.changed_by else None,
        "changed_at": event.changed_at.isoformat() if event.changed_at else None,
    }


@tracking.projector(projector_for=PackageHistory, aggregates=[Package])
class PackageHistoryProjector:
    @on(PackageCreated)
    def on_package_created(self, event):
        current_domain.repository_for(PackageHistory).add(
            PackageHistory(
                package_id=event.package_id,
                owner_id=event.owner_id,
                entries=json.dumps([_entry(event)]),
                updated_at=event.changed_at,
            )
        )

    @on(PackageStatusChanged)
    def on_package_status_changed(self, event):
        repo = current_domain.repository_for(PackageHistory)
        try:
            history = repo.get(event.package_id)
        except ObjectNotFoundError:
            history = PackageHistory(package_id=event.package_id, owner_id=event.owner_id, entries="[]")

        history.entries = json.dumps(timeline(history) + [_entry(event, event.previous_status)])
        history.updated_at = event.changed_at
        repo.add(history)
