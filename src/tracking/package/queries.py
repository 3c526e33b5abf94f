"""Query/filter engine for package listings.

Pure functions over an in-memory collection: nothing here reads the store.
Predicates compose with AND; a filter field left as ``None`` matches
everything.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from protean.exceptions import ValidationError

from tracking.package.package import PackageStatus, parse_status
from tracking.shared.errors import InvalidInputError

NEWEST_FIRST = "newest"
OLDEST_FIRST = "oldest"


@dataclass(frozen=True)
class PackageFilter:
    """Listing criteria. Date bounds are inclusive and may be dates or datetimes."""

    status: str | None = None
    search: str | None = None
    date_from: date | datetime | None = None
    date_to: date | datetime | None = None
    order: str = NEWEST_FIRST


def _naive_utc(moment: datetime) -> datetime:
    # Stored timestamps may come back naive; compare everything as naive UTC
    if moment.tzinfo is not None:
        return moment.astimezone(UTC).replace(tzinfo=None)
    return moment


def _within(created_at, lower, upper) -> bool:
    if created_at is None:
        return lower is None and upper is None
    created = _naive_utc(created_at)
    for bound, inside in ((lower, lambda c, b: c >= b), (upper, lambda c, b: c <= b)):
        if bound is None:
            continue
        if isinstance(bound, datetime):
            if not inside(created, _naive_utc(bound)):
                return False
        elif not inside(created.date(), bound):
            return False
    return True


def _matches_search(package, term: str, owner_emails: dict) -> bool:
    haystack = (
        str(package.id),
        package.recipient_name or "",
        package.recipient_address or "",
        owner_emails.get(str(package.owner_id), ""),
    )
    return any(term in value.lower() for value in haystack)


def matches(package, flt: PackageFilter, owner_emails: dict | None = None) -> bool:
    if flt.status is not None and package.status != parse_status(flt.status).value:
        return False
    if flt.search and not _matches_search(package, flt.search.strip().lower(), owner_emails or {}):
        return False
    return _within(package.created_at, flt.date_from, flt.date_to)


def _sort_key(package):
    return _naive_utc(package.created_at) if package.created_at else datetime.min


def apply_filter(packages, flt: PackageFilter | None = None, owner_emails: dict | None = None) -> list:
    """Return the packages matching ``flt``, newest first unless it asks for oldest."""
    flt = flt or PackageFilter()
    if flt.order not in (NEWEST_FIRST, OLDEST_FIRST):
        raise InvalidInputError({"order": [f"Order must be {NEWEST_FIRST!r} or {OLDEST_FIRST!r}"]})
    if flt.status is not None:
        try:
            parse_status(flt.status)
        except ValidationError as exc:
            raise InvalidInputError(exc.messages) from exc

    selected = [package for package in packages if matches(package, flt, owner_emails)]
    return sorted(selected, key=_sort_key, reverse=flt.order == NEWEST_FIRST)


def summarize(packages, since: datetime) -> dict:
    """Totals for the admin dashboard: packages created since ``since`` and how many are still pending."""
    recent = [p for p in packages if p.created_at and _naive_utc(p.created_at) >= _naive_utc(since)]
    return {
        "total": len(recent),
        "pending": sum(1 for p in recent if p.status == PackageStatus.PENDING.value),
    }
