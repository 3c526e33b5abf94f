"""Domain events for the Package aggregate.

Both events carry the full package snapshot so that live subscribers never
have to read the package back.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from tracking.domain import tracking


@tracking.event(part_of="Package")
class PackageCreated:
    __version__ = 1

    package_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    recipient_name = String(required=True)
    recipient_address = Text(required=True)
    weight = Float(required=True)
    method_id = Identifier(required=True)
    cost = Float(required=True)
    status = String(required=True)
    created_at = DateTime(required=True)
    changed_by = Identifier()
    changed_at = DateTime(required=True)


@tracking.event(part_of="Package")
class PackageStatusChanged:
    """A package moved from ``previous_status`` to ``status``."""

    __version__ = 1

    package_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    recipient_name = String(required=True)
    recipient_address = Text(required=True)
    weight = Float(required=True)
    method_id = Identifier(required=True)
    cost = Float(required=True)
    status = String(required=True)
    previous_status = String(required=True)
    created_at = DateTime(required=True)
    changed_by = Identifier()
    changed_at = DateTime(required=True)
