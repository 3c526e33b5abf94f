"""Repository for the ShippingMethod aggregate."""

from tracking.domain import tracking
from tracking.shipping_method.shipping_method import ShippingMethod

METHOD_LIMIT = 1_000


@tracking.repository(part_of=ShippingMethod)
class ShippingMethodRepository:
    def find_by_id(self, method_id) -> ShippingMethod | None:
        results = self._dao.query.filter(id=str(method_id)).all().items
        return results[0] if results else None

    def find_by_label(self, label: str) -> ShippingMethod | None:
        results = self._dao.query.filter(label=label).all().items
        return results[0] if results else None

    def list_all(self) -> list[ShippingMethod]:
        return sorted(self._dao.query.limit(METHOD_LIMIT).all().items, key=lambda m: m.label.lower())

    def remove(self, method: ShippingMethod) -> None:
        self._dao.delete(method)
