"""Domain events for the ShippingMethod aggregate."""

from protean.fields import Float, Identifier, String

from tracking.domain import tracking


@tracking.event(part_of="ShippingMethod")
class ShippingMethodCreated:
    __version__ = 1

    method_id = Identifier(required=True)
    label = String(required=True)
    rate = Float(required=True)


@tracking.event(part_of="ShippingMethod")
class ShippingRateChanged:
    """An administrator replaced a method's rate; only future packages are affected."""

    __version__ = 1

    method_id = Identifier(required=True)
    label = String(required=True)
    previous_rate = Float(required=True)
    rate = Float(required=True)
    changed_by = Identifier()

