"""ShippingMethod aggregate — a labelled per-kilogram rate."""

import math

from protean.exceptions import ValidationError
from protean.fields import Float, String

from tracking.domain import tracking


@tracking.aggregate
class ShippingMethod:
    label = String(required=True, max_length=50, unique=True)
    rate = Float(required=True, min_value=0.0)

    @classmethod
    def create(cls, label, rate):
        from tracking.shipping_method.events import ShippingMethodCreated

        if not label or not label.strip():
            raise ValidationError({"label": ["Label cannot be empty"]})
        _check_rate(rate)
        method = cls(label=label.strip(), rate=rate)
        method.raise_(ShippingMethodCreated(method_id=method.id, label=method.label, rate=method.rate))
        return method

    def change_rate(self, new_rate, changed_by):
        """Replace the per-kilogram rate. Existing packages keep their cost."""
        from tracking.shipping_method.events import ShippingRateChanged

        _check_rate(new_rate)

        previous_rate = self.rate
        self.rate = new_rate
        self.raise_(
            ShippingRateChanged(
                method_id=self.id,
                label=self.label,
                previous_rate=previous_rate,
                rate=new_rate,
                changed_by=changed_by,
            )
        )


def _check_rate(rate) -> None:
    if rate is None or not math.isfinite(rate) or rate < 0:
        raise ValidationError({"rate": ["Rate must be a finite, non-negative amount per kilogram"]})
