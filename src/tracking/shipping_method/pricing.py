"""Cost calculator.

Cost is computed once, at package creation, in ``Decimal`` and rounded
half-up to cents. Later rate changes never reach existing packages because
the result is stored on the package, not recomputed.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean.utils.globals import current_domain

from tracking.shared.errors import InvalidInputError
from tracking.shipping_method.shipping_method import ShippingMethod

CENTS = Decimal("0.01")


def _as_decimal(value, field: str) -> Decimal:
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidInputError({field: [f"Not a number: {value!r}"]}) from exc
    if not amount.is_finite():
        raise InvalidInputError({field: ["Must be a finite number"]})
    return amount


def cost_for(weight, rate) -> Decimal:
    """``weight * rate`` in cents, rounded half-up."""
    weight = _as_decimal(weight, "weight")
    if weight <= 0:
        raise InvalidInputError({"weight": ["Weight must be greater than zero"]})
    rate = _as_decimal(rate, "rate")
    if rate < 0:
        raise InvalidInputError({"rate": ["Rate must be non-negative"]})
    try:
        return (weight * rate).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidInputError({"weight": ["Weight is too large to price"]}) from exc


def compute_cost(weight, method_id) -> Decimal:
    """Look up ``method_id`` and price ``weight`` kilograms with its current rate."""
    if weight is None or _as_decimal(weight, "weight") <= 0:
        raise InvalidInputError({"weight": ["Weight must be greater than zero"]})

    method = None
    if method_id:
        method = current_domain.repository_for(ShippingMethod).find_by_id(method_id)
    if method is None:
        raise InvalidInputError({"method_id": [f"Unknown shipping method: {method_id}"]})
    return cost_for(weight, method.rate)
