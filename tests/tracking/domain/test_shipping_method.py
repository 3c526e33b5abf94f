import pytest
from protean.exceptions import ValidationError

from tracking.shipping_method.events import ShippingMethodCreated, ShippingRateChanged
from tracking.shipping_method.shipping_method import ShippingMethod


def test_create_strips_label_and_raises_event():
    method = ShippingMethod.create(label="  Express ", rate=9.5)
    assert method.label == "Express"
    assert isinstance(method._events[-1], ShippingMethodCreated)


def test_blank_label_rejected():
    with pytest.raises(ValidationError):
        ShippingMethod.create(label="  ", rate=1.0)


def test_negative_rate_rejected_on_creation():
    with pytest.raises(ValidationError):
        ShippingMethod.create(label="Freight", rate=-1.0)


def test_change_rate():
    method = ShippingMethod.create(label="Standard", rate=4.0)
    method._events.clear()

    method.change_rate(5.25, changed_by="admin-1")

    assert method.rate == 5.25
    event = method._events[-1]
    assert isinstance(event, ShippingRateChanged)
    assert event.previous_rate == 4.0
    assert event.rate == 5.25


def test_negative_rate_change_rejected():
    method = ShippingMethod.create(label="Standard", rate=4.0)
    with pytest.raises(ValidationError):
        method.change_rate(-0.01, changed_by="admin-1")
    assert method.rate == 4.0


def test_non_finite_rate_rejected_on_creation():
    with pytest.raises(ValidationError):
        ShippingMethod.create(label="Freight", rate=float("nan"))


def test_infinite_rate_change_rejected():
    method = ShippingMethod.create(label="Standard", rate=4.0)
    with pytest.raises(ValidationError):
        method.change_rate(float("inf"), changed_by="admin-1")
    assert method.rate == 4.0
