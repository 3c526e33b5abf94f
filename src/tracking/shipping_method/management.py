"""Shipping-rate registry administration — commands and handler.

Only administrators create, re-rate or remove shipping methods. A method
stays in place while any package references it.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from tracking.access.policy import Action, authorize
from tracking.access.resolver import load_requester
from tracking.domain import tracking
from tracking.package.package import Package
from tracking.shared.errors import InvalidInputError, NotFoundError
from tracking.shipping_method.shipping_method import ShippingMethod

logger = structlog.get_logger(__name__)


@tracking.command(part_of="ShippingMethod")
class CreateShippingMethod:
    requester_id = Identifier(required=True)
    label = String(required=True, max_length=50)
    rate = Float(required=True)


@tracking.command(part_of="ShippingMethod")
class UpdateShippingRate:
    requester_id = Identifier(required=True)
    method_id = Identifier(required=True)
    rate = Float(required=True)


@tracking.command(part_of="ShippingMethod")
class RemoveShippingMethod:
    requester_id = Identifier(required=True)
    method_id = Identifier(required=True)


def _get_method(repo, method_id):
    try:
        return repo.get(method_id)
    except ObjectNotFoundError as exc:
        raise NotFoundError({"method_id": [f"Shipping method {method_id} does not exist"]}) from exc


@tracking.command_handler(part_of=ShippingMethod)
class ShippingMethodManagementHandler:
    @handle(CreateShippingMethod)
    def create_method(self, command):
        requester = load_requester(command.requester_id)
        authorize(requester, Action.MANAGE_SHIPPING_METHODS)

        repo = current_domain.repository_for(ShippingMethod)
        if repo.find_by_label(command.label.strip()) is not None:
            raise InvalidInputError({"label": [f"A shipping method named {command.label!r} already exists"]})

        method = ShippingMethod.create(label=command.label, rate=command.rate)
        repo.add(method)
        logger.info("Shipping method created", method_id=str(method.id), label=method.label, rate=method.rate)
        return str(method.id)

    @handle(UpdateShippingRate)
    def update_rate(self, command):
        requester = load_requester(command.requester_id)
        authorize(requester, Action.MANAGE_SHIPPING_METHODS)

        repo = current_domain.repository_for(ShippingMethod)
        method = _get_method(repo, command.method_id)
        method.change_rate(command.rate, changed_by=str(requester.id))
        repo.add(method)
        logger.info("Shipping rate changed", method_id=str(method.id), rate=method.rate)

    @handle(RemoveShippingMethod)
    def remove_method(self, command):
        requester = load_requester(command.requester_id)
        authorize(requester, Action.MANAGE_SHIPPING_METHODS)

        repo = current_domain.repository_for(ShippingMethod)
        method = _get_method(repo, command.method_id)
        if current_domain.repository_for(Package).references_method(str(method.id)):
            raise InvalidInputError({"method_id": ["Shipping method is used by existing packages"]})

        repo.remove(method)
        logger.info("Shipping method removed", method_id=str(method.id), admin_id=str(requester.id))
