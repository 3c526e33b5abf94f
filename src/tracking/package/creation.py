"""Package creation — command and handler."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from tracking.access.policy import Action, authorize
from tracking.access.resolver import load_requester
from tracking.domain import tracking
from tracking.package.package import Package
from tracking.shipping_method.pricing import compute_cost

logger = structlog.get_logger(__name__)


@tracking.command(part_of="Package")
class CreatePackage:
    """Register a new shipment for the requesting customer."""

    requester_id = Identifier(required=True)
    recipient_name = String(required=True, max_length=200)
    recipient_address = Text(required=True)
    weight = Float(required=True)
    method_id = Identifier(required=True)


@tracking.command_handler(part_of=Package)
class CreatePackageHandler:
    @handle(CreatePackage)
    def create_package(self, command):
        owner = load_requester(command.requester_id)
        authorize(owner, Action.CREATE_PACKAGE)

        cost = compute_cost(command.weight, command.method_id)
        package = Package.create(
            owner_id=str(owner.id),
            recipient_name=command.recipient_name,
            recipient_address=command.recipient_address,
            weight=command.weight,
            method_id=command.method_id,
            cost=cost,
        )
        current_domain.repository_for(Package).add(package)
        logger.info(
            "Package created",
            package_id=str(package.id),
            owner_id=str(owner.id),
            method_id=str(command.method_id),
            cost=package.cost,
        )
        return str(package.id)
