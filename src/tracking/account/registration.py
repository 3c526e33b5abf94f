"""Account registration — command and handler.

Signup always produces a Customer; administrators are promoted afterwards
(or created by the startup bootstrap).
"""

import structlog
from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from tracking.account.account import Account
from tracking.domain import tracking
from tracking.shared.errors import InvalidInputError

logger = structlog.get_logger(__name__)


@tracking.command(part_of="Account")
class RegisterAccount:
    """Create a customer account for an authenticated identity."""

    external_id = String(required=True, max_length=255)
    name = String(required=True, max_length=200)
    email = String(required=True, max_length=254)
    address = Text()


@tracking.command_handler(part_of=Account)
class RegisterAccountHandler:
    @handle(RegisterAccount)
    def register_account(self, command):
        repo = current_domain.repository_for(Account)
        if repo.find_by_external_id(command.external_id) is not None:
            raise InvalidInputError({"external_id": ["An account already exists for this identity"]})

        account = Account.register(
            external_id=command.external_id,
            name=command.name,
            email=command.email,
            address=command.address,
        )
        repo.add(account)
        logger.info("Account registered", account_id=str(account.id), role=account.role)
        return str(account.id)
