"""Account administration — admin-only commands and handler.

Administrators may change another account's email, role and address, and
delete accounts that no longer own any package.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from tracking.access.policy import Action, authorize
from tracking.access.resolver import load_requester
from tracking.account.account import Account
from tracking.domain import tracking
from tracking.package.package import Package
from tracking.shared.errors import InvalidInputError, NotFoundError

logger = structlog.get_logger(__name__)


@tracking.command(part_of="Account")
class UpdateAccount:
    """Change an account's email, role and/or address."""

    requester_id = Identifier(required=True)
    account_id = Identifier(required=True)
    email = String(max_length=254)
    role = String(max_length=20)
    address = Text()


@tracking.command(part_of="Account")
class DeleteAccount:
    """Delete an account that owns no packages."""

    requester_id = Identifier(required=True)
    account_id = Identifier(required=True)


def _get_account(repo, account_id):
    try:
        return repo.get(account_id)
    except ObjectNotFoundError as exc:
        raise NotFoundError({"account_id": [f"Account {account_id} does not exist"]}) from exc


@tracking.command_handler(part_of=Account)
class AccountAdministrationHandler:
    @handle(UpdateAccount)
    def update_account(self, command):
        requester = load_requester(command.requester_id)
        authorize(requester, Action.MANAGE_ACCOUNTS)

        repo = current_domain.repository_for(Account)
        account = _get_account(repo, command.account_id)
        changes = {
            field: getattr(command, field)
            for field in ("email", "role", "address")
            if getattr(command, field) is not None
        }
        account.update_by_admin(updated_by=str(requester.id), **changes)
        repo.add(account)
        logger.info("Account updated by admin", account_id=str(account.id), admin_id=str(requester.id))

    @handle(DeleteAccount)
    def delete_account(self, command):
        requester = load_requester(command.requester_id)
        authorize(requester, Action.MANAGE_ACCOUNTS)

        repo = current_domain.repository_for(Account)
        account = _get_account(repo, command.account_id)
        if current_domain.repository_for(Package).count_for_owner(str(account.id)):
            raise InvalidInputError({"account_id": ["Account still owns packages and cannot be deleted"]})

        repo.remove(account)
        logger.info("Account deleted", account_id=str(account.id), admin_id=str(requester.id))
