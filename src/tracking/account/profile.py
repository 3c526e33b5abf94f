"""Self-service profile changes — command and handler."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from tracking.access.policy import Action, authorize
from tracking.access.resolver import load_requester
from tracking.account.account import Account
from tracking.domain import tracking


@tracking.command(part_of="Account")
class UpdateProfile:
    """Change the requester's own display name and/or mailing address."""

    requester_id = Identifier(required=True)
    name = String(max_length=200)
    address = Text()


@tracking.command_handler(part_of=Account)
class UpdateProfileHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        account = load_requester(command.requester_id)
        authorize(account, Action.EDIT_OWN_PROFILE, account)

        changes = {
            field: getattr(command, field) for field in ("name", "address") if getattr(command, field) is not None
        }
        account.update_profile(**changes)
        current_domain.repository_for(Account).add(account)
