"""Authorization gate — one check consulted before every operation.

Role-based dispatch lives here and nowhere else: handlers, the status state
machine and the service facade all call ``authorize`` with the resolved
requester, the action and (where ownership matters) the target record.
"""

from enum import Enum

import structlog

from tracking.shared.errors import ForbiddenError

logger = structlog.get_logger(__name__)


class Action(Enum):
    CREATE_PACKAGE = "create_package"
    READ_PACKAGE = "read_package"
    LIST_PACKAGES = "list_packages"
    CANCEL_PACKAGE = "cancel_package"
    SET_PACKAGE_STATUS = "set_package_status"
    VIEW_SHIPPING_METHODS = "view_shipping_methods"
    MANAGE_SHIPPING_METHODS = "manage_shipping_methods"
    EDIT_OWN_PROFILE = "edit_own_profile"
    MANAGE_ACCOUNTS = "manage_accounts"
    SUBSCRIBE_EVENTS = "subscribe_events"
    VIEW_DASHBOARD = "view_dashboard"


_OPEN_ACTIONS = {
    Action.LIST_PACKAGES,
    Action.VIEW_SHIPPING_METHODS,
    Action.SUBSCRIBE_EVENTS,
    Action.EDIT_OWN_PROFILE,
}

_ADMIN_ACTIONS = {
    Action.MANAGE_SHIPPING_METHODS,
    Action.MANAGE_ACCOUNTS,
    Action.VIEW_DASHBOARD,
}

# Owner always qualifies; admins qualify unless the action is owner-only
_OWNER_ACTIONS = {
    Action.READ_PACKAGE: True,
    Action.SET_PACKAGE_STATUS: True,
    Action.CANCEL_PACKAGE: False,
}


def owns(account, package) -> bool:
    return str(package.owner_id) == str(account.id)


def is_allowed(account, action: Action, resource=None) -> bool:
    if action in _OPEN_ACTIONS:
        return True
    if action in _ADMIN_ACTIONS:
        return account.is_admin
    if action == Action.CREATE_PACKAGE:
        return not account.is_admin
    if action in _OWNER_ACTIONS:
        if resource is None:
            return False
        return owns(account, resource) or (_OWNER_ACTIONS[action] and account.is_admin)
    return False


def authorize(account, action: Action, resource=None) -> None:
    """Raise ``ForbiddenError`` unless ``account`` may perform ``action``.

    Package-scoped denials are keyed by ``package_id`` so the presentation
    layer can decide how much to reveal about foreign packages.
    """
    if is_allowed(account, action, resource):
        return

    logger.info(
        "Authorization denied",
        account_id=str(account.id),
        role=account.role,
        action=action.value,
        resource_id=str(resource.id) if resource is not None else None,
    )
    if action in _OWNER_ACTIONS and resource is not None:
        raise ForbiddenError({"package_id": [f"Not permitted to {action.value.replace('_', ' ')} {resource.id}"]})
    raise ForbiddenError({"action": [f"{account.role} accounts may not {action.value.replace('_', ' ')}"]})
