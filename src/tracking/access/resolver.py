"""Identity & role resolver — the single trust boundary.

Tokens stop here. Everything past the resolver works with a resolved
``Account`` (and through it, a role), never with raw credentials.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from tracking.account.account import Account
from tracking.identity.port import IdentityProvider
from tracking.shared.errors import UnauthenticatedError, UnavailableError

logger = structlog.get_logger(__name__)


class IdentityResolver:
    def __init__(self, identity_provider: IdentityProvider):
        self._identity_provider = identity_provider

    def authenticate(self, token: str) -> str:
        """Return the principal behind ``token`` without requiring an account."""
        try:
            principal = self._identity_provider.authenticate(token)
        except (TimeoutError, ConnectionError) as exc:
            logger.error("Identity provider call failed", error=str(exc))
            raise UnavailableError({"identity_provider": ["Identity provider is unavailable"]}) from exc

        if not principal:
            raise UnauthenticatedError({"token": ["Invalid or expired credentials"]})
        return principal

    def resolve(self, token: str) -> Account:
        principal = self.authenticate(token)
        account = current_domain.repository_for(Account).find_by_external_id(principal)
        if account is None:
            logger.info("Authenticated principal has no account", principal=principal)
            raise UnauthenticatedError({"account": ["No account is registered for this identity"]})
        return account


def load_requester(account_id: str) -> Account:
    """Reload a previously resolved requester by id inside a command handler."""
    try:
        return current_domain.repository_for(Account).get(account_id)
    except ObjectNotFoundError as exc:
        raise UnauthenticatedError({"requester_id": ["Requesting account no longer exists"]}) from exc
