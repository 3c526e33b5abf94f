"""Fake identity provider — in-memory token registry for tests and development."""

from uuid import uuid4

from tracking.identity.port import IdentityProvider


class FakeIdentityProvider(IdentityProvider):
    """Accepts tokens it has issued (or was seeded with) and nothing else."""

    def __init__(self, tokens: dict[str, str] | None = None):
        self._tokens: dict[str, str] = dict(tokens or {})
        self.available = True
        self.failure_reason = "Identity provider unavailable"

    def configure(self, available: bool = True, failure_reason: str = "Identity provider unavailable"):
        """Configure the fake provider behaviour for testing."""
        self.available = available
        self.failure_reason = failure_reason

    def issue_token(self, principal: str) -> str:
        token = f"fake-{uuid4().hex}"
        self._tokens[token] = principal
        return token

    def revoke(self, token: str) -> None:
        self._tokens.pop(token, None)

    def authenticate(self, token: str) -> str | None:
        if not self.available:
            raise ConnectionError(self.failure_reason)
        if not token:
            return None
        return self._tokens.get(token)

    def reset(self):
        """Forget every issued token (useful between tests)."""
        self._tokens.clear()
        self.available = True
