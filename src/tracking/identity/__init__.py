"""Identity provider factory.

Provides get_identity_provider() / set_identity_provider() to swap
implementations. The fake provider is the default; it can be seeded from
``FAKE_IDENTITY_TOKENS`` (``token=principal,token2=principal2``).
"""

import os

from tracking.identity.fake_adapter import FakeIdentityProvider
from tracking.identity.port import IdentityProvider

_current_provider: IdentityProvider | None = None


def _seed_tokens(raw: str) -> dict[str, str]:
    tokens = {}
    for pair in raw.split(","):
        token, sep, principal = pair.strip().partition("=")
        if sep and token and principal:
            tokens[token] = principal
    return tokens


def get_identity_provider() -> IdentityProvider:
    """Return the configured identity provider (singleton)."""
    global _current_provider
    if _current_provider is None:
        adapter = os.environ.get("IDENTITY_PROVIDER", "fake")
        if adapter == "fake":
            _current_provider = FakeIdentityProvider(_seed_tokens(os.environ.get("FAKE_IDENTITY_TOKENS", "")))
        else:
            raise ValueError(f"Unknown identity provider: {adapter}")
    return _current_provider


def set_identity_provider(provider: IdentityProvider) -> None:
    """Override the active identity provider (useful for tests)."""
    global _current_provider
    _current_provider = provider


def reset_identity_provider() -> None:
    """Reset to the default provider."""
    global _current_provider
    _current_provider = None
