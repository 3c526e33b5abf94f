"""Identity provider port — abstract interface for caller authentication.

The engine programs against this port; adapters are swapped via
configuration. Implementations raise ``TimeoutError`` or ``ConnectionError``
when the provider cannot be reached so callers can tell an outage apart
from a rejected credential.
"""

from abc import ABC, abstractmethod


class IdentityProvider(ABC):
    """Abstract interface for identity provider adapters."""

    @abstractmethod
    def authenticate(self, token: str) -> str | None:
        """Validate a caller token.

        Returns:
            The stable principal id for a valid token, ``None`` otherwise.
        """
        ...
