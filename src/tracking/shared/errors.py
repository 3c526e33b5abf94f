"""Error taxonomy for the tracking engine.

Every error names its kind and carries ``messages`` keyed by the offending
field or resource, the same ``{field: [message, ...]}`` shape Protean's
``ValidationError`` uses. None of these are retried inside the engine.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class TrackingError(Exception):
    """Base class for every failure surfaced by the engine."""

    kind = "Error"

    def __init__(self, messages: dict[str, list[str]]):
        super().__init__(messages)
        self.messages = messages

    def __str__(self) -> str:
        return f"{self.kind}: {self.messages}"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "error": self.messages}


class UnauthenticatedError(TrackingError):
    kind = "Unauthenticated"


class ForbiddenError(TrackingError):
    kind = "Forbidden"


class NotFoundError(TrackingError):
    kind = "NotFound"


class InvalidInputError(TrackingError):
    kind = "InvalidInput"


class InvalidTransitionError(TrackingError):
    kind = "InvalidTransition"


class ConflictError(TrackingError):
    """A compare-and-set lost the race; re-read and resubmit to retry."""

    kind = "Conflict"


class UnavailableError(TrackingError):
    """A collaborator timed out or is down; safe to retry with backoff."""

    kind = "Unavailable"


@contextmanager
def translated_errors(collaborator: str = "record_store") -> Iterator[None]:
    """Translate framework and collaborator failures into the engine taxonomy.

    Collaborator failures are logged with their original message but surfaced
    with a generic one.
    """
    try:
        yield
    except TrackingError:
        raise
    except ValidationError as exc:
        raise InvalidInputError(exc.messages) from exc
    except ObjectNotFoundError as exc:
        raise NotFoundError({"resource": ["Requested record does not exist"]}) from exc
    except (TimeoutError, ConnectionError) as exc:
        logger.error("Collaborator call failed", collaborator=collaborator, error=str(exc))
        label = collaborator.replace("_", " ").capitalize()
        raise UnavailableError({collaborator: [f"{label} is unavailable"]}) from exc
