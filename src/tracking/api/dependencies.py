"""Request dependencies: the bearer token and the running service."""

from fastapi import Header, Request

from tracking.service import TrackingService
from tracking.shared.errors import UnauthenticatedError, UnavailableError


def bearer_token(authorization: str | None = Header(None)) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError({"authorization": ["Expected 'Authorization: Bearer <token>'"]})
    return token.strip()


def tracking_service(request: Request) -> TrackingService:
    service = getattr(request.app.state, "tracking", None)
    if service is None:
        raise UnavailableError({"service": ["Tracking service is not running"]})
    return service
