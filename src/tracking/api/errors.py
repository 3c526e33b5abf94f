"""HTTP rendering of engine errors.

Every ``TrackingError`` becomes ``{"error": {field: [messages]}, "kind": ...}``
with the status code of its kind. Malformed request bodies and query
parameters are reported the same way, as ``InvalidInput``. Packages the
caller does not own are reported as missing unless
``TRACKING_CONCEAL_FOREIGN_PACKAGES`` is false.
"""

import os

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tracking.shared.errors import ForbiddenError, InvalidInputError, NotFoundError, TrackingError

logger = structlog.get_logger(__name__)

STATUS_BY_KIND = {
    "Unauthenticated": 401,
    "Forbidden": 403,
    "NotFound": 404,
    "InvalidInput": 400,
    "InvalidTransition": 422,
    "Conflict": 409,
    "Unavailable": 503,
}


def conceal_foreign_packages() -> bool:
    return os.environ.get("TRACKING_CONCEAL_FOREIGN_PACKAGES", "true").strip().lower() not in ("0", "false", "no")


def render(exc: TrackingError) -> JSONResponse:
    if isinstance(exc, ForbiddenError) and "package_id" in exc.messages and conceal_foreign_packages():
        exc = NotFoundError({"package_id": ["Package does not exist"]})

    headers = {"WWW-Authenticate": "Bearer"} if exc.kind == "Unauthenticated" else None
    return JSONResponse(status_code=STATUS_BY_KIND.get(exc.kind, 500), content=exc.to_dict(), headers=headers)


def request_messages(exc: RequestValidationError) -> dict[str, list[str]]:
    """Group pydantic errors by field name, dropping the ``body``/``query`` prefix."""
    messages: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())[1:]) or "request"
        messages.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return messages


async def tracking_error_handler(request: Request, exc: TrackingError) -> JSONResponse:
    logger.info("Request failed", path=request.url.path, kind=exc.kind)
    return render(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Request rejected", path=request.url.path, kind="InvalidInput")
    return render(InvalidInputError(request_messages(exc)))


def register_tracking_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TrackingError, tracking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
