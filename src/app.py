"""Parcel tracking FastAPI application.

Serves the tracking engine over HTTP. Every request runs inside the tracking
domain context and carries a request id in its log context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied.
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from tracking.bootstrap import bootstrap
from tracking.domain import tracking
from tracking.service import TrackingService
from tracking.utils.logging import add_context, clear_context

tracking.init()
bootstrap(tracking)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Parcel Tracking API",
    description="Package lifecycle, shipping rates and access control",
)
app.state.tracking = TrackingService(tracking)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the tracking domain context and bind a request id for logging."""
    add_context(request_id=request.headers.get("X-Request-ID", uuid4().hex), path=request.url.path)
    try:
        with tracking.domain_context():
            response = await call_next(request)
        return response
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from tracking.api import (  # noqa: E402
    account_router,
    package_router,
    register_tracking_error_handlers,
    shipping_method_router,
)

register_exception_handlers(app)
register_tracking_error_handlers(app)

app.include_router(account_router)
app.include_router(package_router)
app.include_router(shipping_method_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": tracking.name}})
