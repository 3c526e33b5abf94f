"""Tracking HTTP API package."""

from tracking.api.errors import register_tracking_error_handlers
from tracking.api.routes import account_router, package_router, shipping_method_router

__all__ = ["account_router", "package_router", "shipping_method_router", "register_tracking_error_handlers"]
