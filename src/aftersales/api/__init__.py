"""Aftersales domain API package."""

from aftersales.api.errors import register_error_handlers
from aftersales.api.routes import complaint_router, notification_router, order_router, refund_router

__all__ = [
    "order_router",
    "complaint_router",
    "refund_router",
    "notification_router",
    "register_error_handlers",
]
