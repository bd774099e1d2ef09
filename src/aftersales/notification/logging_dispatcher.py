"""Dispatcher that writes each notification to the structured log.

Used in development and wherever no real transport is configured.
"""

from uuid import uuid4

import structlog

from aftersales.notification.port import DispatchResult, NotificationDispatcher, build_request

logger = structlog.get_logger(__name__)


class LoggingDispatcher(NotificationDispatcher):
    def notify(self, case_id, order_id, user_id, notification_type, payload) -> DispatchResult:
        request = build_request(case_id, order_id, user_id, notification_type, payload)
        message_id = f"log-{uuid4().hex[:12]}"
        logger.info("Notification dispatched", message_id=message_id, **request)
        return DispatchResult(success=True, message_id=message_id)
