"""Notification relay — hands committed intents to the dispatcher.

Reacts to NotificationIntentRecorded and NotificationIntentRequeued. Runs
after the originating unit of work has committed, so a dispatcher failure is
recorded on the intent and logged but never reaches the command caller.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from aftersales.domain import aftersales
from aftersales.notification import get_dispatcher
from aftersales.notification.events import NotificationIntentRecorded, NotificationIntentRequeued
from aftersales.notification.intent import IntentStatus, NotificationIntent

logger = structlog.get_logger(__name__)


def dispatch_intent(intent: NotificationIntent) -> bool:
    """Send ``intent`` through the configured dispatcher and record the outcome."""
    try:
        result = get_dispatcher().notify(
            str(intent.complaint_id) if intent.complaint_id else None,
            str(intent.order_id),
            str(intent.user_id),
            intent.notification_type,
            intent.payload,
        )
    except Exception as exc:
        logger.error(
            "Notification dispatch raised",
            intent_id=str(intent.id),
            notification_type=intent.notification_type,
            error=str(exc),
        )
        intent.mark_failed(str(exc) or exc.__class__.__name__)
        return False

    if result.success:
        intent.mark_dispatched(result.message_id)
        return True

    logger.warning(
        "Notification dispatch failed",
        intent_id=str(intent.id),
        notification_type=intent.notification_type,
        error=result.failure_reason,
    )
    intent.mark_failed(result.failure_reason or "Unknown dispatch error")
    return False


@aftersales.event_handler(part_of=NotificationIntent)
class NotificationRelay:
    @handle(NotificationIntentRecorded)
    def on_intent_recorded(self, event: NotificationIntentRecorded) -> None:
        self._relay(event.intent_id)

    @handle(NotificationIntentRequeued)
    def on_intent_requeued(self, event: NotificationIntentRequeued) -> None:
        self._relay(event.intent_id)

    def _relay(self, intent_id) -> None:
        repo = current_domain.repository_for(NotificationIntent)
        try:
            intent = repo.get(intent_id)
        except ObjectNotFoundError:
            logger.error("Notification intent not found for dispatch", intent_id=str(intent_id))
            return

        if intent.status != IntentStatus.PENDING.value:
            logger.info(
                "Notification intent not pending, skipping dispatch",
                intent_id=str(intent_id),
                status=intent.status,
            )
            return

        dispatch_intent(intent)
        repo.add(intent)
