"""Notification intent events."""

from protean.fields import DateTime, Identifier, Integer, String

from aftersales.domain import aftersales


@aftersales.event(part_of="NotificationIntent")
class NotificationIntentRecorded:
    """A notification was committed together with the change that caused it."""

    __version__ = "v1"

    intent_id = Identifier(required=True)
    notification_type = String(required=True)
    order_id = Identifier(required=True)
    complaint_id = Identifier()
    recorded_at = DateTime(required=True)


@aftersales.event(part_of="NotificationIntent")
class NotificationIntentDispatched:
    __version__ = "v1"

    intent_id = Identifier(required=True)
    message_id = String()
    attempts = Integer(required=True)
    dispatched_at = DateTime(required=True)


@aftersales.event(part_of="NotificationIntent")
class NotificationIntentFailed:
    __version__ = "v1"

    intent_id = Identifier(required=True)
    error = String(required=True)
    attempts = Integer(required=True)
    failed_at = DateTime(required=True)


@aftersales.event(part_of="NotificationIntent")
class NotificationIntentRequeued:
    """A failed intent was put back in line for another dispatch."""

    __version__ = "v1"

    intent_id = Identifier(required=True)
    attempts = Integer(required=True)
    requeued_at = DateTime(required=True)
