"""Delivery attempt events."""

from protean.fields import Date, DateTime, Identifier, Integer, String

from aftersales.domain import aftersales


@aftersales.event(part_of="DeliveryLog")
class DeliveryAttemptScheduled:
    __version__ = "v1"

    order_id = Identifier(required=True)
    attempt_number = Integer(required=True)
    scheduled_date = Date(required=True)
    scheduled_at = DateTime(required=True)


@aftersales.event(part_of="DeliveryLog")
class DeliveryAttemptFailed:
    """The courier could not hand the parcel over."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    attempt_number = Integer(required=True)
    failure_reason = String(required=True)
    failed_attempts = Integer(required=True)
    attempted_at = DateTime(required=True)


@aftersales.event(part_of="DeliveryLog")
class DeliveryAttemptSucceeded:
    __version__ = "v1"

    order_id = Identifier(required=True)
    attempt_number = Integer(required=True)
    attempted_at = DateTime(required=True)
