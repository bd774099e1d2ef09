"""Refund request events."""

from protean.fields import DateTime, Float, Identifier, String

from aftersales.domain import aftersales


@aftersales.event(part_of="RefundRequest")
class RefundRequested:
    __version__ = "v1"

    refund_id = Identifier(required=True)
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    complaint_id = Identifier()
    amount = Float(required=True)
    refund_method = String(required=True)
    status = String(required=True)
    reason = String(required=True)
    requested_at = DateTime(required=True)


@aftersales.event(part_of="RefundRequest")
class RefundMethodSelected:
    __version__ = "v1"

    refund_id = Identifier(required=True)
    refund_method = String(required=True)
    selected_at = DateTime(required=True)


@aftersales.event(part_of="RefundRequest")
class RefundCompleted:
    __version__ = "v1"

    refund_id = Identifier(required=True)
    order_id = Identifier(required=True)
    complaint_id = Identifier()
    amount = Float(required=True)
    completed_at = DateTime(required=True)


@aftersales.event(part_of="RefundRequest")
class RefundFailed:
    __version__ = "v1"

    refund_id = Identifier(required=True)
    order_id = Identifier(required=True)
    complaint_id = Identifier()
    reason = String(required=True)
    failed_at = DateTime(required=True)


@aftersales.event(part_of="RefundRequest")
class RefundRetried:
    __version__ = "v1"

    refund_id = Identifier(required=True)
    complaint_id = Identifier()
    retried_at = DateTime(required=True)
