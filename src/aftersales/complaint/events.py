"""Complaint case events — facts about investigation, pickup and remedy."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from aftersales.domain import aftersales


@aftersales.event(part_of="ComplaintCase")
class ComplaintFiled:
    __version__ = "v1"

    complaint_id = Identifier(required=True)
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    complaint_type = String(required=True)
    evidence_count = Integer(default=0)
    filed_at = DateTime(required=True)


@aftersales.event(part_of="ComplaintCase")
class ComplaintUpheld:
    """Investigation found the complaint valid; an apology coupon was issued."""

    __version__ = "v1"

    complaint_id = Identifier(required=True)
    order_id = Identifier(required=True)
    coupon_code = String(required=True)
    coupon_discount_percent = Float(required=True)
    resolved_at = DateTime(required=True)


@aftersales.event(part_of="ComplaintCase")
class ComplaintRejected:
    """Investigation found the complaint invalid."""

    __version__ = "v1"

    complaint_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String(required=True)
    resolved_at = DateTime(required=True)


@aftersales.event(part_of="ComplaintCase")
class PickupScheduled:
    __version__ = "v1"

    complaint_id = Identifier(required=True)
    order_id = Identifier(required=True)
    pickup_date = DateTime(required=True)
    scheduled_at = DateTime(required=True)


@aftersales.event(part_of="ComplaintCase")
class PickupCompleted:
    __version__ = "v1"

    complaint_id = Identifier(required=True)
    order_id = Identifier(required=True)
    completed_at = DateTime(required=True)


@aftersales.event(part_of="ComplaintCase")
class ReplacementIssued:
    __version__ = "v1"

    complaint_id = Identifier(required=True)
    order_id = Identifier(required=True)
    replacement_order_id = Identifier(required=True)
    issued_at = DateTime(required=True)


@aftersales.event(part_of="ComplaintCase")
class ComplaintRefundInitiated:
    __version__ = "v1"

    complaint_id = Identifier(required=True)
    order_id = Identifier(required=True)
    refund_request_id = Identifier(required=True)
    refund_method = String(required=True)
    initiated_at = DateTime(required=True)


@aftersales.event(part_of="ComplaintCase")
class ComplaintRefundSettled:
    """The refund behind a complaint completed, failed or went back to pending."""

    __version__ = "v1"

    complaint_id = Identifier(required=True)
    refund_status = String(required=True)
    settled_at = DateTime(required=True)
