from protean.fields import DateTime, Float, Identifier, String

from aftersales.domain import aftersales


@aftersales.event(part_of="Coupon")
class ApologyCouponIssued:
    __version__ = "v1"

    coupon_id = Identifier(required=True)
    code = String(required=True)
    complaint_id = Identifier(required=True)
    discount_value = Float(required=True)
    valid_until = DateTime(required=True)
    issued_at = DateTime(required=True)
