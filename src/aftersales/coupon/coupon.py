"""Coupon aggregate — single-use apology discounts for upheld complaints."""

import secrets
import string
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from aftersales.coupon.events import ApologyCouponIssued
from aftersales.domain import aftersales

APOLOGY_PREFIX = "SORRY"
_CODE_ALPHABET = string.ascii_uppercase + string.digits


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def generate_apology_code() -> str:
    """``SORRY`` followed by six random upper-case letters or digits."""
    return APOLOGY_PREFIX + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))


@aftersales.aggregate
class Coupon:
    code = String(required=True, unique=True, max_length=20)
    description = Text()
    discount_type = String(choices=DiscountType, default=DiscountType.PERCENTAGE.value)
    discount_value = Float(required=True, min_value=0.0)
    usage_limit = Integer(default=1)
    per_user_limit = Integer(default=1)
    is_active = Boolean(default=True)
    valid_from = DateTime()
    valid_until = DateTime()
    category = String(max_length=50)
    source = String(max_length=50)
    complaint_id = Identifier()
    user_id = Identifier()
    created_at = DateTime()

    @classmethod
    def issue_apology(cls, complaint_id: str, user_id: str, percent: float = 20, valid_days: int = 365):
        now = datetime.now(UTC)
        coupon = cls(
            code=generate_apology_code(),
            description=(
                "We sincerely apologize for the inconvenience. "
                f"Please enjoy a {percent:g}% discount on your next order."
            ),
            discount_type=DiscountType.PERCENTAGE.value,
            discount_value=percent,
            usage_limit=1,
            per_user_limit=1,
            is_active=True,
            valid_from=now,
            valid_until=now + timedelta(days=valid_days),
            category="apology",
            source="apology_complaint",
            complaint_id=complaint_id,
            user_id=user_id,
            created_at=now,
        )
        coupon.raise_(
            ApologyCouponIssued(
                coupon_id=str(coupon.id),
                code=coupon.code,
                complaint_id=complaint_id,
                discount_value=percent,
                valid_until=coupon.valid_until,
                issued_at=now,
            )
        )
        return coupon
