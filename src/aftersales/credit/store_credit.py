"""StoreCredit aggregate — gift card balance issued when a refund is paid out as credit.

The full refund amount becomes the card's balance. Redemption happens at
checkout, outside this system.
"""

import secrets
import string
import time
from datetime import UTC, datetime, timedelta

from protean.fields import DateTime, Float, Identifier, String

from aftersales.credit.events import StoreCreditIssued
from aftersales.domain import aftersales

STORE_CREDIT_PREFIX = "GC"
_BASE36 = string.digits + string.ascii_uppercase


def _base36(number: int) -> str:
    digits = ""
    while number:
        number, remainder = divmod(number, 36)
        digits = _BASE36[remainder] + digits
    return digits or "0"


def generate_store_credit_code() -> str:
    """``GC``, the issue time in base 36, then three random characters."""
    return STORE_CREDIT_PREFIX + _base36(time.time_ns() // 1_000_000) + "".join(
        secrets.choice(_BASE36) for _ in range(3)
    )


@aftersales.aggregate
class StoreCredit:
    code = String(required=True, unique=True, max_length=20)
    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    refund_id = Identifier(required=True)
    complaint_id = Identifier()
    amount = Float(required=True, min_value=0.0)
    balance = Float(required=True, min_value=0.0)
    source = String(max_length=50, default="refund")
    expires_at = DateTime(required=True)
    created_at = DateTime()

    @classmethod
    def issue_for_refund(cls, refund, valid_days: int = 365):
        now = datetime.now(UTC)
        credit = cls(
            code=generate_store_credit_code(),
            user_id=str(refund.user_id),
            order_id=str(refund.order_id),
            refund_id=str(refund.id),
            complaint_id=refund.complaint_id,
            amount=refund.amount,
            balance=refund.amount,
            source="refund",
            expires_at=now + timedelta(days=valid_days),
            created_at=now,
        )
        credit.raise_(
            StoreCreditIssued(
                credit_id=str(credit.id),
                code=credit.code,
                user_id=credit.user_id,
                order_id=credit.order_id,
                refund_id=credit.refund_id,
                complaint_id=credit.complaint_id,
                amount=credit.amount,
                expires_at=credit.expires_at,
                issued_at=now,
            )
        )
        return credit
