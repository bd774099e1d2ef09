"""RefundRequest aggregate (CQRS) — money owed back to a customer.

Refunds come from two places: a complaint resolved with a refund remedy
(created PENDING with the method the admin chose) and an abandoned prepaid
delivery (created PENDING_USER_SELECTION until the customer picks a method).
Payment execution happens outside this system; its result is reported back
through complete() or fail().

State Machine:
    PENDING_USER_SELECTION → PENDING → COMPLETED
                             PENDING → FAILED → (retry) → PENDING
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, String

from aftersales.domain import aftersales
from aftersales.errors import InvalidTransition
from aftersales.refund.events import (
    RefundCompleted,
    RefundFailed,
    RefundMethodSelected,
    RefundRequested,
    RefundRetried,
)


class RefundStatus(Enum):
    PENDING_USER_SELECTION = "pending_user_selection"
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class RefundMethod(Enum):
    UPI = "upi"
    BANK = "bank"
    GIFT_CARD = "gift_card"
    ORIGINAL_PAYMENT = "original_payment"


PENDING_SELECTION = "pending_selection"

_VALID_TRANSITIONS = {
    RefundStatus.PENDING_USER_SELECTION: {RefundStatus.PENDING},
    RefundStatus.PENDING: {RefundStatus.COMPLETED, RefundStatus.FAILED},
    RefundStatus.COMPLETED: set(),  # terminal
    RefundStatus.FAILED: {RefundStatus.PENDING},
}


def assert_refund_method(refund_method: str) -> None:
    if refund_method not in {m.value for m in RefundMethod}:
        raise InvalidTransition({"refund_method": [f"Unknown refund method {refund_method}"]})


@aftersales.aggregate
class RefundRequest:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    complaint_id = Identifier()
    amount = Float(required=True, min_value=0.0)
    payment_method = String(max_length=50)
    refund_method = String(required=True, max_length=50)
    reason = String(required=True, max_length=500)
    status = String(choices=RefundStatus, default=RefundStatus.PENDING.value)
    failure_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()

    # -------------------------------------------------------------------
    # Factory methods
    # -------------------------------------------------------------------
    @classmethod
    def for_complaint(cls, order, complaint_id: str, complaint_type: str, refund_method: str):
        """Refund the full order amount for an upheld complaint."""
        assert_refund_method(refund_method)
        return cls._create(
            order,
            refund_method=refund_method,
            reason=f"Complaint: {complaint_type}",
            status=RefundStatus.PENDING,
            complaint_id=complaint_id,
        )

    @classmethod
    def await_selection(cls, order, reason: str):
        """Refund a prepaid order whose delivery was abandoned; the customer picks the method."""
        return cls._create(
            order,
            refund_method=PENDING_SELECTION,
            reason=reason,
            status=RefundStatus.PENDING_USER_SELECTION,
        )

    @classmethod
    def _create(cls, order, refund_method: str, reason: str, status: RefundStatus, complaint_id: str | None = None):
        now = datetime.now(UTC)
        refund = cls(
            order_id=str(order.id),
            user_id=str(order.customer_id),
            complaint_id=complaint_id,
            amount=order.total_amount,
            payment_method=order.payment_method,
            refund_method=refund_method,
            reason=reason,
            status=status.value,
            created_at=now,
            updated_at=now,
        )
        refund.raise_(
            RefundRequested(
                refund_id=str(refund.id),
                order_id=refund.order_id,
                user_id=refund.user_id,
                complaint_id=complaint_id,
                amount=refund.amount,
                refund_method=refund_method,
                status=refund.status,
                reason=reason,
                requested_at=now,
            )
        )
        return refund

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: RefundStatus) -> None:
        current = RefundStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def select_method(self, refund_method: str) -> None:
        if self.status != RefundStatus.PENDING_USER_SELECTION.value:
            raise InvalidTransition({"status": [f"Refund method cannot be changed once the refund is {self.status}"]})
        assert_refund_method(refund_method)
        now = datetime.now(UTC)
        self.refund_method = refund_method
        self.status = RefundStatus.PENDING.value
        self.updated_at = now
        self.raise_(RefundMethodSelected(refund_id=str(self.id), refund_method=refund_method, selected_at=now))

    def complete(self) -> None:
        self._assert_can_transition(RefundStatus.COMPLETED)
        now = datetime.now(UTC)
        self.status = RefundStatus.COMPLETED.value
        self.completed_at = now
        self.updated_at = now
        self.raise_(
            RefundCompleted(
                refund_id=str(self.id),
                order_id=str(self.order_id),
                complaint_id=self.complaint_id,
                amount=self.amount,
                completed_at=now,
            )
        )

    def fail(self, reason: str) -> None:
        self._assert_can_transition(RefundStatus.FAILED)
        now = datetime.now(UTC)
        self.status = RefundStatus.FAILED.value
        self.failure_reason = reason
        self.updated_at = now
        self.raise_(
            RefundFailed(
                refund_id=str(self.id),
                order_id=str(self.order_id),
                complaint_id=self.complaint_id,
                reason=reason,
                failed_at=now,
            )
        )

    def retry(self) -> None:
        self._assert_can_transition(RefundStatus.PENDING)
        if self.refund_method == PENDING_SELECTION:
            raise InvalidTransition({"refund_method": ["Refund method has not been selected"]})
        now = datetime.now(UTC)
        self.status = RefundStatus.PENDING.value
        self.failure_reason = None
        self.updated_at = now
        self.raise_(RefundRetried(refund_id=str(self.id), complaint_id=self.complaint_id, retried_at=now))
