"""ComplaintCase aggregate (CQRS) — one customer complaint against one order.

A case starts in INVESTIGATING and is resolved exactly once. An upheld case
(RESOLVED_TRUE) earns the customer an apology coupon and then runs the pickup
sub-machine before a single remedy is chosen: a replacement order or a
refund. Cases are never deleted.

State Machine:
    investigation:  INVESTIGATING → RESOLVED_TRUE | RESOLVED_FALSE
    pickup:         NONE → SCHEDULED → PICKED_UP      (RESOLVED_TRUE only)
    resolution:     NONE → REPLACEMENT | REFUND       (set once)

Guards distinguish two failures. A transition that is not legal from the
current state raises InvalidTransition. A one-shot action that has already
happened (second pickup, second replacement, second remedy) raises Conflict.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from aftersales.complaint.events import (
    ComplaintFiled,
    ComplaintRefundInitiated,
    ComplaintRefundSettled,
    ComplaintRejected,
    ComplaintUpheld,
    PickupCompleted,
    PickupScheduled,
    ReplacementIssued,
)
from aftersales.domain import aftersales
from aftersales.errors import Conflict, InvalidTransition


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ComplaintType(Enum):
    NOT_RECEIVED = "not_received"
    DAMAGED = "damaged"
    RETURN = "return"
    REPLACE = "replace"
    WARRANTY = "warranty"


class InvestigationStatus(Enum):
    INVESTIGATING = "investigating"
    RESOLVED_TRUE = "resolved_true"
    RESOLVED_FALSE = "resolved_false"


class ResolutionType(Enum):
    NONE = "none"
    REFUND = "refund"
    REPLACEMENT = "replacement"


class PickupStatus(Enum):
    NONE = "none"
    SCHEDULED = "scheduled"
    PICKED_UP = "picked_up"


class CaseRefundStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


COMPLAINT_TYPE_LABELS = {
    ComplaintType.NOT_RECEIVED.value: "Order Not Received",
    ComplaintType.DAMAGED.value: "Damaged Product",
    ComplaintType.RETURN.value: "Return Request",
    ComplaintType.REPLACE.value: "Replacement Request",
    ComplaintType.WARRANTY.value: "Warranty Claim",
}

# Nothing physical to collect when the parcel never arrived
_REFUNDABLE_WITHOUT_PICKUP = {ComplaintType.NOT_RECEIVED.value}

DEFAULT_REJECTION_REASON = "Investigation determined the claim was not valid."


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@aftersales.aggregate
class ComplaintCase:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    complaint_type = String(required=True, choices=ComplaintType)
    description = Text(required=True)
    evidence_images = Text()  # JSON list of image URIs

    investigation_status = String(
        choices=InvestigationStatus,
        default=InvestigationStatus.INVESTIGATING.value,
    )
    investigation_notes = Text()
    resolution_type = String(choices=ResolutionType, default=ResolutionType.NONE.value)

    coupon_code = String(max_length=20)
    coupon_discount_percent = Float()

    refund_method = String(max_length=50)
    refund_status = String(choices=CaseRefundStatus)
    refund_request_id = Identifier()
    store_credit_code = String(max_length=20)

    pickup_status = String(choices=PickupStatus, default=PickupStatus.NONE.value)
    pickup_scheduled_at = DateTime()
    pickup_completed_at = DateTime()

    replacement_order_id = Identifier()
    admin_notes = Text()

    created_at = DateTime()
    updated_at = DateTime()
    resolved_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def coupon_only_for_upheld_cases(self):
        if self.coupon_code and self.investigation_status != InvestigationStatus.RESOLVED_TRUE.value:
            raise ValidationError({"coupon_code": ["Coupons are issued only for upheld complaints"]})

    @invariant.post
    def pickup_only_for_upheld_cases(self):
        if (
            self.pickup_status != PickupStatus.NONE.value
            and self.investigation_status != InvestigationStatus.RESOLVED_TRUE.value
        ):
            raise ValidationError({"pickup_status": ["Pickup applies only to upheld complaints"]})

    @invariant.post
    def replacement_matches_resolution(self):
        if self.replacement_order_id and self.resolution_type != ResolutionType.REPLACEMENT.value:
            raise ValidationError({"replacement_order_id": ["Replacement order requires a replacement resolution"]})

    @invariant.post
    def refund_matches_resolution(self):
        if self.refund_status and self.resolution_type != ResolutionType.REFUND.value:
            raise ValidationError({"refund_status": ["Refund status requires a refund resolution"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def file(
        cls,
        order_id: str,
        user_id: str,
        complaint_type: str,
        description: str,
        evidence_images: list[str] | None = None,
    ):
        """Open a new case in INVESTIGATING."""
        now = datetime.now(UTC)
        case = cls(
            order_id=order_id,
            user_id=user_id,
            complaint_type=complaint_type,
            description=description,
            evidence_images=json.dumps(evidence_images or []),
            created_at=now,
            updated_at=now,
        )
        case.raise_(
            ComplaintFiled(
                complaint_id=str(case.id),
                order_id=order_id,
                user_id=user_id,
                complaint_type=complaint_type,
                evidence_count=len(evidence_images or []),
                filed_at=now,
            )
        )
        return case

    # -------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------
    @property
    def evidence(self) -> list[str]:
        return json.loads(self.evidence_images) if self.evidence_images else []

    @property
    def type_label(self) -> str:
        return COMPLAINT_TYPE_LABELS[self.complaint_type]

    @property
    def is_investigating(self) -> bool:
        return self.investigation_status == InvestigationStatus.INVESTIGATING.value

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    def _assert_investigating(self, target: InvestigationStatus) -> None:
        if not self.is_investigating:
            raise InvalidTransition(
                {"investigation_status": [f"Cannot transition from {self.investigation_status} to {target.value}"]}
            )

    def _assert_upheld(self, action: str) -> None:
        if self.investigation_status != InvestigationStatus.RESOLVED_TRUE.value:
            raise InvalidTransition(
                {"investigation_status": [f"Cannot {action} while investigation is {self.investigation_status}"]}
            )

    def _assert_no_remedy(self) -> None:
        if self.resolution_type != ResolutionType.NONE.value:
            raise Conflict({"resolution_type": [f"Complaint already resolved with {self.resolution_type}"]})

    # -------------------------------------------------------------------
    # Investigation
    # -------------------------------------------------------------------
    def uphold(self, notes: str | None, coupon_code: str, coupon_discount_percent: float) -> None:
        """Resolve as true and record the apology coupon issued for it."""
        self._assert_investigating(InvestigationStatus.RESOLVED_TRUE)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.investigation_status = InvestigationStatus.RESOLVED_TRUE.value
            self.investigation_notes = notes
            self.coupon_code = coupon_code
            self.coupon_discount_percent = coupon_discount_percent
            self.resolved_at = now
            self.updated_at = now

        self.raise_(
            ComplaintUpheld(
                complaint_id=str(self.id),
                order_id=str(self.order_id),
                coupon_code=coupon_code,
                coupon_discount_percent=coupon_discount_percent,
                resolved_at=now,
            )
        )

    def reject(self, notes: str | None) -> None:
        """Resolve as false. The case is closed for good."""
        self._assert_investigating(InvestigationStatus.RESOLVED_FALSE)

        now = datetime.now(UTC)
        self.investigation_status = InvestigationStatus.RESOLVED_FALSE.value
        self.investigation_notes = notes
        self.resolved_at = now
        self.updated_at = now
        self.raise_(
            ComplaintRejected(
                complaint_id=str(self.id),
                order_id=str(self.order_id),
                reason=notes or DEFAULT_REJECTION_REASON,
                resolved_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Pickup
    # -------------------------------------------------------------------
    def schedule_pickup(self, pickup_date: datetime, admin_notes: str | None = None) -> None:
        self._assert_upheld("schedule pickup")
        if self.pickup_status != PickupStatus.NONE.value:
            raise Conflict({"pickup_status": [f"Pickup already {self.pickup_status}"]})

        now = datetime.now(UTC)
        self.pickup_status = PickupStatus.SCHEDULED.value
        self.pickup_scheduled_at = pickup_date
        if admin_notes:
            self.admin_notes = admin_notes
        self.updated_at = now
        self.raise_(
            PickupScheduled(
                complaint_id=str(self.id),
                order_id=str(self.order_id),
                pickup_date=pickup_date,
                scheduled_at=now,
            )
        )

    def mark_picked_up(self) -> None:
        self._assert_upheld("mark picked up")
        if self.pickup_status == PickupStatus.PICKED_UP.value:
            raise Conflict({"pickup_status": ["Item already picked up"]})
        if self.pickup_status != PickupStatus.SCHEDULED.value:
            raise InvalidTransition(
                {"pickup_status": [f"Cannot transition from {self.pickup_status} to {PickupStatus.PICKED_UP.value}"]}
            )

        now = datetime.now(UTC)
        self.pickup_status = PickupStatus.PICKED_UP.value
        self.pickup_completed_at = now
        self.updated_at = now
        self.raise_(PickupCompleted(complaint_id=str(self.id), order_id=str(self.order_id), completed_at=now))

    # -------------------------------------------------------------------
    # Remedies
    # -------------------------------------------------------------------
    def assert_can_replace(self) -> None:
        self._assert_upheld("create a replacement")
        if self.pickup_status != PickupStatus.PICKED_UP.value:
            raise InvalidTransition({"pickup_status": ["Item must be picked up before a replacement is created"]})
        if self.replacement_order_id:
            raise Conflict({"replacement_order_id": ["Replacement order already created"]})
        self._assert_no_remedy()

    def record_replacement(self, replacement_order_id: str) -> None:
        self.assert_can_replace()

        now = datetime.now(UTC)
        with atomic_change(self):
            self.replacement_order_id = replacement_order_id
            self.resolution_type = ResolutionType.REPLACEMENT.value
            self.updated_at = now

        self.raise_(
            ReplacementIssued(
                complaint_id=str(self.id),
                order_id=str(self.order_id),
                replacement_order_id=replacement_order_id,
                issued_at=now,
            )
        )

    def assert_can_refund(self) -> None:
        self._assert_upheld("process a refund")
        if (
            self.complaint_type not in _REFUNDABLE_WITHOUT_PICKUP
            and self.pickup_status != PickupStatus.PICKED_UP.value
        ):
            raise InvalidTransition({"pickup_status": ["Item must be picked up before a refund is processed"]})
        self._assert_no_remedy()

    def record_refund(self, refund_request_id: str, refund_method: str) -> None:
        self.assert_can_refund()

        now = datetime.now(UTC)
        with atomic_change(self):
            self.refund_request_id = refund_request_id
            self.refund_method = refund_method
            self.refund_status = CaseRefundStatus.PENDING.value
            self.resolution_type = ResolutionType.REFUND.value
            self.updated_at = now

        self.raise_(
            ComplaintRefundInitiated(
                complaint_id=str(self.id),
                order_id=str(self.order_id),
                refund_request_id=refund_request_id,
                refund_method=refund_method,
                initiated_at=now,
            )
        )

    def settle_refund(self, refund_status: CaseRefundStatus, store_credit_code: str | None = None) -> None:
        """Mirror the outcome of the refund request onto the case."""
        if self.refund_status != CaseRefundStatus.PENDING.value:
            raise InvalidTransition(
                {"refund_status": [f"Cannot transition from {self.refund_status} to {refund_status.value}"]}
            )

        now = datetime.now(UTC)
        self.refund_status = refund_status.value
        if store_credit_code:
            self.store_credit_code = store_credit_code
            self.admin_notes = f"Return received. Store credit issued: {store_credit_code}"
        self.updated_at = now
        self.raise_(
            ComplaintRefundSettled(complaint_id=str(self.id), refund_status=refund_status.value, settled_at=now)
        )

    def retry_refund(self) -> None:
        """Put a failed refund back in the payments queue."""
        if self.refund_status != CaseRefundStatus.FAILED.value:
            raise InvalidTransition(
                {"refund_status": [f"Cannot retry a refund that is {self.refund_status or 'not started'}"]}
            )

        now = datetime.now(UTC)
        self.refund_status = CaseRefundStatus.PENDING.value
        self.updated_at = now
        self.raise_(
            ComplaintRefundSettled(
                complaint_id=str(self.id),
                refund_status=CaseRefundStatus.PENDING.value,
                settled_at=now,
            )
        )
