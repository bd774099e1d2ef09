"""DeliveryLog aggregate (CQRS) — the append-only attempt history of one order.

The log shares its identity with the order it tracks. Attempts are numbered
from 1 and never removed; the only change an attempt accepts is its outcome
(SCHEDULED → FAILED or SCHEDULED → DELIVERED).
"""

from datetime import UTC, date, datetime
from enum import Enum

from protean.fields import Date, DateTime, HasMany, Identifier, Integer, String, Text

from aftersales.delivery.events import (
    DeliveryAttemptFailed,
    DeliveryAttemptScheduled,
    DeliveryAttemptSucceeded,
)
from aftersales.domain import aftersales
from aftersales.errors import Conflict, InvalidTransition, NotFound


class AttemptStatus(Enum):
    SCHEDULED = "scheduled"
    FAILED = "failed"
    DELIVERED = "delivered"


class FailureReason(Enum):
    RECEIVER_ABSENT = "receiver_absent"
    PHONE_SWITCHED_OFF = "phone_switched_off"
    REFUSED = "refused"
    WRONG_ADDRESS = "wrong_address"
    OTHER = "other"


FAILURE_REASON_LABELS = {
    FailureReason.RECEIVER_ABSENT.value: "Receiver not available",
    FailureReason.PHONE_SWITCHED_OFF.value: "Phone switched off",
    FailureReason.REFUSED.value: "Customer refused delivery",
    FailureReason.WRONG_ADDRESS.value: "Wrong address",
    FailureReason.OTHER.value: "Other",
}


@aftersales.entity(part_of="DeliveryLog")
class DeliveryAttempt:
    attempt_number = Integer(required=True, min_value=1)
    scheduled_date = Date(required=True)
    status = String(choices=AttemptStatus, default=AttemptStatus.SCHEDULED.value)
    failure_reason = String(choices=FailureReason)
    notes = Text()
    attempted_at = DateTime()


@aftersales.aggregate
class DeliveryLog:
    order_id = Identifier(identifier=True, required=True)
    attempts = HasMany(DeliveryAttempt)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open(cls, order_id: str):
        now = datetime.now(UTC)
        return cls(order_id=order_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def ordered_attempts(self) -> list[DeliveryAttempt]:
        return sorted(self.attempts or [], key=lambda a: a.attempt_number)

    @property
    def failed_count(self) -> int:
        return sum(1 for a in (self.attempts or []) if a.status == AttemptStatus.FAILED.value)

    def _attempt(self, attempt_number: int) -> DeliveryAttempt:
        attempt = next((a for a in (self.attempts or []) if a.attempt_number == attempt_number), None)
        if attempt is None:
            raise NotFound({"attempt_number": [f"Delivery attempt {attempt_number} does not exist"]})
        return attempt

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def schedule_attempt(self, scheduled_date: date, notes: str | None = None) -> int:
        """Append the next attempt and return its number."""
        ordered = self.ordered_attempts()
        if ordered and ordered[-1].status == AttemptStatus.SCHEDULED.value:
            raise Conflict(
                {"attempt_number": [f"Delivery attempt {ordered[-1].attempt_number} has no outcome yet"]}
            )

        number = ordered[-1].attempt_number + 1 if ordered else 1
        now = datetime.now(UTC)
        self.add_attempts(
            DeliveryAttempt(
                attempt_number=number,
                scheduled_date=scheduled_date,
                status=AttemptStatus.SCHEDULED.value,
                notes=notes,
            )
        )
        self.updated_at = now
        self.raise_(
            DeliveryAttemptScheduled(
                order_id=str(self.order_id),
                attempt_number=number,
                scheduled_date=scheduled_date,
                scheduled_at=now,
            )
        )
        return number

    def record_failure(self, attempt_number: int, failure_reason: str) -> None:
        if not failure_reason:
            raise InvalidTransition({"failure_reason": ["A failure reason is required"]})
        if failure_reason not in FAILURE_REASON_LABELS:
            raise InvalidTransition({"failure_reason": [f"Unknown failure reason {failure_reason}"]})

        attempt = self._pending(attempt_number, AttemptStatus.FAILED)
        now = datetime.now(UTC)
        attempt.status = AttemptStatus.FAILED.value
        attempt.failure_reason = failure_reason
        attempt.attempted_at = now
        self.updated_at = now
        self.raise_(
            DeliveryAttemptFailed(
                order_id=str(self.order_id),
                attempt_number=attempt_number,
                failure_reason=failure_reason,
                failed_attempts=self.failed_count,
                attempted_at=now,
            )
        )

    def record_delivery(self, attempt_number: int) -> None:
        attempt = self._pending(attempt_number, AttemptStatus.DELIVERED)
        now = datetime.now(UTC)
        attempt.status = AttemptStatus.DELIVERED.value
        attempt.attempted_at = now
        self.updated_at = now
        self.raise_(
            DeliveryAttemptSucceeded(
                order_id=str(self.order_id),
                attempt_number=attempt_number,
                attempted_at=now,
            )
        )

    def _pending(self, attempt_number: int, target: AttemptStatus) -> DeliveryAttempt:
        attempt = self._attempt(attempt_number)
        if attempt.status != AttemptStatus.SCHEDULED.value:
            raise InvalidTransition({"status": [f"Cannot transition from {attempt.status} to {target.value}"]})
        return attempt
