"""NotificationIntent aggregate (CQRS) — the outbox record for one notification.

Intents are written in the same unit of work as the complaint or delivery
change they announce, so a notification exists if and only if the change
committed. Dispatch happens afterwards and may fail without affecting the
change itself.

State Machine:
    PENDING → DISPATCHED
    PENDING → FAILED → (requeue, while attempts < max_attempts) → PENDING
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, Integer, String, Text

from aftersales.domain import aftersales
from aftersales.errors import InvalidTransition
from aftersales.notification.events import (
    NotificationIntentDispatched,
    NotificationIntentFailed,
    NotificationIntentRecorded,
    NotificationIntentRequeued,
)


class NotificationType(Enum):
    COMPLAINT_RECEIVED = "complaint_received"
    COMPLAINT_APPROVED = "complaint_approved"
    COMPLAINT_REJECTED = "complaint_rejected"
    PICKUP_SCHEDULED = "pickup_scheduled"
    PICKUP_COMPLETED = "pickup_completed"
    REPLACEMENT_CREATED = "replacement_created"
    REFUND_INITIATED = "refund_initiated"
    DELIVERY_FAILED = "delivery_failed"
    STORE_CREDIT_ISSUED = "store_credit_issued"


class IntentStatus(Enum):
    PENDING = "pending"
    DISPATCHED = "dispatched"
    FAILED = "failed"


_VALID_TRANSITIONS = {
    IntentStatus.PENDING: {IntentStatus.DISPATCHED, IntentStatus.FAILED},
    IntentStatus.FAILED: {IntentStatus.PENDING},
    IntentStatus.DISPATCHED: set(),  # terminal
}


@aftersales.aggregate
class NotificationIntent:
    notification_type = String(required=True, choices=NotificationType)
    complaint_id = Identifier()
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    customer_name = String(max_length=255)
    customer_email = String(max_length=255)
    additional_data = Text()  # JSON object

    status = String(choices=IntentStatus, default=IntentStatus.PENDING.value)
    attempts = Integer(default=0)
    max_attempts = Integer(default=3)
    last_error = String(max_length=500)
    message_id = String(max_length=100)

    dispatched_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def record(
        cls,
        notification_type: NotificationType,
        order_id: str,
        user_id: str,
        complaint_id: str | None = None,
        customer_name: str | None = None,
        customer_email: str | None = None,
        additional_data: dict | None = None,
        max_attempts: int = 3,
    ):
        now = datetime.now(UTC)
        intent = cls(
            notification_type=notification_type.value,
            complaint_id=complaint_id,
            order_id=order_id,
            user_id=user_id,
            customer_name=customer_name,
            customer_email=customer_email,
            additional_data=json.dumps(additional_data or {}),
            status=IntentStatus.PENDING.value,
            attempts=0,
            max_attempts=max_attempts,
            created_at=now,
            updated_at=now,
        )
        intent.raise_(
            NotificationIntentRecorded(
                intent_id=str(intent.id),
                notification_type=intent.notification_type,
                order_id=order_id,
                complaint_id=complaint_id,
                recorded_at=now,
            )
        )
        return intent

    @property
    def data(self) -> dict:
        return json.loads(self.additional_data) if self.additional_data else {}

    @property
    def payload(self) -> dict:
        return {
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "additionalData": self.data,
        }

    @property
    def can_retry(self) -> bool:
        return self.status == IntentStatus.FAILED.value and self.attempts < self.max_attempts

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: IntentStatus) -> None:
        current = IntentStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def mark_dispatched(self, message_id: str | None = None) -> None:
        self._assert_can_transition(IntentStatus.DISPATCHED)
        now = datetime.now(UTC)
        self.status = IntentStatus.DISPATCHED.value
        self.attempts = self.attempts + 1
        self.message_id = message_id
        self.last_error = None
        self.dispatched_at = now
        self.updated_at = now
        self.raise_(
            NotificationIntentDispatched(
                intent_id=str(self.id),
                message_id=message_id,
                attempts=self.attempts,
                dispatched_at=now,
            )
        )

    def mark_failed(self, error: str) -> None:
        self._assert_can_transition(IntentStatus.FAILED)
        now = datetime.now(UTC)
        self.status = IntentStatus.FAILED.value
        self.attempts = self.attempts + 1
        self.last_error = error[:500]
        self.updated_at = now
        self.raise_(
            NotificationIntentFailed(
                intent_id=str(self.id),
                error=self.last_error,
                attempts=self.attempts,
                failed_at=now,
            )
        )

    def requeue(self) -> None:
        if not self.can_retry:
            raise InvalidTransition({"attempts": [f"Notification cannot be retried after {self.attempts} attempts"]})
        self._assert_can_transition(IntentStatus.PENDING)
        now = datetime.now(UTC)
        self.status = IntentStatus.PENDING.value
        self.updated_at = now
        self.raise_(NotificationIntentRequeued(intent_id=str(self.id), attempts=self.attempts, requeued_at=now))
