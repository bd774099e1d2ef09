"""Pydantic API schemas for the aftersales domain.

These are the external API contracts, kept separate from domain commands.
Routes translate between them.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_id: str | None = None
    name: str
    price: float
    quantity: int = Field(ge=1)


class PlaceOrderRequest(BaseModel):
    customer_id: str
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    payment_method: str
    payment_status: str = "pending"
    total_amount: float | None = None
    delivery_notes: str | None = None
    items: list[OrderItemRequest]


class CancelOrderRequest(BaseModel):
    reason: str


class RecordAttemptRequest(BaseModel):
    scheduled_date: date
    notes: str | None = None


class AttemptOutcomeRequest(BaseModel):
    status: str
    failure_reason: str | None = None


class FileComplaintRequest(BaseModel):
    order_id: str
    user_id: str
    complaint_type: str
    description: str
    evidence_images: list[str] = []


class VersionedRequest(BaseModel):
    expected_version: int | None = None


class ResolveComplaintRequest(VersionedRequest):
    notes: str | None = None


class SchedulePickupRequest(VersionedRequest):
    pickup_date: datetime
    admin_notes: str | None = None


class ProcessRefundRequest(VersionedRequest):
    refund_method: str


class SelectRefundMethodRequest(BaseModel):
    refund_method: str


class FailRefundRequest(BaseModel):
    reason: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str


class StatusDescriptorResponse(BaseModel):
    text: str
    severity: str
    actionable: str | None = None
    terminal: bool


class AttemptNumberResponse(BaseModel):
    attempt_number: int


class DeliveryAttemptResponse(BaseModel):
    attempt_number: int
    scheduled_date: date
    status: str
    failure_reason: str | None = None
    notes: str | None = None
    attempted_at: datetime | None = None


class ComplaintResponse(BaseModel):
    complaint_id: str
    order_id: str
    user_id: str
    complaint_type: str
    description: str
    evidence_images: list[str]
    investigation_status: str
    investigation_notes: str | None = None
    resolution_type: str
    coupon_code: str | None = None
    coupon_discount_percent: float | None = None
    refund_method: str | None = None
    refund_status: str | None = None
    store_credit_code: str | None = None
    pickup_status: str
    pickup_scheduled_at: datetime | None = None
    pickup_completed_at: datetime | None = None
    replacement_order_id: str | None = None
    admin_notes: str | None = None
    version: int


class RetryResponse(BaseModel):
    requeued: int


class ComplaintQueueItem(BaseModel):
    complaint_id: str
    order_id: str
    complaint_type: str
    queue: str
    investigation_status: str
    pickup_status: str | None = None
    resolution_type: str | None = None
    updated_at: datetime | None = None
