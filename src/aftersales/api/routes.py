"""FastAPI routes for the aftersales domain."""

import json

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from aftersales.api.schemas import (
    AttemptNumberResponse,
    AttemptOutcomeRequest,
    CancelOrderRequest,
    ComplaintQueueItem,
    ComplaintResponse,
    DeliveryAttemptResponse,
    FailRefundRequest,
    FileComplaintRequest,
    OrderIdResponse,
    PlaceOrderRequest,
    ProcessRefundRequest,
    RecordAttemptRequest,
    ResolveComplaintRequest,
    RetryResponse,
    SchedulePickupRequest,
    SelectRefundMethodRequest,
    StatusDescriptorResponse,
    StatusResponse,
    VersionedRequest,
)
from aftersales.complaint.complaint import ComplaintCase
from aftersales.complaint.engine import ResolutionEngine
from aftersales.delivery.tracking import MarkAttemptOutcome, RecordDeliveryAttempt, list_attempts
from aftersales.notification.retry import RetryFailedNotifications
from aftersales.order.cancellation import CancelOrder
from aftersales.order.fulfillment import MarkOrderDelivered, MarkOrderProcessing, MarkOrderShipped
from aftersales.order.order import Order
from aftersales.order.placement import PlaceOrder
from aftersales.order.status import project
from aftersales.projections.complaint_queue import ComplaintQueueView
from aftersales.refund.processing import CompleteRefund, FailRefund, RetryRefund, SelectRefundMethod
from aftersales.utils.loading import load

engine = ResolutionEngine()


def _complaint_response(case: ComplaintCase) -> ComplaintResponse:
    return ComplaintResponse(
        complaint_id=str(case.id),
        order_id=str(case.order_id),
        user_id=str(case.user_id),
        complaint_type=case.complaint_type,
        description=case.description,
        evidence_images=case.evidence,
        investigation_status=case.investigation_status,
        investigation_notes=case.investigation_notes,
        resolution_type=case.resolution_type,
        coupon_code=case.coupon_code,
        coupon_discount_percent=case.coupon_discount_percent,
        refund_method=case.refund_method,
        refund_status=case.refund_status,
        store_credit_code=case.store_credit_code,
        pickup_status=case.pickup_status,
        pickup_scheduled_at=case.pickup_scheduled_at,
        pickup_completed_at=case.pickup_completed_at,
        replacement_order_id=str(case.replacement_order_id) if case.replacement_order_id else None,
        admin_notes=case.admin_notes,
        version=case._version,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest) -> OrderIdResponse:
    command = PlaceOrder(
        customer_id=body.customer_id,
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        payment_method=body.payment_method,
        payment_status=body.payment_status,
        total_amount=body.total_amount,
        delivery_notes=body.delivery_notes,
        items=json.dumps([item.model_dump() for item in body.items]),
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.put("/{order_id}/processing", response_model=StatusResponse)
async def mark_processing(order_id: str) -> StatusResponse:
    current_domain.process(MarkOrderProcessing(order_id=order_id), asynchronous=False)
    return StatusResponse(status="processing")


@order_router.put("/{order_id}/shipped", response_model=StatusResponse)
async def mark_shipped(order_id: str) -> StatusResponse:
    current_domain.process(MarkOrderShipped(order_id=order_id), asynchronous=False)
    return StatusResponse(status="shipped")


@order_router.put("/{order_id}/delivered", response_model=StatusResponse)
async def mark_delivered(order_id: str) -> StatusResponse:
    current_domain.process(MarkOrderDelivered(order_id=order_id), asynchronous=False)
    return StatusResponse(status="delivered")


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> StatusResponse:
    current_domain.process(CancelOrder(order_id=order_id, reason=body.reason), asynchronous=False)
    return StatusResponse(status="cancelled")


@order_router.get("/{order_id}/status", response_model=StatusDescriptorResponse)
async def order_status(order_id: str) -> StatusDescriptorResponse:
    """Customer-facing status label for the order."""
    order = load(Order, order_id, "order_id")
    descriptor = project(order, list_attempts(order_id))
    return StatusDescriptorResponse(**descriptor.to_dict())


@order_router.post("/{order_id}/delivery-attempts", status_code=201, response_model=AttemptNumberResponse)
async def record_delivery_attempt(order_id: str, body: RecordAttemptRequest) -> AttemptNumberResponse:
    command = RecordDeliveryAttempt(order_id=order_id, scheduled_date=body.scheduled_date, notes=body.notes)
    attempt_number = current_domain.process(command, asynchronous=False)
    return AttemptNumberResponse(attempt_number=attempt_number)


@order_router.put("/{order_id}/delivery-attempts/{attempt_number}", response_model=StatusResponse)
async def mark_attempt_outcome(order_id: str, attempt_number: int, body: AttemptOutcomeRequest) -> StatusResponse:
    command = MarkAttemptOutcome(
        order_id=order_id,
        attempt_number=attempt_number,
        status=body.status,
        failure_reason=body.failure_reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status=body.status)


@order_router.get("/{order_id}/delivery-attempts", response_model=list[DeliveryAttemptResponse])
async def get_delivery_attempts(order_id: str) -> list[DeliveryAttemptResponse]:
    return [
        DeliveryAttemptResponse(
            attempt_number=a.attempt_number,
            scheduled_date=a.scheduled_date,
            status=a.status,
            failure_reason=a.failure_reason,
            notes=a.notes,
            attempted_at=a.attempted_at,
        )
        for a in list_attempts(order_id)
    ]


# ---------------------------------------------------------------------------
# Complaint Router
# ---------------------------------------------------------------------------
complaint_router = APIRouter(prefix="/complaints", tags=["complaints"])


@complaint_router.post("", status_code=201, response_model=ComplaintResponse)
async def file_complaint(body: FileComplaintRequest) -> ComplaintResponse:
    case = engine.file_complaint(
        order_id=body.order_id,
        user_id=body.user_id,
        complaint_type=body.complaint_type,
        description=body.description,
        evidence_images=body.evidence_images,
    )
    return _complaint_response(case)


@complaint_router.get("", response_model=list[ComplaintQueueItem])
async def list_complaints(queue: str = Query(default="investigating")) -> list[ComplaintQueueItem]:
    """Cases in one admin queue: investigating, resolved, pickup or closed."""
    repo = current_domain.repository_for(ComplaintQueueView)
    views = repo._dao.query.filter(queue=queue).order_by("-updated_at").all().items
    return [
        ComplaintQueueItem(
            complaint_id=str(v.complaint_id),
            order_id=str(v.order_id),
            complaint_type=v.complaint_type,
            queue=v.queue,
            investigation_status=v.investigation_status,
            pickup_status=v.pickup_status,
            resolution_type=v.resolution_type,
            updated_at=v.updated_at,
        )
        for v in views
    ]


@complaint_router.get("/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(complaint_id: str) -> ComplaintResponse:
    return _complaint_response(engine.get(complaint_id))


@complaint_router.put("/{complaint_id}/approve", response_model=ComplaintResponse)
async def approve_complaint(complaint_id: str, body: ResolveComplaintRequest) -> ComplaintResponse:
    """Resolve as true and issue the apology coupon."""
    case = engine.resolve_as_true(complaint_id, notes=body.notes, expected_version=body.expected_version)
    return _complaint_response(case)


@complaint_router.put("/{complaint_id}/reject", response_model=ComplaintResponse)
async def reject_complaint(complaint_id: str, body: ResolveComplaintRequest) -> ComplaintResponse:
    case = engine.resolve_as_false(complaint_id, notes=body.notes, expected_version=body.expected_version)
    return _complaint_response(case)


@complaint_router.put("/{complaint_id}/pickup", response_model=ComplaintResponse)
async def schedule_pickup(complaint_id: str, body: SchedulePickupRequest) -> ComplaintResponse:
    case = engine.schedule_pickup(
        complaint_id,
        pickup_date=body.pickup_date,
        admin_notes=body.admin_notes,
        expected_version=body.expected_version,
    )
    return _complaint_response(case)


@complaint_router.put("/{complaint_id}/picked-up", response_model=ComplaintResponse)
async def mark_picked_up(complaint_id: str, body: VersionedRequest) -> ComplaintResponse:
    case = engine.mark_picked_up(complaint_id, expected_version=body.expected_version)
    return _complaint_response(case)


@complaint_router.post("/{complaint_id}/replacement", response_model=ComplaintResponse)
async def create_replacement(complaint_id: str, body: VersionedRequest) -> ComplaintResponse:
    case = engine.create_replacement_order(complaint_id, expected_version=body.expected_version)
    return _complaint_response(case)


@complaint_router.post("/{complaint_id}/refund", response_model=ComplaintResponse)
async def process_refund(complaint_id: str, body: ProcessRefundRequest) -> ComplaintResponse:
    case = engine.process_refund(
        complaint_id,
        refund_method=body.refund_method,
        expected_version=body.expected_version,
    )
    return _complaint_response(case)


# ---------------------------------------------------------------------------
# Refund Router
# ---------------------------------------------------------------------------
refund_router = APIRouter(prefix="/refunds", tags=["refunds"])


@refund_router.put("/{refund_id}/method", response_model=StatusResponse)
async def select_refund_method(refund_id: str, body: SelectRefundMethodRequest) -> StatusResponse:
    command = SelectRefundMethod(refund_id=refund_id, refund_method=body.refund_method)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="pending")


@refund_router.put("/{refund_id}/complete", response_model=StatusResponse)
async def complete_refund(refund_id: str) -> StatusResponse:
    current_domain.process(CompleteRefund(refund_id=refund_id), asynchronous=False)
    return StatusResponse(status="completed")


@refund_router.put("/{refund_id}/fail", response_model=StatusResponse)
async def fail_refund(refund_id: str, body: FailRefundRequest) -> StatusResponse:
    current_domain.process(FailRefund(refund_id=refund_id, reason=body.reason), asynchronous=False)
    return StatusResponse(status="failed")


@refund_router.put("/{refund_id}/retry", response_model=StatusResponse)
async def retry_refund(refund_id: str) -> StatusResponse:
    current_domain.process(RetryRefund(refund_id=refund_id), asynchronous=False)
    return StatusResponse(status="pending")


# ---------------------------------------------------------------------------
# Notification Router
# ---------------------------------------------------------------------------
notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notification_router.post("/retry", response_model=RetryResponse)
async def retry_failed_notifications() -> RetryResponse:
    requeued = current_domain.process(RetryFailedNotifications(), asynchronous=False)
    return RetryResponse(requeued=requeued or 0)
