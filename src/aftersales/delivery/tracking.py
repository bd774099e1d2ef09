"""Delivery attempt tracking — commands, handler and attempt listing.

Couriers report each attempt on a shipped order. A delivered attempt marks the
order delivered. Once failures reach ``MAX_FAILED_DELIVERY_ATTEMPTS`` the order
is sent back to the provider; a prepaid order then gets a refund request that
waits for the customer to pick a refund method.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Date, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from aftersales.delivery.delivery_log import (
    FAILURE_REASON_LABELS,
    AttemptStatus,
    DeliveryAttempt,
    DeliveryLog,
)
from aftersales.domain import aftersales
from aftersales.errors import InvalidTransition
from aftersales.notification.helpers import record_intent
from aftersales.notification.intent import NotificationType
from aftersales.order.order import Order, OrderStatus
from aftersales.refund.refund import RefundRequest
from aftersales.utils.config import setting
from aftersales.utils.loading import load

logger = structlog.get_logger(__name__)

FAILED_DELIVERY_REFUND_REASON = "Failed delivery attempts"


@aftersales.command(part_of="DeliveryLog")
class RecordDeliveryAttempt:
    """Schedule the next delivery attempt for a shipped order."""

    order_id = Identifier(required=True)
    scheduled_date = Date(required=True)
    notes = Text()


@aftersales.command(part_of="DeliveryLog")
class MarkAttemptOutcome:
    """Record what happened on a scheduled attempt."""

    order_id = Identifier(required=True)
    attempt_number = Integer(required=True, min_value=1)
    status = String(required=True, choices=AttemptStatus)
    failure_reason = String(max_length=50)


def _load_or_open_log(order_id: str) -> DeliveryLog:
    try:
        return current_domain.repository_for(DeliveryLog).get(order_id)
    except ObjectNotFoundError:
        return DeliveryLog.open(order_id)


def list_attempts(order_id: str) -> list[DeliveryAttempt]:
    """All attempts for ``order_id``, oldest first. Empty when none were recorded."""
    try:
        log = current_domain.repository_for(DeliveryLog).get(order_id)
    except ObjectNotFoundError:
        return []
    return log.ordered_attempts()


@aftersales.command_handler(part_of=DeliveryLog)
class DeliveryTrackingHandler:
    @handle(RecordDeliveryAttempt)
    def record_attempt(self, command):
        order = load(Order, command.order_id, "order_id")
        if order.returning_to_provider or order.status != OrderStatus.SHIPPED.value:
            raise InvalidTransition({"status": [f"Cannot schedule delivery for an order in {order.status} state"]})

        log = _load_or_open_log(str(order.id))
        attempt_number = log.schedule_attempt(command.scheduled_date, notes=command.notes)
        current_domain.repository_for(DeliveryLog).add(log)

        logger.info(
            "Delivery attempt scheduled",
            order_id=str(order.id),
            attempt_number=attempt_number,
            scheduled_date=str(command.scheduled_date),
        )
        return attempt_number

    @handle(MarkAttemptOutcome)
    def mark_outcome(self, command):
        order_repo = current_domain.repository_for(Order)
        log = load(DeliveryLog, command.order_id, "order_id")
        order = load(Order, command.order_id, "order_id")

        if command.status == AttemptStatus.DELIVERED.value:
            log.record_delivery(command.attempt_number)
            order.mark_delivered()
        elif command.status == AttemptStatus.FAILED.value:
            log.record_failure(command.attempt_number, command.failure_reason)
            if log.failed_count >= setting("MAX_FAILED_DELIVERY_ATTEMPTS"):
                _abandon_delivery(order, log, command.failure_reason)
        else:
            raise InvalidTransition({"status": [f"Cannot transition from scheduled to {command.status}"]})

        current_domain.repository_for(DeliveryLog).add(log)
        order_repo.add(order)
        return command.attempt_number


def _abandon_delivery(order: Order, log: DeliveryLog, last_reason: str) -> None:
    """Send the order back to the provider after too many failed attempts."""
    order.return_to_provider(f"Multiple failed delivery attempts: {FAILURE_REASON_LABELS[last_reason]}")

    additional_data = {"failedAttempts": log.failed_count, "reason": order.return_reason}
    if not order.is_cod and order.is_paid:
        refund = RefundRequest.await_selection(order, reason=FAILED_DELIVERY_REFUND_REASON)
        current_domain.repository_for(RefundRequest).add(refund)
        additional_data["refundRequestId"] = str(refund.id)

    record_intent(NotificationType.DELIVERY_FAILED, order, additional_data=additional_data)

    logger.warning(
        "Order returning to provider after failed deliveries",
        order_id=str(order.id),
        failed_attempts=log.failed_count,
        payment_method=order.payment_method,
    )
