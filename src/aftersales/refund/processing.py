"""Refund processing — commands and handler.

The payments team reports the result of each refund here. Completing a
refund marks the order refunded and settles the complaint it came from. A
refund paid out as a gift card is issued as store credit in the same unit of
work. A failed refund can be put back in the queue with RetryRefund.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from aftersales.complaint.complaint import CaseRefundStatus, ComplaintCase
from aftersales.credit.store_credit import StoreCredit
from aftersales.domain import aftersales
from aftersales.notification.helpers import record_intent
from aftersales.notification.intent import NotificationType
from aftersales.order.order import ComplaintStatus, Order
from aftersales.order.status import format_delivery_date
from aftersales.refund.refund import RefundMethod, RefundRequest
from aftersales.utils.config import setting
from aftersales.utils.loading import load

logger = structlog.get_logger(__name__)


@aftersales.command(part_of="RefundRequest")
class SelectRefundMethod:
    """The customer chose how an abandoned-delivery refund is paid out."""

    refund_id = Identifier(required=True)
    refund_method = String(required=True, choices=RefundMethod)


@aftersales.command(part_of="RefundRequest")
class CompleteRefund:
    refund_id = Identifier(required=True)


@aftersales.command(part_of="RefundRequest")
class FailRefund:
    refund_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@aftersales.command(part_of="RefundRequest")
class RetryRefund:
    refund_id = Identifier(required=True)


def _linked_case(refund: RefundRequest) -> ComplaintCase | None:
    if not refund.complaint_id:
        return None
    return load(ComplaintCase, refund.complaint_id, "complaint_id")


def _issue_store_credit(refund: RefundRequest, order: Order, case: ComplaintCase | None) -> StoreCredit:
    credit = StoreCredit.issue_for_refund(refund, valid_days=setting("STORE_CREDIT_VALID_DAYS"))
    current_domain.repository_for(StoreCredit).add(credit)
    record_intent(
        NotificationType.STORE_CREDIT_ISSUED,
        order,
        case,
        {
            "storeCreditCode": credit.code,
            "amount": credit.amount,
            "expiresAt": format_delivery_date(credit.expires_at),
        },
    )
    logger.info(
        "Store credit issued",
        refund_id=str(refund.id),
        order_id=str(order.id),
        credit_code=credit.code,
        amount=credit.amount,
    )
    return credit


@aftersales.command_handler(part_of=RefundRequest)
class RefundProcessingHandler:
    @handle(SelectRefundMethod)
    def select_method(self, command):
        repo = current_domain.repository_for(RefundRequest)
        refund = load(RefundRequest, command.refund_id, "refund_id")
        refund.select_method(command.refund_method)
        repo.add(refund)

    @handle(CompleteRefund)
    def complete(self, command):
        refund = load(RefundRequest, command.refund_id, "refund_id")
        order = load(Order, refund.order_id, "order_id")
        case = _linked_case(refund)

        refund.complete()
        if order.is_paid:
            order.mark_refunded(refund.amount)
        else:
            logger.warning(
                "Refund completed for an order that was not marked paid",
                refund_id=str(refund.id),
                order_id=str(order.id),
                payment_status=order.payment_status,
            )

        credit_code = None
        if refund.refund_method == RefundMethod.GIFT_CARD.value:
            credit_code = _issue_store_credit(refund, order, case).code

        if case is not None:
            case.settle_refund(CaseRefundStatus.COMPLETED, store_credit_code=credit_code)
            order.set_complaint_status(ComplaintStatus.REFUND_COMPLETED)
            current_domain.repository_for(ComplaintCase).add(case)

        current_domain.repository_for(RefundRequest).add(refund)
        current_domain.repository_for(Order).add(order)

    @handle(FailRefund)
    def fail(self, command):
        refund = load(RefundRequest, command.refund_id, "refund_id")
        case = _linked_case(refund)

        refund.fail(command.reason)
        if case is not None:
            order = load(Order, refund.order_id, "order_id")
            case.settle_refund(CaseRefundStatus.FAILED)
            order.set_complaint_status(ComplaintStatus.REFUND_FAILED)
            current_domain.repository_for(ComplaintCase).add(case)
            current_domain.repository_for(Order).add(order)

        current_domain.repository_for(RefundRequest).add(refund)
        logger.warning("Refund failed", refund_id=str(refund.id), reason=command.reason)

    @handle(RetryRefund)
    def retry(self, command):
        refund = load(RefundRequest, command.refund_id, "refund_id")
        case = _linked_case(refund)

        refund.retry()
        if case is not None:
            order = load(Order, refund.order_id, "order_id")
            case.retry_refund()
            order.set_complaint_status(ComplaintStatus.REFUND_PENDING)
            current_domain.repository_for(ComplaintCase).add(case)
            current_domain.repository_for(Order).add(order)

        current_domain.repository_for(RefundRequest).add(refund)
        logger.info("Refund requeued", refund_id=str(refund.id))
