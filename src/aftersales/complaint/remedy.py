"""Complaint remedies — replacement order or refund, chosen once per case.

Both remedies create their side effect (a zero-amount replacement order or a
refund request) in the same unit of work as the case update, so a case never
points at a remedy that was not written, and vice versa.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from aftersales.complaint.complaint import ComplaintCase, ComplaintType
from aftersales.domain import aftersales
from aftersales.notification.helpers import record_intent
from aftersales.notification.intent import NotificationType
from aftersales.order.order import ComplaintStatus, Order
from aftersales.refund.refund import RefundMethod, RefundRequest, assert_refund_method
from aftersales.utils.loading import load

logger = structlog.get_logger(__name__)


@aftersales.command(part_of="ComplaintCase")
class CreateReplacementOrder:
    complaint_id = Identifier(required=True)
    expected_version = Integer()


@aftersales.command(part_of="ComplaintCase")
class ProcessComplaintRefund:
    complaint_id = Identifier(required=True)
    refund_method = String(required=True, choices=RefundMethod)
    expected_version = Integer()


@aftersales.command_handler(part_of=ComplaintCase)
class RemedyHandler:
    @handle(CreateReplacementOrder)
    def create_replacement(self, command):
        case = load(ComplaintCase, command.complaint_id, "complaint_id", command.expected_version)
        case.assert_can_replace()
        order = load(Order, case.order_id, "order_id")

        replacement = Order.create_replacement(
            order,
            warranty=case.complaint_type == ComplaintType.WARRANTY.value,
        )
        case.record_replacement(str(replacement.id))

        current_domain.repository_for(Order).add(replacement)
        current_domain.repository_for(ComplaintCase).add(case)
        record_intent(
            NotificationType.REPLACEMENT_CREATED,
            order,
            case,
            {"replacementOrderId": str(replacement.id)},
        )

        logger.info(
            "Replacement order created",
            complaint_id=str(case.id),
            order_id=str(order.id),
            replacement_order_id=str(replacement.id),
        )
        return str(case.id)

    @handle(ProcessComplaintRefund)
    def process_refund(self, command):
        case = load(ComplaintCase, command.complaint_id, "complaint_id", command.expected_version)
        case.assert_can_refund()
        assert_refund_method(command.refund_method)
        order = load(Order, case.order_id, "order_id")

        refund = RefundRequest.for_complaint(order, str(case.id), case.complaint_type, command.refund_method)
        case.record_refund(str(refund.id), command.refund_method)
        order.set_complaint_status(ComplaintStatus.REFUND_PENDING)

        current_domain.repository_for(RefundRequest).add(refund)
        current_domain.repository_for(ComplaintCase).add(case)
        current_domain.repository_for(Order).add(order)
        record_intent(
            NotificationType.REFUND_INITIATED,
            order,
            case,
            {"refundMethod": command.refund_method, "refundAmount": refund.amount},
        )

        logger.info(
            "Complaint refund initiated",
            complaint_id=str(case.id),
            refund_id=str(refund.id),
            amount=refund.amount,
        )
        return str(case.id)
