"""Complaint investigation outcome — commands and handler.

Upholding a complaint issues a single-use apology coupon in the same unit of
work; rejecting it closes the case.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from aftersales.complaint.complaint import DEFAULT_REJECTION_REASON, ComplaintCase
from aftersales.coupon.coupon import Coupon
from aftersales.domain import aftersales
from aftersales.notification.helpers import record_intent
from aftersales.notification.intent import NotificationType
from aftersales.order.order import ComplaintStatus, Order
from aftersales.utils.config import setting
from aftersales.utils.loading import load

logger = structlog.get_logger(__name__)


@aftersales.command(part_of="ComplaintCase")
class ResolveComplaintAsTrue:
    complaint_id = Identifier(required=True)
    notes = Text()
    expected_version = Integer()


@aftersales.command(part_of="ComplaintCase")
class ResolveComplaintAsFalse:
    complaint_id = Identifier(required=True)
    notes = Text()
    expected_version = Integer()


@aftersales.command_handler(part_of=ComplaintCase)
class InvestigationHandler:
    @handle(ResolveComplaintAsTrue)
    def resolve_as_true(self, command):
        case = load(ComplaintCase, command.complaint_id, "complaint_id", command.expected_version)
        order = load(Order, case.order_id, "order_id")

        coupon = Coupon.issue_apology(
            complaint_id=str(case.id),
            user_id=str(case.user_id),
            percent=setting("APOLOGY_COUPON_PERCENT"),
            valid_days=setting("APOLOGY_COUPON_VALID_DAYS"),
        )
        case.uphold(command.notes, coupon.code, coupon.discount_value)
        order.set_complaint_status(ComplaintStatus.RESOLVED)

        current_domain.repository_for(Coupon).add(coupon)
        current_domain.repository_for(ComplaintCase).add(case)
        current_domain.repository_for(Order).add(order)
        record_intent(
            NotificationType.COMPLAINT_APPROVED,
            order,
            case,
            {"couponCode": coupon.code, "couponDiscount": coupon.discount_value},
        )

        logger.info("Complaint upheld", complaint_id=str(case.id), coupon_code=coupon.code)
        return str(case.id)

    @handle(ResolveComplaintAsFalse)
    def resolve_as_false(self, command):
        case = load(ComplaintCase, command.complaint_id, "complaint_id", command.expected_version)
        order = load(Order, case.order_id, "order_id")

        case.reject(command.notes)
        order.set_complaint_status(ComplaintStatus.FALSE_REPORT)

        current_domain.repository_for(ComplaintCase).add(case)
        current_domain.repository_for(Order).add(order)
        record_intent(
            NotificationType.COMPLAINT_REJECTED,
            order,
            case,
            {"rejectionReason": command.notes or DEFAULT_REJECTION_REASON},
        )

        logger.info("Complaint rejected", complaint_id=str(case.id))
        return str(case.id)
