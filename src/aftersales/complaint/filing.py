"""Complaint filing — command and handler.

A customer may complain about a delivered order, or about a shipped order
that never arrived. Only one case per order can be under investigation at a
time.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from aftersales.complaint.complaint import ComplaintCase, ComplaintType, InvestigationStatus
from aftersales.domain import aftersales
from aftersales.errors import Conflict, InvalidTransition
from aftersales.notification.helpers import record_intent
from aftersales.notification.intent import NotificationType
from aftersales.order.order import ComplaintStatus, Order, OrderStatus
from aftersales.utils.loading import load

logger = structlog.get_logger(__name__)


@aftersales.command(part_of="ComplaintCase")
class FileComplaint:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    complaint_type = String(required=True, choices=ComplaintType)
    description = Text(required=True)
    evidence_images = Text()  # JSON list of image URIs


def _assert_complainable(order: Order, user_id: str, complaint_type: str) -> None:
    if str(order.customer_id) != str(user_id):
        raise InvalidTransition({"user_id": ["Complaints can only be filed by the customer who placed the order"]})

    allowed = {OrderStatus.DELIVERED.value}
    if complaint_type == ComplaintType.NOT_RECEIVED.value:
        allowed.add(OrderStatus.SHIPPED.value)
    if order.status not in allowed:
        raise InvalidTransition({"order_id": [f"Cannot file a {complaint_type} complaint on a {order.status} order"]})

    open_cases = (
        current_domain.repository_for(ComplaintCase)
        ._dao.query.filter(
            order_id=str(order.id),
            investigation_status=InvestigationStatus.INVESTIGATING.value,
        )
        .all()
    )
    if open_cases.items:
        raise Conflict({"order_id": ["A complaint for this order is already under investigation"]})


def _parse_evidence(evidence_images: str | None) -> list[str]:
    if not evidence_images:
        return []
    try:
        evidence = json.loads(evidence_images)
    except json.JSONDecodeError as exc:
        raise InvalidTransition({"evidence_images": ["Evidence must be a JSON list of image URIs"]}) from exc
    if not isinstance(evidence, list) or not all(isinstance(uri, str) for uri in evidence):
        raise InvalidTransition({"evidence_images": ["Evidence must be a JSON list of image URIs"]})
    return evidence


@aftersales.command_handler(part_of=ComplaintCase)
class FileComplaintHandler:
    @handle(FileComplaint)
    def file_complaint(self, command):
        order = load(Order, command.order_id, "order_id")
        _assert_complainable(order, command.user_id, command.complaint_type)

        evidence = _parse_evidence(command.evidence_images)
        case = ComplaintCase.file(
            order_id=str(order.id),
            user_id=command.user_id,
            complaint_type=command.complaint_type,
            description=command.description,
            evidence_images=evidence,
        )
        order.set_complaint_status(ComplaintStatus.OPEN)

        current_domain.repository_for(ComplaintCase).add(case)
        current_domain.repository_for(Order).add(order)
        record_intent(NotificationType.COMPLAINT_RECEIVED, order, case)

        logger.info(
            "Complaint filed",
            complaint_id=str(case.id),
            order_id=str(order.id),
            complaint_type=case.complaint_type,
        )
        return str(case.id)
