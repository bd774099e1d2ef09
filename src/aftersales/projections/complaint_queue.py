"""Complaint queue — the admin console's view of open and closed cases.

Each case sits in exactly one queue: ``investigating`` until resolved,
``resolved`` once upheld, ``pickup`` while a collection is pending, and
``closed`` once rejected or remedied.
"""

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from aftersales.complaint.complaint import ComplaintCase
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


@aftersales.projection
class ComplaintQueueView:
    complaint_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    complaint_type = String(required=True)
    queue = String(required=True)
    investigation_status = String(required=True)
    pickup_status = String(default="none")
    resolution_type = String(default="none")
    coupon_code = String()
    refund_status = String()
    replacement_order_id = Identifier()
    filed_at = DateTime()
    updated_at = DateTime()


@aftersales.projector(projector_for=ComplaintQueueView, aggregates=[ComplaintCase])
class ComplaintQueueProjector:
    @on(ComplaintFiled)
    def on_complaint_filed(self, event):
        current_domain.repository_for(ComplaintQueueView).add(
            ComplaintQueueView(
                complaint_id=event.complaint_id,
                order_id=event.order_id,
                user_id=event.user_id,
                complaint_type=event.complaint_type,
                queue="investigating",
                investigation_status="investigating",
                filed_at=event.filed_at,
                updated_at=event.filed_at,
            )
        )

    @on(ComplaintUpheld)
    def on_complaint_upheld(self, event):
        repo = current_domain.repository_for(ComplaintQueueView)
        view = repo.get(event.complaint_id)
        view.queue = "resolved"
        view.investigation_status = "resolved_true"
        view.coupon_code = event.coupon_code
        view.updated_at = event.resolved_at
        repo.add(view)

    @on(ComplaintRejected)
    def on_complaint_rejected(self, event):
        repo = current_domain.repository_for(ComplaintQueueView)
        view = repo.get(event.complaint_id)
        view.queue = "closed"
        view.investigation_status = "resolved_false"
        view.updated_at = event.resolved_at
        repo.add(view)

    @on(PickupScheduled)
    def on_pickup_scheduled(self, event):
        repo = current_domain.repository_for(ComplaintQueueView)
        view = repo.get(event.complaint_id)
        view.queue = "pickup"
        view.pickup_status = "scheduled"
        view.updated_at = event.scheduled_at
        repo.add(view)

    @on(PickupCompleted)
    def on_pickup_completed(self, event):
        repo = current_domain.repository_for(ComplaintQueueView)
        view = repo.get(event.complaint_id)
        view.queue = "resolved"
        view.pickup_status = "picked_up"
        view.updated_at = event.completed_at
        repo.add(view)

    @on(ReplacementIssued)
    def on_replacement_issued(self, event):
        repo = current_domain.repository_for(ComplaintQueueView)
        view = repo.get(event.complaint_id)
        view.queue = "closed"
        view.resolution_type = "replacement"
        view.replacement_order_id = event.replacement_order_id
        view.updated_at = event.issued_at
        repo.add(view)

    @on(ComplaintRefundInitiated)
    def on_refund_initiated(self, event):
        repo = current_domain.repository_for(ComplaintQueueView)
        view = repo.get(event.complaint_id)
        view.queue = "closed"
        view.resolution_type = "refund"
        view.refund_status = "pending"
        view.updated_at = event.initiated_at
        repo.add(view)

    @on(ComplaintRefundSettled)
    def on_refund_settled(self, event):
        repo = current_domain.repository_for(ComplaintQueueView)
        view = repo.get(event.complaint_id)
        view.refund_status = event.refund_status
        view.updated_at = event.settled_at
        repo.add(view)
