"""Tests for the ComplaintCase state machine — investigation, pickup and remedies."""

from datetime import UTC, datetime, timedelta

import pytest
from aftersales.complaint.complaint import CaseRefundStatus, ComplaintCase
from aftersales.complaint.events import (
    ComplaintFiled,
    ComplaintRefundInitiated,
    ComplaintRejected,
    ComplaintUpheld,
    PickupCompleted,
    PickupScheduled,
    ReplacementIssued,
)
from aftersales.errors import Conflict, InvalidTransition
from protean.exceptions import ValidationError


def _make_case(complaint_type="damaged"):
    return ComplaintCase.file(
        order_id="ord-001",
        user_id="cust-001",
        complaint_type=complaint_type,
        description="Screen cracked on arrival",
        evidence_images=["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"],
    )


def _upheld(complaint_type="damaged"):
    case = _make_case(complaint_type)
    case.uphold("Courier confirmed", "SORRYAB12CD", 20.0)
    return case


def _picked_up(complaint_type="damaged"):
    case = _upheld(complaint_type)
    case.schedule_pickup(datetime.now(UTC) + timedelta(days=1))
    case.mark_picked_up()
    return case


class TestFiling:
    def test_starts_investigating(self):
        case = _make_case()
        assert case.investigation_status == "investigating"
        assert case.resolution_type == "none"
        assert case.pickup_status == "none"
        assert case.coupon_code is None

    def test_evidence_round_trips(self):
        assert _make_case().evidence == ["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"]

    def test_type_label(self):
        assert _make_case("not_received").type_label == "Order Not Received"

    def test_raises_filed_event(self):
        case = _make_case()
        assert isinstance(case._events[0], ComplaintFiled)
        assert case._events[0].evidence_count == 2

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_case("lost_in_space")


class TestInvestigation:
    def test_uphold_records_coupon(self):
        case = _make_case()
        case._events.clear()
        case.uphold("Courier confirmed", "SORRYAB12CD", 20.0)

        assert case.investigation_status == "resolved_true"
        assert case.investigation_notes == "Courier confirmed"
        assert case.coupon_code == "SORRYAB12CD"
        assert case.coupon_discount_percent == 20.0
        assert case.resolved_at is not None
        assert isinstance(case._events[0], ComplaintUpheld)

    def test_reject_closes_case(self):
        case = _make_case()
        case._events.clear()
        case.reject(None)

        assert case.investigation_status == "resolved_false"
        assert case.coupon_code is None
        assert isinstance(case._events[0], ComplaintRejected)
        assert case._events[0].reason == "Investigation determined the claim was not valid."

    def test_cannot_resolve_twice(self):
        case = _upheld()
        with pytest.raises(InvalidTransition):
            case.uphold(None, "SORRY000000", 20.0)
        with pytest.raises(InvalidTransition):
            case.reject(None)

    def test_rejected_case_cannot_be_upheld(self):
        case = _make_case()
        case.reject("Photos show no damage")
        with pytest.raises(InvalidTransition) as exc:
            case.uphold(None, "SORRY000000", 20.0)
        assert "resolved_false" in exc.value.messages["investigation_status"][0]

    def test_coupon_requires_upheld_case(self):
        case = _make_case()
        with pytest.raises(ValidationError):
            case.coupon_code = "SORRYXXXXXX"


class TestPickup:
    def test_schedule_and_complete(self):
        case = _upheld()
        case._events.clear()
        pickup_at = datetime.now(UTC) + timedelta(days=2)
        case.schedule_pickup(pickup_at, admin_notes="Call before arriving")
        case.mark_picked_up()

        assert case.pickup_status == "picked_up"
        assert case.pickup_scheduled_at is not None
        assert case.pickup_completed_at is not None
        assert case.admin_notes == "Call before arriving"
        assert [type(e) for e in case._events] == [PickupScheduled, PickupCompleted]

    def test_pickup_needs_upheld_case(self):
        case = _make_case()
        with pytest.raises(InvalidTransition):
            case.schedule_pickup(datetime.now(UTC))

    def test_pickup_on_rejected_case(self):
        case = _make_case()
        case.reject(None)
        with pytest.raises(InvalidTransition):
            case.schedule_pickup(datetime.now(UTC))

    def test_second_schedule_conflicts(self):
        case = _upheld()
        case.schedule_pickup(datetime.now(UTC))
        scheduled_at = case.pickup_scheduled_at
        with pytest.raises(Conflict):
            case.schedule_pickup(datetime.now(UTC) + timedelta(days=3))
        assert case.pickup_scheduled_at == scheduled_at

    def test_picked_up_without_schedule(self):
        with pytest.raises(InvalidTransition):
            _upheld().mark_picked_up()

    def test_second_picked_up_conflicts(self):
        case = _picked_up()
        with pytest.raises(Conflict):
            case.mark_picked_up()


class TestReplacementRemedy:
    def test_record_replacement(self):
        case = _picked_up()
        case._events.clear()
        case.record_replacement("ord-002")

        assert case.resolution_type == "replacement"
        assert case.replacement_order_id == "ord-002"
        assert isinstance(case._events[0], ReplacementIssued)

    def test_requires_pickup(self):
        case = _upheld()
        with pytest.raises(InvalidTransition):
            case.record_replacement("ord-002")

    def test_requires_upheld_case(self):
        with pytest.raises(InvalidTransition):
            _make_case().assert_can_replace()

    def test_second_replacement_conflicts(self):
        case = _picked_up()
        case.record_replacement("ord-002")
        with pytest.raises(Conflict):
            case.record_replacement("ord-003")
        assert case.replacement_order_id == "ord-002"

    def test_replacement_after_refund_conflicts(self):
        case = _picked_up()
        case.record_refund("ref-001", "upi")
        with pytest.raises(Conflict):
            case.record_replacement("ord-002")


class TestRefundRemedy:
    def test_record_refund(self):
        case = _picked_up()
        case._events.clear()
        case.record_refund("ref-001", "bank")

        assert case.resolution_type == "refund"
        assert case.refund_status == "pending"
        assert case.refund_method == "bank"
        assert isinstance(case._events[0], ComplaintRefundInitiated)

    def test_refund_needs_pickup_for_physical_items(self):
        with pytest.raises(InvalidTransition):
            _upheld("damaged").record_refund("ref-001", "upi")

    def test_not_received_refunds_without_pickup(self):
        case = _upheld("not_received")
        case.record_refund("ref-001", "upi")
        assert case.resolution_type == "refund"
        assert case.pickup_status == "none"

    def test_second_refund_conflicts(self):
        case = _picked_up()
        case.record_refund("ref-001", "upi")
        with pytest.raises(Conflict):
            case.record_refund("ref-002", "upi")

    def test_refund_after_replacement_conflicts(self):
        case = _picked_up()
        case.record_replacement("ord-002")
        with pytest.raises(Conflict):
            case.record_refund("ref-001", "upi")

    def test_settle_refund(self):
        case = _picked_up()
        case.record_refund("ref-001", "upi")
        case.settle_refund(CaseRefundStatus.COMPLETED)
        assert case.refund_status == "completed"

    def test_settle_only_pending_refund(self):
        case = _picked_up()
        case.record_refund("ref-001", "upi")
        case.settle_refund(CaseRefundStatus.FAILED)
        with pytest.raises(InvalidTransition):
            case.settle_refund(CaseRefundStatus.COMPLETED)

    def test_store_credit_is_noted_on_case(self):
        case = _picked_up()
        case.record_refund("ref-001", "gift_card")
        case.settle_refund(CaseRefundStatus.COMPLETED, store_credit_code="GCM1ABCDXYZ")

        assert case.store_credit_code == "GCM1ABCDXYZ"
        assert case.admin_notes == "Return received. Store credit issued: GCM1ABCDXYZ"

    def test_failed_refund_can_be_retried(self):
        case = _picked_up()
        case.record_refund("ref-001", "upi")
        case.settle_refund(CaseRefundStatus.FAILED)
        case.retry_refund()

        assert case.refund_status == "pending"
        assert case.resolution_type == "refund"

    def test_retry_needs_failed_refund(self):
        case = _picked_up()
        case.record_refund("ref-001", "upi")
        with pytest.raises(InvalidTransition):
            case.retry_refund()
