"""Tests for the RefundRequest aggregate."""

from types import SimpleNamespace

import pytest
from aftersales.errors import InvalidTransition
from aftersales.refund.events import (
    RefundCompleted,
    RefundFailed,
    RefundMethodSelected,
    RefundRequested,
    RefundRetried,
)
from aftersales.refund.refund import RefundRequest


def _order(payment_method="upi"):
    return SimpleNamespace(id="ord-001", customer_id="cust-001", total_amount=151.0, payment_method=payment_method)


def _complaint_refund(refund_method="upi"):
    return RefundRequest.for_complaint(_order(), "cmp-001", "damaged", refund_method)


class TestCreation:
    def test_for_complaint(self):
        refund = _complaint_refund("bank")

        assert refund.status == "pending"
        assert refund.amount == 151.0
        assert refund.refund_method == "bank"
        assert refund.reason == "Complaint: damaged"
        assert refund.complaint_id == "cmp-001"
        assert isinstance(refund._events[0], RefundRequested)

    def test_unknown_method_is_rejected(self):
        with pytest.raises(InvalidTransition):
            _complaint_refund("cheque")

    def test_await_selection(self):
        refund = RefundRequest.await_selection(_order(), reason="Failed delivery attempts")

        assert refund.status == "pending_user_selection"
        assert refund.refund_method == "pending_selection"
        assert refund.complaint_id is None
        assert refund.user_id == "cust-001"


class TestLifecycle:
    def test_select_method(self):
        refund = RefundRequest.await_selection(_order(), reason="Failed delivery attempts")
        refund._events.clear()
        refund.select_method("gift_card")

        assert refund.status == "pending"
        assert refund.refund_method == "gift_card"
        assert isinstance(refund._events[0], RefundMethodSelected)

    def test_select_method_only_once(self):
        with pytest.raises(InvalidTransition):
            _complaint_refund().select_method("bank")

    def test_complete(self):
        refund = _complaint_refund()
        refund._events.clear()
        refund.complete()

        assert refund.status == "completed"
        assert refund.completed_at is not None
        assert isinstance(refund._events[0], RefundCompleted)

    def test_cannot_complete_before_selection(self):
        refund = RefundRequest.await_selection(_order(), reason="Failed delivery attempts")
        with pytest.raises(InvalidTransition):
            refund.complete()

    def test_fail(self):
        refund = _complaint_refund()
        refund._events.clear()
        refund.fail("Bank rejected transfer")

        assert refund.status == "failed"
        assert refund.failure_reason == "Bank rejected transfer"
        assert isinstance(refund._events[0], RefundFailed)

    def test_terminal_states(self):
        refund = _complaint_refund()
        refund.complete()
        with pytest.raises(InvalidTransition):
            refund.fail("late")

    def test_failed_refund_can_be_retried(self):
        refund = _complaint_refund()
        refund.fail("Bank rejected transfer")
        refund._events.clear()
        refund.retry()

        assert refund.status == "pending"
        assert refund.failure_reason is None
        assert isinstance(refund._events[0], RefundRetried)

    def test_only_failed_refunds_are_retried(self):
        with pytest.raises(InvalidTransition):
            _complaint_refund().retry()

    def test_method_cannot_change_after_failure(self):
        refund = _complaint_refund()
        refund.fail("Bank rejected transfer")
        with pytest.raises(InvalidTransition):
            refund.select_method("gift_card")
