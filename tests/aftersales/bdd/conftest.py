"""Shared BDD fixtures and step definitions for aftersales."""

import pytest
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a delivered prepaid order", target_fixture="order_id")
def delivered_prepaid_order(make_order):
    return make_order(status="delivered", payment_method="upi", payment_status="paid")


@given("a shipped prepaid order", target_fixture="order_id")
def shipped_prepaid_order(make_order):
    return make_order(status="shipped", payment_method="upi", payment_status="paid")


@given(parsers.cfparse('a shipped order paid by "{payment_method}"'), target_fixture="order_id")
def shipped_order_paid_by(make_order, payment_method):
    payment_status = "pending" if payment_method == "cod" else "paid"
    return make_order(status="shipped", payment_method=payment_method, payment_status=payment_status)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the customer was notified of "{notification_type}"'))
def customer_was_notified(dispatcher, notification_type):
    assert len(dispatcher.sent_of_type(notification_type)) == 1


@then("the request is rejected as an invalid transition")
def rejected_as_invalid_transition(error):
    from aftersales.errors import InvalidTransition

    assert isinstance(error["exc"], InvalidTransition)


@then("the request is rejected as a conflict")
def rejected_as_conflict(error):
    from aftersales.errors import Conflict

    assert isinstance(error["exc"], Conflict)
