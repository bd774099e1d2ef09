"""Tests for the Order aggregate — placement, progress, cancellation and return."""

import pytest
from aftersales.errors import InvalidTransition
from aftersales.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPaymentRefunded,
    OrderPlaced,
    OrderReturningToProvider,
)
from aftersales.order.order import ComplaintStatus, Order


def _make_items():
    return [
        {"product_id": "prod-kb", "name": "Mechanical Keyboard", "price": 120.0, "quantity": 1},
        {"product_id": "prod-mp", "name": "Mouse Pad XL", "price": 15.5, "quantity": 2},
    ]


def _make_order(payment_method="upi", payment_status="paid"):
    return Order.place(
        customer_id="cust-001",
        items_data=_make_items(),
        payment_method=payment_method,
        payment_status=payment_status,
        customer_name="Asha Rao",
        customer_email="asha@example.com",
    )


def _to_shipped(order):
    order.mark_processing()
    order.mark_shipped()
    return order


class TestPlacement:
    def test_starts_placed(self):
        order = _make_order()
        assert order.status == "placed"
        assert order.order_type == "standard"
        assert order.complaint_status == "none"
        assert order.returning_to_provider is False

    def test_total_defaults_to_item_sum(self):
        assert _make_order().total_amount == 151.0

    def test_explicit_total_wins(self):
        order = Order.place(
            customer_id="cust-001",
            items_data=_make_items(),
            payment_method="upi",
            total_amount=140.0,
        )
        assert order.total_amount == 140.0

    def test_items_are_recorded(self):
        order = _make_order()
        assert len(order.items) == 2
        assert {item.name for item in order.items} == {"Mechanical Keyboard", "Mouse Pad XL"}

    def test_raises_order_placed(self):
        order = _make_order()
        assert len(order._events) == 1
        assert isinstance(order._events[0], OrderPlaced)
        assert order._events[0].item_count == 2

    @pytest.mark.parametrize("method,expected", [("cod", True), ("COD", True), ("upi", False)])
    def test_is_cod(self, method, expected):
        assert _make_order(payment_method=method).is_cod is expected


class TestFulfillmentProgress:
    def test_happy_path(self):
        order = _to_shipped(_make_order())
        order.mark_delivered()

        assert order.status == "delivered"
        assert order.shipped_at is not None
        assert order.delivered_at is not None
        assert isinstance(order._events[-1], OrderDelivered)

    def test_cannot_skip_processing(self):
        order = _make_order()
        with pytest.raises(InvalidTransition):
            order.mark_shipped()

    def test_cannot_deliver_placed_order(self):
        with pytest.raises(InvalidTransition) as exc:
            _make_order().mark_delivered()
        assert "Cannot transition from placed to delivered" in exc.value.messages["status"][0]

    def test_delivered_is_terminal(self):
        order = _to_shipped(_make_order())
        order.mark_delivered()
        with pytest.raises(InvalidTransition):
            order.mark_processing()


class TestCancellation:
    def test_cancel_placed_order(self):
        order = _make_order()
        order._events.clear()
        order.cancel("Changed my mind")

        assert order.status == "cancelled"
        assert order.cancellation_reason == "Changed my mind"
        assert order.returning_to_provider is False
        assert isinstance(order._events[0], OrderCancelled)

    @pytest.mark.parametrize("steps", [1, 2])
    def test_cannot_cancel_after_processing_starts(self, steps):
        order = _make_order()
        order.mark_processing()
        if steps == 2:
            order.mark_shipped()
        with pytest.raises(InvalidTransition):
            order.cancel("Too late")


class TestReturnToProvider:
    def test_shipped_order_is_cancelled_and_flagged(self):
        order = _to_shipped(_make_order())
        order._events.clear()
        order.return_to_provider("Multiple failed delivery attempts: Wrong address")

        assert order.status == "cancelled"
        assert order.returning_to_provider is True
        assert order.return_reason == "Multiple failed delivery attempts: Wrong address"
        assert isinstance(order._events[0], OrderReturningToProvider)

    def test_delivered_order_cannot_return(self):
        order = _to_shipped(_make_order())
        order.mark_delivered()
        with pytest.raises(InvalidTransition):
            order.return_to_provider("Failed")

    def test_returning_order_cannot_progress(self):
        order = _to_shipped(_make_order())
        order.return_to_provider("Failed")
        with pytest.raises(InvalidTransition) as exc:
            order.mark_delivered()
        assert "returning_to_provider" in exc.value.messages

    def test_returning_order_cannot_be_cancelled_again(self):
        order = _to_shipped(_make_order())
        order.return_to_provider("Failed")
        with pytest.raises(InvalidTransition):
            order.cancel("Please")


class TestReplacement:
    def test_replacement_copies_parent(self):
        parent = _to_shipped(_make_order())
        parent.mark_delivered()
        replacement = Order.create_replacement(parent)

        assert replacement.id != parent.id
        assert replacement.parent_order_id == str(parent.id)
        assert replacement.order_type == "replacement"
        assert replacement.status == "processing"
        assert replacement.payment_status == "paid"
        assert replacement.payment_method == "replacement"
        assert replacement.total_amount == 0.0
        assert len(replacement.items) == 2
        assert replacement.customer_email == "asha@example.com"

    def test_warranty_replacement(self):
        parent = _make_order()
        assert Order.create_replacement(parent, warranty=True).order_type == "warranty_replacement"


class TestPaymentAndComplaintBookkeeping:
    def test_mark_refunded(self):
        order = _make_order()
        order._events.clear()
        order.mark_refunded(151.0)

        assert order.payment_status == "refunded"
        assert isinstance(order._events[0], OrderPaymentRefunded)
        assert order._events[0].amount == 151.0

    def test_unpaid_order_cannot_be_refunded(self):
        with pytest.raises(InvalidTransition):
            _make_order(payment_status="pending").mark_refunded(10.0)

    def test_set_complaint_status(self):
        order = _make_order()
        order.set_complaint_status(ComplaintStatus.REFUND_PENDING)
        assert order.complaint_status == "refund_pending"
