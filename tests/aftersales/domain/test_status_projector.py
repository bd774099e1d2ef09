"""Tests for the customer-facing status projection."""

from datetime import date, datetime
from types import SimpleNamespace

import pytest
from aftersales.order.status import REFUND_SELECT, can_cancel, format_delivery_date, project


def _order(**overrides):
    fields = {
        "status": "shipped",
        "payment_method": "upi",
        "payment_status": "paid",
        "returning_to_provider": False,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _attempt(number, status, scheduled_date=date(2025, 3, 1)):
    return SimpleNamespace(attempt_number=number, status=status, scheduled_date=scheduled_date)


class TestFormatDeliveryDate:
    def test_date(self):
        assert format_delivery_date(date(2025, 3, 1)) == "Mar 1, 2025"

    def test_datetime(self):
        assert format_delivery_date(datetime(2025, 12, 24, 18, 30)) == "Dec 24, 2025"

    def test_iso_string(self):
        assert format_delivery_date("2025-07-09") == "Jul 9, 2025"


class TestReturningToProvider:
    def test_cod_order_reads_failed(self):
        order = _order(status="cancelled", payment_method="cod", payment_status="pending", returning_to_provider=True)
        descriptor = project(order)

        assert descriptor.text == "Order Failed – COD"
        assert descriptor.severity == "error"
        assert descriptor.actionable is None
        assert descriptor.terminal is True

    def test_cod_match_is_case_insensitive(self):
        order = _order(status="cancelled", payment_method="COD", returning_to_provider=True)
        assert project(order).text == "Order Failed – COD"

    def test_paid_order_offers_refund_selection(self):
        order = _order(status="cancelled", returning_to_provider=True)
        descriptor = project(order)

        assert descriptor.text == "Delivery Failed – Returning to Provider"
        assert descriptor.severity == "error"
        assert descriptor.actionable == REFUND_SELECT

    def test_unpaid_prepaid_order_has_no_action(self):
        order = _order(status="cancelled", payment_status="pending", returning_to_provider=True)
        descriptor = project(order)

        assert descriptor.text == "Delivery Failed – Returning to Provider"
        assert descriptor.actionable is None

    def test_return_takes_precedence_over_cancelled_status(self):
        order = _order(status="cancelled", returning_to_provider=True)
        assert project(order).text != "Order Cancelled"

    def test_return_takes_precedence_over_rescheduled_attempt(self):
        order = _order(status="cancelled", returning_to_provider=True)
        attempts = [_attempt(1, "failed"), _attempt(2, "scheduled", date(2025, 3, 4))]
        assert project(order, attempts).text == "Delivery Failed – Returning to Provider"


class TestRescheduledDelivery:
    def test_failed_then_scheduled_shows_next_date(self):
        attempts = [_attempt(1, "failed"), _attempt(2, "scheduled", date(2025, 3, 4))]
        descriptor = project(_order(), attempts)

        assert descriptor.text == "Delivery attempt failed – next delivery scheduled on Mar 4, 2025"
        assert descriptor.severity == "warning"
        assert descriptor.terminal is False

    def test_uses_latest_rescheduled_attempt(self):
        attempts = [
            _attempt(3, "scheduled", date(2025, 3, 8)),
            _attempt(1, "failed"),
            _attempt(2, "failed", date(2025, 3, 4)),
        ]
        assert project(_order(), attempts).text.endswith("Mar 8, 2025")

    def test_failure_without_reschedule_falls_through_to_status(self):
        attempts = [_attempt(1, "failed")]
        assert project(_order(), attempts).text == "Shipped"

    def test_first_scheduled_attempt_is_not_a_reschedule(self):
        attempts = [_attempt(1, "scheduled")]
        assert project(_order(), attempts).text == "Shipped"


class TestPlainStatus:
    @pytest.mark.parametrize(
        "status,text,severity,terminal",
        [
            ("placed", "Order Placed", "info", False),
            ("processing", "Processing", "info", False),
            ("shipped", "Shipped", "info", False),
            ("delivered", "Delivered", "success", True),
            ("cancelled", "Order Cancelled", "error", True),
        ],
    )
    def test_status_labels(self, status, text, severity, terminal):
        descriptor = project(_order(status=status))

        assert descriptor.text == text
        assert descriptor.severity == severity
        assert descriptor.terminal is terminal
        assert descriptor.actionable is None

    def test_to_dict(self):
        assert project(_order(status="delivered")).to_dict() == {
            "text": "Delivered",
            "severity": "success",
            "actionable": None,
            "terminal": True,
        }

    def test_projection_is_deterministic(self):
        order = _order()
        attempts = [_attempt(1, "failed"), _attempt(2, "scheduled")]
        assert project(order, attempts) == project(order, list(reversed(attempts)))


class TestCanCancel:
    def test_placed_order(self):
        assert can_cancel(_order(status="placed")) is True

    @pytest.mark.parametrize("status", ["processing", "shipped", "delivered", "cancelled"])
    def test_other_statuses(self, status):
        assert can_cancel(_order(status=status)) is False

    def test_returning_order(self):
        assert can_cancel(_order(status="placed", returning_to_provider=True)) is False
