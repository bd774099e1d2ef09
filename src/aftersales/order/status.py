"""Customer-facing order status.

``project`` collapses the order record and its delivery attempts into one
status label. Rules are evaluated top to bottom and the first match wins, so
a COD order that failed delivery reads "Order Failed – COD" even though its
status is ``cancelled``.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from aftersales.delivery.delivery_log import AttemptStatus
from aftersales.order.order import COD, OrderStatus, PaymentStatus


class Severity(Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


REFUND_SELECT = "refund-select"


@dataclass(frozen=True)
class StatusDescriptor:
    text: str
    severity: str
    actionable: str | None = None
    terminal: bool = False

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "severity": self.severity,
            "actionable": self.actionable,
            "terminal": self.terminal,
        }


def format_delivery_date(value: date | datetime | str) -> str:
    """Render a date as ``Mar 1, 2025``."""
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return f"{value:%b} {value.day}, {value.year}"


def _is_cod(order) -> bool:
    return (order.payment_method or "").lower() == COD


def _next_attempt_after_failure(attempts):
    """Latest scheduled attempt that follows a failed one, or None."""
    ordered = sorted(attempts, key=lambda a: a.attempt_number)
    failed = [a.attempt_number for a in ordered if a.status == AttemptStatus.FAILED.value]
    if not failed:
        return None
    rescheduled = [a for a in ordered if a.status == AttemptStatus.SCHEDULED.value and a.attempt_number > failed[0]]
    return rescheduled[-1] if rescheduled else None


# ---------------------------------------------------------------------------
# Rules, in precedence order
# ---------------------------------------------------------------------------
def _failed_cod(order, attempts):
    if order.returning_to_provider and _is_cod(order):
        return StatusDescriptor("Order Failed – COD", Severity.ERROR.value, terminal=True)
    return None


def _returning_prepaid(order, attempts):
    if order.returning_to_provider:
        actionable = REFUND_SELECT if order.payment_status == PaymentStatus.PAID.value else None
        return StatusDescriptor(
            "Delivery Failed – Returning to Provider",
            Severity.ERROR.value,
            actionable=actionable,
            terminal=True,
        )
    return None


def _rescheduled(order, attempts):
    attempt = _next_attempt_after_failure(attempts)
    if attempt is None:
        return None
    return StatusDescriptor(
        f"Delivery attempt failed – next delivery scheduled on {format_delivery_date(attempt.scheduled_date)}",
        Severity.WARNING.value,
    )


def _by_status(status: OrderStatus, text: str, severity: Severity, terminal: bool = False):
    def rule(order, attempts):
        if order.status == status.value:
            return StatusDescriptor(text, severity.value, terminal=terminal)
        return None

    return rule


_RULES: tuple[Callable, ...] = (
    _failed_cod,
    _returning_prepaid,
    _rescheduled,
    _by_status(OrderStatus.CANCELLED, "Order Cancelled", Severity.ERROR, terminal=True),
    _by_status(OrderStatus.DELIVERED, "Delivered", Severity.SUCCESS, terminal=True),
    _by_status(OrderStatus.SHIPPED, "Shipped", Severity.INFO),
    _by_status(OrderStatus.PROCESSING, "Processing", Severity.INFO),
)

_DEFAULT = StatusDescriptor("Order Placed", Severity.INFO.value)


def project(order, attempts: Iterable = ()) -> StatusDescriptor:
    """Return the single status label a customer sees for ``order``.

    ``attempts`` are the order's delivery attempts in any order.
    """
    attempts = list(attempts or [])
    for rule in _RULES:
        descriptor = rule(order, attempts)
        if descriptor is not None:
            return descriptor
    return _DEFAULT


def can_cancel(order) -> bool:
    """Customers may cancel only while the order is placed and not on its way back."""
    return order.status == OrderStatus.PLACED.value and not order.returning_to_provider
