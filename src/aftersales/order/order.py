"""Order aggregate (CQRS) — the order record complaints and deliveries hang off.

Only the parts of an order that the aftersales flows read or write live here:
status, payment state, line items, the return-to-provider flag and the
complaint back-reference. Checkout and payment capture happen elsewhere.

State Machine:
    PLACED → PROCESSING → SHIPPED → DELIVERED
    PLACED → CANCELLED                      (customer cancellation)
    PLACED | PROCESSING | SHIPPED → CANCELLED + returning_to_provider
                                            (abandoned delivery)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from aftersales.domain import aftersales
from aftersales.errors import InvalidTransition
from aftersales.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPaymentRefunded,
    OrderPlaced,
    OrderProcessingStarted,
    OrderReturningToProvider,
    OrderShipped,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PLACED = "placed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class OrderType(Enum):
    STANDARD = "standard"
    REPLACEMENT = "replacement"
    WARRANTY_REPLACEMENT = "warranty_replacement"


class ComplaintStatus(Enum):
    NONE = "none"
    OPEN = "open"
    RESOLVED = "resolved"
    FALSE_REPORT = "false_report"
    REFUND_PENDING = "refund_pending"
    REFUND_COMPLETED = "refund_completed"
    REFUND_FAILED = "refund_failed"


COD = "cod"
REPLACEMENT_PAYMENT_METHOD = "replacement"

_VALID_TRANSITIONS = {
    OrderStatus.PLACED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}

_RETURNABLE_STATUSES = {OrderStatus.PLACED, OrderStatus.PROCESSING, OrderStatus.SHIPPED}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@aftersales.entity(part_of="Order")
class OrderItem:
    product_id = Identifier()
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)

    def to_dict(self) -> dict:
        return {
            "product_id": str(self.product_id) if self.product_id else None,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
        }


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@aftersales.aggregate
class Order:
    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    customer_email = String(max_length=255)
    customer_phone = String(max_length=50)
    status = String(choices=OrderStatus, default=OrderStatus.PLACED.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(required=True, max_length=50)
    total_amount = Float(default=0.0, min_value=0.0)
    items = HasMany(OrderItem)
    order_type = String(choices=OrderType, default=OrderType.STANDARD.value)
    parent_order_id = Identifier()
    returning_to_provider = Boolean(default=False)
    return_reason = String(max_length=500)
    delivery_notes = Text()
    complaint_status = String(choices=ComplaintStatus, default=ComplaintStatus.NONE.value)
    cancellation_reason = String(max_length=500)
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory methods
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id: str,
        items_data: list[dict],
        payment_method: str,
        payment_status: str = PaymentStatus.PENDING.value,
        customer_name: str | None = None,
        customer_email: str | None = None,
        customer_phone: str | None = None,
        delivery_notes: str | None = None,
        total_amount: float | None = None,
    ):
        """Record a new customer order.

        ``total_amount`` defaults to the sum of ``price * quantity`` over the items.
        """
        if total_amount is None:
            total_amount = round(sum(item["price"] * item["quantity"] for item in items_data), 2)
        return cls._create(
            customer_id=customer_id,
            items_data=items_data,
            payment_method=payment_method,
            payment_status=payment_status,
            total_amount=total_amount,
            status=OrderStatus.PLACED.value,
            order_type=OrderType.STANDARD.value,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            delivery_notes=delivery_notes,
        )

    @classmethod
    def create_replacement(cls, parent: "Order", warranty: bool = False):
        """Issue a zero-amount, already-paid copy of ``parent`` for a resolved complaint."""
        return cls._create(
            customer_id=str(parent.customer_id),
            items_data=[item.to_dict() for item in (parent.items or [])],
            payment_method=REPLACEMENT_PAYMENT_METHOD,
            payment_status=PaymentStatus.PAID.value,
            total_amount=0.0,
            status=OrderStatus.PROCESSING.value,
            order_type=(OrderType.WARRANTY_REPLACEMENT if warranty else OrderType.REPLACEMENT).value,
            parent_order_id=str(parent.id),
            customer_name=parent.customer_name,
            customer_email=parent.customer_email,
            customer_phone=parent.customer_phone,
            delivery_notes=parent.delivery_notes,
        )

    @classmethod
    def _create(cls, items_data: list[dict], **fields):
        now = datetime.now(UTC)
        order = cls(**fields, created_at=now, updated_at=now)
        for item_data in items_data:
            order.add_items(OrderItem(**item_data))
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(order.customer_id),
                order_type=order.order_type,
                parent_order_id=order.parent_order_id,
                payment_method=order.payment_method,
                payment_status=order.payment_status,
                total_amount=order.total_amount,
                items=json.dumps(items_data),
                item_count=len(items_data),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------
    @property
    def is_cod(self) -> bool:
        return (self.payment_method or "").lower() == COD

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _assert_not_returning(self) -> None:
        if self.returning_to_provider:
            raise InvalidTransition({"returning_to_provider": ["Order is being returned to the provider"]})

    # -------------------------------------------------------------------
    # Fulfillment progress
    # -------------------------------------------------------------------
    def mark_processing(self) -> None:
        self._assert_not_returning()
        self._assert_can_transition(OrderStatus.PROCESSING)
        now = datetime.now(UTC)
        self.status = OrderStatus.PROCESSING.value
        self.updated_at = now
        self.raise_(OrderProcessingStarted(order_id=str(self.id), started_at=now))

    def mark_shipped(self) -> None:
        self._assert_not_returning()
        self._assert_can_transition(OrderStatus.SHIPPED)
        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        self.shipped_at = now
        self.updated_at = now
        self.raise_(OrderShipped(order_id=str(self.id), shipped_at=now))

    def mark_delivered(self) -> None:
        self._assert_not_returning()
        self._assert_can_transition(OrderStatus.DELIVERED)
        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.delivered_at = now
        self.updated_at = now
        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))

    # -------------------------------------------------------------------
    # Cancellation and return to provider
    # -------------------------------------------------------------------
    def cancel(self, reason: str) -> None:
        """Customer cancellation; allowed only while the order is still placed."""
        from aftersales.order.status import can_cancel

        if not can_cancel(self):
            raise InvalidTransition({"status": [f"Cannot cancel an order in {self.status} state"]})

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_at = now
        self.updated_at = now
        self.raise_(OrderCancelled(order_id=str(self.id), reason=reason, cancelled_at=now))

    def return_to_provider(self, reason: str) -> None:
        """Abandon delivery: the order is cancelled and flagged as returning."""
        self._assert_not_returning()
        if OrderStatus(self.status) not in _RETURNABLE_STATUSES:
            raise InvalidTransition({"status": [f"Cannot return an order in {self.status} state to the provider"]})

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.returning_to_provider = True
        self.return_reason = reason
        self.cancelled_at = now
        self.updated_at = now
        self.raise_(
            OrderReturningToProvider(
                order_id=str(self.id),
                payment_method=self.payment_method,
                payment_status=self.payment_status,
                reason=reason,
                returned_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment and complaint bookkeeping
    # -------------------------------------------------------------------
    def mark_refunded(self, amount: float) -> None:
        if self.payment_status != PaymentStatus.PAID.value:
            raise InvalidTransition({"payment_status": [f"Cannot refund an order with payment {self.payment_status}"]})

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.REFUNDED.value
        self.updated_at = now
        self.raise_(OrderPaymentRefunded(order_id=str(self.id), amount=amount, refunded_at=now))

    def set_complaint_status(self, status: ComplaintStatus) -> None:
        self.complaint_status = status.value
        self.updated_at = datetime.now(UTC)
