"""Order domain events."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from aftersales.domain import aftersales


@aftersales.event(part_of="Order")
class OrderPlaced:
    """A customer order, or a replacement order issued for a complaint, was created."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_type = String(required=True)
    parent_order_id = Identifier()
    payment_method = String(required=True)
    payment_status = String(required=True)
    total_amount = Float(required=True)
    items = Text(required=True)  # JSON list of item dicts
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@aftersales.event(part_of="Order")
class OrderProcessingStarted:
    __version__ = "v1"

    order_id = Identifier(required=True)
    started_at = DateTime(required=True)


@aftersales.event(part_of="Order")
class OrderShipped:
    __version__ = "v1"

    order_id = Identifier(required=True)
    shipped_at = DateTime(required=True)


@aftersales.event(part_of="Order")
class OrderDelivered:
    __version__ = "v1"

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@aftersales.event(part_of="Order")
class OrderCancelled:
    """The customer cancelled the order before it left the warehouse."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    reason = String(required=True)
    cancelled_at = DateTime(required=True)


@aftersales.event(part_of="Order")
class OrderReturningToProvider:
    """Delivery was abandoned and the parcel is on its way back."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    payment_method = String(required=True)
    payment_status = String(required=True)
    reason = String(required=True)
    returned_at = DateTime(required=True)


@aftersales.event(part_of="Order")
class OrderPaymentRefunded:
    __version__ = "v1"

    order_id = Identifier(required=True)
    amount = Float(required=True)
    refunded_at = DateTime(required=True)
