"""Order placement — command and handler."""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from aftersales.domain import aftersales
from aftersales.order.order import Order, PaymentStatus


@aftersales.command(part_of="Order")
class PlaceOrder:
    """Record an order handed over by checkout."""

    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    customer_email = String(max_length=255)
    customer_phone = String(max_length=50)
    payment_method = String(required=True, max_length=50)
    payment_status = String(default=PaymentStatus.PENDING.value, max_length=50)
    total_amount = Float()
    delivery_notes = Text()
    items = Text(required=True)  # JSON list of item dicts


@aftersales.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        order = Order.place(
            customer_id=command.customer_id,
            items_data=items_data,
            payment_method=command.payment_method,
            payment_status=command.payment_status or PaymentStatus.PENDING.value,
            customer_name=command.customer_name,
            customer_email=command.customer_email,
            customer_phone=command.customer_phone,
            delivery_notes=command.delivery_notes,
            total_amount=command.total_amount,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
