"""Order fulfillment progress — commands and handler.

Warehouse and carrier integrations report progress through these commands.
Delivery attempt outcomes go through ``aftersales.delivery.tracking`` instead.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from aftersales.domain import aftersales
from aftersales.order.order import Order


@aftersales.command(part_of="Order")
class MarkOrderProcessing:
    order_id = Identifier(required=True)


@aftersales.command(part_of="Order")
class MarkOrderShipped:
    order_id = Identifier(required=True)


@aftersales.command(part_of="Order")
class MarkOrderDelivered:
    order_id = Identifier(required=True)


@aftersales.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(MarkOrderProcessing)
    def mark_processing(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_processing()
        repo.add(order)

    @handle(MarkOrderShipped)
    def mark_shipped(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_shipped()
        repo.add(order)

    @handle(MarkOrderDelivered)
    def mark_delivered(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_delivered()
        repo.add(order)
