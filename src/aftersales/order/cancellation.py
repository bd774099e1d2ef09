"""Order cancellation — command and handler.

Customers may cancel only while the order is still placed; see
``aftersales.order.status.can_cancel``.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from aftersales.domain import aftersales
from aftersales.order.order import Order


@aftersales.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@aftersales.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(command.reason)
        repo.add(order)
