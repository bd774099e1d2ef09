"""Return pickup for upheld complaints — commands and handler."""

from protean import handle
from protean.fields import DateTime, Identifier, Integer, Text
from protean.utils.globals import current_domain

from aftersales.complaint.complaint import ComplaintCase
from aftersales.domain import aftersales
from aftersales.notification.helpers import record_intent
from aftersales.notification.intent import NotificationType
from aftersales.order.order import Order
from aftersales.utils.loading import load


@aftersales.command(part_of="ComplaintCase")
class SchedulePickup:
    complaint_id = Identifier(required=True)
    pickup_date = DateTime(required=True)
    admin_notes = Text()
    expected_version = Integer()


@aftersales.command(part_of="ComplaintCase")
class MarkPickedUp:
    complaint_id = Identifier(required=True)
    expected_version = Integer()


@aftersales.command_handler(part_of=ComplaintCase)
class PickupHandler:
    @handle(SchedulePickup)
    def schedule_pickup(self, command):
        case = load(ComplaintCase, command.complaint_id, "complaint_id", command.expected_version)
        order = load(Order, case.order_id, "order_id")

        case.schedule_pickup(command.pickup_date, admin_notes=command.admin_notes)

        current_domain.repository_for(ComplaintCase).add(case)
        record_intent(
            NotificationType.PICKUP_SCHEDULED,
            order,
            case,
            {"pickupDate": command.pickup_date.isoformat()},
        )
        return str(case.id)

    @handle(MarkPickedUp)
    def mark_picked_up(self, command):
        case = load(ComplaintCase, command.complaint_id, "complaint_id", command.expected_version)
        order = load(Order, case.order_id, "order_id")

        case.mark_picked_up()

        current_domain.repository_for(ComplaintCase).add(case)
        record_intent(NotificationType.PICKUP_COMPLETED, order, case)
        return str(case.id)
