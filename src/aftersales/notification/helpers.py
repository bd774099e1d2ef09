"""Helpers for recording notification intents inside a command's unit of work."""

from protean.utils.globals import current_domain

from aftersales.notification.intent import NotificationIntent, NotificationType


def record_intent(
    notification_type: NotificationType,
    order,
    case=None,
    additional_data: dict | None = None,
) -> NotificationIntent:
    """Stage a notification about ``order`` (and ``case``, when there is one).

    The intent is added to the repository of the current unit of work, so it
    commits or rolls back together with the change being announced.
    """
    data = dict(additional_data or {})
    if case is not None:
        data.setdefault("complaintType", case.type_label)

    intent = NotificationIntent.record(
        notification_type,
        order_id=str(order.id),
        user_id=str(case.user_id if case is not None else order.customer_id),
        complaint_id=str(case.id) if case is not None else None,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        additional_data=data,
    )
    current_domain.repository_for(NotificationIntent).add(intent)
    return intent
