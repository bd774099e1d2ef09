"""Notification dispatcher port (abstract interface).

Customer communication for complaint and delivery outcomes leaves this system
through a dispatcher. The transport (email, SMS, push) is the adapter's
concern; the domain only hands over the notification request.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of handing one notification to the transport."""

    success: bool
    message_id: str | None = None
    failure_reason: str | None = None


def build_request(case_id, order_id, user_id, notification_type: str, payload: dict) -> dict:
    """Shape a notification request the way the transport expects it on the wire."""
    return {
        "complaintId": case_id,
        "orderId": order_id,
        "userId": user_id,
        "notificationType": notification_type,
        "customerName": payload.get("customerName"),
        "customerEmail": payload.get("customerEmail"),
        "additionalData": payload.get("additionalData") or {},
    }


class NotificationDispatcher(ABC):
    """Abstract notification dispatcher interface."""

    @abstractmethod
    def notify(
        self,
        case_id: str | None,
        order_id: str,
        user_id: str,
        notification_type: str,
        payload: dict,
    ) -> DispatchResult:
        """Send one notification.

        ``payload`` carries ``customerName``, ``customerEmail`` and
        ``additionalData``. Adapters may raise; callers treat an exception
        the same as an unsuccessful result.
        """
        ...
