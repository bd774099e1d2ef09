"""Fake notification dispatcher — records requests for test assertions."""

from uuid import uuid4

from aftersales.notification.port import DispatchResult, NotificationDispatcher, build_request


class FakeDispatcher(NotificationDispatcher):
    """Dispatcher that keeps every request in memory."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.raise_error = False
        self.failure_reason = "Notification transport unavailable"

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Notification transport unavailable",
        raise_error: bool = False,
    ):
        """Make the next dispatches fail, either by result or by raising."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_error = raise_error

    def notify(self, case_id, order_id, user_id, notification_type, payload) -> DispatchResult:
        if self.raise_error:
            raise ConnectionError(self.failure_reason)
        if not self.should_succeed:
            return DispatchResult(success=False, failure_reason=self.failure_reason)

        self.sent.append(build_request(case_id, order_id, user_id, notification_type, payload))
        return DispatchResult(success=True, message_id=f"ntf-{uuid4().hex[:12]}")

    def sent_of_type(self, notification_type: str) -> list[dict]:
        return [r for r in self.sent if r["notificationType"] == notification_type]

    def reset(self):
        self.sent.clear()
        self.configure()
