"""RetryFailedNotifications command + handler — requeue failed intents.

Invoked by a cron job or an operator. Each eligible intent is requeued; the
relay picks the requeue event up and dispatches it again.
"""

import structlog
from protean import handle
from protean.fields import Integer
from protean.utils.globals import current_domain

from aftersales.domain import aftersales
from aftersales.notification.intent import IntentStatus, NotificationIntent

logger = structlog.get_logger(__name__)


@aftersales.command(part_of="NotificationIntent")
class RetryFailedNotifications:
    limit = Integer(default=100, min_value=1)


def _retryable_intents(repo, limit: int) -> tuple[list[NotificationIntent], int]:
    """Page through failed intents, oldest first, until ``limit`` retryable ones are found.

    Intents that used up their attempts stay ``failed`` and are skipped, so
    they never crowd out intents that still have budget left.
    """
    retryable: list[NotificationIntent] = []
    examined = 0
    offset = 0
    while len(retryable) < limit:
        page = (
            repo._dao.query.filter(status=IntentStatus.FAILED.value)
            .order_by("created_at")
            .offset(offset)
            .limit(limit)
            .all()
            .items
        )
        examined += len(page)
        retryable.extend(intent for intent in page if intent.can_retry)
        if len(page) < limit:
            break
        offset += limit
    return retryable[:limit], examined


@aftersales.command_handler(part_of=NotificationIntent)
class RetryFailedNotificationsHandler:
    @handle(RetryFailedNotifications)
    def retry_failed(self, command):
        repo = current_domain.repository_for(NotificationIntent)
        retryable, examined = _retryable_intents(repo, command.limit or 100)

        for intent in retryable:
            intent.requeue()
            repo.add(intent)

        logger.info("Failed notifications requeued", requeued=len(retryable), examined=examined)
        return len(retryable)
