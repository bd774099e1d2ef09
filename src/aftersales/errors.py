"""Error types surfaced by aftersales commands.

All errors carry a ``messages`` dict of ``{field: [message, ...]}`` in the
same shape as Protean validation errors, so API handlers can render them
uniformly.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class InvalidTransition(ValidationError):
    """A guard failed: the requested transition is not legal from the current state."""

    def __init__(self, messages: dict):
        super().__init__(messages)
        self.messages = messages


class NotFound(ObjectNotFoundError):
    """The referenced order, complaint, refund or delivery attempt does not exist."""

    def __init__(self, messages: dict):
        super().__init__(messages)
        self.messages = messages


class Conflict(InvalidOperationError):
    """A one-shot action already ran, or the record changed since it was read."""

    def __init__(self, messages: dict):
        super().__init__(messages)
        self.messages = messages


class PersistenceFailure(Exception):
    """The store could not be reached; nothing was committed."""

    def __init__(self, messages: dict):
        super().__init__(messages)
        self.messages = messages
