"""Error taxonomy for the chat service.

Every error carries a ``message`` that is safe to show to the client that
triggered the failing operation.
"""


class ChatError(Exception):
    """Base class for errors scoped to a single operation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(ChatError):
    """Missing, invalid or expired credential, or inactive user."""


class AuthorizationError(ChatError):
    """Authenticated user is not an active participant of the conversation."""


class PersistenceError(ChatError):
    """Storage was unavailable or rejected the write."""


class MalformedRequestError(ChatError):
    """Event payload is not valid JSON or misses required fields."""


class NotFoundError(ChatError):
    """Requested record does not exist."""
