"""Domain errors surfaced to API callers."""


class EventSnapError(Exception):
    """Base error carrying a human-readable message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(EventSnapError):
    """Raised when request input is missing or out of bounds."""


class EventNotFoundError(EventSnapError):
    """Raised when no event exists for an id."""

    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__("Event not found")


class EventExpiredError(EventSnapError):
    """Raised when an event is past its expiry but not yet swept."""

    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__("Event has expired")


class QuotaExceededError(EventSnapError):
    """Raised when a participant has used up their photo quota."""

    def __init__(self, event_id: str, user_id: str, limit: int) -> None:
        self.event_id = event_id
        self.user_id = user_id
        self.limit = limit
        super().__init__("Photo limit reached")


class InvalidPayloadError(EventSnapError):
    """Raised when the uploaded photo encoding cannot be decoded."""


class StorageError(EventSnapError):
    """Raised when object storage rejects an operation."""
