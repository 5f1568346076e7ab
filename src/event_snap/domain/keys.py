"""Key-value and object storage key conventions."""

EVENT_PREFIX = "event:"
PHOTO_PREFIX = "photo:"
PHOTO_EXTENSION = "jpg"


def event_key(event_id: str) -> str:
    return f"{EVENT_PREFIX}{event_id}"


def event_photos_prefix(event_id: str) -> str:
    """Prefix matching every photo record of an event."""
    return f"{PHOTO_PREFIX}{event_id}:"


def user_photos_prefix(event_id: str, user_id: str) -> str:
    """Prefix matching one participant's photo records within an event."""
    return f"{PHOTO_PREFIX}{event_id}:{user_id}:"


def photo_key(event_id: str, user_id: str, photo_id: str) -> str:
    return f"{PHOTO_PREFIX}{event_id}:{user_id}:{photo_id}"


def photo_path(event_id: str, user_id: str, photo_id: str) -> str:
    """Object storage location for a photo's bytes."""
    return f"{event_id}/{user_id}/{photo_id}.{PHOTO_EXTENSION}"
