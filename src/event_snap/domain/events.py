"""Domain models for events."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_MILLISECOND = timedelta(milliseconds=1)


@dataclass(frozen=True)
class EventRecord:
    """Represents a shared, time-boxed photo album."""

    id: str
    name: str
    max_photos_per_user: int
    expiry_days: int
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Return true once the expiry deadline has passed."""
        return self.expires_at < now

    def to_dict(self) -> dict[str, object]:
        """Serialize to the camelCase payload stored and returned by the API."""
        return {
            "id": self.id,
            "name": self.name,
            "maxPhotosPerUser": self.max_photos_per_user,
            "expiryDays": self.expiry_days,
            "expiresAt": to_millis(self.expires_at),
            "createdAt": to_millis(self.created_at),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> "EventRecord":
        """Build a record from a stored payload."""
        return cls(
            id=str(payload["id"]),
            name=str(payload["name"]),
            max_photos_per_user=int(payload["maxPhotosPerUser"]),
            expiry_days=int(payload["expiryDays"]),
            expires_at=from_millis(int(payload["expiresAt"])),
            created_at=from_millis(int(payload["createdAt"])),
        )


def to_millis(value: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return (value - _EPOCH) // _MILLISECOND


def from_millis(value: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return _EPOCH + value * _MILLISECOND


def utc_now() -> datetime:
    """Current UTC time truncated to millisecond precision."""
    now = datetime.now(tz=UTC)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)
