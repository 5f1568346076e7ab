"""Domain models for event photos."""

from dataclasses import dataclass
from datetime import datetime

from event_snap.domain.events import from_millis, to_millis


@dataclass(frozen=True)
class PhotoRecord:
    """Metadata for a stored photo."""

    id: str
    event_id: str
    user_id: str
    path: str
    uploaded_at: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "eventId": self.event_id,
            "userId": self.user_id,
            "path": self.path,
            "uploadedAt": to_millis(self.uploaded_at),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> "PhotoRecord":
        return cls(
            id=str(payload["id"]),
            event_id=str(payload["eventId"]),
            user_id=str(payload["userId"]),
            path=str(payload["path"]),
            uploaded_at=from_millis(int(payload["uploadedAt"])),
        )


@dataclass(frozen=True)
class PhotoView:
    """Photo metadata with a short-lived display URL."""

    photo: PhotoRecord
    url: str | None

    def to_dict(self) -> dict[str, object]:
        return {**self.photo.to_dict(), "url": self.url}
