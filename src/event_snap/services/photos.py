"""Photo upload, listing and archive logic."""

import base64
import binascii
import io
import logging
import re
import threading
import zipfile
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol
from uuid import uuid4

from event_snap.domain.errors import (
    InvalidPayloadError,
    QuotaExceededError,
    StorageError,
    ValidationError,
)
from event_snap.domain.events import EventRecord, utc_now
from event_snap.domain.keys import (
    event_photos_prefix,
    photo_key,
    photo_path,
    user_photos_prefix,
)
from event_snap.domain.photos import PhotoRecord, PhotoView
from event_snap.services.events import EventService
from event_snap.services.kv import KeyValueStore

logger = logging.getLogger(__name__)

PHOTO_CONTENT_TYPE = "image/jpeg"
_FORBIDDEN_USER_ID_CHARS = (":", "/")
_WHITESPACE = re.compile(r"\s+")
_MILLISECOND = timedelta(milliseconds=1)


class PhotoStorage(Protocol):
    """Interface for the object storage holding photo bytes."""

    def ensure_bucket(self) -> None:
        """Create the private photo bucket when it does not exist."""

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        """Store bytes under a path without overwriting."""

    def create_signed_url(self, path: str, expires_in: int) -> str:
        """Return a time-limited URL for reading an object."""

    def download(self, path: str) -> bytes:
        """Return the bytes stored under a path."""

    def remove(self, paths: list[str]) -> None:
        """Delete the objects stored under the given paths."""


@dataclass(frozen=True)
class PhotoArchive:
    """ZIP archive of an event's photos."""

    filename: str
    content: bytes
    photo_count: int


@dataclass
class PhotoService:
    """Enforces quotas and moves photos between the API and storage."""

    event_service: EventService
    store: KeyValueStore
    storage: PhotoStorage
    signed_url_ttl_seconds: int = 3600
    clock: Callable[[], datetime] = field(default=utc_now)
    _last_uploaded_at: datetime | None = field(default=None, init=False, repr=False)
    _upload_clock_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def upload_photo(
        self, event_id: str, user_id: str | None, photo_data: str | None
    ) -> PhotoRecord:
        """Validate quota, store the photo bytes, then persist metadata."""
        if not photo_data or not user_id:
            raise ValidationError("Missing photo data or user ID")
        if any(char in user_id for char in _FORBIDDEN_USER_ID_CHARS):
            raise ValidationError("Invalid user ID")

        event = self.event_service.get_event(event_id)
        count = self.count_user_photos(event_id, user_id)
        if count >= event.max_photos_per_user:
            logger.info(
                "Photo quota reached",
                extra={"event_id": event_id, "user_id": user_id, "count": count},
            )
            raise QuotaExceededError(event_id, user_id, event.max_photos_per_user)

        content = decode_photo_data(photo_data)
        photo_id = str(uuid4())
        path = photo_path(event_id, user_id, photo_id)
        try:
            self.storage.upload(path, content, PHOTO_CONTENT_TYPE)
        except StorageError:
            logger.exception("Storage upload failed", extra={"path": path})
            raise

        photo = PhotoRecord(
            id=photo_id,
            event_id=event_id,
            user_id=user_id,
            path=path,
            uploaded_at=self._next_upload_time(),
        )
        self.store.set(photo_key(event_id, user_id, photo_id), photo.to_dict())
        return photo

    def list_photos(self, event_id: str) -> list[PhotoView]:
        """Return an event's photos with signed display URLs."""
        self.event_service.get_event(event_id)
        views = []
        for photo in self.event_photos(event_id):
            views.append(PhotoView(photo=photo, url=self._signed_url(photo)))
        return views

    def count_user_photos(self, event_id: str, user_id: str) -> int:
        """Count a participant's photos in an event."""
        return len(self.store.get_by_prefix(user_photos_prefix(event_id, user_id)))

    def build_archive(self, event_id: str) -> PhotoArchive:
        """Bundle every downloadable photo of an event into a ZIP file."""
        event = self.event_service.get_event(event_id)
        buffer = io.BytesIO()
        written = 0
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for photo in self.event_photos(event_id):
                try:
                    content = self.storage.download(photo.path)
                except StorageError:
                    logger.exception(
                        "Failed to download photo for archive",
                        extra={"photo_id": photo.id, "path": photo.path},
                    )
                    continue
                written += 1
                archive.writestr(f"photo-{written}.jpg", content)
        return PhotoArchive(
            filename=archive_filename(event),
            content=buffer.getvalue(),
            photo_count=written,
        )

    def event_photos(self, event_id: str) -> list[PhotoRecord]:
        """Return an event's photo records in upload order."""
        photos = []
        for payload in self.store.get_by_prefix(event_photos_prefix(event_id)):
            try:
                photos.append(PhotoRecord.from_dict(payload))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed photo record: %s", payload)
        return sorted(photos, key=lambda photo: (photo.uploaded_at, photo.id))

    def _next_upload_time(self) -> datetime:
        """Upload timestamp, strictly increasing within this process."""
        with self._upload_clock_lock:
            now = self.clock()
            if self._last_uploaded_at is not None and now <= self._last_uploaded_at:
                now = self._last_uploaded_at + _MILLISECOND
            self._last_uploaded_at = now
            return now

    def _signed_url(self, photo: PhotoRecord) -> str | None:
        try:
            return self.storage.create_signed_url(
                photo.path, self.signed_url_ttl_seconds
            )
        except StorageError:
            logger.warning(
                "Failed to sign photo URL",
                exc_info=True,
                extra={"photo_id": photo.id, "path": photo.path},
            )
            return None


def decode_photo_data(photo_data: str) -> bytes:
    """Decode a base64 data URL (``data:<mime>;base64,<payload>``) to bytes."""
    _, separator, encoded = photo_data.partition(",")
    if not separator:
        raise InvalidPayloadError("Photo data must be a base64 data URL")
    try:
        content = base64.b64decode(encoded.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidPayloadError("Photo data is not valid base64") from exc
    if not content:
        raise InvalidPayloadError("Photo data is empty")
    return content


def archive_filename(event: EventRecord) -> str:
    """Download name for an event's photo archive."""
    slug = _WHITESPACE.sub("-", event.name.strip())
    return f"{slug}-photos.zip"
