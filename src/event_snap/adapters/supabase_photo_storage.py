"""Supabase Storage implementation for photo bytes."""

import logging
from dataclasses import dataclass

from supabase import Client

from event_snap.domain.errors import StorageError
from event_snap.services.photos import PhotoStorage

logger = logging.getLogger(__name__)


@dataclass
class SupabasePhotoStorage(PhotoStorage):
    """Stores photos in a private Supabase Storage bucket.

    Client errors are re-raised as ``StorageError`` so callers only deal with
    the domain exception.
    """

    client: Client
    bucket: str
    file_size_limit: int = 5 * 1024 * 1024

    def ensure_bucket(self) -> None:
        """Create the bucket as private when it is missing."""
        try:
            buckets = self.client.storage.list_buckets()
            if any(bucket.name == self.bucket for bucket in buckets):
                return
            self.client.storage.create_bucket(
                self.bucket,
                options={"public": False, "file_size_limit": self.file_size_limit},
            )
        except Exception as exc:
            raise StorageError(f"Failed to prepare bucket {self.bucket}") from exc
        logger.info("Created storage bucket", extra={"bucket": self.bucket})

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        """Upload bytes without overwriting an existing object."""
        try:
            self.client.storage.from_(self.bucket).upload(
                path=path,
                file=content,
                file_options={"content-type": content_type, "upsert": "false"},
            )
        except Exception as exc:
            raise StorageError("Failed to upload photo") from exc

    def create_signed_url(self, path: str, expires_in: int) -> str:
        """Return a signed URL valid for ``expires_in`` seconds."""
        try:
            result = self.client.storage.from_(self.bucket).create_signed_url(
                path, expires_in
            )
        except Exception as exc:
            raise StorageError("Failed to sign photo URL") from exc
        url = result.get("signedURL") or result.get("signedUrl")
        if not url:
            raise StorageError("Failed to sign photo URL")
        return url

    def download(self, path: str) -> bytes:
        """Download an object's bytes."""
        try:
            return self.client.storage.from_(self.bucket).download(path)
        except Exception as exc:
            raise StorageError("Failed to download photo") from exc

    def remove(self, paths: list[str]) -> None:
        """Remove objects from the bucket."""
        try:
            self.client.storage.from_(self.bucket).remove(paths)
        except Exception as exc:
            raise StorageError("Failed to delete photo") from exc
