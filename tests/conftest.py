"""Shared test fixtures."""

import base64
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from event_snap.config import Settings
from event_snap.containers import AppContainer
from event_snap.domain.errors import StorageError
from event_snap.services.events import EventService
from event_snap.services.kv import KeyValueStore
from event_snap.services.photos import PhotoService, PhotoStorage
from event_snap.services.sweeper import ExpirySweeper

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg-bytes"
PHOTO_DATA_URL = "data:image/jpeg;base64," + base64.b64encode(JPEG_BYTES).decode()


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value store for tests."""

    values: dict[str, dict[str, object]] = field(default_factory=dict)
    failing_deletes: set[str] = field(default_factory=set)

    def get(self, key: str) -> dict[str, object] | None:
        return self.values.get(key)

    def set(self, key: str, value: dict[str, object]) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        if key in self.failing_deletes:
            raise RuntimeError(f"delete failed for {key}")
        self.values.pop(key, None)

    def get_by_prefix(self, prefix: str) -> list[dict[str, object]]:
        return [value for _, value in self.items_by_prefix(prefix)]

    def items_by_prefix(self, prefix: str) -> list[tuple[str, dict[str, object]]]:
        return [
            (key, value)
            for key, value in sorted(self.values.items())
            if key.startswith(prefix)
        ]

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return [key for key in self.values if key.startswith(prefix)]


@dataclass
class FakePhotoStorage(PhotoStorage):
    """Fake object storage that keeps blobs in memory."""

    objects: dict[str, tuple[bytes, str]] = field(default_factory=dict)
    buckets_ensured: int = 0
    fail_uploads: bool = False
    unsignable_paths: set[str] = field(default_factory=set)
    failing_removals: set[str] = field(default_factory=set)
    removed: list[str] = field(default_factory=list)

    def ensure_bucket(self) -> None:
        self.buckets_ensured += 1

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        if self.fail_uploads:
            raise StorageError("Failed to upload photo")
        if path in self.objects:
            raise StorageError("Object already exists")
        self.objects[path] = (content, content_type)

    def create_signed_url(self, path: str, expires_in: int) -> str:
        if path in self.unsignable_paths:
            raise StorageError("Failed to sign photo URL")
        return f"https://storage.test/{path}?expires_in={expires_in}"

    def download(self, path: str) -> bytes:
        if path not in self.objects:
            raise StorageError("Failed to download photo")
        return self.objects[path][0]

    def remove(self, paths: list[str]) -> None:
        for path in paths:
            if path in self.failing_removals:
                raise StorageError("Failed to delete photo")
            self.objects.pop(path, None)
            self.removed.append(path)


@dataclass
class FakeClock:
    """Clock that advances one millisecond per reading."""

    now: datetime = field(
        default_factory=lambda: datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
    )
    step: timedelta = field(default_factory=lambda: timedelta(milliseconds=1))

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def expire_event(store: InMemoryKeyValueStore, event_id: str) -> None:
    """Move an event's expiry into the past without removing it."""
    payload = dict(store.values[f"event:{event_id}"])
    payload["expiresAt"] = 0
    store.values[f"event:{event_id}"] = payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoic2VydmljZV9yb2xlIn0.c2lnbmF0dXJl"
        ),
        admin_token="admin-token",
        api_key="public-key",
        sweeper_enabled=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def photo_storage() -> FakePhotoStorage:
    return FakePhotoStorage()


@pytest.fixture
def event_service(
    store: InMemoryKeyValueStore, clock: Callable[[], datetime]
) -> EventService:
    return EventService(store=store, clock=clock)


@pytest.fixture
def photo_service(
    event_service: EventService,
    store: InMemoryKeyValueStore,
    photo_storage: FakePhotoStorage,
    clock: Callable[[], datetime],
) -> PhotoService:
    return PhotoService(
        event_service=event_service,
        store=store,
        storage=photo_storage,
        clock=clock,
    )


@pytest.fixture
def sweeper(
    store: InMemoryKeyValueStore,
    photo_storage: FakePhotoStorage,
    clock: Callable[[], datetime],
) -> ExpirySweeper:
    return ExpirySweeper(store=store, storage=photo_storage, clock=clock)


@pytest.fixture
def container(
    settings: Settings,
    photo_storage: FakePhotoStorage,
    event_service: EventService,
    photo_service: PhotoService,
    sweeper: ExpirySweeper,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        photo_storage=photo_storage,
        event_service=event_service,
        photo_service=photo_service,
        sweeper=sweeper,
    )


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer public-key"}
