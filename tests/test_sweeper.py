"""Tests for the expiry sweeper."""

import asyncio

import pytest

from event_snap.domain.errors import EventNotFoundError
from event_snap.services.events import EventService
from event_snap.services.photos import PhotoService
from event_snap.services.sweeper import ExpirySweeper
from tests.conftest import (
    PHOTO_DATA_URL,
    FakePhotoStorage,
    InMemoryKeyValueStore,
    expire_event,
)


def test_sweep_removes_expired_event_and_photos(
    event_service: EventService,
    photo_service: PhotoService,
    photo_storage: FakePhotoStorage,
    store: InMemoryKeyValueStore,
    sweeper: ExpirySweeper,
) -> None:
    event = event_service.create_event("Past", 5, 1)
    first = photo_service.upload_photo(event.id, "user-1", PHOTO_DATA_URL)
    second = photo_service.upload_photo(event.id, "user-2", PHOTO_DATA_URL)
    expire_event(store, event.id)

    report = sweeper.sweep()

    assert report.events_deleted == 1
    assert report.photos_deleted == 2
    assert report.failures == 0
    assert store.keys_with_prefix(f"photo:{event.id}:") == []
    assert sorted(photo_storage.removed) == sorted([first.path, second.path])
    with pytest.raises(EventNotFoundError):
        event_service.get_event(event.id)
    with pytest.raises(EventNotFoundError):
        photo_service.list_photos(event.id)


def test_sweep_keeps_live_events(
    event_service: EventService,
    photo_service: PhotoService,
    store: InMemoryKeyValueStore,
    sweeper: ExpirySweeper,
) -> None:
    live = event_service.create_event("Live", 5, 7)
    photo = photo_service.upload_photo(live.id, "user-1", PHOTO_DATA_URL)

    report = sweeper.sweep()

    assert report.events_deleted == 0
    assert event_service.get_event(live.id) == live
    assert f"photo:{live.id}:user-1:{photo.id}" in store.values


def test_sweep_continues_after_storage_failure(
    event_service: EventService,
    photo_service: PhotoService,
    photo_storage: FakePhotoStorage,
    store: InMemoryKeyValueStore,
    sweeper: ExpirySweeper,
) -> None:
    event = event_service.create_event("Past", 5, 1)
    stuck = photo_service.upload_photo(event.id, "user-1", PHOTO_DATA_URL)
    photo_service.upload_photo(event.id, "user-1", PHOTO_DATA_URL)
    photo_storage.failing_removals.add(stuck.path)
    expire_event(store, event.id)

    report = sweeper.sweep()

    assert report.failures == 1
    assert report.photos_deleted == 2
    assert report.events_deleted == 1
    assert store.keys_with_prefix(f"photo:{event.id}:") == []
    assert f"event:{event.id}" not in store.values


def test_sweep_continues_after_metadata_failure(
    event_service: EventService,
    photo_service: PhotoService,
    store: InMemoryKeyValueStore,
    sweeper: ExpirySweeper,
) -> None:
    broken = event_service.create_event("Broken", 5, 1)
    photo = photo_service.upload_photo(broken.id, "user-1", PHOTO_DATA_URL)
    other = event_service.create_event("Other", 5, 1)
    expire_event(store, broken.id)
    expire_event(store, other.id)
    store.failing_deletes.add(f"photo:{broken.id}:user-1:{photo.id}")

    report = sweeper.sweep()

    assert report.failures == 1
    assert report.photos_deleted == 0
    assert report.events_deleted == 2
    assert f"event:{other.id}" not in store.values


def test_sweep_skips_malformed_records(
    store: InMemoryKeyValueStore, sweeper: ExpirySweeper
) -> None:
    store.values["event:garbage"] = {"id": "garbage"}

    report = sweeper.sweep()

    assert report.failures == 1
    assert "event:garbage" in store.values


def test_sweep_deletes_malformed_photo_records(
    event_service: EventService,
    photo_service: PhotoService,
    photo_storage: FakePhotoStorage,
    store: InMemoryKeyValueStore,
    sweeper: ExpirySweeper,
) -> None:
    event = event_service.create_event("Past", 5, 1)
    photo_service.upload_photo(event.id, "user-1", PHOTO_DATA_URL)
    store.values[f"photo:{event.id}:user-2:bad"] = {"id": "bad"}
    expire_event(store, event.id)

    report = sweeper.sweep()

    assert report.failures == 0
    assert report.photos_deleted == 2
    assert report.events_deleted == 1
    assert store.keys_with_prefix(f"photo:{event.id}:") == []
    assert f"{event.id}/user-2/bad.jpg" in photo_storage.removed


def test_run_forever_sweeps_until_stopped(
    event_service: EventService,
    store: InMemoryKeyValueStore,
    sweeper: ExpirySweeper,
) -> None:
    event = event_service.create_event("Past", 5, 1)
    expire_event(store, event.id)

    async def scenario() -> None:
        stop = asyncio.Event()
        task = asyncio.create_task(sweeper.run_forever(0.01, stop))
        for _ in range(200):
            if f"event:{event.id}" not in store.values:
                break
            await asyncio.sleep(0.01)
        stop.set()
        await asyncio.wait_for(task, timeout=1)

    asyncio.run(scenario())

    assert f"event:{event.id}" not in store.values


def test_run_forever_returns_immediately_when_stopped(sweeper: ExpirySweeper) -> None:
    async def scenario() -> None:
        stop = asyncio.Event()
        stop.set()
        await asyncio.wait_for(sweeper.run_forever(3600, stop), timeout=1)

    asyncio.run(scenario())
