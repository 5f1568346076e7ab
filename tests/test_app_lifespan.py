"""Tests for application startup and shutdown."""

from fastapi.testclient import TestClient

from event_snap.api.app import create_app
from tests.conftest import FakePhotoStorage


def test_lifespan_prepares_bucket(container, photo_storage: FakePhotoStorage) -> None:
    app = create_app(container)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert photo_storage.buckets_ensured == 1

    assert photo_storage.buckets_ensured == 1


def test_lifespan_runs_and_stops_sweeper(container) -> None:
    container.settings.sweeper_enabled = True
    container.settings.sweep_interval_seconds = 3600
    app = create_app(container)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200


def test_lifespan_survives_bucket_failure(
    container, photo_storage: FakePhotoStorage, monkeypatch
) -> None:
    def broken_bucket() -> None:
        raise RuntimeError("storage offline")

    monkeypatch.setattr(photo_storage, "ensure_bucket", broken_bucket)
    app = create_app(container)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
