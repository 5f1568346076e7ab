"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from event_snap.adapters.supabase_kv_store import SupabaseKeyValueStore
from event_snap.adapters.supabase_photo_storage import SupabasePhotoStorage
from event_snap.config import Settings
from event_snap.services.events import EventService
from event_snap.services.photos import PhotoService, PhotoStorage
from event_snap.services.sweeper import ExpirySweeper


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    photo_storage: PhotoStorage
    event_service: EventService
    photo_service: PhotoService
    sweeper: ExpirySweeper


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    store = SupabaseKeyValueStore(supabase_client, resolved_settings.kv_table)
    photo_storage = SupabasePhotoStorage(
        client=supabase_client,
        bucket=resolved_settings.photo_bucket,
        file_size_limit=resolved_settings.bucket_file_size_limit,
    )
    event_service = EventService(
        store=store, max_expiry_days=resolved_settings.max_expiry_days
    )
    photo_service = PhotoService(
        event_service=event_service,
        store=store,
        storage=photo_storage,
        signed_url_ttl_seconds=resolved_settings.signed_url_ttl_seconds,
    )
    sweeper = ExpirySweeper(store=store, storage=photo_storage)

    return AppContainer(
        settings=resolved_settings,
        photo_storage=photo_storage,
        event_service=event_service,
        photo_service=photo_service,
        sweeper=sweeper,
    )
