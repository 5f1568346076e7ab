"""Background removal of expired events and their photos."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from event_snap.domain.events import EventRecord, utc_now
from event_snap.domain.keys import (
    EVENT_PREFIX,
    event_key,
    event_photos_prefix,
    photo_path,
)
from event_snap.domain.photos import PhotoRecord
from event_snap.services.kv import KeyValueStore
from event_snap.services.photos import PhotoStorage

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    """Outcome of a single sweep run."""

    events_deleted: int = 0
    photos_deleted: int = 0
    failures: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "eventsDeleted": self.events_deleted,
            "photosDeleted": self.photos_deleted,
            "failures": self.failures,
        }


@dataclass
class ExpirySweeper:
    """Deletes events past their expiry together with their photos.

    A run never stops early: each failed deletion is logged, counted in the
    report and skipped. Nothing is retried until the next run.
    """

    store: KeyValueStore
    storage: PhotoStorage
    clock: Callable[[], datetime] = field(default=utc_now)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def sweep(self) -> SweepReport:
        """Run one pass over all events."""
        report = SweepReport()
        now = self.clock()
        for payload in self.store.get_by_prefix(EVENT_PREFIX):
            try:
                event = EventRecord.from_dict(payload)
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed event record: %s", payload)
                report.failures += 1
                continue
            if event.is_expired(now):
                self._delete_event(event, report)
        if report.events_deleted or report.failures:
            logger.info("Expiry sweep finished", extra=report.to_dict())
        return report

    async def sweep_async(self) -> SweepReport:
        """Run a pass off the event loop, one pass at a time."""
        async with self._lock:
            return await asyncio.to_thread(self.sweep)

    async def run_forever(self, interval_seconds: float, stop: asyncio.Event) -> None:
        """Sweep every ``interval_seconds`` until ``stop`` is set."""
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval_seconds)
            except TimeoutError:
                pass
            else:
                return
            try:
                await self.sweep_async()
            except Exception:
                logger.exception("Expiry sweep failed")

    def _delete_event(self, event: EventRecord, report: SweepReport) -> None:
        prefix = event_photos_prefix(event.id)
        for key, payload in self.store.items_by_prefix(prefix):
            path = _blob_path(event.id, key[len(prefix) :], payload)
            try:
                self.storage.remove([path])
            except Exception:
                logger.exception(
                    "Error deleting photo from storage", extra={"path": path}
                )
                report.failures += 1
            try:
                self.store.delete(key)
            except Exception:
                logger.exception("Error deleting photo metadata", extra={"key": key})
                report.failures += 1
                continue
            report.photos_deleted += 1

        try:
            self.store.delete(event_key(event.id))
        except Exception:
            logger.exception("Error deleting event", extra={"event_id": event.id})
            report.failures += 1
            return
        report.events_deleted += 1
        logger.info("Deleted expired event", extra={"event_id": event.id})


def _blob_path(event_id: str, key_suffix: str, payload: dict[str, object]) -> str:
    """Return a photo's blob path, falling back to its key when unreadable."""
    try:
        return PhotoRecord.from_dict(payload).path
    except (KeyError, TypeError, ValueError):
        logger.warning("Deleting malformed photo record: %s", payload)
    user_id, _, photo_id = key_suffix.partition(":")
    return photo_path(event_id, user_id, photo_id)
