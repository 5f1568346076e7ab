"""Event registry business logic."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import uuid4

from event_snap.domain.errors import (
    EventExpiredError,
    EventNotFoundError,
    StorageError,
    ValidationError,
)
from event_snap.domain.events import EventRecord, utc_now
from event_snap.domain.keys import EVENT_PREFIX, event_key
from event_snap.services.kv import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class EventService:
    """Creates and looks up events."""

    store: KeyValueStore
    max_expiry_days: int = 30
    clock: Callable[[], datetime] = field(default=utc_now)

    def create_event(
        self,
        name: str | None,
        max_photos_per_user: int | None,
        expiry_days: int | None,
    ) -> EventRecord:
        """Validate input, persist a new event and return it."""
        if not name or not name.strip() or not max_photos_per_user or not expiry_days:
            raise ValidationError("Missing required fields")
        if expiry_days > self.max_expiry_days:
            raise ValidationError(
                f"Maximum expiry time is {self.max_expiry_days} days"
            )
        if expiry_days < 1:
            raise ValidationError("Expiry time must be at least 1 day")
        if max_photos_per_user < 1:
            raise ValidationError("Photo limit must be at least 1")

        created_at = self.clock()
        event = EventRecord(
            id=str(uuid4()),
            name=name,
            max_photos_per_user=max_photos_per_user,
            expiry_days=expiry_days,
            expires_at=created_at + timedelta(days=expiry_days),
            created_at=created_at,
        )
        self.store.set(event_key(event.id), event.to_dict())
        logger.info(
            "Created event",
            extra={"event_id": event.id, "expiry_days": expiry_days},
        )
        return event

    def get_event(self, event_id: str) -> EventRecord:
        """Return a live event or raise when it is missing or expired."""
        payload = self.store.get(event_key(event_id))
        if payload is None:
            raise EventNotFoundError(event_id)
        try:
            event = EventRecord.from_dict(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError("Event record is unreadable") from exc
        if event.is_expired(self.clock()):
            raise EventExpiredError(event_id)
        return event

    def list_events(self) -> list[EventRecord]:
        """Return every stored event, expired ones included."""
        events = []
        for payload in self.store.get_by_prefix(EVENT_PREFIX):
            try:
                events.append(EventRecord.from_dict(payload))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed event record: %s", payload)
        return sorted(events, key=lambda event: event.created_at)
