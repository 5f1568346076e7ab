"""Anonymous participant state kept in client cookies."""

import json
from dataclasses import dataclass
from urllib.parse import quote, unquote
from uuid import uuid4

USER_ID_COOKIE = "userId"
JOINED_EVENTS_COOKIE = "joinedEvents"
COOKIE_MAX_AGE_SECONDS = 365 * 24 * 60 * 60


@dataclass(frozen=True)
class JoinedEvent:
    """An event the participant has joined from this browser."""

    id: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name}


def new_user_id() -> str:
    return str(uuid4())


def parse_joined_events(raw: str | None) -> list[JoinedEvent]:
    """Decode the joined-events cookie, treating bad values as empty."""
    if not raw:
        return []
    try:
        items = json.loads(unquote(raw))
    except ValueError:
        return []
    if not isinstance(items, list):
        return []
    events = []
    for item in items:
        if isinstance(item, dict) and "id" in item and "name" in item:
            events.append(JoinedEvent(id=str(item["id"]), name=str(item["name"])))
    return events


def serialize_joined_events(events: list[JoinedEvent]) -> str:
    """Encode joined events for storage in a cookie."""
    return quote(json.dumps([event.to_dict() for event in events]), safe="")


def add_joined_event(
    events: list[JoinedEvent], event_id: str, name: str
) -> list[JoinedEvent]:
    """Return the list with the event appended unless already present."""
    if any(event.id == event_id for event in events):
        return events
    return [*events, JoinedEvent(id=event_id, name=name)]
