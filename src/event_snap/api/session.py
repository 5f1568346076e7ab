"""Cookie-backed participant session endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response

from event_snap.services.participants import (
    COOKIE_MAX_AGE_SECONDS,
    JOINED_EVENTS_COOKIE,
    USER_ID_COOKIE,
    add_joined_event,
    new_user_id,
    parse_joined_events,
    serialize_joined_events,
)

if TYPE_CHECKING:
    from event_snap.containers import AppContainer

router = APIRouter(prefix="/session", tags=["session"])


def _ensure_user_id(request: Request, response: Response) -> str:
    user_id = request.cookies.get(USER_ID_COOKIE)
    if user_id:
        return user_id
    user_id = new_user_id()
    _set_cookie(response, USER_ID_COOKIE, user_id)
    return user_id


def _set_cookie(response: Response, name: str, value: str) -> None:
    response.set_cookie(
        name, value, max_age=COOKIE_MAX_AGE_SECONDS, path="/", samesite="lax"
    )


@router.get("")
async def get_session(request: Request, response: Response) -> dict[str, object]:
    """Return the participant id and joined events, issuing an id if needed."""
    user_id = _ensure_user_id(request, response)
    events = parse_joined_events(request.cookies.get(JOINED_EVENTS_COOKIE))
    return {
        "userId": user_id,
        "joinedEvents": [event.to_dict() for event in events],
    }


@router.post("/events/{event_id}")
async def join_event(
    event_id: str, request: Request, response: Response
) -> dict[str, object]:
    """Join a live event and remember it in the participant's cookies."""
    container: AppContainer = request.app.state.container
    event = container.event_service.get_event(event_id)
    user_id = _ensure_user_id(request, response)
    events = add_joined_event(
        parse_joined_events(request.cookies.get(JOINED_EVENTS_COOKIE)),
        event.id,
        event.name,
    )
    _set_cookie(response, JOINED_EVENTS_COOKIE, serialize_joined_events(events))
    return {
        "event": event.to_dict(),
        "userId": user_id,
        "joinedEvents": [joined.to_dict() for joined in events],
    }
