"""Event and photo endpoints guarded by the shared public API key."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import quote

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from event_snap.api.models import CreateEventRequest, UploadPhotoRequest

if TYPE_CHECKING:
    from event_snap.containers import AppContainer

logger = logging.getLogger(__name__)


def _get_api_key(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.api_key


async def require_api_key(
    authorization: str | None = Header(default=None),
    api_key: str | None = Depends(_get_api_key),
) -> None:
    """Ensure requests carry the shared bearer key when one is configured."""
    if api_key is None:
        return
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or token.strip() != api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(
    prefix="/events", tags=["events"], dependencies=[Depends(require_api_key)]
)


@router.post("")
async def create_event(
    payload: CreateEventRequest, request: Request
) -> dict[str, object]:
    """Create a new event."""
    container: AppContainer = request.app.state.container
    event = container.event_service.create_event(
        name=payload.name,
        max_photos_per_user=payload.max_photos_per_user,
        expiry_days=payload.expiry_days,
    )
    return {"event": event.to_dict()}


@router.get("/{event_id}")
async def get_event(event_id: str, request: Request) -> dict[str, object]:
    """Return a live event."""
    container: AppContainer = request.app.state.container
    event = container.event_service.get_event(event_id)
    return {"event": event.to_dict()}


@router.post("/{event_id}/photos")
async def upload_photo(
    event_id: str, payload: UploadPhotoRequest, request: Request
) -> dict[str, object]:
    """Upload a photo on behalf of an anonymous participant."""
    container: AppContainer = request.app.state.container
    photo = container.photo_service.upload_photo(
        event_id=event_id,
        user_id=payload.user_id,
        photo_data=payload.photo_data,
    )
    return {"photo": photo.to_dict()}


@router.get("/{event_id}/photos")
async def list_photos(event_id: str, request: Request) -> dict[str, object]:
    """List an event's photos with signed URLs."""
    container: AppContainer = request.app.state.container
    views = container.photo_service.list_photos(event_id)
    return {"photos": [view.to_dict() for view in views]}


@router.get("/{event_id}/photos/archive")
async def download_archive(event_id: str, request: Request) -> Response:
    """Download every photo of an event as a ZIP file."""
    container: AppContainer = request.app.state.container
    archive = container.photo_service.build_archive(event_id)
    return Response(
        content=archive.content,
        media_type="application/zip",
        headers={
            "Content-Disposition": (
                f"attachment; filename*=UTF-8''{quote(archive.filename)}"
            )
        },
    )


@router.get("/{event_id}/users/{user_id}/count", response_model=None)
async def user_photo_count(
    event_id: str, user_id: str, request: Request
) -> dict[str, int] | JSONResponse:
    """Return how many photos a participant has uploaded to an event."""
    container: AppContainer = request.app.state.container
    try:
        count = container.photo_service.count_user_photos(event_id, user_id)
    except Exception:
        logger.exception(
            "Error fetching photo count",
            extra={"event_id": event_id, "user_id": user_id},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch photo count"},
        )
    return {"count": count}
