"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from event_snap.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/events", dependencies=[Depends(require_admin)])
async def list_events(request: Request) -> dict[str, object]:
    """Return every stored event with its expiry state and photo count."""
    container: AppContainer = request.app.state.container
    now = container.event_service.clock()
    events = []
    for event in container.event_service.list_events():
        photo_count = len(container.photo_service.event_photos(event.id))
        events.append(
            {
                **event.to_dict(),
                "expired": event.is_expired(now),
                "photoCount": photo_count,
            }
        )
    return {"events": events}


@router.post("/sweep", dependencies=[Depends(require_admin)])
async def run_sweep(request: Request) -> dict[str, object]:
    """Run an expiry sweep immediately."""
    container: AppContainer = request.app.state.container
    report = await container.sweeper.sweep_async()
    return {"report": report.to_dict()}
