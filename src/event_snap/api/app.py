"""FastAPI application factory."""

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from event_snap.api.admin import router as admin_router
from event_snap.api.events import router as events_router
from event_snap.api.session import router as session_router
from event_snap.app_logging import configure_logging
from event_snap.config import parse_cors_origins
from event_snap.containers import AppContainer
from event_snap.domain.errors import (
    EventExpiredError,
    EventNotFoundError,
    EventSnapError,
    InvalidPayloadError,
    QuotaExceededError,
    StorageError,
    ValidationError,
)

_ERROR_STATUSES: dict[type[EventSnapError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidPayloadError: status.HTTP_400_BAD_REQUEST,
    QuotaExceededError: status.HTTP_403_FORBIDDEN,
    EventNotFoundError: status.HTTP_404_NOT_FOUND,
    EventExpiredError: status.HTTP_410_GONE,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await asyncio.to_thread(state_container.photo_storage.ensure_bucket)
        except Exception:
            logger.exception("Failed to prepare photo bucket")
        stop = asyncio.Event()
        sweeper_task = None
        if settings.sweeper_enabled:
            sweeper_task = asyncio.create_task(
                state_container.sweeper.run_forever(
                    settings.sweep_interval_seconds, stop
                )
            )
        yield
        stop.set()
        if sweeper_task is not None:
            sweeper_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper_task

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_cors_origins(settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.exception_handler(EventSnapError)
    async def handle_domain_error(
        request: Request, exc: EventSnapError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request failed: %s",
                exc.message,
                extra={"path": request.url.path},
            )
        return JSONResponse(status_code=status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(
            "Rejected request body",
            extra={"path": request.url.path, "error_count": len(exc.errors())},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body"},
        )

    app.include_router(events_router)
    app.include_router(session_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _status_for(exc: EventSnapError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in _ERROR_STATUSES:
            return _ERROR_STATUSES[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR
