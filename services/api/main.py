from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import TranscriptsError
from core.logging_config import setup_logging_from_env
from core.settings import Settings, get_settings
from core.storage import TranscriptStorage, build_storage
from services.api.exception_handlers import (
    not_found_handler,
    transcripts_exception_handler,
    unhandled_exception_handler,
)
from services.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from services.api.routes import router as transcripts_router
from services.api.schemas import HealthResponse


def create_app(
    settings: Settings | None = None,
    storage: TranscriptStorage | None = None,
    *,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the API.

    Configuration and the storage client are resolved here, once, so a broken
    configuration stops the process before it starts serving. Tests pass
    ``settings`` and ``storage`` explicitly.
    """
    if configure_logging:
        setup_logging_from_env()

    logger.info("Starting transcripts API")
    settings = settings or get_settings()
    auth_token = settings.require_auth_token()
    logger.info(
        "Configuration loaded backend={backend} base_uri={base_uri}",
        backend=settings.storage.backend,
        base_uri=settings.public.base_uri,
    )
    if storage is None:
        storage = build_storage(settings)

    app = FastAPI(
        title="Transcripts API",
        version="0.1.0",
        description="Upload and serve HTML transcripts",
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.auth_token = auth_token

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # CORS middleware - add LAST so it executes FIRST
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allow_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/healthz", tags=["meta"], response_model=HealthResponse)
    async def healthcheck() -> HealthResponse:
        return HealthResponse()

    app.add_exception_handler(TranscriptsError, transcripts_exception_handler)
    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(transcripts_router)

    return app


__all__ = ["create_app"]
