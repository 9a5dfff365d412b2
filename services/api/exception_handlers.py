"""FastAPI exception handlers for custom exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import (
    TranscriptsError,
    ValidationError,
    AuthenticationError,
    UploadReadError,
    StorageError,
    TranscriptNotFoundError,
)


def status_for(exc: TranscriptsError) -> int:
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, TranscriptNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (StorageError, UploadReadError)):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def transcripts_exception_handler(request: Request, exc: TranscriptsError) -> JSONResponse:
    """Handle transcripts-specific exceptions."""
    status_code = status_for(exc)

    log = logger.warning if status_code < 500 else logger.error
    log(
        "{method} {path} -> {status}: {type} - {message}",
        method=request.method,
        path=request.url.path,
        status=status_code,
        type=type(exc).__name__,
        message=exc.message,
    )

    # 401 bodies carry the plain "Unauthorized" marker clients match on.
    error = "Unauthorized" if isinstance(exc, AuthenticationError) else type(exc).__name__
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": exc.message,
            "details": exc.details,
        },
    )


async def not_found_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unmatched routes and methods share one 404 body."""
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Endpoint Not Found"})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTPException", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions so a request never takes the process down."""
    logger.opt(exception=exc).error("Unhandled exception on {method} {path}", method=request.method, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": type(exc).__name__,
            "message": "Internal Server Error",
        },
    )


__all__ = [
    "status_for",
    "transcripts_exception_handler",
    "not_found_handler",
    "unhandled_exception_handler",
]
