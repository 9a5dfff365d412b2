from __future__ import annotations

import hmac

from fastapi import Request
from loguru import logger

from core.exceptions import AuthenticationError
from core.settings import Settings
from core.storage import TranscriptStorage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> TranscriptStorage:
    return request.app.state.storage


def require_token(request: Request) -> None:
    """Reject the request unless ``Authorization`` equals the configured token."""
    expected: str = request.app.state.auth_token
    provided = request.headers.get("Authorization")
    if provided is None or not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        logger.warning(
            "Rejected {method} {path}: {reason}",
            method=request.method,
            path=request.url.path,
            reason="missing token" if provided is None else "token mismatch",
        )
        raise AuthenticationError("Unauthorized")


__all__ = ["get_app_settings", "get_storage", "require_token"]
