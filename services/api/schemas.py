from __future__ import annotations

from pydantic import BaseModel


class TranscriptCreated(BaseModel):
    id: str
    url: str


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"


__all__ = ["TranscriptCreated", "MessageResponse", "HealthResponse"]
