"""Transcript identifiers and storage keys."""

from __future__ import annotations

from uuid import uuid4

TRANSCRIPT_SUFFIX = ".html"


def new_transcript_id() -> str:
    """Return the first segment of a random UUID (8 hex characters)."""
    return str(uuid4()).split("-")[0]


def transcript_key(transcript_id: str) -> str:
    return f"{transcript_id}{TRANSCRIPT_SUFFIX}"


__all__ = ["TRANSCRIPT_SUFFIX", "new_transcript_id", "transcript_key"]
