"""Custom exception hierarchy for the transcripts service."""

from __future__ import annotations


class TranscriptsError(Exception):
    """Base exception for all transcripts-specific errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(TranscriptsError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(TranscriptsError):
    """Base class for client input errors."""
    pass


class MalformedUploadError(ValidationError):
    """Raised when the multipart form cannot be parsed or lacks the file field."""
    pass


class UnsupportedContentTypeError(ValidationError):
    """Raised when an uploaded file is not declared as text/html."""
    pass


class AuthenticationError(TranscriptsError):
    """Raised when the Authorization header does not match the configured token."""
    pass


class UploadReadError(TranscriptsError):
    """Raised when an uploaded file cannot be read."""
    pass


class StorageError(TranscriptsError):
    """Raised when storage operations fail."""
    pass


class S3Error(StorageError):
    """Raised when S3 operations fail."""
    pass


class TranscriptNotFoundError(StorageError):
    """Raised when no transcript is stored under the requested key."""
    pass


class TranscriptExistsError(StorageError):
    """Raised when a conditional write finds the key already taken."""
    pass
