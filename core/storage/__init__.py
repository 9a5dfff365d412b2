"""Transcript storage abstraction (S3-compatible bucket or local filesystem)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from loguru import logger

if TYPE_CHECKING:
    from core.settings import Settings


class TranscriptStorage(Protocol):
    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:  # returns uri
        """Write only if ``key`` is free, else raise TranscriptExistsError."""
        ...

    def get_bytes(self, key: str) -> bytes:  # raises TranscriptNotFoundError
        ...


def build_storage(settings: "Settings") -> TranscriptStorage:
    """Create the storage backend selected by ``settings.storage.backend``."""
    cfg = settings.storage
    if cfg.backend == "s3":
        from core.storage.s3 import S3Storage

        storage: TranscriptStorage = S3Storage(
            bucket=cfg.bucket or "",
            prefix=cfg.prefix,
            region=cfg.region,
            endpoint_url=cfg.endpoint_url,
            access_key_id=cfg.access_key_id,
            secret_access_key=cfg.secret_access_key,
        )
        logger.info(
            "S3 storage ready bucket={bucket} prefix={prefix} endpoint={endpoint}",
            bucket=cfg.bucket,
            prefix=cfg.prefix,
            endpoint=cfg.endpoint_url or "default",
        )
        return storage

    from core.storage.local import LocalStorage

    storage = LocalStorage(cfg.local_root)
    logger.info("Local storage ready root={root}", root=str(cfg.local_root))
    return storage


__all__ = ["TranscriptStorage", "build_storage"]
