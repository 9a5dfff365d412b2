from __future__ import annotations

from pathlib import Path

from loguru import logger

from core.exceptions import StorageError, TranscriptExistsError, TranscriptNotFoundError


class LocalStorage:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise TranscriptNotFoundError("Transcript not found", {"key": key})
        return path

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        # Content type is implied by the .html suffix on disk.
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("xb") as fp:
                fp.write(data)
        except FileExistsError as exc:
            raise TranscriptExistsError("Transcript already exists", {"key": key}) from exc
        except OSError as exc:
            logger.error("Writing {path} failed: {exc}", path=str(path), exc=exc)
            raise StorageError("Error writing transcript", {"key": key}) from exc
        return str(path)

    def get_bytes(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise TranscriptNotFoundError("Transcript not found", {"key": key}) from exc
        except OSError as exc:
            logger.error("Reading {path} failed: {exc}", path=str(path), exc=exc)
            raise StorageError("Error reading transcript", {"key": key}) from exc


__all__ = ["LocalStorage"]
