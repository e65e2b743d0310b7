import time
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from simplymedi.logging.logger import Log
from simplymedi.storage.base import BaseStorage, StorageError, StoredFile


class LocalStorage(BaseStorage):
    """Stores uploads under ``{root}/{folder}/{timestamp}-{uuid}-{name}``."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def store(self, content: bytes, name: str, mime_type: str, folder: str) -> StoredFile:
        safe_name = Path(name).name or "upload"
        key = f"{folder}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_name}"
        path = self._resolve_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as exc:
            raise StorageError(f"Failed to store {key}: {exc}") from exc
        Log.info(f"Stored upload locally: {key}", mime_type=mime_type, size=len(content))
        return StoredFile(url=f"/uploads/{key}", key=key, is_local=True)

    def fetch(self, key: str) -> bytes:
        path = self._resolve_path(key)
        if not path.exists():
            raise StorageError(f"File not found: {key}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._resolve_path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc

    @contextmanager
    def local_copy(self, key: str) -> Generator[Path, None, None]:
        """Yield the stored file in place; nothing is copied, so nothing is removed."""
        path = self._resolve_path(key)
        if not path.exists():
            raise StorageError(f"File not found: {key}")
        yield path

    def _resolve_path(self, key: str) -> Path:
        root = self._root.resolve()
        path = (root / key).resolve()
        if root not in path.parents:
            raise StorageError(f"Key escapes storage root: {key}")
        return path
