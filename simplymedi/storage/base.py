import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from simplymedi.logging.logger import Log


@dataclass(frozen=True)
class StoredFile:
    """Location of a stored upload as returned by :meth:`BaseStorage.store`."""

    url: str
    key: str
    is_local: bool


class StorageError(Exception):
    """Raised when a storage backend cannot store, fetch, or delete an object."""


class BaseStorage(ABC):
    """Contract for blob storage backends holding raw uploaded reports."""

    @abstractmethod
    def store(self, content: bytes, name: str, mime_type: str, folder: str) -> StoredFile:
        """Persist ``content`` and return where it was stored."""

    @abstractmethod
    def fetch(self, key: str) -> bytes:
        """Return the bytes stored under ``key``.

        Raises:
            StorageError: if the object does not exist or cannot be read.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the object stored under ``key``."""

    @contextmanager
    def local_copy(self, key: str) -> Generator[Path, None, None]:
        """Yield a filesystem path holding the object's bytes.

        The default downloads into a temporary file that is removed on every exit
        path, including exceptions raised by the caller.
        """
        content = self.fetch(key)
        suffix = Path(key).suffix
        fd, raw_path = tempfile.mkstemp(prefix="simplymedi-", suffix=suffix)
        path = Path(raw_path)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
            yield path
        finally:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                Log.warning(f"Failed to remove temporary copy {path}: {exc}")
