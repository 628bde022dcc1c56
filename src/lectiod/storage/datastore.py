"""Key/value storage for harvested artifacts.

This module provides the byte-blob stores that back each configuration
bundle's storage target:
- MemoryStore: process-local dictionary
- FileSystemStore: one file per key under a base directory
- Datastore: wraps either, degrading to memory when the configured
  backend cannot be created
"""

import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Optional, Protocol

from lectiod.core.constants import StorageType
from lectiod.core.exceptions import KeyNotFoundError, StorageError
from lectiod.core.models import StorageSettings


logger = logging.getLogger(__name__)

_KEY_SEGMENT = re.compile(r"^[A-Za-z0-9_.\-]+$")


def split_key(key: str) -> list[str]:
    """Split a '/'-separated key into validated segments.

    Raises:
        StorageError: If the key is empty or has an unsafe segment
    """
    segments = [s for s in key.split("/") if s]
    if not segments:
        raise StorageError(f"Invalid storage key: '{key}'")
    for segment in segments:
        if segment in (".", "..") or not _KEY_SEGMENT.match(segment):
            raise StorageError(f"Invalid storage key segment '{segment}' in '{key}'")
    return segments


class KeyValueStore(Protocol):
    """Storage operations required by the service."""

    def put(self, key: str, value: bytes) -> None:
        ...

    def get(self, key: str) -> bytes:
        ...

    def has(self, key: str) -> bool:
        ...

    def delete(self, key: str) -> None:
        ...

    def close(self) -> None:
        ...


class MemoryStore:
    """Dictionary-backed store; contents are lost at shutdown."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def _normalize(self, key: str) -> str:
        return "/" + "/".join(split_key(key))

    def put(self, key: str, value: bytes) -> None:
        key = self._normalize(key)
        with self._lock:
            self._data[key] = bytes(value)

    def get(self, key: str) -> bytes:
        key = self._normalize(key)
        with self._lock:
            try:
                return self._data[key]
            except KeyError:
                raise KeyNotFoundError(f"Key not found: {key}") from None

    def has(self, key: str) -> bool:
        key = self._normalize(key)
        with self._lock:
            return key in self._data

    def delete(self, key: str) -> None:
        key = self._normalize(key)
        with self._lock:
            if self._data.pop(key, None) is None:
                raise KeyNotFoundError(f"Key not found: {key}")

    def close(self) -> None:
        pass


class FileSystemStore:
    """Stores each key as a file below base_path.

    Key segments map to directories, e.g. '/tenant/DEFAULT/x.json' is
    stored at {base_path}/tenant/DEFAULT/x.json.
    """

    def __init__(self, base_path: Path | str):
        """Initialize filesystem store.

        Args:
            base_path: Root directory, created if missing

        Raises:
            StorageError: If the directory cannot be created
        """
        self.base_path = Path(base_path)
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Unable to create store in '{self.base_path}': {e}") from e
        if not os.access(self.base_path, os.W_OK):
            raise StorageError(f"Store directory '{self.base_path}' is not writable")

    def _path(self, key: str) -> Path:
        return self.base_path.joinpath(*split_key(key))

    def put(self, key: str, value: bytes) -> None:
        """Write value atomically.

        Raises:
            StorageError: If the write fails
        """
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write key {key}: {e}") from e

    def get(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise KeyNotFoundError(f"Key not found: {key}") from None
        except OSError as e:
            raise StorageError(f"Failed to read key {key}: {e}") from e

    def has(self, key: str) -> bool:
        return self._path(key).is_file()

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            raise KeyNotFoundError(f"Key not found: {key}") from None
        except OSError as e:
            raise StorageError(f"Failed to delete key {key}: {e}") from e

    def close(self) -> None:
        pass


class Datastore:
    """Storage target of one configuration bundle.

    If the configured backend cannot be created, an in-memory store is
    used instead so the service can still start; is_valid and error report
    what went wrong.
    """

    def __init__(
        self,
        settings: StorageSettings,
        store: KeyValueStore,
        error: Optional[str] = None,
    ):
        self.settings = settings
        self._store = store
        self._error = error

    @classmethod
    def open(cls, settings: StorageSettings) -> "Datastore":
        """Create the backend described by settings.

        Args:
            settings: Storage target descriptor

        Returns:
            Datastore, never raises for backend construction problems
        """
        if settings.type == StorageType.MEMORY.value:
            return cls(settings, MemoryStore())

        if settings.type == StorageType.FILE_SYSTEM.value:
            if settings.filesys is None:
                error = "Filesystem storage requires a base path, creating in memory store"
            else:
                try:
                    store = FileSystemStore(settings.filesys.base_path)
                    logger.debug(f"Opened filesystem store at {store.base_path}")
                    return cls(settings, store)
                except StorageError as e:
                    error = f"{e}, creating in memory store"
        else:
            error = f"Unknown storage type '{settings.type}', creating in memory store"

        logger.warning(error)
        return cls(settings, MemoryStore(), error=error)

    @property
    def is_valid(self) -> bool:
        """True if the configured backend was created without errors."""
        return self._error is None

    @property
    def error(self) -> Optional[str]:
        return self._error

    def put(self, key: str, value: bytes) -> None:
        self._store.put(key, value)

    def get(self, key: str) -> bytes:
        return self._store.get(key)

    def has(self, key: str) -> bool:
        return self._store.has(key)

    def delete(self, key: str) -> None:
        self._store.delete(key)

    def close(self) -> None:
        self._store.close()
