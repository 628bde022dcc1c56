"""Key/value storage backends and result persistence."""

from lectiod.storage.datastore import (
    Datastore,
    FileSystemStore,
    KeyValueStore,
    MemoryStore,
)
from lectiod.storage.results import ResultWriter

__all__ = [
    "Datastore",
    "FileSystemStore",
    "KeyValueStore",
    "MemoryStore",
    "ResultWriter",
]
