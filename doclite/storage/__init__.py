"""Collection ownership, write operations and snapshot persistence.

- **Collection**: live documents plus the monotonic id counter
- **MutationEngine**: insert, ``$set`` update with multi/upsert, remove
- **DocumentStore**: the public surface tying engine, collection and backend
- **Backends**: JSON file (optionally gzipped), SQLite key-value, memory
"""

from .backends import BaseBackend, FileSystemBackend, MemoryBackend, SQLiteBackend
from .collection import Collection
from .mutations import MutationEngine
from .store import DocumentStore, create_backend, open_store

__all__ = [
    # Backends
    "BaseBackend",
    "FileSystemBackend",
    "MemoryBackend",
    "SQLiteBackend",
    # Model
    "Collection",
    "MutationEngine",
    # Store
    "DocumentStore",
    "create_backend",
    "open_store",
]
