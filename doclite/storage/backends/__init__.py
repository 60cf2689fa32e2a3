"""Pluggable snapshot storage backends.

- **FileSystemBackend**: JSON file with atomic writes, optional gzip
- **SQLiteBackend**: named snapshots in a key-value table
- **MemoryBackend**: in-memory snapshot for testing
"""

from .base import BaseBackend
from .filesystem import FileSystemBackend
from .memory import MemoryBackend
from .sqlite import SQLiteBackend

__all__ = [
    "BaseBackend",
    "FileSystemBackend",
    "MemoryBackend",
    "SQLiteBackend",
]
