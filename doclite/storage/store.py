"""Public document store surface.

Usage::

    from doclite import open_store

    db = open_store("people.db")
    db.insert({"name": "Carol", "age": 41})
    cursor = db.find({"age": {"$gte": 18}}).sort("name", 1).limit(10)
    db.save()
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import msgspec

from doclite.config import StoreConfig, default_data_dir, load_config
from doclite.core.codec import decode_documents, encode_documents
from doclite.core.cursor import ResultCursor
from doclite.core.engine import QueryEngine
from doclite.core.exceptions import StorageError
from doclite.core.models import Document, ExistsSemantics

from .backends.base import BaseBackend
from .backends.filesystem import FileSystemBackend
from .backends.memory import MemoryBackend
from .backends.sqlite import SQLiteBackend
from .collection import Collection
from .mutations import MutationEngine

logger = logging.getLogger(__name__)

SQLITE_FILENAME = "doclite.sqlite3"


class DocumentStore:
    """An in-memory collection backed by a snapshot storage backend.

    The backend is read once, here, and written only by :meth:`save`.
    Operations are synchronous and unsynchronized; share a store between
    threads only behind an external lock.
    """

    def __init__(
        self,
        backend: BaseBackend | None = None,
        strict: bool = False,
        exists: ExistsSemantics = ExistsSemantics.PRESENCE,
        data: bytes | str | None = None,
    ):
        """Create a store and load its contents.

        Args:
            backend: Where snapshots are loaded from and saved to.
            strict: Raise on invalid queries and updates instead of
                degrading to no-ops.
            exists: Semantics of ``$exists`` and of the update change test.
            data: JSON snapshot text to start from instead of loading the
                backend. Saves still go to the backend.

        Raises:
            StorageError: If the backend holds a snapshot that cannot be read.
        """
        self.backend = backend or MemoryBackend()
        self.collection = Collection()
        self.query_engine = QueryEngine(strict=strict, exists=exists)
        self.mutations = MutationEngine(
            self.collection, self.query_engine, strict=strict, exists=exists
        )

        documents = decode_documents(data) if data else self.backend.load()
        if documents:
            self.collection.load(documents)
        logger.debug(f"Opened {self.backend!r} with {len(self.collection)} documents")

    def __enter__(self) -> "DocumentStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self.collection)

    def __repr__(self) -> str:
        return f"DocumentStore({self.backend!r}, count={len(self.collection)})"

    def insert(self, documents: Any) -> int:
        """Insert documents; returns the last assigned ``_id`` (or -1)."""
        return self.mutations.insert(documents)

    def update(self, query: Any, update: Any, options: Any = None) -> int:
        """Apply a ``$set`` update; returns the number of changed documents."""
        return self.mutations.update(query, update, options)

    def remove(self, query: Any = None) -> int:
        """Remove matching documents (all when no query); returns the count."""
        return self.mutations.remove(query)

    def find(self, query: Any = None) -> ResultCursor:
        """Return a cursor over detached copies of the matching documents."""
        matched = self.query_engine.evaluate(query, self.collection.documents)
        return ResultCursor(matched)

    def find_one(self, query: Any = None) -> Document | None:
        """Copy of the first matching document, or None."""
        return self.find(query).first()

    def count(self) -> int:
        """Number of stored documents."""
        return len(self.collection)

    def save(self) -> bool:
        """Write the whole collection to the backend.

        Snapshots are JSON, so ``date`` and ``datetime`` values are written as
        ISO-8601 strings and a store loaded from them holds strings: queries
        must then compare against the string form (see :meth:`to_date`).

        Returns:
            True on success. On failure the error is logged, the in-memory
            collection is untouched and False is returned.
        """
        try:
            self.backend.save(self.collection.documents)
        except StorageError as e:
            logger.error(f"Failed saving to {self.backend.location}: {e}")
            return False
        return True

    def get_json(self, indent: int | None = None) -> str:
        """Serialize the whole collection."""
        return encode_documents(self.collection.documents, indent=indent).decode()

    @staticmethod
    def now() -> str:
        """Current UTC time as an ISO-8601 string with millisecond precision."""
        stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return stamp.replace("+00:00", "Z")

    @staticmethod
    def to_date(text: str) -> datetime:
        """Parse an ISO-8601 timestamp such as one returned by :meth:`now`."""
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)

    def close(self) -> None:
        """Release the backend. Unsaved changes are discarded."""
        self.backend.close()


def create_backend(config: StoreConfig) -> BaseBackend:
    """Build the backend a configuration asks for."""
    if config.backend == "memory":
        return MemoryBackend(name=config.db_name)

    if config.backend == "sqlite":
        if config.db_path:
            path = Path(config.db_path).expanduser()
        else:
            base = config.db_dir or default_data_dir()
            path = Path(base).expanduser() / SQLITE_FILENAME
        path.parent.mkdir(parents=True, exist_ok=True)
        return SQLiteBackend(path, name=config.db_name)

    return FileSystemBackend(
        config.resolve_path(), use_gzip=config.gzip_enabled, indent=config.indent
    )


def open_store(
    location: str | Path | StoreConfig | Mapping[str, Any] | None = None,
    data: bytes | str | None = None,
    **overrides: Any,
) -> DocumentStore:
    """Open (or create) a store.

    Args:
        location: A file or directory path, a :class:`StoreConfig`, a
            mapping of config fields, or None to use configuration files
            and environment variables.
        data: JSON snapshot text to seed the store with.
        **overrides: StoreConfig fields taking precedence over ``location``.

    Raises:
        StorageError: If an existing snapshot cannot be read.
        ValueError: If the configuration is invalid.
    """
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if isinstance(location, StoreConfig):
        config = StoreConfig.from_mapping(
            {**msgspec.structs.asdict(location), **overrides}
        )
    elif isinstance(location, Mapping):
        config = StoreConfig.from_mapping({**location, **overrides})
    elif location is not None:
        config = StoreConfig.from_path(location, **overrides)
    else:
        config = load_config(**overrides)

    backend = create_backend(config)
    logger.info(f"Opening store at {backend.location}")
    return DocumentStore(backend, strict=config.strict, exists=config.exists, data=data)
