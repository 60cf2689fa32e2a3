"""doclite: an embeddable in-memory document store.

Documents are schema-less dicts queried with a MongoDB-style filter
language (equality, regular expressions, ``$gt``/``$gte``/``$lt``/``$lte``,
``$exists`` and ``$or``). The whole collection is persisted as a single
JSON snapshot.
"""

__version__ = "0.1.0"

from doclite.config import StoreConfig, load_config
from doclite.core import (
    DocliteError,
    QueryEngine,
    ResultCursor,
    StorageError,
)
from doclite.storage import DocumentStore, open_store

__all__ = [
    "__version__",
    "DocliteError",
    "DocumentStore",
    "QueryEngine",
    "ResultCursor",
    "StorageError",
    "StoreConfig",
    "load_config",
    "open_store",
]
