"""Exception classes for doclite.

The default (permissive) code paths never raise these: malformed queries
degrade to pass-through and bad mutations return zero rows. They surface
in strict mode and at the storage boundary.
"""


class DocliteError(Exception):
    """Base exception for all doclite errors."""

    pass


class InvalidQueryError(DocliteError, ValueError):
    """Raised when a query is not a document."""

    def __init__(self, query: object):
        """Initialize with the offending query."""
        self.query = query
        super().__init__(f"Query must be a document, got {type(query).__name__}")


class UnsupportedClauseError(DocliteError):
    """Raised in strict mode for clauses the engine cannot evaluate."""

    def __init__(self, key: str, kind: str, detail: str = ""):
        """Initialize with clause key and kind."""
        self.key = key
        self.kind = kind
        message = f"Unsupported {kind} clause for '{key}'"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class InvalidUpdateError(DocliteError, ValueError):
    """Raised in strict mode when an update specification is unusable."""

    pass


class DuplicateKeyError(DocliteError):
    """Raised in strict mode when inserting an _id that already exists."""

    def __init__(self, doc_id: int):
        """Initialize with the duplicate id."""
        self.doc_id = doc_id
        super().__init__(f"Duplicate _id: {doc_id}")


class StorageError(DocliteError):
    """Base exception for storage backend failures."""

    pass


class SerializationError(StorageError):
    """Raised when a snapshot cannot be encoded or decoded."""

    pass


class InvalidDocumentError(DocliteError, ValueError):
    """Raised in strict mode when an inserted document carries a bad _id."""

    def __init__(self, doc_id: object):
        """Initialize with the offending id."""
        self.doc_id = doc_id
        super().__init__(f"_id must be a positive integer, got {doc_id!r}")
