"""In-memory storage backend for testing and ephemeral stores."""

from doclite.core.codec import decode_documents, encode_documents
from doclite.core.models import Document

from .base import BaseBackend


class MemoryBackend(BaseBackend):
    """Keeps the serialized snapshot in memory.

    Holding bytes rather than live objects means a save/load cycle goes
    through the same codec as the file backends.
    """

    def __init__(self, data: bytes | str | None = None, name: str = "memory"):
        if isinstance(data, str):
            data = data.encode()
        self._snapshot: bytes | None = data or None
        self.name = name
        self.saves = 0

    @property
    def location(self) -> str:
        return f":memory:{self.name}"

    def load(self) -> list[Document] | None:
        """Decode the held snapshot."""
        if self._snapshot is None:
            return None
        return decode_documents(self._snapshot)

    def save(self, documents: list[Document]) -> None:
        """Encode and hold the snapshot."""
        self._snapshot = encode_documents(documents)
        self.saves += 1

    @property
    def snapshot(self) -> bytes | None:
        """The raw stored snapshot."""
        return self._snapshot
