"""The in-memory collection: live documents plus the id counter."""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from doclite.core.models import ID_FIELD, Document

logger = logging.getLogger(__name__)


def is_valid_id(value: Any) -> bool:
    """Ids are positive integers."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def with_id_first(document: Document, doc_id: int) -> Document:
    """Return a copy of the document with ``_id`` as its first field."""
    rebuilt = {ID_FIELD: doc_id}
    rebuilt.update((k, v) for k, v in document.items() if k != ID_FIELD)
    return rebuilt


def normalize_id(value: Any) -> int | None:
    """Return a stored ``_id`` as an int, or None when it is not usable.

    Integral floats such as ``3.0`` (written by other JSON tools) count as
    the integer they hold.
    """
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return value if is_valid_id(value) else None


class Collection:
    """Insertion-ordered documents owned by one store.

    The counter only grows: it is always at least the largest ``_id``
    present, and ids are never handed out twice, even after removal.
    """

    def __init__(self, documents: Iterable[Document] | None = None):
        self.documents: list[Document] = []
        self.last_id = 0
        if documents:
            self.load(documents)

    def load(self, documents: Iterable[Document]) -> None:
        """Replace contents with loaded documents, backfilling bad ids.

        One pass finds the highest usable id; a second assigns fresh ids,
        continuing from it, to documents whose ``_id`` is missing, is not a
        positive integer, or repeats an id seen earlier in the snapshot.
        """
        loaded = list(documents)
        usable = [normalize_id(doc.get(ID_FIELD)) for doc in loaded]
        highest = max((i for i in usable if i is not None), default=0)

        seen: set[int] = set()
        backfilled = 0
        for position, (doc, doc_id) in enumerate(zip(loaded, usable, strict=True)):
            stored = doc.get(ID_FIELD)
            if doc_id is None or doc_id in seen:
                if stored:
                    reason = "duplicate" if doc_id is not None else "invalid"
                    logger.warning(f"Replacing {reason} _id {stored!r} on load")
                highest += 1
                doc_id = highest
                backfilled += 1
            if not (type(stored) is int and stored == doc_id):
                loaded[position] = with_id_first(doc, doc_id)
            seen.add(doc_id)

        if backfilled:
            logger.info(f"Assigned ids to {backfilled} loaded documents")

        self.documents = loaded
        self.last_id = max(self.last_id, highest)

    def next_id(self) -> int:
        """Reserve and return the next id."""
        self.last_id += 1
        return self.last_id

    def observe_id(self, doc_id: int) -> None:
        """Raise the counter to cover an externally supplied id."""
        if is_valid_id(doc_id) and doc_id > self.last_id:
            self.last_id = doc_id

    def has_id(self, doc_id: Any) -> bool:
        """Check whether a document with this id is stored."""
        return any(doc.get(ID_FIELD) == doc_id for doc in self.documents)

    def append(self, document: Document) -> None:
        """Append a document the collection now owns."""
        self.documents.append(document)

    def replace(self, documents: list[Document]) -> None:
        """Swap in a rebuilt backing sequence. The counter is untouched."""
        self.documents = documents

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents)
