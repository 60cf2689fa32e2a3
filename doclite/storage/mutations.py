"""Insert, update and remove against a live collection.

Update and remove evaluate their query directly over the collection's own
documents, so every change lands on the stored objects themselves. Nothing
here returns copies; reads that need isolation go through a ResultCursor.
"""

import logging
from copy import deepcopy
from typing import Any

from doclite.core.engine import QueryEngine
from doclite.core.exceptions import (
    DuplicateKeyError,
    InvalidDocumentError,
    InvalidUpdateError,
)
from doclite.core.models import (
    ID_FIELD,
    Document,
    ExistsSemantics,
    UpdateOptions,
    field_is_set,
    is_document,
    is_sequence,
    strict_equals,
)

from .collection import Collection, is_valid_id, with_id_first

logger = logging.getLogger(__name__)


class MutationEngine:
    """Apply write operations to a collection.

    Invalid arguments yield ``-1`` (insert) or ``0`` rows (update, remove)
    unless the engine is strict, in which case they raise.
    """

    def __init__(
        self,
        collection: Collection,
        query_engine: QueryEngine | None = None,
        strict: bool = False,
        exists: ExistsSemantics = ExistsSemantics.PRESENCE,
    ):
        self.collection = collection
        self.query_engine = query_engine or QueryEngine(strict=strict, exists=exists)
        self.strict = strict
        self.exists = exists

    def insert(self, documents: Any) -> int:
        """Insert one document or a sequence of documents.

        Args:
            documents: A document or a list of documents.

        Returns:
            The ``_id`` of the last document handled, or -1 when that
            element was not a document or was rejected.
        """
        if is_sequence(documents):
            last_id = -1
            for document in documents:
                last_id = self._insert_one(document)
            return last_id
        return self._insert_one(documents)

    def _insert_one(self, document: Any) -> int:
        if not is_document(document):
            logger.warning(f"Skipping insert of non-document {type(document)}")
            return -1

        doc_id = document.get(ID_FIELD)
        if not doc_id:
            doc_id = self.collection.next_id()
            stored = with_id_first(deepcopy(document), doc_id)
        else:
            if not is_valid_id(doc_id):
                if self.strict:
                    raise InvalidDocumentError(doc_id)
                logger.warning(f"Rejecting insert with invalid _id {doc_id!r}")
                return -1
            if self.collection.has_id(doc_id):
                if self.strict:
                    raise DuplicateKeyError(doc_id)
                logger.warning(f"Rejecting insert of duplicate _id {doc_id}")
                return -1
            self.collection.observe_id(doc_id)
            stored = deepcopy(dict(document))

        self.collection.append(stored)
        return doc_id

    def update(
        self,
        query: dict[str, Any] | None,
        update: Any,
        options: Any = None,
    ) -> int:
        """Apply a ``$set`` to matching documents.

        Args:
            query: Selects the documents to change.
            update: Must hold a ``$set`` mapping of field values to write.
            options: ``multi`` to change every match rather than the first,
                ``upsert`` to insert the ``$set`` document when nothing
                matches.

        Returns:
            Number of documents that actually changed; 1 for an upsert that
            inserted, 0 when its insert was rejected.
        """
        if query is not None and not is_document(query):
            return self._reject(f"query must be a document, got {type(query)}")
        if not is_document(update):
            return self._reject(f"update must be a document, got {type(update)}")

        opts = UpdateOptions.from_value(options)
        if opts is None:
            return self._reject(f"options must be a document, got {type(options)}")

        changes = update.get("$set")
        if not is_document(changes):
            return self._reject("only $set updates are supported")

        matched = self.query_engine.evaluate(query, self.collection.documents)

        if not matched and opts.upsert:
            if self.insert(changes) == -1:
                logger.warning("Upsert rejected: $set document could not be inserted")
                return 0
            logger.debug("Upserted document from $set")
            return 1

        altered = 0
        for document in matched:
            if self._apply_set(document, changes):
                altered += 1
            if not opts.multi:
                break
        return altered

    def _apply_set(self, document: Document, changes: dict[str, Any]) -> bool:
        changed = False
        for field, value in changes.items():
            if field == ID_FIELD:
                logger.warning("Ignoring $set of immutable _id")
                continue
            if not field_is_set(document, field, self.exists) or not strict_equals(
                document[field], value
            ):
                document[field] = deepcopy(value)
                changed = True
        return changed

    def _reject(self, reason: str) -> int:
        if self.strict:
            raise InvalidUpdateError(reason)
        logger.warning(f"Update ignored: {reason}")
        return 0

    def remove(self, query: Any = None) -> int:
        """Remove every document matching the query.

        With no query (or None) the collection is emptied. There is no
        limit: all matches go.

        Returns:
            Number of documents removed.
        """
        if query is not None and not is_document(query):
            logger.warning(f"Remove ignored: query is a {type(query)}, not a document")
            return 0

        matched = self.query_engine.evaluate(query, self.collection.documents)
        doomed = {id(doc) for doc in matched if doc.get(ID_FIELD)}
        if not doomed:
            return 0

        kept = [doc for doc in self.collection.documents if id(doc) not in doomed]
        removed = len(self.collection) - len(kept)
        self.collection.replace(kept)
        logger.debug(f"Removed {removed} documents")
        return removed
