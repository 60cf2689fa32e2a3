"""Query evaluation by sequential narrowing.

The top-level clauses of a query form a conjunction. They are applied left
to right, each one filtering the result of the previous clause rather than
the whole collection. The final result is a subsequence, by reference, of
the documents passed in.
"""

import logging
from collections import deque
from collections.abc import Sequence
from typing import Any

from .clauses import parse_query
from .exceptions import InvalidQueryError, UnsupportedClauseError
from .matchers import match_conditional, match_normal, match_or
from .models import (
    CONDITIONAL_OPERATORS,
    Clause,
    ClauseType,
    Document,
    ExistsSemantics,
    is_document,
)

logger = logging.getLogger(__name__)


class QueryEngine:
    """Evaluate query documents against a sequence of documents.

    In the default permissive mode malformed or unsupported clauses are
    passed through without filtering. With ``strict=True`` they raise
    instead.
    """

    def __init__(
        self,
        strict: bool = False,
        exists: ExistsSemantics = ExistsSemantics.PRESENCE,
    ):
        self.strict = strict
        self.exists = exists

    def evaluate(
        self, query: dict[str, Any] | None, documents: Sequence[Document]
    ) -> list[Document]:
        """Return the documents matching every clause of the query.

        Args:
            query: Query document. None or an empty document matches all.
            documents: Documents to scan; the result holds references to them.

        Returns:
            Matching documents in their original relative order.
        """
        if query is None:
            return list(documents)
        if not is_document(query):
            if self.strict:
                raise InvalidQueryError(query)
            logger.warning(f"Ignoring non-document query of type {type(query)}")
            return []

        result = list(documents)
        for clause in parse_query(query):
            result = self.apply(clause, result)
        return result

    def apply(self, clause: Clause, documents: list[Document]) -> list[Document]:
        """Narrow documents by one clause."""
        logger.debug(f"Applying {clause.kind.value} clause '{clause.key}'")

        if clause.kind is ClauseType.NORMAL:
            return match_normal(clause.key, clause.value, documents)

        if clause.kind is ClauseType.CONDITIONAL:
            pending = deque(clause.operators)
            while pending:
                operator, operand = pending.popleft()
                if operator not in CONDITIONAL_OPERATORS:
                    self._unsupported(clause, f"unknown operator {operator}")
                    continue
                documents = match_conditional(
                    clause.key, operator, operand, documents, self.exists
                )
            return documents

        if clause.kind is ClauseType.OR:
            for clauses in clause.alternatives:
                for sub in clauses:
                    if not sub.kind.is_supported or sub.kind is ClauseType.OR:
                        self._unsupported(sub, "inside $or")
            return match_or(clause.alternatives, documents, self.exists)

        self._unsupported(clause)
        return documents

    def _unsupported(self, clause: Clause, detail: str = "") -> None:
        if self.strict:
            raise UnsupportedClauseError(clause.key, clause.kind.value, detail)
        logger.debug(
            f"Passing through {clause.kind.value} clause '{clause.key}' {detail}"
        )
