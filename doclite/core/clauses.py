"""Clause classification and query parsing.

A query is a document whose keys are clauses. Each clause is classified
once, up front, into a :class:`ClauseType`; the matchers then dispatch on
that tag instead of inspecting raw values.
"""

from collections.abc import Mapping
from datetime import date
from typing import Any

from .models import (
    CONDITIONAL_OPERATORS,
    OR_KEY,
    PATH_SEPARATOR,
    Clause,
    ClauseType,
    first_key,
    is_document,
    is_regex,
    is_sequence,
)


def _is_plain_value(value: Any) -> bool:
    return isinstance(value, bool | int | float | str | date) or is_regex(value)


def classify(key: str, value: Any) -> ClauseType:
    """Determine the matching strategy for one query key/value pair.

    Args:
        key: Clause key (field name or ``$or``).
        value: Raw clause value from the query.

    Returns:
        The clause type. Never raises.
    """
    if _is_plain_value(value):
        if PATH_SEPARATOR in key:
            return ClauseType.SUBDOCUMENT_MATCH
        return ClauseType.NORMAL

    if is_document(value):
        if first_key(value) in CONDITIONAL_OPERATORS:
            return ClauseType.CONDITIONAL
        return ClauseType.SUBDOCUMENT

    if is_sequence(value):
        if key == OR_KEY:
            return ClauseType.OR
        return ClauseType.ARRAY

    return ClauseType.UNKNOWN


def parse_clause(key: str, value: Any) -> Clause:
    """Classify a clause and capture what its matcher needs."""
    kind = classify(key, value)

    if kind is ClauseType.CONDITIONAL:
        # operators are copied out; the caller's query is never consumed
        return Clause(key, kind, value, operators=tuple(value.items()))

    if kind is ClauseType.OR:
        # Alternatives are normally single-key documents. Extra keys in one
        # alternative must all hold for it to match.
        alternatives = tuple(
            tuple(parse_clause(k, v) for k, v in branch.items())
            for branch in value
            if is_document(branch) and branch
        )
        return Clause(key, kind, value, alternatives=alternatives)

    return Clause(key, kind, value)


def parse_query(query: Mapping[str, Any] | None) -> list[Clause]:
    """Parse a query document into clauses, preserving key order."""
    if not query:
        return []
    return [parse_clause(key, value) for key, value in query.items()]
