"""Matchers that filter document sequences by a single clause.

Each matcher is a pure function: it scans the given documents in order and
returns a new list holding references to the ones that match. A document
appears at most once in a matcher's output.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from .models import (
    COMPARISON_OPERATORS,
    Clause,
    ClauseType,
    Document,
    ExistsSemantics,
    field_is_set,
    is_regex,
    is_truthy,
    satisfies,
    strict_equals,
    string_form,
)


def normal_matches(document: Document, field: str, target: Any) -> bool:
    """Equality or pattern test of one field."""
    if field not in document:
        return False
    value = document[field]
    if is_regex(target):
        return target.search(string_form(value)) is not None
    return strict_equals(value, target)


def conditional_matches(
    document: Document,
    field: str,
    operator: str,
    operand: Any,
    exists: ExistsSemantics = ExistsSemantics.PRESENCE,
) -> bool:
    """Test one conditional operator against a field.

    Unknown operators match everything; callers decide whether to reject
    them before getting here.
    """
    if operator == "$exists":
        return field_is_set(document, field, exists) == is_truthy(operand)
    if operator in COMPARISON_OPERATORS:
        return field in document and satisfies(operator, document[field], operand)
    return True


def clause_matches(
    document: Document,
    clause: Clause,
    exists: ExistsSemantics = ExistsSemantics.PRESENCE,
) -> bool:
    """Test a NORMAL or CONDITIONAL clause against a single document.

    Other clause kinds contribute no match.
    """
    if clause.kind is ClauseType.NORMAL:
        return normal_matches(document, clause.key, clause.value)
    if clause.kind is ClauseType.CONDITIONAL:
        return all(
            conditional_matches(document, clause.key, op, operand, exists)
            for op, operand in clause.operators
        )
    return False


def match_normal(field: str, target: Any, documents: Iterable[Document]) -> list:
    """Keep documents whose field equals (or matches) the target."""
    return [doc for doc in documents if normal_matches(doc, field, target)]


def match_conditional(
    field: str,
    operator: str,
    operand: Any,
    documents: Iterable[Document],
    exists: ExistsSemantics = ExistsSemantics.PRESENCE,
) -> list:
    """Keep documents satisfying ``field <operator> operand``."""
    return [
        doc
        for doc in documents
        if conditional_matches(doc, field, operator, operand, exists)
    ]


def match_or(
    alternatives: Sequence[Sequence[Clause]],
    documents: Iterable[Document],
    exists: ExistsSemantics = ExistsSemantics.PRESENCE,
) -> list:
    """Keep documents matching at least one alternative.

    Alternatives are tried in order and the first hit wins. An alternative
    made only of unsupported clauses never matches.
    """
    result = []
    for doc in documents:
        for clauses in alternatives:
            if clauses and all(clause_matches(doc, c, exists) for c in clauses):
                result.append(doc)
                break
    return result
