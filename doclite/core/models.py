"""Core data model for documents, query clauses and value semantics.

Documents are plain ``dict`` objects mapping field names to values. The
helpers in this module define how those values behave inside the query
engine:

- Strict equality: booleans never equal numbers, ``int`` and ``float``
  share one numeric type, containers compare element-wise.
- Ordering: numbers, strings and dates are each ordered within their own
  family. Values from different families are incomparable and never
  satisfy a comparison operator.
- String form: the text a value is matched against when the query value
  is a regular expression.
"""

import enum
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import msgspec

Document = dict[str, Any]

ID_FIELD = "_id"

CONDITIONAL_OPERATORS = frozenset({"$gt", "$gte", "$lt", "$lte", "$exists"})
COMPARISON_OPERATORS = frozenset({"$gt", "$gte", "$lt", "$lte"})
OR_KEY = "$or"
PATH_SEPARATOR = "."


class ClauseType(enum.Enum):
    """Matching strategy selected for a single query clause."""

    NORMAL = "normal"
    SUBDOCUMENT_MATCH = "subdocument_match"
    CONDITIONAL = "conditional"
    SUBDOCUMENT = "subdocument"
    OR = "or"
    ARRAY = "array"
    UNKNOWN = "unknown"

    @property
    def is_supported(self) -> bool:
        """Whether the engine filters on clauses of this kind."""
        return self in _SUPPORTED_CLAUSES


_SUPPORTED_CLAUSES = frozenset(
    {ClauseType.NORMAL, ClauseType.CONDITIONAL, ClauseType.OR}
)


class ExistsSemantics(enum.Enum):
    """How ``$exists`` and the update change test decide a field is set."""

    PRESENCE = "presence"
    TRUTHY = "truthy"


@dataclass(frozen=True)
class Clause:
    """A classified query clause.

    ``operators`` holds the ``(operator, operand)`` pairs of a conditional
    clause in the order they were written. ``alternatives`` holds the parsed
    sub-documents of an ``$or`` clause, each one a tuple of clauses that
    must all hold.
    """

    key: str
    kind: ClauseType
    value: Any
    operators: tuple[tuple[str, Any], ...] = ()
    alternatives: tuple[tuple["Clause", ...], ...] = ()


@dataclass(frozen=True)
class UpdateOptions:
    """Options accepted by update."""

    multi: bool = False
    upsert: bool = False

    @classmethod
    def from_value(cls, options: Any) -> "UpdateOptions | None":
        """Build options from a caller mapping; None when unusable."""
        if options is None:
            return cls()
        if not is_document(options):
            return None
        return cls(
            multi=bool(options.get("multi", False)),
            upsert=bool(options.get("upsert", False)),
        )


def is_document(value: Any) -> bool:
    """Check whether a value can be used as a document."""
    return isinstance(value, Mapping)


def is_sequence(value: Any) -> bool:
    """Check for list-like values, excluding text."""
    return isinstance(value, Sequence) and not isinstance(value, str | bytes)


def is_regex(value: Any) -> bool:
    """Check for a compiled regular expression."""
    return isinstance(value, re.Pattern)


def is_number(value: Any) -> bool:
    """Check for a numeric value (booleans included)."""
    return isinstance(value, int | float)


def first_key(mapping: Mapping[str, Any]) -> str | None:
    """Return the first key in insertion order, or None when empty."""
    return next(iter(mapping), None)


def is_truthy(value: Any) -> bool:
    """Truthiness as the legacy store applied it."""
    if isinstance(value, float) and value != value:
        return False
    if is_document(value) or is_sequence(value):
        return True
    return bool(value)


def field_is_set(
    document: Mapping[str, Any],
    field: str,
    semantics: ExistsSemantics = ExistsSemantics.PRESENCE,
) -> bool:
    """Decide whether a document carries a field."""
    if field not in document:
        return False
    if semantics is ExistsSemantics.TRUTHY:
        return is_truthy(document[field])
    return True


def strict_equals(left: Any, right: Any) -> bool:
    """Equality that requires matching types as well as values."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return left == right
    if is_document(left) and is_document(right):
        if left.keys() != right.keys():
            return False
        return all(strict_equals(left[k], right[k]) for k in left)
    if is_sequence(left) and is_sequence(right):
        if len(left) != len(right):
            return False
        return all(strict_equals(a, b) for a, b in zip(left, right, strict=True))
    if is_regex(left) and is_regex(right):
        return left.pattern == right.pattern and left.flags == right.flags
    if type(left) is not type(right):
        return False
    return left == right


def _ordering_family(value: Any) -> str | None:
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    # datetime subclasses date, so test it first
    if isinstance(value, datetime):
        return "datetime"
    if isinstance(value, date):
        return "date"
    return None


def compare_values(left: Any, right: Any) -> int | None:
    """Three-way compare two values of the same ordering family.

    Returns None when the values are incomparable.
    """
    family = _ordering_family(left)
    if family is None or family != _ordering_family(right):
        return None
    try:
        if left < right:
            return -1
        if left > right:
            return 1
        if left == right:
            return 0
    except TypeError:
        # naive vs. aware datetimes
        return None
    return None


def satisfies(operator: str, value: Any, operand: Any) -> bool:
    """Evaluate a comparison operator against a field value."""
    result = compare_values(value, operand)
    if result is None:
        return False
    if operator == "$gt":
        return result > 0
    if operator == "$gte":
        return result >= 0
    if operator == "$lt":
        return result < 0
    if operator == "$lte":
        return result <= 0
    return False


def string_form(value: Any) -> str:
    """Render a field value as the text a regular expression is tested on."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, date):
        return value.isoformat()
    if is_document(value):
        return msgspec.json.encode(value, enc_hook=str).decode()
    if is_sequence(value):
        return ",".join(string_form(item) for item in value)
    return str(value)
