"""Result cursor over detached copies of matched documents."""

import locale
import math
from collections.abc import Iterator, Mapping
from copy import deepcopy
from datetime import date, datetime
from functools import cmp_to_key
from typing import Any

from .codec import encode_documents
from .models import ID_FIELD, Document, compare_values, first_key, is_number


def _rank(value: Any) -> int:
    """Order of value families when values cannot be compared directly."""
    if is_number(value):
        return 0
    if isinstance(value, str):
        return 1
    if isinstance(value, datetime):
        return 3
    if isinstance(value, date):
        return 2
    return 4


def _compare_strings(left: str, right: str) -> int:
    folded = locale.strcoll(left.casefold(), right.casefold())
    if folded:
        return folded
    return locale.strcoll(left, right)


def _compare_present(left: Any, right: Any) -> int:
    if isinstance(left, str) and isinstance(right, str):
        return _compare_strings(left, right)
    result = compare_values(left, right)
    if result is not None:
        return result
    return _rank(left) - _rank(right)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _coerce_count(value: Any) -> int | None:
    """Coerce a limit/skip argument to a non-negative int, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = int(value)
    if not isinstance(value, int) or value < 0:
        return None
    return value


class ResultCursor:
    """Chainable sort/limit/skip over the results of a find.

    The cursor deep-copies the documents it is given, so nothing done to it
    or to the documents it hands out reaches the collection.
    """

    def __init__(self, documents: list[Document] | None = None):
        self._data: list[Document] = [deepcopy(doc) for doc in documents or []]

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._data)

    def __getitem__(self, index: int) -> Document:
        return self._data[index]

    def __repr__(self) -> str:
        return f"ResultCursor(count={len(self._data)})"

    def sort(
        self, spec: str | Mapping[str, int], direction: int = 1
    ) -> "ResultCursor":
        """Sort in place by one field.

        Args:
            spec: Field name, or a ``{field: direction}`` mapping whose first
                key is used.
            direction: ``1`` ascending, ``-1`` descending. Ignored when
                ``spec`` is a mapping.

        Documents missing the field (or holding None) go last when
        ascending and first when descending. Ties are broken by ascending
        ``_id``.
        """
        if isinstance(spec, Mapping):
            field = first_key(spec)
            if field is None:
                return self
            direction = spec[field]
        else:
            field = spec

        direction = -1 if direction is not None and _is_negative(direction) else 1

        def compare(a: Document, b: Document) -> int:
            a_value, b_value = a.get(field), b.get(field)
            if a_value is None and b_value is None:
                result = 0
            elif a_value is None:
                result = direction
            elif b_value is None:
                result = -direction
            else:
                result = _sign(_compare_present(a_value, b_value)) * direction
            if result:
                return result
            tie = compare_values(a.get(ID_FIELD), b.get(ID_FIELD))
            return tie or 0

        self._data.sort(key=cmp_to_key(compare))
        return self

    def limit(self, n: Any) -> "ResultCursor":
        """Keep only the first ``n`` documents."""
        count = _coerce_count(n)
        if count is not None:
            del self._data[count:]
        return self

    def skip(self, n: Any) -> "ResultCursor":
        """Drop the first ``n`` documents."""
        count = _coerce_count(n)
        if count is not None:
            del self._data[:count]
        return self

    def count(self) -> int:
        """Number of documents currently held."""
        return len(self._data)

    def first(self) -> Document | None:
        """First document in the current order, if any."""
        return self._data[0] if self._data else None

    def to_array(self) -> list[Document]:
        """The cursor's documents in their current order."""
        return self._data

    def to_json(self, indent: int | None = None) -> str:
        """Serialize the current documents, optionally pretty-printed."""
        return encode_documents(self._data, indent=indent).decode()


def _is_negative(direction: Any) -> bool:
    try:
        return float(direction) < 0
    except (TypeError, ValueError):
        return False
