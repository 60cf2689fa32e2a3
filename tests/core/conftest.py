"""Shared fixtures for query engine tests."""

import pytest

from doclite.core.engine import QueryEngine


@pytest.fixture
def documents():
    """Seven documents with overlapping fields a-d, ids 1-7."""
    return [
        {"_id": 1, "a": 1},
        {"_id": 2, "a": 2, "b": 2},
        {"_id": 3, "a": 3, "b": 3, "c": 3},
        {"_id": 4, "a": 4, "b": 4, "c": 4, "d": 4},
        {"_id": 5, "b": 5, "c": 5, "d": 5},
        {"_id": 6, "c": 6, "d": 6},
        {"_id": 7, "c": 7},
    ]


@pytest.fixture
def people():
    """Documents with names for regex and string tests."""
    return [
        {"_id": 8, "name": "Paul", "age": 34},
        {"_id": 9, "name": "Carol", "age": 41},
        {"_id": 10, "name": "Zach", "age": 17},
    ]


@pytest.fixture
def engine():
    """Permissive query engine."""
    return QueryEngine()


@pytest.fixture
def strict_engine():
    """Strict query engine."""
    return QueryEngine(strict=True)