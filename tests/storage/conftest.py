"""Shared fixtures for storage tests."""

import tempfile
from pathlib import Path

import pytest

from doclite.storage.backends import MemoryBackend
from doclite.storage.collection import Collection
from doclite.storage.mutations import MutationEngine
from doclite.storage.store import DocumentStore


@pytest.fixture
def temp_dir():
    """Temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_documents():
    """Documents as a caller would insert them, without ids."""
    return [
        {"a": 1},
        {"a": 2, "b": 2},
        {"a": 3, "b": 3, "c": 3},
        {"a": 4, "b": 4, "c": 4, "d": 4},
        {"b": 5, "c": 5, "d": 5},
        {"c": 6, "d": 6},
        {"c": 7},
    ]


@pytest.fixture
def collection():
    """Empty collection."""
    return Collection()


@pytest.fixture
def mutations(collection):
    """Permissive mutation engine over the empty collection."""
    return MutationEngine(collection)


@pytest.fixture
def strict_mutations(collection):
    """Strict mutation engine over the empty collection."""
    return MutationEngine(collection, strict=True)


@pytest.fixture
def memory_backend():
    """Empty in-memory backend."""
    return MemoryBackend()


@pytest.fixture
def store(memory_backend, sample_documents):
    """Store holding the sample documents with ids 1-7."""
    db = DocumentStore(memory_backend)
    db.insert(sample_documents)
    return db
