"""Tests for the public document store."""

import re
from datetime import datetime, timezone

import pytest

from doclite.config import StoreConfig
from doclite.core.exceptions import (
    SerializationError,
    StorageError,
    UnsupportedClauseError,
)
from doclite.storage.backends import FileSystemBackend, MemoryBackend, SQLiteBackend
from doclite.storage.store import DocumentStore, create_backend, open_store


def ids(cursor):
    return [doc["_id"] for doc in cursor]


class TestScenarios:
    """End-to-end behavior of the store surface."""

    def test_insert_and_find(self):
        """Ids are assigned in order and queries narrow."""
        db = DocumentStore()
        assert db.insert({"a": 1}) == 1
        assert db.insert({"a": 2, "b": 2}) == 2
        assert db.insert({"a": 3, "b": 3, "c": 3}) == 3

        assert ids(db.find({"b": {"$gt": 1}})) == [2, 3]
        assert ids(db.find({"b": {"$gt": 1}}).sort({"_id": -1})) == [3, 2]

    def test_update_multi(self):
        """Multi updates change every match."""
        db = DocumentStore()
        db.insert([{"a": 1}, {"a": 2, "b": 2}, {"a": 3, "b": 3, "c": 3}])

        altered = db.update(
            {"b": {"$exists": True}}, {"$set": {"flag": True}}, {"multi": True}
        )

        assert altered == 2
        assert ids(db.find({"flag": True})) == [2, 3]

    def test_upsert(self):
        """Upsert appends a new document with the next id."""
        db = DocumentStore()
        db.insert([{"a": 1}, {"a": 2}, {"a": 3}])

        altered = db.update(
            {"missing": "x"}, {"$set": {"created": True}}, {"upsert": True}
        )

        assert altered == 1
        assert db.find({"created": True}).to_array() == [{"_id": 4, "created": True}]

    def test_remove(self, store):
        """Removed ids never come back."""
        before = store.count()
        removed = store.remove({"c": {"$exists": True}})

        assert removed == 5
        assert store.count() == before - removed
        assert store.insert({"c": 1}) == 8

    def test_update_then_remove_sequence(self, store):
        """Writes compose over one store."""
        store.insert([{"name": "Paul"}, {"name": "Carol"}, {"name": "Zach"}])

        multi = {"multi": True}
        assert store.update({"b": {"$exists": True}}, {"$set": {"e": 1}}, multi) == 4
        assert store.update({}, {"$set": {"e": 1}}, multi) == 6
        assert (
            store.update(
                {"name": "Nobody"}, {"$set": {"name": "Nobody"}}, {"upsert": True}
            )
            == 1
        )
        assert store.find_one({"name": "Nobody"})["_id"] == 11
        assert store.remove({"name": re.compile("^[PCN]")}) == 3
        assert store.count() == 8

    def test_find_sort_limit(self, store):
        """Sorted windows put missing fields last."""
        cursor = store.find().sort("d", 1).limit(4)
        assert ids(cursor) == [4, 5, 6, 1]

    def test_find_one(self, store):
        """find_one returns a copy of the first match or None."""
        assert store.find_one({"c": {"$gt": 4}})["_id"] == 5
        assert store.find_one({"a": 100}) is None

    def test_len_and_repr(self, store):
        """Stores report their size."""
        assert len(store) == 7
        assert "count=7" in repr(store)


class TestIsolation:
    """Test read isolation and write visibility."""

    def test_find_results_are_copies(self, store):
        """Mutating found documents leaves the collection alone."""
        found = store.find({"a": 1}).first()
        found["a"] = 50
        found["extra"] = True

        assert store.find({"a": 1}).first() == {"_id": 1, "a": 1}
        assert store.find({"a": 50}).count() == 0

    def test_update_visible_to_next_find(self, store):
        """Updates show up in the next find with only the set field changed."""
        before = store.find({"a": 2}).first()
        store.update({"a": 2}, {"$set": {"b": 20}})
        after = store.find({"a": 2}).first()

        assert after == {**before, "b": 20}

    def test_inserted_document_detached(self):
        """Changing an inserted dict afterwards does not reach the store."""
        db = DocumentStore()
        doc = {"a": 1}
        db.insert(doc)
        doc["a"] = 2
        assert db.find_one()["a"] == 1


class TestPersistence:
    """Test load and save through backends."""

    def test_round_trip(self, store, memory_backend):
        """A fresh store over the same backend sees the saved documents."""
        store.update({"a": 1}, {"$set": {"nested": {"x": [1, 2]}}})
        assert store.save() is True

        reloaded = DocumentStore(memory_backend)
        assert reloaded.find().to_array() == store.find().to_array()

    def test_counter_resumes_after_load(self, store, memory_backend):
        """Loaded stores keep allocating after the highest id."""
        store.remove({"c": 7})
        store.save()

        reloaded = DocumentStore(memory_backend)
        assert reloaded.insert({"x": 1}) == 7

    def test_backfills_ids_on_load(self):
        """Loaded documents without ids receive fresh ones."""
        backend = MemoryBackend('[{"_id": 2, "a": 1}, {"a": 2}]')
        db = DocumentStore(backend)
        assert ids(db.find()) == [2, 3]
        assert db.insert({}) == 4

    def test_float_id_not_reused_after_load(self):
        """A snapshot id written as 3.0 is never assigned again."""
        db = DocumentStore(MemoryBackend('[{"_id": 3.0, "a": 1}]'))
        assigned = [db.insert({"n": n}) for n in range(3)]

        assert assigned == [4, 5, 6]
        assert db.find({"_id": 3}).count() == 1

    def test_unsaved_changes_not_persisted(self, memory_backend):
        """Only save writes to the backend."""
        db = DocumentStore(memory_backend)
        db.insert({"a": 1})
        assert memory_backend.load() is None
        assert memory_backend.saves == 0

    def test_seed_data(self, memory_backend):
        """Seed JSON replaces the initial load but saves go to the backend."""
        db = DocumentStore(memory_backend, data='[{"_id": 5, "a": 1}]')
        assert db.count() == 1
        db.save()
        assert memory_backend.load() == [{"_id": 5, "a": 1}]

    def test_corrupt_snapshot(self):
        """Unreadable snapshots fail the store construction."""
        with pytest.raises(SerializationError):
            DocumentStore(MemoryBackend(b"[1, 2]"))

    def test_save_failure(self, temp_dir):
        """A failed save reports False and keeps the collection."""
        target = temp_dir / "store.db"
        db = DocumentStore(FileSystemBackend(target))
        db.insert({"a": 1})
        target.mkdir()

        assert db.save() is False
        assert db.count() == 1

    def test_file_round_trip(self, temp_dir, sample_documents):
        """A file-backed store reloads what it saved."""
        path = temp_dir / "people.db.gz"
        with open_store(path) as db:
            db.insert(sample_documents)
            assert db.save()

        with open_store(path) as db:
            assert db.count() == 7
            assert ids(db.find({"d": {"$exists": True}})) == [4, 5, 6]

    def test_date_queries_after_reload(self, memory_backend):
        """Reloaded dates match their string form, not the datetime."""
        when = datetime(2020, 1, 2, tzinfo=timezone.utc)
        db = DocumentStore(memory_backend)
        db.insert({"when": when})
        assert db.find({"when": when}).count() == 1
        db.save()

        reloaded = DocumentStore(memory_backend)
        assert reloaded.find({"when": when}).count() == 0
        assert reloaded.find({"when": "2020-01-02T00:00:00Z"}).count() == 1

    def test_dates_persist_as_text(self, memory_backend):
        """Datetimes come back as ISO strings."""
        db = DocumentStore(memory_backend)
        when = datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        db.insert({"when": when})
        db.save()

        stored = DocumentStore(memory_backend).find_one()["when"]
        assert isinstance(stored, str)
        assert DocumentStore.to_date(stored) == when

    def test_unencodable_value_fails_save(self):
        """Values that cannot be serialized fail the save."""
        db = DocumentStore()
        db.insert({"pattern": re.compile("x")})
        assert db.save() is False

    def test_get_json(self, store):
        """The whole collection serializes to a JSON array."""
        assert store.get_json().startswith('[{"_id":1,"a":1}')
        assert "\n" in store.get_json(indent=2)


class TestStrictStore:
    """Test the strict store option."""

    def test_strict_find(self, memory_backend):
        """Strict stores reject unsupported queries."""
        db = DocumentStore(memory_backend, strict=True)
        with pytest.raises(UnsupportedClauseError):
            db.find({"a.b": 1})

    def test_permissive_find(self, store):
        """Permissive stores pass unsupported clauses through."""
        assert store.find({"a.b": 1}).count() == 7

    def test_non_document_queries(self, store):
        """Non-document queries find and remove nothing."""
        assert store.find("a").count() == 0
        assert store.remove(["a"]) == 0
        assert store.count() == 7


class TestTime:
    """Test timestamp helpers."""

    def test_now_format(self):
        """now() is UTC ISO-8601 with milliseconds."""
        stamp = DocumentStore.now()
        assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", stamp)

    def test_now_parses(self):
        """now() round-trips through to_date."""
        parsed = DocumentStore.to_date(DocumentStore().now())
        assert parsed.tzinfo is not None
        assert abs((datetime.now(timezone.utc) - parsed).total_seconds()) < 60


class TestOpenStore:
    """Test opening stores from locations and configuration."""

    def test_path(self, temp_dir):
        """A file path opens a file-backed store."""
        db = open_store(temp_dir / "x.db")
        assert isinstance(db.backend, FileSystemBackend)
        assert db.backend.path == (temp_dir / "x.db").resolve()
        assert not db.backend.use_gzip

    def test_directory(self, temp_dir):
        """A directory gets the default file name."""
        db = open_store(temp_dir)
        assert db.backend.path == (temp_dir / "doclite.db").resolve()

    def test_mapping(self):
        """A mapping of settings is accepted."""
        db = open_store({"backend": "memory", "strict": True})
        assert isinstance(db.backend, MemoryBackend)
        assert db.query_engine.strict

    def test_config_with_overrides(self, temp_dir):
        """Overrides beat the given configuration."""
        config = StoreConfig(db_dir=str(temp_dir))
        db = open_store(config, backend="sqlite", strict=None)
        assert isinstance(db.backend, SQLiteBackend)
        assert db.backend.db_path == temp_dir / "doclite.sqlite3"
        db.close()

    def test_default_location(self, tmp_path):
        """Without a location the data directory is used."""
        db = open_store()
        expected = tmp_path / "data" / "doclite" / "doclite.db"
        assert db.backend.path == expected.resolve()

    def test_environment(self, monkeypatch, temp_dir):
        """Environment variables configure the default store."""
        monkeypatch.setenv("DOCLITE_DB_PATH", str(temp_dir / "env.db"))
        monkeypatch.setenv("DOCLITE_GZIP", "yes")
        db = open_store()
        assert db.backend.path == (temp_dir / "env.db").resolve()
        assert db.backend.use_gzip

    def test_seed_data(self):
        """Seed data can be passed to open_store."""
        db = open_store({"backend": "memory"}, data='[{"_id": 1}]')
        assert db.count() == 1

    def test_invalid_configuration(self):
        """Bad settings are rejected."""
        with pytest.raises(ValueError):
            open_store({"backend": "cloud"})


class TestCreateBackend:
    """Test backend selection from configuration."""

    def test_memory(self):
        """The memory backend is named after the database."""
        backend = create_backend(StoreConfig(backend="memory", db_name="x"))
        assert backend.location == ":memory:x"

    def test_sqlite_path(self, temp_dir):
        """An explicit path is used as the SQLite file."""
        path = temp_dir / "nested" / "db.sqlite3"
        backend = create_backend(
            StoreConfig(backend="sqlite", db_path=str(path), db_name="people")
        )
        assert path.exists()
        assert backend.location == f"{path}#people"
        backend.close()

    def test_gzip_suffix(self, temp_dir):
        """A .gz name enables compression."""
        backend = create_backend(StoreConfig(db_path=str(temp_dir / "s.db.gz")))
        assert backend.use_gzip

    def test_load_error_type(self, temp_dir):
        """Storage errors are raised for unreadable snapshots."""
        (temp_dir / "bad.db").write_text("nope")
        with pytest.raises(StorageError):
            open_store(temp_dir / "bad.db")
