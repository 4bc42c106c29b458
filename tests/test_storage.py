"""Test suite for submission storage backends"""

import json
import os
from datetime import datetime, timezone

import pytest

from certify_grc.models import PersistenceReadFailure, PersistenceWriteFailure
from certify_grc.storage import (
    JsonFileStorage, MemoryStorage, RecordHistory, SQLiteStorage, build_storage,
)

RECORDS = [{"id": "1", "submittedAt": "2026-01-15T09:30:00+00:00", "sections": {}}]


@pytest.fixture(params=["memory", "json", "sqlite"])
def backend(request, tmp_path):
    if request.param == "memory":
        return MemoryStorage()
    if request.param == "json":
        return JsonFileStorage(str(tmp_path / "data"))
    return SQLiteStorage(str(tmp_path / "certify.db"))


def test_absent_key_loads_empty(backend):
    """Test a missing key reads as an empty history"""
    assert backend.load("contextOrganizationRecords") == []


def test_save_replaces_value(backend):
    """Test saving stores and then replaces the whole list"""
    backend.save("leadershipAssessments", RECORDS)
    assert backend.load("leadershipAssessments") == RECORDS

    backend.save("leadershipAssessments", RECORDS + RECORDS)
    assert len(backend.load("leadershipAssessments")) == 2
    assert backend.load("planningAssessments") == []


def test_malformed_blob_loads_empty():
    """Test unparseable or non-list data reads as empty"""
    storage = MemoryStorage({"a": "{not json", "b": json.dumps({"id": "1"})})
    assert storage.load("a") == []
    assert storage.load("b") == []


def test_json_file_layout(tmp_path):
    """Test the JSON backend writes one file per key"""
    storage = JsonFileStorage(str(tmp_path))
    storage.save("supportAssessments", RECORDS)

    with open(tmp_path / "supportAssessments.json", encoding="utf-8") as f:
        assert json.load(f) == RECORDS
    assert [p.name for p in tmp_path.iterdir()] == ["supportAssessments.json"]


def test_json_write_failure(tmp_path):
    """Test an unwritable directory raises PersistenceWriteFailure"""
    blocker = tmp_path / "data"
    blocker.write_text("not a directory")
    storage = JsonFileStorage(str(blocker))

    with pytest.raises(PersistenceWriteFailure):
        storage.save("supportAssessments", RECORDS)


def test_unserializable_records_fail_to_save():
    """Test records that are not JSON-able are reported as a write failure"""
    storage = MemoryStorage()
    with pytest.raises(PersistenceWriteFailure):
        storage.save("key", [object()])
    assert "key" not in storage.blobs


def test_sqlite_persists_across_instances(tmp_path):
    """Test a new SQLite storage reads what another one wrote"""
    path = str(tmp_path / "certify.db")
    SQLiteStorage(path).save("operationAssessments", RECORDS)

    assert SQLiteStorage(path).load("operationAssessments") == RECORDS
    assert os.path.exists(path)


def test_build_storage(tmp_path):
    """Test backend selection from configuration"""

    class Config:
        STORAGE_BACKEND = "json"
        DATA_DIR = str(tmp_path)
        DB_PATH = str(tmp_path / "certify.db")

    assert isinstance(build_storage(Config), JsonFileStorage)
    Config.STORAGE_BACKEND = "sqlite"
    assert isinstance(build_storage(Config), SQLiteStorage)
    Config.STORAGE_BACKEND = "memory"
    assert isinstance(build_storage(Config), MemoryStorage)
    Config.STORAGE_BACKEND = "redis"
    with pytest.raises(ValueError):
        build_storage(Config)


class Note:
    """Minimal record with an id"""

    def __init__(self, id, text):
        self.id = id
        self.text = text

    def to_dict(self):
        return {"id": self.id, "text": self.text}


def decode_note(data):
    if not isinstance(data, dict) or not isinstance(data.get("text"), str):
        raise PersistenceReadFailure(f"bad note: {data!r}")
    return Note(str(data["id"]), data["text"])


AT = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


def test_history_skips_unreadable_records():
    """Test a bad record hides only itself and survives the next write"""
    stored = [{"id": "1", "text": "first"}, {"id": "2", "text": 5}, "junk",
              {"id": "3", "text": "third"}]
    storage = MemoryStorage({"notes": json.dumps(stored)})
    history = RecordHistory(storage, "notes", decode_note)

    assert [n.id for n in history.records()] == ["1", "3"]

    history.append(Note(history.next_id(AT), "fourth"))
    saved = storage.load("notes")
    assert saved[:4] == stored
    assert saved[4]["text"] == "fourth"
    assert [n.text for n in history.records()] == ["first", "third", "fourth"]


def test_history_next_id():
    """Test ids are epoch milliseconds and never reuse a stored id"""
    history = RecordHistory(MemoryStorage(), "notes", decode_note)
    assert history.next_id(AT) == str(int(AT.timestamp() * 1000))

    future = str(int(AT.timestamp() * 1000) + 500)
    storage = MemoryStorage({"notes": json.dumps([{"id": future, "text": 1}])})
    history = RecordHistory(storage, "notes", decode_note)
    assert history.next_id(AT) == str(int(future) + 1)


def test_history_remove():
    """Test removing a record rewrites the stored list"""
    storage = MemoryStorage()
    history = RecordHistory(storage, "notes", decode_note)
    history.append(Note("1", "a"))
    history.append(Note("2", "b"))

    assert history.remove("1") is True
    assert history.remove("1") is False
    assert [n.id for n in history.records()] == ["2"]
    assert storage.load("notes") == [{"id": "2", "text": "b"}]


def test_history_failed_append_changes_nothing():
    """Test the in-memory list is unchanged when the write fails"""

    class FailingStorage(MemoryStorage):
        def _write(self, key, payload):
            raise OSError("disk full")

    history = RecordHistory(FailingStorage(), "notes", decode_note)
    with pytest.raises(PersistenceWriteFailure):
        history.append(Note("1", "a"))
    assert history.records() == []
