"""Durable key-value storage for submission histories.

Each assessment domain keeps its whole ordered history under one key, as a
JSON-encoded list. Writes always replace the full value.
"""

import json
import os
import sqlite3
import tempfile
from contextlib import closing
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .logger import get_logger
from .models import PersistenceReadFailure, PersistenceWriteFailure

logger = get_logger(__name__)


class SubmissionStorage:
    """Base class: ``load(key) -> list`` and ``save(key, records)``"""

    def load(self, key: str) -> List[dict]:
        """Return the stored list, or [] when absent or malformed"""
        raw = self._read(key)
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring malformed data under %r: %s", key, e)
            return []
        if not isinstance(records, list):
            logger.warning("Ignoring non-list data under %r", key)
            return []
        return records

    def save(self, key: str, records: List[dict]) -> None:
        """Replace the stored list; raises PersistenceWriteFailure"""
        try:
            payload = json.dumps(records, ensure_ascii=False)
            self._write(key, payload)
        except PersistenceWriteFailure:
            raise
        except (OSError, sqlite3.Error, TypeError, ValueError) as e:
            raise PersistenceWriteFailure(f"Could not save {key!r}: {e}") from e

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, payload: str) -> None:
        raise NotImplementedError


class MemoryStorage(SubmissionStorage):
    """Process-local storage, used for tests and demos"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.blobs: Dict[str, str] = dict(initial or {})

    def _read(self, key):
        return self.blobs.get(key)

    def _write(self, key, payload):
        self.blobs[key] = payload


class JsonFileStorage(SubmissionStorage):
    """One ``<key>.json`` file per key inside ``directory``"""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def _read(self, key):
        try:
            with open(self.path_for(key), 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read %s: %s", self.path_for(key), e)
            return None

    def _write(self, key, payload):
        os.makedirs(self.directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
            os.replace(tmp_path, self.path_for(key))
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class SQLiteStorage(SubmissionStorage):
    """Key-value table in a SQLite database"""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialized = False

    def get_db_direct(self):
        """Standalone connection; callers use ``with closing(...)``"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        if not self._initialized:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS submission_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            conn.commit()
            self._initialized = True
        return conn

    def _read(self, key):
        try:
            with closing(self.get_db_direct()) as conn:
                row = conn.execute(
                    'SELECT value FROM submission_store WHERE key = ?', (key,)
                ).fetchone()
        except sqlite3.Error as e:
            logger.warning("Could not read %r from %s: %s", key, self.db_path, e)
            return None
        return row['value'] if row else None

    def _write(self, key, payload):
        with closing(self.get_db_direct()) as conn:
            conn.execute('''
                INSERT INTO submission_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key)
                DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
            ''', (key, payload))
            conn.commit()


class RecordHistory:
    """Append-only list of records kept under one storage key.

    ``decode`` turns a stored dict into a record and raises
    PersistenceReadFailure when it cannot. Unreadable entries are skipped one
    by one but kept in the stored list, so later writes never drop them.
    """

    def __init__(self, storage: SubmissionStorage, key: str,
                 decode: Callable[[dict], object]):
        self.storage = storage
        self.key = key
        self.decode = decode
        self._raw: Optional[List[object]] = None
        self._records: Optional[List[object]] = None

    def _ensure_loaded(self) -> None:
        if self._records is not None:
            return
        raw = self.storage.load(self.key)
        records = []
        for index, item in enumerate(raw):
            try:
                records.append(self.decode(item))
            except PersistenceReadFailure as e:
                logger.warning("Skipping unreadable record %d under %r: %s", index, self.key, e)
        self._raw = raw
        self._records = records

    def records(self) -> list:
        self._ensure_loaded()
        return list(self._records)

    def next_id(self, at: datetime) -> str:
        """Epoch milliseconds, above every numeric id already stored"""
        self._ensure_loaded()
        candidate = int(at.timestamp() * 1000)
        for item in self._raw:
            if not isinstance(item, dict):
                continue
            try:
                candidate = max(candidate, int(item.get("id")) + 1)
            except (TypeError, ValueError):
                continue
        return str(candidate)

    def append(self, record) -> None:
        """Persist ``record`` at the end; caches change only after the write"""
        self._ensure_loaded()
        raw = self._raw + [record.to_dict()]
        self.storage.save(self.key, raw)
        self._raw = raw
        self._records = self._records + [record]

    def remove(self, record_id: str) -> bool:
        """Delete the record with ``record_id``; False when there is none"""
        self._ensure_loaded()
        raw = [item for item in self._raw
               if not (isinstance(item, dict) and str(item.get("id")) == record_id)]
        if len(raw) == len(self._raw):
            return False
        self.storage.save(self.key, raw)
        self._raw = raw
        self._records = [r for r in self._records if r.id != record_id]
        return True


def build_storage(config) -> SubmissionStorage:
    """Create the backend named by ``config.STORAGE_BACKEND``"""
    backend = config.STORAGE_BACKEND
    if backend == 'memory':
        return MemoryStorage()
    if backend == 'json':
        return JsonFileStorage(config.DATA_DIR)
    if backend == 'sqlite':
        return SQLiteStorage(config.DB_PATH)
    raise ValueError(f"Unknown storage backend: {backend}")
