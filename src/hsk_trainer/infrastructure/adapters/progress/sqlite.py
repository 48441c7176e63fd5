"""
SQLite Progress Store: Infrastructure adapter for an embedded key/value table.

Implements ProgressStore with a single `kv(key, value)` table; the progress
map is one serialized record stored under `storage_key`.
"""

import logging
import sqlite3
from pathlib import Path

from hsk_trainer.application.progress_codec import progress_from_json, progress_to_json
from hsk_trainer.domain.constants import DEFAULT_STORAGE_KEY
from hsk_trainer.domain.errors import StorageError
from hsk_trainer.domain.scheduling.models import ProgressMap
from hsk_trainer.domain.scheduling.ports import ProgressStore

logger = logging.getLogger(__name__)


class SqliteProgressStore(ProgressStore):
    """
    Stores progress in a SQLite database. A connection is opened per call.
    """

    def __init__(self, db_path: Path | str, storage_key: str = DEFAULT_STORAGE_KEY):
        self.db_path = db_path
        self.storage_key = storage_key
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path), timeout=10.0)
        if not self._initialized:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                    """
                )
            self._initialized = True
        return conn

    def load(self) -> ProgressMap:
        try:
            conn = self._connect()
            try:
                row = conn.execute(
                    "SELECT value FROM kv WHERE key = ?", (self.storage_key,)
                ).fetchone()
            finally:
                conn.close()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Could not read {self.db_path}: {e}") from e

        if row is None:
            return {}
        return progress_from_json(row[0])

    def save(self, progress: ProgressMap) -> None:
        payload = progress_to_json(progress)
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO kv (key, value) VALUES (?, ?)
                        ON CONFLICT(key) DO UPDATE SET value = excluded.value
                        """,
                        (self.storage_key, payload),
                    )
            finally:
                conn.close()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Could not write {self.db_path}: {e}") from e

    def clear(self) -> None:
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute("DELETE FROM kv WHERE key = ?", (self.storage_key,))
            finally:
                conn.close()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Could not clear {self.db_path}: {e}") from e
