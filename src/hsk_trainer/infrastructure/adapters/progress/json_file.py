"""
JSON File Progress Store: Infrastructure adapter for a key/value document on disk.

The file holds a JSON object of string keys to string values, the same shape
as browser local storage. The progress map is one serialized record stored
under `storage_key`, so other records can share the file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from hsk_trainer.application.progress_codec import progress_from_json, progress_to_json
from hsk_trainer.domain.constants import DEFAULT_STORAGE_KEY
from hsk_trainer.domain.errors import StorageError
from hsk_trainer.domain.scheduling.models import ProgressMap
from hsk_trainer.domain.scheduling.ports import ProgressStore

logger = logging.getLogger(__name__)


class JsonFileProgressStore(ProgressStore):
    """
    Stores progress in a JSON file, replacing it atomically on every save.
    """

    def __init__(self, path: Path, storage_key: str = DEFAULT_STORAGE_KEY):
        self.path = Path(path)
        self.storage_key = storage_key

    def _read_records(self, for_write: bool = False) -> dict[str, Any]:
        """
        Read the whole record map.

        For a load, anything unreadable is a fresh start. Before a write, a
        file that cannot be read is left alone (StorageError) and one whose
        content is not a JSON object is moved aside, so no other record is
        lost by the rewrite.
        """
        if not self.path.exists():
            return {}
        try:
            data = self.path.read_bytes()
        except OSError as e:
            if for_write:
                raise StorageError(f"Could not read {self.path}: {e}") from e
            logger.warning(f"Could not read {self.path}: {e}")
            return {}

        try:
            raw = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            raw = None
        if isinstance(raw, dict):
            return raw

        if for_write:
            self._move_aside()
        else:
            logger.warning(f"Ignoring {self.path}: expected a JSON object")
        return {}

    def _move_aside(self) -> None:
        target = self.path.with_name(f"{self.path.name}.corrupt")
        try:
            os.replace(self.path, target)
        except OSError as e:
            raise StorageError(f"Could not move unreadable {self.path} aside: {e}") from e
        logger.warning(f"Moved unreadable {self.path} to {target}")

    def _write_records(self, records: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e

    def load(self) -> ProgressMap:
        raw = self._read_records().get(self.storage_key)
        return progress_from_json(raw if isinstance(raw, str) else None)

    def save(self, progress: ProgressMap) -> None:
        records = self._read_records(for_write=True)
        records[self.storage_key] = progress_to_json(progress)
        self._write_records(records)

    def clear(self) -> None:
        records = self._read_records(for_write=True)
        if self.storage_key not in records:
            return
        del records[self.storage_key]
        self._write_records(records)
