"""
Resilient Progress Store: degrades to memory when durable storage fails.

A session must never crash because the disk is full or the database is
locked; it keeps working in memory and warns once.
"""

import logging

from hsk_trainer.domain.errors import StorageError
from hsk_trainer.domain.scheduling.models import ProgressMap
from hsk_trainer.domain.scheduling.ports import ProgressStore

from .memory import InMemoryProgressStore

logger = logging.getLogger(__name__)


class ResilientProgressStore(ProgressStore):
    """
    Wraps another ProgressStore.

    After the first StorageError every call is served from memory for the
    rest of the process lifetime.
    """

    def __init__(self, inner: ProgressStore):
        self.inner = inner
        self.fallback = InMemoryProgressStore()
        self.degraded = False

    def _degrade(self, action: str, error: StorageError) -> None:
        if not self.degraded:
            logger.warning(f"Progress {action} failed ({error}); continuing in memory only.")
        self.degraded = True

    def load(self) -> ProgressMap:
        if self.degraded:
            return self.fallback.load()
        try:
            return self.inner.load()
        except StorageError as e:
            self._degrade("load", e)
            return {}

    def save(self, progress: ProgressMap) -> None:
        if not self.degraded:
            try:
                self.inner.save(progress)
                return
            except StorageError as e:
                self._degrade("save", e)
        self.fallback.save(progress)

    def clear(self) -> None:
        self.fallback.clear()
        if self.degraded:
            return
        try:
            self.inner.clear()
        except StorageError as e:
            self._degrade("clear", e)
