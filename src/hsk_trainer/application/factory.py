"""
Progress Store Factory
Centralizes the logic for selecting the appropriate storage adapter.
"""

import logging

from hsk_trainer.application.config import AppConfig
from hsk_trainer.domain.scheduling.ports import ProgressStore
from hsk_trainer.infrastructure.adapters.progress import (
    InMemoryProgressStore,
    JsonFileProgressStore,
    ResilientProgressStore,
    SqliteProgressStore,
)

logger = logging.getLogger(__name__)


def get_progress_store(config: AppConfig) -> ProgressStore:
    """
    Returns the ProgressStore selected by config, wrapped so that storage
    failures degrade to in-memory operation instead of ending the session.
    """
    if config.backend == "memory":
        return InMemoryProgressStore()

    inner: ProgressStore
    if config.backend == "sqlite":
        inner = SqliteProgressStore(config.resolved_progress_db, storage_key=config.storage_key)
        logger.debug(f"Backend: SQLite ({config.resolved_progress_db})")
    else:
        inner = JsonFileProgressStore(config.resolved_progress_file, storage_key=config.storage_key)
        logger.debug(f"Backend: JSON file ({config.resolved_progress_file})")

    return ResilientProgressStore(inner)
