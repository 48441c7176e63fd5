import logging
from unittest.mock import MagicMock

from hsk_trainer.application.scheduler import ensure_state
from hsk_trainer.domain.errors import StorageError
from hsk_trainer.infrastructure.adapters.progress import (
    InMemoryProgressStore,
    ResilientProgressStore,
)


def test_passes_through_when_healthy():
    inner = InMemoryProgressStore()
    store = ResilientProgressStore(inner)
    progress = {"x": ensure_state("x", {})}

    store.save(progress)

    assert inner.load() == progress
    assert store.load() == progress
    assert store.degraded is False


def test_save_failure_degrades_to_memory(caplog):
    inner = MagicMock()
    inner.save.side_effect = StorageError("quota exceeded")
    store = ResilientProgressStore(inner)
    progress = {"x": ensure_state("x", {})}

    with caplog.at_level(logging.WARNING):
        store.save(progress)
        store.save(progress)

    assert store.degraded is True
    assert inner.save.call_count == 1
    assert store.load() == progress
    inner.load.assert_not_called()
    assert sum("continuing in memory" in r.message for r in caplog.records) == 1


def test_load_failure_starts_fresh():
    inner = MagicMock()
    inner.load.side_effect = StorageError("unreachable")
    store = ResilientProgressStore(inner)

    assert store.load() == {}
    assert store.degraded is True


def test_clear_failure_degrades():
    inner = MagicMock()
    inner.clear.side_effect = StorageError("read-only")
    store = ResilientProgressStore(inner)

    store.clear()

    assert store.degraded is True
    assert store.load() == {}


def test_in_memory_store_returns_detached_copies():
    store = InMemoryProgressStore()
    progress = {"x": ensure_state("x", {})}
    store.save(progress)

    loaded = store.load()
    loaded.clear()

    assert store.load() == progress
    store.clear()
    assert store.load() == {}
