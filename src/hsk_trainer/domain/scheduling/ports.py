"""
Ports (interfaces) for progress persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import ProgressMap


class ProgressStore(ABC):
    """
    Port for loading and saving the whole progress map.

    Implementations:
        - JsonFileProgressStore: A JSON key/value document on disk.
        - SqliteProgressStore: A key/value table in SQLite.
        - InMemoryProgressStore: Process memory only.
        - ResilientProgressStore: Wraps another store and degrades to memory.
    """

    @abstractmethod
    def load(self) -> ProgressMap:
        """
        Read the persisted progress map.

        Returns:
            Mapping of item id to CardState. Missing or corrupt content
            yields an empty mapping.

        Raises:
            StorageError: If the underlying store cannot be reached at all.
        """
        pass

    @abstractmethod
    def save(self, progress: ProgressMap) -> None:
        """
        Replace the persisted progress map.

        Raises:
            StorageError: If the write did not reach durable storage.
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all persisted progress."""
        pass
