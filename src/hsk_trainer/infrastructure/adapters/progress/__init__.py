# Infrastructure Progress Adapters Package
from .json_file import JsonFileProgressStore
from .memory import InMemoryProgressStore
from .resilient import ResilientProgressStore
from .sqlite import SqliteProgressStore

__all__ = [
    "InMemoryProgressStore",
    "JsonFileProgressStore",
    "ResilientProgressStore",
    "SqliteProgressStore",
]
