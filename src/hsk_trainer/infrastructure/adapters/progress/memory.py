"""
In-Memory Progress Store: keeps the serialized record in process memory.
"""

from hsk_trainer.application.progress_codec import progress_from_json, progress_to_json
from hsk_trainer.domain.scheduling.models import ProgressMap
from hsk_trainer.domain.scheduling.ports import ProgressStore


class InMemoryProgressStore(ProgressStore):
    """
    Holds progress as the same JSON text a durable store would write, so
    loads always return fresh values detached from the caller's map.
    """

    def __init__(self, raw: str | None = None):
        self.raw = raw

    def load(self) -> ProgressMap:
        return progress_from_json(self.raw)

    def save(self, progress: ProgressMap) -> None:
        self.raw = progress_to_json(progress)

    def clear(self) -> None:
        self.raw = None
