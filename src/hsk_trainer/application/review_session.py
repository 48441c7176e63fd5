"""
Review session: Application layer orchestrator.

Holds the progress map for the duration of a session, turns grade events
into scheduler calls, and keeps the review queue in order.
"""

import logging
import threading
from collections.abc import Callable, Mapping, Sequence

from hsk_trainer.application.scheduler import ensure_state, next_state, now_ms, parse_grade
from hsk_trainer.domain.constants import DEFAULT_REQUEUE_OFFSET
from hsk_trainer.domain.errors import UnknownItemError
from hsk_trainer.domain.scheduling.models import CardState, Grade, ProgressMap
from hsk_trainer.domain.scheduling.ports import ProgressStore
from hsk_trainer.domain.vocab import VocabItem

logger = logging.getLogger(__name__)


def load_progress(store: ProgressStore) -> ProgressMap:
    """Read the persisted progress map (empty on a fresh or corrupt store)."""
    return store.load()


def save_progress(store: ProgressStore, progress: ProgressMap) -> None:
    """Persist the whole progress map."""
    store.save(progress)


def due_items(
    items: Sequence[VocabItem],
    progress: Mapping[str, CardState],
    now: int,
) -> list[tuple[VocabItem, CardState]]:
    """Items whose aggregate due time has passed with their states, earliest first."""
    states = [(item, ensure_state(item.id, progress)) for item in items]
    due = [(item, state) for item, state in states if state.due <= now]
    return sorted(due, key=lambda pair: pair[1].due)


def pick_due(
    items: Sequence[VocabItem],
    progress: Mapping[str, CardState],
    now: int,
) -> list[VocabItem]:
    """
    Build the review queue: due items, earliest first.

    When nothing is due every item is returned so practice keeps flowing.
    """
    due = [item for item, _ in due_items(items, progress, now)]
    return due or list(items)


class ReviewSession:
    """
    One learner's review session over a vocabulary list.

    Follows Dependency Inversion: depends on the ProgressStore port, not a
    concrete adapter. The session is the only writer of its progress map;
    grades may arrive from several threads (the HTTP server runs handlers in
    a pool), so each read-update-save runs under one lock.
    """

    def __init__(
        self,
        items: Sequence[VocabItem],
        store: ProgressStore,
        requeue_offset: int = DEFAULT_REQUEUE_OFFSET,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Args:
            items: Vocabulary to practice.
            store: Where progress is loaded from and saved to.
            requeue_offset: How many positions later a failed item reappears.
            clock: Source of epoch ms; injectable for tests.
        """
        self.items = list(items)
        self._by_id = {item.id: item for item in self.items}
        self._store = store
        self._requeue_offset = max(1, requeue_offset)
        self._clock = clock
        self._lock = threading.RLock()
        self.progress: ProgressMap = load_progress(store)
        self.queue: list[VocabItem] = pick_due(self.items, self.progress, self._clock())
        self.index = 0

    @property
    def current(self) -> VocabItem | None:
        if not self.queue:
            return None
        return self.queue[self.index % len(self.queue)]

    @property
    def remaining(self) -> int:
        return len(self.queue)

    def state_for(self, item_id: str) -> CardState:
        if item_id not in self._by_id:
            raise UnknownItemError(item_id)
        return ensure_state(item_id, self.progress)

    def apply(
        self,
        item_id: str,
        grade: Grade | str,
        practiced_writing: bool = True,
        now: int | None = None,
    ) -> CardState:
        """Grade an arbitrary item without touching the queue position."""
        grade = parse_grade(grade)
        with self._lock:
            current = self.state_for(item_id)
            updated = next_state(
                current,
                grade,
                now=self._clock() if now is None else now,
                practiced_writing=practiced_writing,
            )

            self.progress = {**self.progress, item_id: updated}
            save_progress(self._store, self.progress)
        logger.debug(f"Graded {item_id} as {grade.value}; next due {updated.due}")
        return updated

    def grade(
        self,
        grade: Grade | str,
        practiced_writing: bool = True,
        now: int | None = None,
    ) -> CardState | None:
        """
        Grade the current item and move the queue along.

        An "again" moves the item a few positions later in this session;
        any other grade advances to the next item.
        """
        grade = parse_grade(grade)
        with self._lock:
            item = self.current
            if item is None:
                return None

            updated = self.apply(item.id, grade, practiced_writing=practiced_writing, now=now)

            if grade is Grade.AGAIN:
                self._requeue_current()
            else:
                self.skip()
        return updated

    def skip(self) -> None:
        if self.queue:
            self.index = (self.index + 1) % len(self.queue)

    def reset(self) -> None:
        """Forget all progress and start over with every item queued."""
        with self._lock:
            self._store.clear()
            self.progress = {}
            self.queue = list(self.items)
            self.index = 0
        logger.info("Progress reset")

    def _requeue_current(self) -> None:
        position = self.index % len(self.queue)
        queue = list(self.queue)
        removed = queue.pop(position)
        queue.insert(min(len(queue), position + self._requeue_offset), removed)
        self.queue = queue
        self.index = position
