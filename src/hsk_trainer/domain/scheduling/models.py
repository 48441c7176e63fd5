"""
Domain models for review scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import Enum

from hsk_trainer.domain.constants import DEFAULT_DIFFICULTY


class Grade(str, Enum):
    """Self-reported recall quality, from worst to best."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


class Skill(str, Enum):
    """Independently scheduled practice modes."""

    RECOGNIZE = "recognize"
    WRITE = "write"


@dataclass(frozen=True)
class SkillState:
    """
    Memory state for one (item, skill) pair.

    Attributes:
        due: Epoch ms at which this skill should next be reviewed.
        interval_days: Scheduled gap used to compute the next due time.
        stability_days: Internal memory-strength estimate.
        difficulty: Item hardness in [1.3, 10].
        lapses: Number of failed reviews.
        last_grade: Most recent grade applied.
        last_reviewed: Epoch ms of the most recent review.
    """

    due: int = 0
    interval_days: float = 0.0
    stability_days: float = 0.0
    difficulty: float = DEFAULT_DIFFICULTY
    lapses: int = 0
    last_grade: Grade | None = None
    last_reviewed: int | None = None


@dataclass(frozen=True)
class SkillSet:
    """Per-skill states of a card. A slot is None until the skill is first touched."""

    recognize: SkillState | None = None
    write: SkillState | None = None

    def get(self, skill: Skill) -> SkillState | None:
        return getattr(self, skill.value)

    def with_skill(self, skill: Skill, state: SkillState) -> "SkillSet":
        return replace(self, **{skill.value: state})

    def present(self) -> Iterator[tuple[Skill, SkillState]]:
        """Yield (skill, state) for every populated slot, in Skill order."""
        for skill in Skill:
            state = self.get(skill)
            if state is not None:
                yield skill, state


@dataclass(frozen=True)
class CardState:
    """
    Aggregate scheduling state for one item.

    The flat fields mirror the recognize skill (due is the minimum over
    skills) so older single-skill records and simple due sorting keep working.
    """

    id: str
    due: int = 0
    interval_days: float = 0.0
    last_grade: Grade | None = None
    last_reviewed: int | None = None
    skills: SkillSet = field(default_factory=SkillSet)


ProgressMap = dict[str, CardState]
