"""
Progress statistics derived from the persisted scheduling state.

This is a pure computation module with no I/O.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from hsk_trainer.application.scheduler import ensure_state
from hsk_trainer.domain.constants import DAY_MS, TARGET_RETENTION
from hsk_trainer.domain.scheduling.models import CardState, Skill, SkillState
from hsk_trainer.domain.vocab import VocabItem


@dataclass
class SkillSummary:
    """Totals for one skill across the vocabulary."""

    reviewed: int = 0
    due: int = 0
    lapses: int = 0
    mean_stability: float | None = None
    mean_retrievability: float | None = None


@dataclass
class ProgressSummary:
    """
    Snapshot of learning progress.
    """

    total: int
    reviewed: int  # items with at least one review
    new: int  # items never reviewed
    due: int  # items whose aggregate due time has passed
    skills: dict[str, SkillSummary] = field(default_factory=dict)


class ProgressStatsCalculator:
    """
    Computes summary metrics from a progress map.

    Stateless and side-effect free.
    """

    def summarize(
        self,
        items: Sequence[VocabItem],
        progress: Mapping[str, CardState],
        now: int,
    ) -> ProgressSummary:
        cards = [ensure_state(item.id, progress) for item in items]
        reviewed = sum(1 for card in cards if card.last_reviewed is not None)

        return ProgressSummary(
            total=len(cards),
            reviewed=reviewed,
            new=len(cards) - reviewed,
            due=sum(1 for card in cards if card.due <= now),
            skills={skill.value: self._summarize_skill(cards, skill, now) for skill in Skill},
        )

    def _summarize_skill(self, cards: list[CardState], skill: Skill, now: int) -> SkillSummary:
        states = [card.skills.get(skill) for card in cards]
        states = [state for state in states if state is not None]
        seen = [state for state in states if state.last_reviewed is not None]

        summary = SkillSummary(
            reviewed=len(seen),
            due=sum(1 for state in states if state.due <= now),
            lapses=sum(state.lapses for state in states),
        )
        if seen:
            summary.mean_stability = sum(s.stability_days for s in seen) / len(seen)
            recall = [r for r in (self.retrievability(s, now) for s in seen) if r is not None]
            if recall:
                summary.mean_retrievability = sum(recall) / len(recall)
        return summary

    def retrievability(self, state: SkillState, now: int) -> float | None:
        """
        Estimate current recall probability.

        R = 0.9^(t/S) where t = days since last review, S = stability.
        """
        if state.last_reviewed is None or state.stability_days <= 0:
            return None

        days_elapsed = max(0, now - state.last_reviewed) / DAY_MS
        return TARGET_RETENTION ** (days_elapsed / state.stability_days)
