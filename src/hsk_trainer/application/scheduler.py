"""
Review scheduler: per-skill memory model and grade application.

This is a pure computation module with no I/O. Every function returns new
frozen values and never mutates its inputs.
"""

import math
import time
from collections.abc import Mapping
from dataclasses import replace

from hsk_trainer.domain.constants import (
    AGAIN_DELAY_MS,
    AGAIN_DIFFICULTY_STEP,
    AGAIN_STABILITY_FACTOR,
    BOOTSTRAP_STABILITY_DAYS,
    BOOTSTRAP_THRESHOLD_DAYS,
    DAY_MS,
    DEFAULT_DIFFICULTY,
    GROWTH_PER_DIFFICULTY,
    GROWTH_PER_QUALITY,
    MAX_DIFFICULTY,
    MAX_INTERVAL_DAYS,
    MIN_DIFFICULTY,
    MIN_GROWTH,
    MIN_INTERVAL_DAYS,
    MIN_STABILITY_DAYS,
    MIN_SUCCESS_STABILITY_DAYS,
    RECOGNIZE_INTERVAL_FACTOR,
    SUCCESS_DIFFICULTY_STEP,
    WRITE_INTERVAL_FACTOR,
)
from hsk_trainer.domain.errors import InvalidGradeError
from hsk_trainer.domain.scheduling.models import CardState, Grade, Skill, SkillSet, SkillState

# There is no quality 2: a failure is a steep drop and every pass starts at 3.
GRADE_QUALITY: dict[Grade, int] = {
    Grade.AGAIN: 1,
    Grade.HARD: 3,
    Grade.GOOD: 4,
    Grade.EASY: 5,
}

PASSING_QUALITY = 3

SKILL_INTERVAL_FACTOR: dict[Skill, float] = {
    Skill.RECOGNIZE: RECOGNIZE_INTERVAL_FACTOR,
    Skill.WRITE: WRITE_INTERVAL_FACTOR,
}


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def parse_grade(value: Grade | str) -> Grade:
    """
    Coerce a caller-supplied grade into a Grade.

    Accepts Grade members or the four literals (case-insensitive).
    Anything else is rejected rather than clamped.
    """
    if isinstance(value, Grade):
        return value
    if isinstance(value, str):
        try:
            return Grade(value.strip().lower())
        except ValueError:
            pass
    raise InvalidGradeError(value)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def update_skill(state: SkillState, grade: Grade | str, now: int, skill: Skill) -> SkillState:
    """
    Apply one grade to one skill.

    Failure (again): lapse recorded, difficulty up, stability halved and the
    skill is due again in 30 seconds. Success: stability grown by a grade-
    and difficulty-dependent multiplier, and the next interval derived from
    stability via the skill's factor. The multiplier reads the difficulty the
    skill had before this review; the lowered difficulty is what gets stored.
    """
    grade = parse_grade(grade)
    q = GRADE_QUALITY[grade]

    if q < PASSING_QUALITY:
        return replace(
            state,
            due=now + AGAIN_DELAY_MS,
            interval_days=0.0,
            stability_days=max(MIN_STABILITY_DAYS, state.stability_days * AGAIN_STABILITY_FACTOR),
            difficulty=_clamp(
                state.difficulty + AGAIN_DIFFICULTY_STEP * (PASSING_QUALITY - q),
                MIN_DIFFICULTY,
                MAX_DIFFICULTY,
            ),
            lapses=state.lapses + 1,
            last_grade=grade,
            last_reviewed=now,
        )

    difficulty = _clamp(
        state.difficulty - SUCCESS_DIFFICULTY_STEP * (q - 2),
        MIN_DIFFICULTY,
        MAX_DIFFICULTY,
    )

    stability = state.stability_days
    if stability < BOOTSTRAP_THRESHOLD_DAYS:
        stability = BOOTSTRAP_STABILITY_DAYS

    growth = (
        1
        + GROWTH_PER_QUALITY * (q - 2)
        - GROWTH_PER_DIFFICULTY * (state.difficulty - DEFAULT_DIFFICULTY)
    )
    growth = max(MIN_GROWTH, growth)
    stability = max(MIN_SUCCESS_STABILITY_DAYS, stability * growth)

    interval = _clamp(
        stability * SKILL_INTERVAL_FACTOR[skill], MIN_INTERVAL_DAYS, MAX_INTERVAL_DAYS
    )

    return replace(
        state,
        due=now + _round_half_up(interval * DAY_MS),
        interval_days=interval,
        stability_days=stability,
        difficulty=difficulty,
        last_grade=grade,
        last_reviewed=now,
    )


def ensure_skill(card: CardState, skill: Skill) -> SkillState:
    """
    Return the card's state for a skill, synthesizing it when absent.

    Missing skills are seeded from the card's flat fields, which carry the
    schedule of records written before per-skill tracking existed. For a
    never-reviewed card those fields are all zero, giving the default state.
    """
    existing = card.skills.get(skill)
    if existing is not None:
        return existing

    return SkillState(
        due=card.due,
        interval_days=card.interval_days,
        stability_days=card.interval_days,
        difficulty=DEFAULT_DIFFICULTY,
        lapses=0,
        last_grade=card.last_grade,
        last_reviewed=card.last_reviewed,
    )


def compute_aggregate(card: CardState, skills: SkillSet) -> CardState:
    """
    Rebuild the card-level fields from a skill set.

    due is the earliest due over present skills. The remaining flat fields
    mirror the recognize skill, falling back to the card's own values.
    """
    dues = [state.due for _, state in skills.present()]
    due = min(dues) if dues else card.due

    primary = skills.recognize
    if primary is None:
        return replace(card, due=due, skills=skills)

    return replace(
        card,
        due=due,
        interval_days=primary.interval_days,
        last_grade=primary.last_grade,
        last_reviewed=primary.last_reviewed,
        skills=skills,
    )


def ensure_state(item_id: str, state_map: Mapping[str, CardState]) -> CardState:
    """
    Return a fully-populated CardState for an item.

    Unknown ids are a valid "never reviewed" state. The map is not modified.
    """
    card = state_map.get(item_id)
    if card is None:
        card = CardState(id=item_id)

    skills = card.skills
    for skill in Skill:
        if skills.get(skill) is None:
            skills = skills.with_skill(skill, ensure_skill(card, skill))

    if skills is card.skills:
        return card
    return replace(card, skills=skills)


def next_state(
    prev: CardState,
    grade: Grade | str,
    now: int | None = None,
    practiced_writing: bool = True,
) -> CardState:
    """
    Compute the card state after one review.

    Args:
        prev: Current state, typically from ensure_state().
        grade: again, hard, good or easy.
        now: Epoch ms of the review; defaults to wall-clock time.
        practiced_writing: False when writing was not exercised (the card was
            only looked at, or traced), which leaves the write skill untouched.

    Returns:
        A new CardState; prev is not modified.

    Raises:
        InvalidGradeError: If grade is not one of the four literals.
    """
    grade = parse_grade(grade)
    if now is None:
        now = now_ms()

    skills = prev.skills
    recognize = update_skill(ensure_skill(prev, Skill.RECOGNIZE), grade, now, Skill.RECOGNIZE)
    skills = skills.with_skill(Skill.RECOGNIZE, recognize)

    write = ensure_skill(prev, Skill.WRITE)
    if practiced_writing:
        write = update_skill(write, grade, now, Skill.WRITE)
    skills = skills.with_skill(Skill.WRITE, write)

    return compute_aggregate(prev, skills)


def due_skills(card: CardState, now: int) -> list[Skill]:
    """Skills of a card that are due at `now`, earliest first."""
    full = ensure_state(card.id, {card.id: card})
    due = [(state.due, skill) for skill, state in full.skills.present()]
    return [skill for at, skill in sorted(due, key=lambda pair: pair[0]) if at <= now]
