"""
Total (never-raising) conversion between persisted JSON and scheduling models.

Every field has a documented default; anything missing or of the wrong
type falls back to it instead of failing:

    due, intervalDays     -> 0
    stabilityDays         -> intervalDays
    difficulty            -> 2.5 (clamped to [1.3, 10])
    lapses                -> 0
    lastGrade             -> absent unless one of the four grade literals
    lastReviewed          -> absent unless a number
    skills                -> empty; unknown skill names are ignored
    id                    -> the record's key in the map
"""

import json
import logging
import math
from typing import Any

from hsk_trainer.domain.constants import DEFAULT_DIFFICULTY, MAX_DIFFICULTY, MIN_DIFFICULTY
from hsk_trainer.domain.scheduling.models import (
    CardState,
    Grade,
    ProgressMap,
    Skill,
    SkillSet,
    SkillState,
)

logger = logging.getLogger(__name__)


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _timestamp(value: Any, default: int | None) -> int | None:
    number = _number(value)
    return default if number is None else int(number)


def _days(value: Any, default: float) -> float:
    number = _number(value)
    return default if number is None else max(0.0, number)


def _grade(value: Any) -> Grade | None:
    try:
        return Grade(value)
    except ValueError:
        return None


def skill_state_from_dict(raw: Any) -> SkillState | None:
    """Decode one persisted skill record; non-objects are treated as absent."""
    if not isinstance(raw, dict):
        return None

    interval = _days(raw.get("intervalDays"), 0.0)
    difficulty = _number(raw.get("difficulty"))
    lapses = _number(raw.get("lapses"))

    return SkillState(
        due=_timestamp(raw.get("due"), 0),
        interval_days=interval,
        stability_days=_days(raw.get("stabilityDays"), interval),
        difficulty=(
            DEFAULT_DIFFICULTY
            if difficulty is None
            else max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, difficulty))
        ),
        lapses=0 if lapses is None else max(0, int(lapses)),
        last_grade=_grade(raw.get("lastGrade")),
        last_reviewed=_timestamp(raw.get("lastReviewed"), None),
    )


def card_state_from_dict(item_id: str, raw: Any) -> CardState | None:
    """Decode one persisted card record; non-objects are treated as absent."""
    if not isinstance(raw, dict):
        return None

    skills = SkillSet()
    raw_skills = raw.get("skills")
    if isinstance(raw_skills, dict):
        for skill in Skill:
            state = skill_state_from_dict(raw_skills.get(skill.value))
            if state is not None:
                skills = skills.with_skill(skill, state)

    stored_id = raw.get("id")
    return CardState(
        id=stored_id if isinstance(stored_id, str) and stored_id else item_id,
        due=_timestamp(raw.get("due"), 0),
        interval_days=_days(raw.get("intervalDays"), 0.0),
        last_grade=_grade(raw.get("lastGrade")),
        last_reviewed=_timestamp(raw.get("lastReviewed"), None),
        skills=skills,
    )


def progress_from_dict(raw: Any) -> ProgressMap:
    """Decode the whole progress map, dropping records that are not objects."""
    if not isinstance(raw, dict):
        return {}

    progress: ProgressMap = {}
    for item_id, record in raw.items():
        if not isinstance(item_id, str):
            continue
        card = card_state_from_dict(item_id, record)
        if card is None:
            logger.debug(f"Dropping malformed progress record for {item_id!r}")
            continue
        progress[item_id] = card
    return progress


def progress_from_json(text: str | None) -> ProgressMap:
    """Parse serialized progress. Empty or invalid JSON is a fresh start."""
    if not text:
        return {}
    try:
        raw = json.loads(text)
    except ValueError as e:
        logger.warning(f"Ignoring unreadable progress data: {e}")
        return {}
    return progress_from_dict(raw)


def skill_state_to_dict(state: SkillState) -> dict[str, Any]:
    data: dict[str, Any] = {
        "due": state.due,
        "intervalDays": state.interval_days,
        "stabilityDays": state.stability_days,
        "difficulty": state.difficulty,
        "lapses": state.lapses,
    }
    if state.last_grade is not None:
        data["lastGrade"] = state.last_grade.value
    if state.last_reviewed is not None:
        data["lastReviewed"] = state.last_reviewed
    return data


def card_state_to_dict(card: CardState) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": card.id,
        "due": card.due,
        "intervalDays": card.interval_days,
    }
    if card.last_grade is not None:
        data["lastGrade"] = card.last_grade.value
    if card.last_reviewed is not None:
        data["lastReviewed"] = card.last_reviewed
    data["skills"] = {
        skill.value: skill_state_to_dict(state) for skill, state in card.skills.present()
    }
    return data


def progress_to_dict(progress: ProgressMap) -> dict[str, Any]:
    return {item_id: card_state_to_dict(card) for item_id, card in progress.items()}


def progress_to_json(progress: ProgressMap) -> str:
    return json.dumps(progress_to_dict(progress), ensure_ascii=False)
