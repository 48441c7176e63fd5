import json

import pytest

from hsk_trainer.application.progress_codec import (
    card_state_from_dict,
    card_state_to_dict,
    progress_from_json,
    progress_to_json,
    skill_state_from_dict,
)
from hsk_trainer.application.scheduler import ensure_state, next_state
from hsk_trainer.domain.scheduling.models import CardState, Grade, SkillState


@pytest.mark.parametrize("text", [None, "", "{not json", "[1, 2]", '"hello"', "null"])
def test_unreadable_progress_is_empty(text):
    assert progress_from_json(text) == {}


def test_persisted_shape_uses_camel_case_keys(t0):
    card = next_state(ensure_state("hsk3-001", {}), "good", t0)

    data = json.loads(progress_to_json({"hsk3-001": card}))

    record = data["hsk3-001"]
    assert record["id"] == "hsk3-001"
    assert record["lastGrade"] == "good"
    assert record["lastReviewed"] == t0
    assert set(record["skills"]) == {"recognize", "write"}
    assert set(record["skills"]["write"]) == {
        "due",
        "intervalDays",
        "stabilityDays",
        "difficulty",
        "lapses",
        "lastGrade",
        "lastReviewed",
    }


def test_absent_optional_fields_are_omitted():
    data = card_state_to_dict(CardState(id="x"))
    assert data == {"id": "x", "due": 0, "intervalDays": 0.0, "skills": {}}


def test_reviewed_progress_survives_serialization(t0):
    card = next_state(ensure_state("x", {}), "again", t0)
    card = next_state(card, "easy", t0 + 60_000, practiced_writing=False)

    assert progress_from_json(progress_to_json({"x": card})) == {"x": card}


def test_legacy_record_without_skills(t0):
    raw = {"id": "x", "due": t0, "intervalDays": 3}

    card = card_state_from_dict("x", raw)

    assert card == CardState(id="x", due=t0, interval_days=3.0)
    assert card.skills.recognize is None


def test_partial_skill_record_gets_documented_defaults():
    state = skill_state_from_dict({"intervalDays": 4})
    assert state == SkillState(
        due=0, interval_days=4.0, stability_days=4.0, difficulty=2.5, lapses=0
    )


def test_invalid_field_values_fall_back():
    state = skill_state_from_dict(
        {
            "due": "tomorrow",
            "intervalDays": -2,
            "stabilityDays": None,
            "difficulty": 99,
            "lapses": True,
            "lastGrade": "meh",
            "lastReviewed": "yesterday",
        }
    )
    assert state.due == 0
    assert state.interval_days == 0
    assert state.stability_days == 0
    assert state.difficulty == 10
    assert state.lapses == 0
    assert state.last_grade is None
    assert state.last_reviewed is None


def test_non_object_records_are_dropped(t0):
    text = json.dumps(
        {
            "a": "garbage",
            "b": {"due": t0, "skills": {"write": 7, "recognize": {"lapses": 2}, "speak": {}}},
        }
    )

    progress = progress_from_json(text)

    assert list(progress) == ["b"]
    card = progress["b"]
    assert card.id == "b"
    assert card.skills.write is None
    assert card.skills.recognize.lapses == 2


def test_grade_values_decode_to_enum():
    card = card_state_from_dict("x", {"lastGrade": "hard"})
    assert card.last_grade is Grade.HARD
