# Domain Scheduling Package
from .models import CardState, Grade, ProgressMap, Skill, SkillSet, SkillState
from .ports import ProgressStore

__all__ = [
    "CardState",
    "Grade",
    "ProgressMap",
    "ProgressStore",
    "Skill",
    "SkillSet",
    "SkillState",
]
