"""Vocabulary entries practiced by the learner. Owned by static content data."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class VocabItem:
    """One character or word."""

    id: str
    hanzi: str
    pinyin: str
    meaning: str
    traditional: str | None = None
    level: list[str] = field(default_factory=list)
    pos: list[str] = field(default_factory=list)
    frequency: int | None = None
