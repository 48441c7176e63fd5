"""Load vocabulary lists from JSON or YAML files."""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from hsk_trainer.domain.errors import VocabLoadError
from hsk_trainer.domain.vocab import VocabItem

logger = logging.getLogger(__name__)

BUNDLED_VOCAB = "hsk3.sample.json"


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, (str, int))]


def parse_vocab_entry(raw: Any) -> VocabItem | None:
    """
    Build a VocabItem from one decoded entry, or None if it is unusable.

    id and hanzi must be non-empty strings; pinyin and meaning may be
    missing (empty) but not of another type.
    """
    if not isinstance(raw, dict):
        return None
    if any(not isinstance(raw.get(key), str) or not raw[key] for key in ("id", "hanzi")):
        return None
    if any(not isinstance(raw.get(key, ""), str) for key in ("pinyin", "meaning")):
        return None

    traditional = raw.get("traditional")
    frequency = raw.get("frequency")
    return VocabItem(
        id=raw["id"],
        hanzi=raw["hanzi"],
        pinyin=raw.get("pinyin", ""),
        meaning=raw.get("meaning", ""),
        traditional=traditional if isinstance(traditional, str) and traditional else None,
        level=_string_list(raw.get("level")),
        pos=_string_list(raw.get("pos")),
        frequency=(
            frequency if isinstance(frequency, int) and not isinstance(frequency, bool) else None
        ),
    )


def parse_vocab(entries: Any, source: str = "<data>") -> list[VocabItem]:
    """
    Convert decoded data into VocabItems.

    Entries without an id or hanzi are skipped with a warning. Duplicate ids
    keep the first occurrence.
    """
    if not isinstance(entries, list):
        raise VocabLoadError(f"{source}: expected a list of entries")

    items: list[VocabItem] = []
    seen: set[str] = set()
    for index, raw in enumerate(entries):
        item = parse_vocab_entry(raw)
        if item is None:
            logger.warning(f"{source}: skipping malformed entry #{index}")
            continue
        if item.id in seen:
            logger.warning(f"{source}: skipping duplicate id {item.id}")
            continue
        seen.add(item.id)
        items.append(item)
    return items


def load_vocab(path: Path | None = None) -> list[VocabItem]:
    """
    Load a vocabulary file. YAML is used for .yaml/.yml, JSON otherwise.
    Without a path the bundled HSK 3 sample deck is returned.
    """
    if path is None:
        bundled = resources.files("hsk_trainer.data").joinpath(BUNDLED_VOCAB)
        text = bundled.read_text(encoding="utf-8")
        return parse_vocab(json.loads(text), source=BUNDLED_VOCAB)

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise VocabLoadError(f"Could not read vocabulary {path}: {e}") from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, ValueError) as e:
        raise VocabLoadError(f"Could not parse vocabulary {path}: {e}") from e

    items = parse_vocab(data, source=str(path))
    logger.info(f"Loaded {len(items)} vocabulary items from {path}")
    return items
