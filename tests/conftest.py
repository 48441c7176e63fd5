import os

import pytest

from hsk_trainer.domain.vocab import VocabItem
from hsk_trainer.infrastructure.adapters.progress import InMemoryProgressStore

T0 = 1_700_000_000_000


@pytest.fixture(autouse=True)
def mock_home(tmp_path, monkeypatch):
    """Points HOME at a temp dir and drops HSK_* variables to isolate config and data."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("HSK_"):
            monkeypatch.delenv(key)
    return home


@pytest.fixture
def items():
    return [
        VocabItem(id="hsk3-001", hanzi="爱好", pinyin="àihào", meaning="hobby"),
        VocabItem(id="hsk3-002", hanzi="阿姨", pinyin="āyí", meaning="aunt"),
        VocabItem(id="hsk3-003", hanzi="安静", pinyin="ānjìng", meaning="quiet"),
        VocabItem(id="hsk3-004", hanzi="把", pinyin="bǎ", meaning="to hold"),
        VocabItem(id="hsk3-005", hanzi="班", pinyin="bān", meaning="class"),
    ]


@pytest.fixture
def memory_store():
    return InMemoryProgressStore()


@pytest.fixture
def t0():
    """A fixed review time in epoch ms (2023-11-14)."""
    return T0


@pytest.fixture
def clock():
    """A settable clock returning epoch ms."""

    class Clock:
        def __init__(self):
            self.now = T0

        def __call__(self):
            return self.now

    return Clock()
