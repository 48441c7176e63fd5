"""hsk-trainer: spaced-repetition trainer for reading and writing Chinese characters."""

from hsk_trainer.consts import VERSION

__version__ = VERSION
