"""Exception hierarchy shared by every layer."""


class TrainerError(Exception):
    """Base class for all errors raised by hsk-trainer."""


class InvalidGradeError(TrainerError, ValueError):
    """A grade outside of again/hard/good/easy was supplied."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid grade {value!r}; expected one of again, hard, good, easy.")


class StorageError(TrainerError):
    """The progress store could not be read or written."""


class VocabLoadError(TrainerError):
    """The vocabulary file is missing or unreadable."""


class UnknownItemError(TrainerError, KeyError):
    """An item id is not part of the loaded vocabulary."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(item_id)

    def __str__(self) -> str:
        return f"Unknown item id: {self.item_id}"
