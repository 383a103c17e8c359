"""Domain exceptions raised by services and translated to HTTP errors in main."""

from __future__ import annotations


class InvalidIntervalError(ValueError):
    """A schedule item whose end is not after its start."""

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Item {item_id!r} has end_time <= start_time")


class DuplicateItemError(ValueError):
    """The same id appeared twice in one conflict computation."""

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Duplicate item id {item_id!r}")


class TalkNotFoundError(LookupError):
    def __init__(self, talk_id: str) -> None:
        self.talk_id = talk_id
        super().__init__("Talk not found")


class AlreadyScheduledError(ValueError):
    def __init__(self, talk_id: str) -> None:
        self.talk_id = talk_id
        super().__init__("Talk already in your schedule")


class EmailTakenError(ValueError):
    def __init__(self) -> None:
        super().__init__("An account with this email already exists")


class InvalidCredentialsError(ValueError):
    def __init__(self) -> None:
        super().__init__("Invalid email or password")
