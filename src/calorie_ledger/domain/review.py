"""Review session states for confirming extracted entries."""

from dataclasses import dataclass

from calorie_ledger.domain.entries import Entry


@dataclass(frozen=True)
class Idle:
    """No entry is open for editing."""


@dataclass(frozen=True)
class BatchOpen:
    """A batch of unconfirmed entries; the head is open for editing."""

    queue: tuple[Entry, ...]
    original_length: int

    @property
    def head(self) -> Entry:
        return self.queue[0]


@dataclass(frozen=True)
class SingleEdit:
    """An already persisted entry opened directly for editing."""

    entry: Entry


ReviewState = Idle | BatchOpen | SingleEdit


@dataclass(frozen=True)
class ReviewProgress:
    """Position of the open entry within its batch, 1-based."""

    position: int
    total: int
