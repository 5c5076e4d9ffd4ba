"""Review queue state machine for confirming entries one at a time."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from calorie_ledger.domain.entries import Entry
from calorie_ledger.domain.review import (
    BatchOpen,
    Idle,
    ReviewProgress,
    ReviewState,
    SingleEdit,
)
from calorie_ledger.errors import ReviewError

_logger = logging.getLogger(__name__)


@dataclass
class ReviewQueue:
    """Holds the entry currently open for editing.

    A seeded batch is consumed strictly from its head. Editing a persisted
    entry directly is a separate single-edit state that never touches a
    batch.
    """

    state: ReviewState = field(default_factory=Idle)

    def seed(self, items: Sequence[Entry]) -> None:
        """Replace the queue with a new batch and open its first item."""
        if not items:
            return
        if isinstance(self.state, BatchOpen):
            _logger.info(
                "Replacing open batch with %s unreviewed items", len(self.state.queue)
            )
        self.state = BatchOpen(queue=tuple(items), original_length=len(items))

    def current(self) -> Entry | None:
        """Return the entry open for editing, if any."""
        if isinstance(self.state, BatchOpen):
            return self.state.head
        if isinstance(self.state, SingleEdit):
            return self.state.entry
        return None

    def advance(self) -> None:
        """Drop the batch head; an emptied batch returns to idle."""
        if not isinstance(self.state, BatchOpen):
            return
        rest = self.state.queue[1:]
        if rest:
            self.state = BatchOpen(queue=rest, original_length=self.state.original_length)
        else:
            self.state = Idle()

    def progress(self) -> ReviewProgress | None:
        """Return the 1-based batch position of the open entry."""
        if not isinstance(self.state, BatchOpen):
            return None
        original = self.state.original_length
        return ReviewProgress(
            position=original - len(self.state.queue) + 1,
            total=original,
        )

    def open_single(self, entry: Entry) -> None:
        """Open a persisted entry for a one-off edit."""
        if isinstance(self.state, BatchOpen):
            raise ReviewError("Finish reviewing the current batch first")
        self.state = SingleEdit(entry=entry)

    def close(self) -> None:
        """End a single edit without touching any batch."""
        if isinstance(self.state, SingleEdit):
            self.state = Idle()

    def is_batch_head(self, entry_id: str) -> bool:
        return isinstance(self.state, BatchOpen) and self.state.head.id == entry_id

    def is_open(self, entry_id: str) -> bool:
        current = self.current()
        return current is not None and current.id == entry_id
