"""Review and merge of confirmed entries into the ledger."""

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

from calorie_ledger.domain.analysis import FoodItem
from calorie_ledger.domain.entries import (
    Entry,
    EntryEdit,
    EntryKind,
    MacroEstimate,
    MealSlot,
    MeasurementUnit,
)
from calorie_ledger.errors import (
    EntryNotFoundError,
    InferenceError,
    RecalculationError,
    ReviewError,
)
from calorie_ledger.services.inference import InferenceService
from calorie_ledger.services.ledger import LedgerStore
from calorie_ledger.services.numbers import parse_or_zero, round_half_up, whole_or_zero
from calorie_ledger.services.review import ReviewQueue

_logger = logging.getLogger(__name__)

_UNITS = {unit.value for unit in MeasurementUnit}


@dataclass
class EntryIdFactory:
    """Issues entry ids from intake time that are never reused."""

    _last: int = 0

    def observe(self, entry_ids: Sequence[str]) -> None:
        """Make sure future ids sort after every existing numeric id."""
        for entry_id in entry_ids:
            if entry_id.isdigit():
                self._last = max(self._last, int(entry_id))

    def next_id(self, intake_ms: int) -> str:
        self._last = max(self._last + 1, intake_ms)
        return str(self._last)


@dataclass
class ReconciliationService:
    """Opens entries for review and commits confirmed edits to the ledger."""

    ledger: LedgerStore
    queue: ReviewQueue
    inference_service: InferenceService
    id_factory: EntryIdFactory = field(default_factory=EntryIdFactory)
    lock: threading.RLock = field(default_factory=threading.RLock)

    def seed_batch(
        self,
        food_items: Sequence[FoodItem],
        meal_slot: MealSlot | None,
        intake_ms: int,
    ) -> int:
        """Queue extracted food items for review and return how many."""
        if not food_items:
            return 0
        with self.lock:
            self.id_factory.observe([entry.id for entry in self.ledger.all()])
            entries = [
                _entry_from_food_item(
                    item,
                    entry_id=self.id_factory.next_id(intake_ms),
                    meal_slot=meal_slot,
                    intake_ms=intake_ms,
                )
                for item in food_items
            ]
            self.queue.seed(entries)
        _logger.info("Review batch seeded: items=%s", len(entries))
        return len(entries)

    def open_for_edit(self, entry_id: str) -> Entry:
        """Open a persisted entry for a one-off edit."""
        with self.lock:
            entry = self.ledger.get(entry_id)
            if entry is None:
                raise EntryNotFoundError(entry_id)
            self.queue.open_single(entry)
        return entry

    def commit(self, edit: EntryEdit) -> Entry:
        """Merge an edited entry into the ledger and move the review on."""
        with self.lock:
            current = self.queue.current()
            if current is None or current.id != edit.entry_id:
                raise ReviewError("Entry is not open for editing")
            committed = _apply_edit(current, edit)
            inserted = self.ledger.upsert(committed)
            if self.queue.is_batch_head(committed.id):
                self.queue.advance()
            else:
                self.queue.close()
        _logger.info(
            "Entry committed: id=%s inserted=%s calories=%s",
            committed.id,
            inserted,
            committed.calories,
        )
        return committed

    def skip(self) -> None:
        """Discard the batch head, or cancel a single edit."""
        with self.lock:
            current = self.queue.current()
            if current is None:
                return
            if self.queue.is_batch_head(current.id):
                self.queue.advance()
                _logger.info("Batch item skipped: id=%s", current.id)
            else:
                self.queue.close()

    async def recalculate(
        self, entry_id: str, description: str, amount: object, unit: str | None
    ) -> MacroEstimate | None:
        """Re-estimate macros for the open entry without committing.

        Returns None when the edit session closed while waiting.
        """
        if not description.strip():
            raise ReviewError("Description is required to recalculate")
        with self.lock:
            if not self.queue.is_open(entry_id):
                raise ReviewError("Entry is not open for editing")
        query = _recalculation_query(description, amount, unit)
        try:
            result = await self.inference_service.analyze(query)
        except InferenceError as exc:
            raise RecalculationError("Could not reach the nutrition model") from exc
        items = result.food_items or []
        if not items:
            raise RecalculationError("No food found to recalculate")
        with self.lock:
            if not self.queue.is_open(entry_id):
                _logger.info("Discarding stale recalculation for id=%s", entry_id)
                return None
        return MacroEstimate(
            entry_id=entry_id,
            calories=round_half_up(sum(item.calories for item in items)),
            protein=round_half_up(sum(item.protein or 0 for item in items)),
            carbs=round_half_up(sum(item.carbs or 0 for item in items)),
            fat=round_half_up(sum(item.fat or 0 for item in items)),
        )


def _entry_from_food_item(
    item: FoodItem, *, entry_id: str, meal_slot: MealSlot | None, intake_ms: int
) -> Entry:
    return Entry(
        id=entry_id,
        timestamp=intake_ms,
        description=item.food_name,
        kind=EntryKind.FOOD_ENTRY,
        meal_slot=meal_slot,
        calories=round_half_up(item.calories),
        protein=round_half_up(item.protein or 0),
        carbs=round_half_up(item.carbs or 0),
        fat=round_half_up(item.fat or 0),
        amount=item.amount_grams or 0,
        unit=MeasurementUnit.GRAM.value,
    )


def _apply_edit(current: Entry, edit: EntryEdit) -> Entry:
    return Entry(
        id=current.id,
        timestamp=current.timestamp,
        kind=current.kind,
        description=edit.description.strip() or current.description,
        meal_slot=edit.meal_slot or MealSlot.SNACK,
        calories=whole_or_zero(edit.calories),
        protein=whole_or_zero(edit.protein),
        carbs=whole_or_zero(edit.carbs),
        fat=whole_or_zero(edit.fat),
        amount=parse_or_zero(edit.amount),
        unit=_normalize_unit(edit.unit),
    )


def _normalize_unit(unit: str | None) -> str:
    if unit and unit in _UNITS:
        return unit
    return MeasurementUnit.GRAM.value


def _recalculation_query(description: str, amount: object, unit: str | None) -> str:
    quantity = parse_or_zero(amount)
    parts = [f"{quantity:g}" if quantity else "", _normalize_unit(unit), description]
    return " ".join(part for part in parts if part).strip()
