"""Domain models for ledger entries."""

from dataclasses import dataclass
from enum import StrEnum


class EntryKind(StrEnum):
    """Kind of nutrition event recorded in the ledger."""

    FOOD_ENTRY = "FOOD_ENTRY"
    PROFILE_SETUP = "PROFILE_SETUP"


class MealSlot(StrEnum):
    """Meal an entry belongs to."""

    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    DINNER = "DINNER"
    SNACK = "SNACK"


class MeasurementUnit(StrEnum):
    """Fixed vocabulary of portion units."""

    GRAM = "g"
    TABLESPOON = "tbsp"
    LADLE = "ladle"
    CUP = "cup"
    PALM = "palm"
    PIECE = "piece"
    SLICE = "slice"
    PLATE = "plate"
    SKEWER = "skewer"


UNSPECIFIED_MEAL_LABEL = "unspecified"


@dataclass(frozen=True)
class Entry:
    """A single nutrition event in the history."""

    id: str
    timestamp: int
    description: str
    kind: EntryKind = EntryKind.FOOD_ENTRY
    meal_slot: MealSlot | None = None
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    amount: float | None = None
    unit: str | None = None

    @property
    def meal_label(self) -> str:
        """Return the meal slot name used for display."""
        return self.meal_slot.value if self.meal_slot else UNSPECIFIED_MEAL_LABEL


@dataclass(frozen=True)
class EntryEdit:
    """User-edited values for the entry currently open for review.

    Numeric fields hold whatever the user typed; they are normalised when
    the edit is committed.
    """

    entry_id: str
    description: str
    meal_slot: MealSlot | None = None
    amount: object = None
    unit: str | None = None
    calories: object = None
    protein: object = None
    carbs: object = None
    fat: object = None


@dataclass(frozen=True)
class MacroEstimate:
    """Freshly estimated macros for an entry under edit."""

    entry_id: str
    calories: float
    protein: float
    carbs: float
    fat: float
