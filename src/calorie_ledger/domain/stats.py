"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class MacroTotals:
    """Summed macronutrients in grams."""

    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class WeeklyBucket:
    """Totals for one day of the current Saturday-to-Friday week."""

    day: date
    calories: float
    protein: float
    carbs: float
    fat: float
    goal: float
    is_future: bool


@dataclass(frozen=True)
class DailySummary:
    """Today's consumption against the calorie goal."""

    day: date
    consumed: float
    macros: MacroTotals
    goal: float | None
    remaining: float
