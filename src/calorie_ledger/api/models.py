"""Pydantic models for API request payloads."""

from pydantic import BaseModel, Field

from calorie_ledger.domain.entries import EntryEdit, MealSlot


class AnalyzeRequest(BaseModel):
    """Free text describing a meal or personal stats."""

    text: str
    meal_slot: MealSlot | None = None


class CommitRequest(BaseModel):
    """Confirmed values for the entry open for review.

    Numeric fields accept raw form input; anything unparsable becomes 0.
    """

    entry_id: str
    description: str
    meal_slot: MealSlot | None = None
    amount: float | str | None = None
    unit: str | None = None
    calories: float | str | None = None
    protein: float | str | None = None
    carbs: float | str | None = None
    fat: float | str | None = None

    def to_edit(self) -> EntryEdit:
        """Convert the payload into an entry edit."""
        return EntryEdit(
            entry_id=self.entry_id,
            description=self.description,
            meal_slot=self.meal_slot,
            amount=self.amount,
            unit=self.unit,
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
        )


class RecalculateRequest(BaseModel):
    """Portion details used to re-estimate macros for the open entry."""

    entry_id: str
    description: str = Field(min_length=1)
    amount: float | str | None = None
    unit: str | None = None
