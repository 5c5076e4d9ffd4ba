"""Models for free-text analysis results."""

from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from calorie_ledger.domain.profile import UserStats

_REQUIRED_STATS = ("age", "gender", "weight", "height")


class ActionType(StrEnum):
    """What the user's free text was about."""

    PROFILE_SETUP = "PROFILE_SETUP"
    FOOD_ENTRY = "FOOD_ENTRY"
    UNKNOWN = "UNKNOWN"


class FoodItem(BaseModel):
    """Single food item extracted from text."""

    food_name: str
    amount_grams: float = Field(default=0.0, ge=0)
    calories: float = Field(ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)

    @field_validator("amount_grams", mode="before")
    @classmethod
    def _missing_amount(cls, value: object) -> object:
        return 0.0 if value is None else value


class AnalysisResult(BaseModel):
    """Structured output for a free-text analysis."""

    action_type: ActionType = ActionType.UNKNOWN
    user_stats: UserStats | None = None
    calculated_goal: float | None = None
    food_items: list[FoodItem] | None = None
    advice: str = ""

    @field_validator("action_type", mode="before")
    @classmethod
    def _unknown_action(cls, value: object) -> object:
        if isinstance(value, str) and value.upper() in ActionType.__members__:
            return value.upper()
        return ActionType.UNKNOWN

    @field_validator("user_stats", mode="before")
    @classmethod
    def _partial_stats(cls, value: object) -> object:
        # Structured outputs send every stats field, null when not mentioned.
        if not isinstance(value, dict):
            return value
        if any(value.get(key) is None for key in _REQUIRED_STATS):
            return None
        return {key: item for key, item in value.items() if item is not None}

    @field_validator("advice", mode="before")
    @classmethod
    def _empty_advice(cls, value: object) -> object:
        return value if isinstance(value, str) else ""
