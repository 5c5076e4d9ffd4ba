"""Domain models for the user profile."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field

MINIMUM_DAILY_GOAL = 1200
DEFAULT_DAILY_GOAL = 2000

ACTIVITY_LEVELS: dict[str, float] = {
    "1.2": 1.2,
    "1.375": 1.375,
    "1.55": 1.55,
    "1.725": 1.725,
}
SEDENTARY_MULTIPLIER = 1.2


class UserStats(BaseModel):
    """Physical stats and weight goal for a user."""

    age: float = Field(gt=0)
    gender: Literal["male", "female"]
    weight: float = Field(gt=0)
    height: float = Field(gt=0)
    activity_level: str = "1.375"
    target_weight: float | None = Field(default=None, ge=0)
    weight_loss_per_month: float | None = Field(default=None, ge=0)


@dataclass(frozen=True)
class Profile:
    """User profile with the derived daily calorie goal."""

    stats: UserStats
    bmr: int
    tdee: int
