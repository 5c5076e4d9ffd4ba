"""Free-text nutrition analysis using LLMs."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from calorie_ledger.domain.analysis import AnalysisResult
from calorie_ledger.errors import InferenceError

_logger = logging.getLogger(__name__)


def _nullable(schema: dict[str, object]) -> dict[str, object]:
    return {"anyOf": [schema, {"type": "null"}]}


_USER_STATS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "age": _nullable({"type": "number"}),
        "gender": _nullable({"type": "string", "enum": ["male", "female"]}),
        "weight": _nullable({"type": "number"}),
        "height": _nullable({"type": "number"}),
        "activity_level": _nullable(
            {"type": "string", "enum": ["1.2", "1.375", "1.55", "1.725"]}
        ),
        "target_weight": _nullable({"type": "number"}),
        "weight_loss_per_month": _nullable({"type": "number"}),
    },
    "required": [
        "age",
        "gender",
        "weight",
        "height",
        "activity_level",
        "target_weight",
        "weight_loss_per_month",
    ],
    "additionalProperties": False,
}

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "action_type": {
            "type": "string",
            "enum": ["PROFILE_SETUP", "FOOD_ENTRY", "UNKNOWN"],
        },
        "user_stats": _nullable(_USER_STATS_SCHEMA),
        "calculated_goal": _nullable({"type": "number"}),
        "food_items": _nullable(
            {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "food_name": {"type": "string"},
                        "amount_grams": {"type": "number", "minimum": 0},
                        "calories": {"type": "number", "minimum": 0},
                        "protein": _nullable({"type": "number", "minimum": 0}),
                        "carbs": _nullable({"type": "number", "minimum": 0}),
                        "fat": _nullable({"type": "number", "minimum": 0}),
                    },
                    "required": [
                        "food_name",
                        "amount_grams",
                        "calories",
                        "protein",
                        "carbs",
                        "fat",
                    ],
                    "additionalProperties": False,
                },
            }
        ),
        "advice": {"type": "string"},
    },
    "required": [
        "action_type",
        "user_stats",
        "calculated_goal",
        "food_items",
        "advice",
    ],
    "additionalProperties": False,
}

SYSTEM_INSTRUCTIONS = """\
You are a nutrition and health assistant that maintains a calorie log and
works out the user's daily calorie needs.

1. If the user gives physical stats (age, height, weight, gender, activity)
   or a weight goal (target weight, kilograms to lose per month):
   - set action_type to "PROFILE_SETUP" and extract the stats;
   - compute BMR with Mifflin-St Jeor:
     men: 10*weight + 6.25*height - 5*age + 5
     women: 10*weight + 6.25*height - 5*age - 161
   - multiply by the activity factor: sedentary 1.2, light 1.375,
     moderate 1.55, very active 1.725;
   - one kilogram of body fat is about 7700 kcal, so losing X kg per month
     needs a daily deficit of X * 7700 / 30;
   - calculated_goal is maintenance minus the deficit, never below 1200.
2. If the user names foods:
   - set action_type to "FOOD_ENTRY" and list every food separately;
   - when no amount is given, estimate a typical portion and compute
     calories, protein, carbs and fat for that estimated amount.
3. In advice:
   - if you estimated an amount, say which amount you assumed and ask the
     user to check the weight before confirming;
   - add one short health tip.
Otherwise set action_type to "UNKNOWN".
"""


class InferenceClient(Protocol):
    """Interface for structured LLM completions."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured output for a prompt."""


@dataclass
class InferenceService:
    """Service that prepares analysis prompts and validates results."""

    client: InferenceClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(self, text: str) -> AnalysisResult:
        """Classify free text and extract food items or profile stats."""
        try:
            raw = await self.client.complete(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                instructions=SYSTEM_INSTRUCTIONS,
                schema=ANALYSIS_SCHEMA,
                prompt=text,
            )
        except Exception as exc:
            raise InferenceError(f"Analysis request failed: {exc}") from exc
        try:
            result = AnalysisResult.model_validate(raw)
        except ValidationError as exc:
            raise InferenceError("Analysis response did not match schema") from exc
        _logger.info(
            "Analysis complete: action=%s items=%s",
            result.action_type,
            len(result.food_items or []),
        )
        return result
