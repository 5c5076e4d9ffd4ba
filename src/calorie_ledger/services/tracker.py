"""Application state and entry points for the calorie tracker."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from zoneinfo import ZoneInfo

from calorie_ledger.domain.analysis import ActionType, AnalysisResult
from calorie_ledger.domain.entries import MealSlot
from calorie_ledger.domain.profile import Profile, UserStats
from calorie_ledger.errors import InferenceError
from calorie_ledger.services.inference import InferenceService
from calorie_ledger.services.profiles import calculate_profile, profile_from_analysis
from calorie_ledger.services.reconciliation import ReconciliationService

_logger = logging.getLogger(__name__)

BREAKFAST_START_HOUR = 5
LUNCH_START_HOUR = 11
DINNER_START_HOUR = 16
LATE_SNACK_START_HOUR = 23


class AppStatus(StrEnum):
    """Status of the most recent analysis request."""

    IDLE = "IDLE"
    LOADING = "LOADING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class Outcome(StrEnum):
    """What an analysis request did to the application state."""

    IGNORED = "IGNORED"
    QUEUED = "QUEUED"
    PROFILE_UPDATED = "PROFILE_UPDATED"
    NO_ACTION = "NO_ACTION"
    FAILED = "FAILED"


@dataclass(frozen=True)
class AnalysisOutcome:
    """Result of submitting free text for analysis."""

    outcome: Outcome
    advice: str = ""
    queued: int = 0
    profile: Profile | None = None
    error: InferenceError | None = None


def default_meal_slot(hour: int) -> MealSlot:
    """Guess the meal slot from the local hour of day."""
    if BREAKFAST_START_HOUR <= hour < LUNCH_START_HOUR:
        return MealSlot.BREAKFAST
    if LUNCH_START_HOUR <= hour < DINNER_START_HOUR:
        return MealSlot.LUNCH
    if DINNER_START_HOUR <= hour < LATE_SNACK_START_HOUR:
        return MealSlot.DINNER
    return MealSlot.SNACK


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class TrackerService:
    """Routes analysis results into the review queue or the profile."""

    inference_service: InferenceService
    reconciliation: ReconciliationService
    timezone_name: str = "UTC"
    clock: Callable[[], datetime] = field(default=_utc_now)
    status: AppStatus = AppStatus.IDLE
    last_advice: str = ""

    async def analyze(
        self, text: str, meal_slot: MealSlot | None = None
    ) -> AnalysisOutcome:
        """Analyze free text and apply the result."""
        if not text.strip():
            return AnalysisOutcome(outcome=Outcome.IGNORED)

        now = self.clock()
        local_hour = now.astimezone(ZoneInfo(self.timezone_name)).hour
        slot = meal_slot or default_meal_slot(local_hour)
        self.status = AppStatus.LOADING
        try:
            result = await self.inference_service.analyze(text)
        except InferenceError as exc:
            _logger.exception("Analysis failed")
            self.status = AppStatus.ERROR
            return AnalysisOutcome(outcome=Outcome.FAILED, error=exc)

        if result.advice:
            self.last_advice = result.advice
        outcome = self._apply(result, slot, int(now.timestamp() * 1000))
        self.status = AppStatus.SUCCESS
        return outcome

    def _apply(
        self, result: AnalysisResult, meal_slot: MealSlot, intake_ms: int
    ) -> AnalysisOutcome:
        if result.action_type == ActionType.FOOD_ENTRY and result.food_items:
            queued = self.reconciliation.seed_batch(
                result.food_items, meal_slot, intake_ms
            )
            return AnalysisOutcome(
                outcome=Outcome.QUEUED, advice=result.advice, queued=queued
            )
        if (
            result.action_type == ActionType.PROFILE_SETUP
            and result.user_stats is not None
            and result.calculated_goal
        ):
            profile = profile_from_analysis(result.user_stats, result.calculated_goal)
            with self.reconciliation.lock:
                self.reconciliation.ledger.set_profile(profile)
            _logger.info("Profile updated from chat: tdee=%s", profile.tdee)
            return AnalysisOutcome(
                outcome=Outcome.PROFILE_UPDATED, advice=result.advice, profile=profile
            )
        return AnalysisOutcome(outcome=Outcome.NO_ACTION, advice=result.advice)

    def save_profile(self, stats: UserStats) -> Profile:
        """Recalculate and store the profile from the profile form."""
        profile = calculate_profile(stats)
        with self.reconciliation.lock:
            self.reconciliation.ledger.set_profile(profile)
        self.last_advice = "Profile saved. You can start logging meals now."
        _logger.info("Profile saved: bmr=%s tdee=%s", profile.bmr, profile.tdee)
        return profile

    def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry; unknown ids are a no-op."""
        with self.reconciliation.lock:
            removed = self.reconciliation.ledger.remove(entry_id)
        if removed:
            _logger.info("Entry deleted: id=%s", entry_id)
        return removed
