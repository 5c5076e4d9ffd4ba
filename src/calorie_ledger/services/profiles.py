"""Daily calorie goal calculation."""

from calorie_ledger.domain.profile import (
    ACTIVITY_LEVELS,
    MINIMUM_DAILY_GOAL,
    SEDENTARY_MULTIPLIER,
    Profile,
    UserStats,
)
from calorie_ledger.services.numbers import parse_or_zero, round_half_up

KCAL_PER_KG_FAT = 7700
DAYS_PER_MONTH = 30


def basal_metabolic_rate(stats: UserStats) -> float:
    """Mifflin-St Jeor BMR in kcal/day."""
    bmr = 10 * stats.weight + 6.25 * stats.height - 5 * stats.age
    return bmr + (5 if stats.gender == "male" else -161)


def activity_multiplier(level: str) -> float:
    """Resolve an activity level string to its multiplier."""
    if level in ACTIVITY_LEVELS:
        return ACTIVITY_LEVELS[level]
    multiplier = parse_or_zero(level)
    return multiplier if multiplier > 0 else SEDENTARY_MULTIPLIER


def daily_deficit(stats: UserStats) -> float:
    """Daily kcal deficit needed for the monthly weight-loss target."""
    loss_per_month = stats.weight_loss_per_month or 0
    return loss_per_month * KCAL_PER_KG_FAT / DAYS_PER_MONTH


def clamp_goal(goal: float) -> int:
    """Round a daily goal and apply the minimum safe intake."""
    return max(MINIMUM_DAILY_GOAL, round_half_up(goal))


def calculate_profile(stats: UserStats) -> Profile:
    """Build a profile from stats entered in the profile form."""
    bmr = basal_metabolic_rate(stats)
    maintenance = bmr * activity_multiplier(stats.activity_level)
    return Profile(
        stats=stats,
        bmr=round_half_up(bmr),
        tdee=clamp_goal(maintenance - daily_deficit(stats)),
    )


def profile_from_analysis(stats: UserStats, calculated_goal: float) -> Profile:
    """Build a profile from conversationally extracted stats and goal."""
    return Profile(
        stats=stats,
        bmr=round_half_up(basal_metabolic_rate(stats)),
        tdee=clamp_goal(calculated_goal),
    )
