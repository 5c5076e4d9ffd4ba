"""Daily and weekly aggregates over the ledger."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from calorie_ledger.domain.entries import Entry, EntryKind
from calorie_ledger.domain.profile import DEFAULT_DAILY_GOAL, Profile
from calorie_ledger.domain.stats import DailySummary, MacroTotals, WeeklyBucket
from calorie_ledger.services.ledger import LedgerStore

DAY_MS = 86_400_000
DAYS_PER_WEEK = 7


def day_start_ms(day: date, tz: ZoneInfo) -> int:
    """Return local midnight of a day as epoch milliseconds."""
    start = datetime.combine(day, time(), tzinfo=tz)
    return int(start.timestamp() * 1000)


def food_entries_between(
    entries: Iterable[Entry], start_ms: int, end_ms: int
) -> list[Entry]:
    """Return food entries timestamped in [start_ms, end_ms)."""
    return [
        entry
        for entry in entries
        if entry.kind == EntryKind.FOOD_ENTRY and start_ms <= entry.timestamp < end_ms
    ]


def consumed_on(entries: Iterable[Entry], day: date, tz: ZoneInfo) -> float:
    """Sum of calories eaten on a local calendar day."""
    start = day_start_ms(day, tz)
    end = day_start_ms(day + timedelta(days=1), tz)
    return sum(entry.calories for entry in food_entries_between(entries, start, end))


def macros_on(entries: Iterable[Entry], day: date, tz: ZoneInfo) -> MacroTotals:
    """Summed macros eaten on a local calendar day."""
    start = day_start_ms(day, tz)
    end = day_start_ms(day + timedelta(days=1), tz)
    eaten = food_entries_between(entries, start, end)
    return MacroTotals(
        protein=sum(entry.protein for entry in eaten),
        carbs=sum(entry.carbs for entry in eaten),
        fat=sum(entry.fat for entry in eaten),
    )


def remaining_calories(profile: Profile | None, consumed: float) -> float:
    """Calories left in today's budget; never negative."""
    if profile is None:
        return 0
    return max(0, profile.tdee - consumed)


def week_start(today: date) -> date:
    """Return the Saturday that starts the week containing today."""
    sunday_based = (today.weekday() + 1) % 7
    days_from_saturday = (sunday_based + 1) % 7
    return today - timedelta(days=days_from_saturday)


def weekly_breakdown(
    entries: Iterable[Entry], profile: Profile | None, today: date, tz: ZoneInfo
) -> list[WeeklyBucket]:
    """Per-day totals for the Saturday-to-Friday week containing today."""
    entries = list(entries)
    goal = profile.tdee if profile else DEFAULT_DAILY_GOAL
    start = week_start(today)
    buckets: list[WeeklyBucket] = []
    for offset in range(DAYS_PER_WEEK):
        day = start + timedelta(days=offset)
        day_start = day_start_ms(day, tz)
        eaten = food_entries_between(entries, day_start, day_start + DAY_MS)
        buckets.append(
            WeeklyBucket(
                day=day,
                calories=sum(entry.calories for entry in eaten),
                protein=sum(entry.protein for entry in eaten),
                carbs=sum(entry.carbs for entry in eaten),
                fat=sum(entry.fat for entry in eaten),
                goal=goal,
                is_future=day > today,
            )
        )
    return buckets


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class AggregationService:
    """Computes aggregates for the ledger in the user's timezone."""

    ledger: LedgerStore
    timezone_name: str = "UTC"
    clock: Callable[[], datetime] = field(default=_utc_now)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    def today(self) -> date:
        """Return the current local date."""
        return self.clock().astimezone(self.tz).date()

    def consumed_today(self) -> float:
        """Return calories eaten today."""
        return consumed_on(self.ledger.all(), self.today(), self.tz)

    def consumed_macros_today(self) -> MacroTotals:
        """Return macros eaten today."""
        return macros_on(self.ledger.all(), self.today(), self.tz)

    def remaining(self) -> float:
        """Return calories left for today."""
        return remaining_calories(self.ledger.profile, self.consumed_today())

    def weekly_breakdown(self) -> list[WeeklyBucket]:
        """Return the current Saturday-to-Friday week."""
        return weekly_breakdown(
            self.ledger.all(), self.ledger.profile, self.today(), self.tz
        )

    def daily_summary(self) -> DailySummary:
        """Return today's totals against the goal."""
        profile = self.ledger.profile
        entries = self.ledger.all()
        tz = self.tz
        today = self.today()
        consumed = consumed_on(entries, today, tz)
        return DailySummary(
            day=today,
            consumed=consumed,
            macros=macros_on(entries, today, tz),
            goal=profile.tdee if profile else None,
            remaining=remaining_calories(profile, consumed),
        )
