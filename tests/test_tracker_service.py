"""Tests for routing analysis results."""

import asyncio
from datetime import UTC, datetime

import pytest

from calorie_ledger.domain.entries import Entry, EntryEdit, MealSlot
from calorie_ledger.domain.profile import UserStats
from calorie_ledger.domain.review import BatchOpen, Idle
from calorie_ledger.services.tracker import (
    AppStatus,
    Outcome,
    TrackerService,
    default_meal_slot,
)
from tests.conftest import (
    FIXED_NOW,
    FakeInferenceClient,
    fixed_clock,
    make_reconciliation,
    ms,
)

PROFILE_PAYLOAD: dict[str, object] = {
    "action_type": "PROFILE_SETUP",
    "user_stats": {
        "age": 30,
        "gender": "male",
        "weight": 80,
        "height": 175,
        "activity_level": "1.375",
        "target_weight": 72,
        "weight_loss_per_month": 2,
    },
    "calculated_goal": 1891.2,
    "food_items": None,
    "advice": "Aim for 1891 kcal a day.",
}


def _tracker(
    client: FakeInferenceClient, now: datetime = FIXED_NOW, timezone_name: str = "UTC"
) -> TrackerService:
    reconciliation = make_reconciliation(client)
    return TrackerService(
        inference_service=reconciliation.inference_service,
        reconciliation=reconciliation,
        timezone_name=timezone_name,
        clock=fixed_clock(now),
    )


def test_blank_text_is_ignored_without_inference() -> None:
    client = FakeInferenceClient()
    tracker = _tracker(client)

    result = asyncio.run(tracker.analyze("   "))

    assert result.outcome == Outcome.IGNORED
    assert client.prompts == []
    assert tracker.status == AppStatus.IDLE


def test_food_text_seeds_review_batch() -> None:
    client = FakeInferenceClient()
    tracker = _tracker(client)

    result = asyncio.run(tracker.analyze("rice and a kebab"))

    assert result.outcome == Outcome.QUEUED
    assert result.queued == 2
    assert result.advice == "Check the portion sizes."
    assert tracker.status == AppStatus.SUCCESS
    assert tracker.last_advice == "Check the portion sizes."
    state = tracker.reconciliation.queue.state
    assert isinstance(state, BatchOpen)
    assert [entry.description for entry in state.queue] == ["rice", "kebab"]
    assert all(entry.meal_slot == MealSlot.LUNCH for entry in state.queue)
    assert state.queue[0].timestamp == ms(FIXED_NOW)
    # Nothing is persisted until the user confirms.
    assert tracker.reconciliation.ledger.all() == ()


def test_explicit_meal_slot_overrides_clock() -> None:
    tracker = _tracker(FakeInferenceClient())

    asyncio.run(tracker.analyze("porridge", MealSlot.BREAKFAST))

    head = tracker.reconciliation.queue.current()
    assert head is not None
    assert head.meal_slot == MealSlot.BREAKFAST


def test_failed_analysis_sets_error_and_keeps_state() -> None:
    client = FakeInferenceClient(error=RuntimeError("network down"))
    tracker = _tracker(client)

    result = asyncio.run(tracker.analyze("rice"))

    assert result.outcome == Outcome.FAILED
    assert result.error is not None
    assert tracker.status == AppStatus.ERROR
    assert tracker.reconciliation.queue.state == Idle()
    assert tracker.reconciliation.ledger.all() == ()


def test_profile_setup_updates_profile() -> None:
    tracker = _tracker(FakeInferenceClient(payloads=[PROFILE_PAYLOAD]))

    result = asyncio.run(tracker.analyze("I'm 30, male, 80kg, 175cm"))

    assert result.outcome == Outcome.PROFILE_UPDATED
    profile = tracker.reconciliation.ledger.profile
    assert profile is not None
    assert profile == result.profile
    assert profile.tdee == 1891
    assert profile.bmr == 1749
    assert profile.stats.target_weight == 72
    assert tracker.reconciliation.queue.state == Idle()


def test_profile_setup_without_stats_is_no_action() -> None:
    payload = {**PROFILE_PAYLOAD, "user_stats": {"age": 30, "gender": None}}
    tracker = _tracker(FakeInferenceClient(payloads=[payload]))

    result = asyncio.run(tracker.analyze("I'm 30"))

    assert result.outcome == Outcome.NO_ACTION
    assert tracker.reconciliation.ledger.profile is None
    assert tracker.status == AppStatus.SUCCESS


def test_unknown_action_changes_nothing() -> None:
    payload = {
        "action_type": "SMALL_TALK",
        "user_stats": None,
        "calculated_goal": None,
        "food_items": None,
        "advice": "Drink water.",
    }
    tracker = _tracker(FakeInferenceClient(payloads=[payload]))

    result = asyncio.run(tracker.analyze("hello"))

    assert result.outcome == Outcome.NO_ACTION
    assert result.advice == "Drink water."
    assert tracker.reconciliation.queue.state == Idle()
    assert tracker.reconciliation.ledger.all() == ()


def test_save_profile_recalculates_goal() -> None:
    tracker = _tracker(FakeInferenceClient())
    stats = UserStats(age=30, gender="male", weight=80, height=175)

    profile = tracker.save_profile(stats)

    assert tracker.reconciliation.ledger.profile == profile
    assert profile.tdee == 2405
    assert tracker.last_advice


def test_delete_entry_is_idempotent() -> None:
    tracker = _tracker(FakeInferenceClient())
    asyncio.run(tracker.analyze("rice and a kebab"))
    head = tracker.reconciliation.queue.current()
    assert head is not None
    tracker.reconciliation.commit(_edit_from(head))

    assert tracker.delete_entry(head.id) is True
    assert tracker.delete_entry(head.id) is False
    assert tracker.reconciliation.ledger.all() == ()


def _edit_from(entry: Entry) -> EntryEdit:
    return EntryEdit(
        entry_id=entry.id,
        description=entry.description,
        meal_slot=entry.meal_slot,
        amount=entry.amount,
        unit=entry.unit,
        calories=entry.calories,
        protein=entry.protein,
        carbs=entry.carbs,
        fat=entry.fat,
    )


@pytest.mark.parametrize(
    ("hour", "expected"),
    [
        (4, MealSlot.SNACK),
        (5, MealSlot.BREAKFAST),
        (10, MealSlot.BREAKFAST),
        (11, MealSlot.LUNCH),
        (15, MealSlot.LUNCH),
        (16, MealSlot.DINNER),
        (22, MealSlot.DINNER),
        (23, MealSlot.SNACK),
    ],
)
def test_default_meal_slot(hour: int, expected: MealSlot) -> None:
    assert default_meal_slot(hour) == expected


def test_meal_slot_uses_local_hour() -> None:
    # 14:00 UTC is 17:30 in Tehran.
    tracker = _tracker(FakeInferenceClient(), timezone_name="Asia/Tehran")

    asyncio.run(tracker.analyze("rice"))

    head = tracker.reconciliation.queue.current()
    assert head is not None
    assert head.meal_slot == MealSlot.DINNER


def test_early_morning_utc_defaults_to_snack() -> None:
    now = datetime(2026, 10, 21, 2, 0, tzinfo=UTC)
    tracker = _tracker(FakeInferenceClient(), now=now)

    asyncio.run(tracker.analyze("rice"))

    head = tracker.reconciliation.queue.current()
    assert head is not None
    assert head.meal_slot == MealSlot.SNACK
