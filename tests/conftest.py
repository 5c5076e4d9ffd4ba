"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from calorie_ledger.config import Settings, storage_keys
from calorie_ledger.containers import AppContainer
from calorie_ledger.domain.entries import Entry, EntryKind, MealSlot
from calorie_ledger.services.aggregation import AggregationService
from calorie_ledger.services.inference import InferenceClient, InferenceService
from calorie_ledger.services.ledger import KeyValueStore, LedgerStore
from calorie_ledger.services.reconciliation import ReconciliationService
from calorie_ledger.services.review import ReviewQueue
from calorie_ledger.services.tracker import TrackerService

# Wednesday, 14:00 UTC.
FIXED_NOW = datetime(2026, 10, 21, 14, 0, tzinfo=UTC)


def fixed_clock(now: datetime = FIXED_NOW) -> Callable[[], datetime]:
    return lambda: now


def ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def food_entry(  # noqa: PLR0913
    entry_id: str,
    timestamp: datetime,
    calories: float = 100,
    protein: float = 0,
    carbs: float = 0,
    fat: float = 0,
    kind: EntryKind = EntryKind.FOOD_ENTRY,
) -> Entry:
    return Entry(
        id=entry_id,
        timestamp=ms(timestamp),
        description=f"food {entry_id}",
        kind=kind,
        meal_slot=MealSlot.LUNCH,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
    )


def food_payload(*items: tuple[str, float]) -> dict[str, object]:
    """Build a FOOD_ENTRY analysis payload from (name, calories) pairs."""
    return {
        "action_type": "FOOD_ENTRY",
        "user_stats": None,
        "calculated_goal": None,
        "food_items": [
            {
                "food_name": name,
                "amount_grams": 100,
                "calories": calories,
                "protein": 10.4,
                "carbs": 20.5,
                "fat": None,
            }
            for name, calories in items
        ],
        "advice": "Check the portion sizes.",
    }


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value store for tests."""

    values: dict[str, str] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)
    failing_writes: int = 0

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.failing_writes:
            self.failing_writes -= 1
            raise ConnectionError("store unavailable")
        self.values[key] = value
        self.writes.append(key)


@dataclass
class FakeInferenceClient(InferenceClient):
    """Fake inference client returning queued payloads."""

    payloads: list[dict[str, object]] = field(
        default_factory=lambda: [food_payload(("rice", 205.6), ("kebab", 310.2))]
    )
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)

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
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if len(self.payloads) > 1:
            return self.payloads.pop(0)
        return self.payloads[0]


def make_ledger(store: InMemoryKeyValueStore | None = None) -> LedgerStore:
    return LedgerStore(
        store=store or InMemoryKeyValueStore(), keys=storage_keys("test")
    )


def make_reconciliation(
    client: FakeInferenceClient | None = None, ledger: LedgerStore | None = None
) -> ReconciliationService:
    inference_service = InferenceService(
        client=client or FakeInferenceClient(),
        model="gpt-5.2",
        reasoning_effort=None,
        store=False,
    )
    return ReconciliationService(
        ledger=ledger or make_ledger(),
        queue=ReviewQueue(),
        inference_service=inference_service,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def inference_client() -> FakeInferenceClient:
    return FakeInferenceClient()


@pytest.fixture
def container(
    settings: Settings,
    kv_store: InMemoryKeyValueStore,
    inference_client: FakeInferenceClient,
) -> AppContainer:
    ledger = make_ledger(kv_store)
    review_queue = ReviewQueue()
    inference_service = InferenceService(
        client=inference_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )
    reconciliation_service = ReconciliationService(
        ledger=ledger,
        queue=review_queue,
        inference_service=inference_service,
    )
    aggregation_service = AggregationService(
        ledger=ledger, timezone_name="UTC", clock=fixed_clock()
    )
    tracker_service = TrackerService(
        inference_service=inference_service,
        reconciliation=reconciliation_service,
        timezone_name="UTC",
        clock=fixed_clock(),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        ledger=ledger,
        review_queue=review_queue,
        inference_service=inference_service,
        reconciliation_service=reconciliation_service,
        aggregation_service=aggregation_service,
        tracker_service=tracker_service,
        close_resources=close_resources,
    )
