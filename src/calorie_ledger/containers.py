"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calorie_ledger.adapters.openai_inference_client import OpenAIInferenceClient
from calorie_ledger.adapters.supabase_kv_store import SupabaseKeyValueStore
from calorie_ledger.config import Settings, storage_keys
from calorie_ledger.services.aggregation import AggregationService
from calorie_ledger.services.inference import InferenceService
from calorie_ledger.services.ledger import LedgerStore
from calorie_ledger.services.reconciliation import ReconciliationService
from calorie_ledger.services.review import ReviewQueue
from calorie_ledger.services.tracker import TrackerService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ledger: LedgerStore
    review_queue: ReviewQueue
    inference_service: InferenceService
    reconciliation_service: ReconciliationService
    aggregation_service: AggregationService
    tracker_service: TrackerService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    ledger = LedgerStore(
        store=SupabaseKeyValueStore(supabase_client),
        keys=storage_keys(resolved_settings.storage_namespace),
    )
    openai_client = OpenAIInferenceClient.create(
        resolved_settings.openai_api_key,
        timeout=resolved_settings.openai_timeout_seconds,
    )
    inference_service = InferenceService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    review_queue = ReviewQueue()
    reconciliation_service = ReconciliationService(
        ledger=ledger,
        queue=review_queue,
        inference_service=inference_service,
    )
    aggregation_service = AggregationService(
        ledger=ledger, timezone_name=resolved_settings.timezone
    )
    tracker_service = TrackerService(
        inference_service=inference_service,
        reconciliation=reconciliation_service,
        timezone_name=resolved_settings.timezone,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        ledger=ledger,
        review_queue=review_queue,
        inference_service=inference_service,
        reconciliation_service=reconciliation_service,
        aggregation_service=aggregation_service,
        tracker_service=tracker_service,
        close_resources=close_resources,
    )
