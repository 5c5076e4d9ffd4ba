"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from calorie_ledger.api.models import AnalyzeRequest, CommitRequest, RecalculateRequest
from calorie_ledger.app_logging import configure_logging
from calorie_ledger.containers import AppContainer
from calorie_ledger.domain.entries import Entry
from calorie_ledger.domain.profile import Profile, UserStats
from calorie_ledger.domain.review import BatchOpen, SingleEdit
from calorie_ledger.domain.stats import DailySummary, WeeklyBucket
from calorie_ledger.errors import EntryNotFoundError, RecalculationError, ReviewError
from calorie_ledger.services.tracker import Outcome


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.ledger.load()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ReviewError)
    async def review_error(request: Request, exc: ReviewError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(EntryNotFoundError)
    async def entry_not_found(
        request: Request, exc: EntryNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"Entry {exc} not found"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/entries/analyze")
    async def analyze(payload: AnalyzeRequest, request: Request) -> dict[str, object]:
        """Analyze free text and queue extracted food items for review."""
        state_container: AppContainer = request.app.state.container
        tracker = state_container.tracker_service
        result = await tracker.analyze(payload.text, payload.meal_slot)
        if result.outcome == Outcome.FAILED:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_error(
                    state_container,
                    result.error,
                    "Couldn't analyze that text. Please try again.",
                ),
            )
        return {
            "status": tracker.status.value,
            "outcome": result.outcome.value,
            "advice": result.advice,
            "queued": result.queued,
            "profile": _profile_payload(result.profile) if result.profile else None,
            "review": _review_payload(state_container),
        }

    @app.get("/entries")
    async def list_entries(request: Request) -> dict[str, object]:
        """Return the entry history, most recent first."""
        state_container: AppContainer = request.app.state.container
        return {
            "entries": [_entry_payload(entry) for entry in state_container.ledger.all()]
        }

    @app.delete("/entries/{entry_id}")
    async def delete_entry(entry_id: str, request: Request) -> dict[str, object]:
        """Delete an entry; deleting an unknown id is not an error."""
        state_container: AppContainer = request.app.state.container
        removed = state_container.tracker_service.delete_entry(entry_id)
        return {"deleted": removed}

    @app.post("/entries/{entry_id}/edit")
    async def open_entry(entry_id: str, request: Request) -> dict[str, object]:
        """Open a persisted entry for editing."""
        state_container: AppContainer = request.app.state.container
        state_container.reconciliation_service.open_for_edit(entry_id)
        return _review_payload(state_container)

    @app.get("/review")
    async def review(request: Request) -> dict[str, object]:
        """Return the entry open for review and batch progress."""
        state_container: AppContainer = request.app.state.container
        return _review_payload(state_container)

    @app.post("/review/commit")
    async def commit(payload: CommitRequest, request: Request) -> dict[str, object]:
        """Confirm the open entry and move to the next one."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.reconciliation_service.commit(payload.to_edit())
        return {
            "committed": _entry_payload(entry),
            "review": _review_payload(state_container),
        }

    @app.post("/review/skip")
    async def skip(request: Request) -> dict[str, object]:
        """Skip the open batch item, or cancel a single edit."""
        state_container: AppContainer = request.app.state.container
        state_container.reconciliation_service.skip()
        return _review_payload(state_container)

    @app.post("/review/recalculate")
    async def recalculate(
        payload: RecalculateRequest, request: Request
    ) -> dict[str, object]:
        """Re-estimate macros for the open entry without saving."""
        state_container: AppContainer = request.app.state.container
        try:
            estimate = await state_container.reconciliation_service.recalculate(
                payload.entry_id, payload.description, payload.amount, payload.unit
            )
        except RecalculationError as exc:
            logger.exception(
                "Recalculation failed", extra={"entry_id": payload.entry_id}
            )
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_error(
                    state_container, exc, "Couldn't recalculate. Please try again."
                ),
            ) from exc
        if estimate is None:
            return {"estimate": None, "stale": True}
        return {"estimate": asdict(estimate), "stale": False}

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        """Return the current profile, if set."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.ledger.profile
        return {"profile": _profile_payload(profile) if profile else None}

    @app.put("/profile")
    async def save_profile(stats: UserStats, request: Request) -> dict[str, object]:
        """Recalculate the daily goal from the submitted stats."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.tracker_service.save_profile(stats)
        return {"profile": _profile_payload(profile)}

    @app.get("/stats/today")
    async def today(request: Request) -> dict[str, object]:
        """Return today's consumption and remaining budget."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.aggregation_service.daily_summary()
        return {
            **_daily_payload(summary),
            "status": state_container.tracker_service.status.value,
            "advice": state_container.tracker_service.last_advice,
        }

    @app.get("/stats/week")
    async def week(request: Request) -> dict[str, object]:
        """Return the Saturday-to-Friday breakdown for the current week."""
        state_container: AppContainer = request.app.state.container
        buckets = state_container.aggregation_service.weekly_breakdown()
        return {"days": [_bucket_payload(bucket) for bucket in buckets]}

    return app


def _format_error(
    state_container: AppContainer, exc: Exception | None, fallback: str
) -> str:
    """Return a user-facing error message with local debug info."""
    if exc is not None and state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback


def _entry_payload(entry: Entry) -> dict[str, object]:
    payload = asdict(entry)
    payload["kind"] = entry.kind.value
    payload["meal_slot"] = entry.meal_slot.value if entry.meal_slot else None
    payload["meal_label"] = entry.meal_label
    return payload


def _review_payload(state_container: AppContainer) -> dict[str, object]:
    queue = state_container.review_queue
    current = queue.current()
    progress = queue.progress()
    if isinstance(queue.state, BatchOpen):
        mode = "batch"
    elif isinstance(queue.state, SingleEdit):
        mode = "single"
    else:
        mode = "idle"
    return {
        "mode": mode,
        "entry": _entry_payload(current) if current else None,
        "is_new": current is not None
        and not state_container.ledger.contains(current.id),
        "progress": asdict(progress) if progress else None,
    }


def _profile_payload(profile: Profile) -> dict[str, object]:
    return {
        "stats": profile.stats.model_dump(),
        "bmr": profile.bmr,
        "tdee": profile.tdee,
    }


def _daily_payload(summary: DailySummary) -> dict[str, object]:
    return {
        "day": summary.day.isoformat(),
        "consumed": summary.consumed,
        "macros": asdict(summary.macros),
        "goal": summary.goal,
        "remaining": summary.remaining,
    }


def _bucket_payload(bucket: WeeklyBucket) -> dict[str, object]:
    payload = asdict(bucket)
    payload["day"] = bucket.day.isoformat()
    payload["weekday"] = bucket.day.strftime("%a")
    return payload
