"""Ledger store holding the entry history and the user profile."""

import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from calorie_ledger.config import StorageKeys
from calorie_ledger.domain.entries import Entry, EntryKind, MealSlot
from calorie_ledger.domain.profile import Profile, UserStats
from calorie_ledger.errors import LedgerStoreError

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Persistence interface for opaque serialized blobs."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""


@dataclass
class LedgerStore:
    """Ordered entry history, most recent first, plus the current profile.

    Every mutation rewrites the affected blob in full.
    """

    store: KeyValueStore
    keys: StorageKeys
    _entries: list[Entry] = field(default_factory=list)
    _profile: Profile | None = None

    def load(self) -> None:
        """Replace in-memory state with the persisted history and profile."""
        raw_history = self.store.get(self.keys.history)
        raw_profile = self.store.get(self.keys.profile)
        try:
            entries = [_entry_from_row(row) for row in _decode_list(raw_history)]
            profile = _profile_from_row(json.loads(raw_profile)) if raw_profile else None
        except (ValueError, KeyError, TypeError, ValidationError) as exc:
            raise LedgerStoreError("Persisted ledger data is corrupt") from exc
        self._entries = _dedupe(entries)
        self._profile = profile
        _logger.info(
            "Ledger loaded: entries=%s profile=%s",
            len(self._entries),
            profile is not None,
        )

    def all(self) -> tuple[Entry, ...]:
        """Return a read-only view of every entry."""
        return tuple(self._entries)

    def get(self, entry_id: str) -> Entry | None:
        """Return an entry by id, if present."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def contains(self, entry_id: str) -> bool:
        """Return True when an entry with this id exists."""
        return self.get(entry_id) is not None

    def upsert(self, entry: Entry) -> bool:
        """Replace the entry with the same id, or insert it at the front.

        Returns True when a new entry was inserted.
        """
        entries = list(self._entries)
        for index, existing in enumerate(entries):
            if existing.id == entry.id:
                entries[index] = entry
                self._save_history(entries)
                return False
        entries.insert(0, entry)
        self._save_history(entries)
        return True

    def remove(self, entry_id: str) -> bool:
        """Remove an entry by id; unknown ids are ignored."""
        remaining = [entry for entry in self._entries if entry.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._save_history(remaining)
        return True

    @property
    def profile(self) -> Profile | None:
        return self._profile

    def set_profile(self, profile: Profile) -> None:
        """Replace the stored profile wholesale."""
        self.store.set(self.keys.profile, json.dumps(_profile_to_row(profile)))
        self._profile = profile

    def _save_history(self, entries: list[Entry]) -> None:
        # In-memory state only changes once the write succeeded.
        payload = [_entry_to_row(entry) for entry in entries]
        self.store.set(self.keys.history, json.dumps(payload))
        self._entries = entries


def _decode_list(raw: str | None) -> list[dict[str, object]]:
    if not raw:
        return []
    decoded = json.loads(raw)
    if not isinstance(decoded, list):
        raise TypeError("history must be a list")
    return decoded


def _dedupe(entries: list[Entry]) -> list[Entry]:
    seen: set[str] = set()
    unique: list[Entry] = []
    for entry in entries:
        if entry.id in seen:
            _logger.warning("Dropping duplicate ledger entry id=%s", entry.id)
            continue
        seen.add(entry.id)
        unique.append(entry)
    return unique


def _entry_to_row(entry: Entry) -> dict[str, object]:
    return {
        "id": entry.id,
        "timestamp": entry.timestamp,
        "description": entry.description,
        "kind": entry.kind.value,
        "meal_slot": entry.meal_slot.value if entry.meal_slot else None,
        "calories": entry.calories,
        "protein": entry.protein,
        "carbs": entry.carbs,
        "fat": entry.fat,
        "amount": entry.amount,
        "unit": entry.unit,
    }


def _entry_from_row(row: dict[str, object]) -> Entry:
    meal_slot = row.get("meal_slot")
    amount = row.get("amount")
    return Entry(
        id=str(row["id"]),
        timestamp=int(row["timestamp"]),
        description=str(row.get("description") or ""),
        kind=EntryKind(row.get("kind") or EntryKind.FOOD_ENTRY),
        meal_slot=MealSlot(meal_slot) if meal_slot else None,
        calories=float(row.get("calories") or 0),
        protein=float(row.get("protein") or 0),
        carbs=float(row.get("carbs") or 0),
        fat=float(row.get("fat") or 0),
        amount=float(amount) if amount is not None else None,
        unit=str(row["unit"]) if row.get("unit") else None,
    )


def _profile_to_row(profile: Profile) -> dict[str, object]:
    return {
        "stats": profile.stats.model_dump(),
        "bmr": profile.bmr,
        "tdee": profile.tdee,
    }


def _profile_from_row(row: dict[str, object]) -> Profile:
    return Profile(
        stats=UserStats.model_validate(row["stats"]),
        bmr=int(row.get("bmr") or 0),
        tdee=int(row["tdee"]),
    )
