"""Persistent food log backed by a key-value store."""

import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from calorie_snap.domain.food import FoodLogEntry
from calorie_snap.domain.nutrition import NutritionTotals

LOGS_STORAGE_KEY = "calorysnap_logs_v1"

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Interface for durable string key-value storage."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""


@dataclass
class LogStore:
    """Ordered food log, newest entry first."""

    storage: KeyValueStore
    key: str = LOGS_STORAGE_KEY
    _entries: list[FoodLogEntry] = field(default_factory=list, init=False)

    def load(self) -> list[FoodLogEntry]:
        """Restore persisted entries, falling back to an empty log."""
        self._entries = _read_entries(self.storage, self.key)
        _logger.info("Food log loaded: entries=%s", len(self._entries))
        return list(self._entries)

    def entries(self) -> list[FoodLogEntry]:
        """Return the current entries, newest first."""
        return list(self._entries)

    def get(self, entry_id: str) -> FoodLogEntry | None:
        """Return an entry by id, if present."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def append(self, entry: FoodLogEntry) -> None:
        """Prepend an entry and persist the log."""
        if self.get(entry.id) is not None:
            raise ValueError(f"Duplicate food log entry id: {entry.id}")
        self._entries.insert(0, entry)
        self._persist()

    def remove(self, entry_id: str) -> None:
        """Delete an entry by id if present and persist the log."""
        remaining = [entry for entry in self._entries if entry.id != entry_id]
        if len(remaining) == len(self._entries):
            return
        self._entries = remaining
        self._persist()

    def totals(self) -> NutritionTotals:
        """Sum calories and macros across all entries."""
        return sum_totals(self._entries)

    def _persist(self) -> None:
        payload = json.dumps(
            [
                entry.model_dump(mode="json", by_alias=True, exclude_none=True)
                for entry in self._entries
            ]
        )
        try:
            self.storage.set(self.key, payload)
        except OSError:
            _logger.exception(
                "Failed to persist food log", extra={"entries": len(self._entries)}
            )


def sum_totals(entries: list[FoodLogEntry]) -> NutritionTotals:
    total = NutritionTotals.zero()
    for entry in entries:
        total = NutritionTotals(
            calories=total.calories + entry.calories,
            protein=total.protein + entry.protein,
            carbs=total.carbs + entry.carbs,
            fat=total.fat + entry.fat,
        )
    return total


def _read_entries(storage: KeyValueStore, key: str) -> list[FoodLogEntry]:
    try:
        raw = storage.get(key)
    except (OSError, ValueError):
        _logger.warning("Failed to read food log storage", exc_info=True)
        return []
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        _logger.warning("Stored food log is not valid JSON; starting empty")
        return []
    if not isinstance(data, list):
        _logger.warning("Stored food log is not a list; starting empty")
        return []

    entries: list[FoodLogEntry] = []
    seen: set[str] = set()
    for item in data:
        entry = _parse_entry(item)
        if entry is None or entry.id in seen:
            _logger.warning("Skipping unreadable food log record")
            continue
        seen.add(entry.id)
        entries.append(entry)
    return entries


def _parse_entry(item: object) -> FoodLogEntry | None:
    if not isinstance(item, dict):
        return None
    record = {
        "foodName": "",
        "calories": 0,
        "protein": 0,
        "carbs": 0,
        "fat": 0,
        "description": "",
        "portionEstimate": "",
        "timestamp": 0,
        **item,
    }
    if isinstance(record.get("id"), int):
        record["id"] = str(record["id"])
    try:
        return FoodLogEntry.model_validate(record)
    except ValidationError:
        return None
