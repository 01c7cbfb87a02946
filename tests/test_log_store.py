"""Tests for the persistent food log."""

import json

import pytest

from calorie_snap.domain.nutrition import NutritionTotals
from calorie_snap.services.log_store import LOGS_STORAGE_KEY, LogStore
from tests.conftest import FailingKeyValueStore, InMemoryKeyValueStore, make_entry


def test_empty_store_totals_are_zero(log_store: LogStore) -> None:
    assert log_store.entries() == []
    assert log_store.totals() == NutritionTotals(0, 0, 0, 0)


def test_single_entry_totals_match_entry(log_store: LogStore) -> None:
    log_store.append(make_entry("a", calories=500, protein=30, carbs=40, fat=20))

    assert log_store.totals() == NutritionTotals(
        calories=500, protein=30, carbs=40, fat=20
    )


def test_totals_follow_appends_and_removes(log_store: LogStore) -> None:
    log_store.append(make_entry("a", calories=100, protein=1, carbs=2, fat=3))
    log_store.append(make_entry("b", calories=200, protein=4, carbs=5, fat=6))
    log_store.append(make_entry("c", calories=400, protein=7, carbs=8, fat=9))
    log_store.remove("b")

    totals = log_store.totals()

    assert totals.calories == 500
    assert totals.protein == 8
    assert totals.carbs == 10
    assert totals.fat == 12


def test_append_prepends_newest_first(log_store: LogStore) -> None:
    log_store.append(make_entry("first"))
    log_store.append(make_entry("second"))

    assert [entry.id for entry in log_store.entries()] == ["second", "first"]


def test_append_rejects_duplicate_id(log_store: LogStore) -> None:
    log_store.append(make_entry("a"))

    with pytest.raises(ValueError):
        log_store.append(make_entry("a", food_name="Other"))

    assert len(log_store.entries()) == 1


def test_every_mutation_is_persisted(storage: InMemoryKeyValueStore) -> None:
    store = LogStore(storage)
    store.load()

    store.append(make_entry("a"))
    store.append(make_entry("b"))
    store.remove("a")
    store.remove("missing")

    assert storage.writes == 3
    saved = json.loads(storage.values[LOGS_STORAGE_KEY])
    assert [item["id"] for item in saved] == ["b"]


def test_removed_entry_is_not_reloaded(storage: InMemoryKeyValueStore) -> None:
    store = LogStore(storage)
    store.load()
    store.append(make_entry("keep"))
    store.append(make_entry("drop", image_url="abc"))
    store.remove("drop")

    reloaded = LogStore(storage).load()

    assert [entry.id for entry in reloaded] == ["keep"]


def test_persisted_layout_uses_camel_case_keys(storage: InMemoryKeyValueStore) -> None:
    store = LogStore(storage)
    store.append(make_entry("a", image_url="aW1n"))

    record = json.loads(storage.values[LOGS_STORAGE_KEY])[0]

    assert record["foodName"] == "Oatmeal"
    assert record["portionEstimate"] == "1 cup"
    assert record["imageUrl"] == "aW1n"
    assert record["timestamp"] == 1_700_000_000_000


def test_entry_without_image_omits_image_key(storage: InMemoryKeyValueStore) -> None:
    store = LogStore(storage)
    store.append(make_entry("a"))

    record = json.loads(storage.values[LOGS_STORAGE_KEY])[0]

    assert "imageUrl" not in record


@pytest.mark.parametrize("raw", ["{not json", '{"id": "a"}', "42"])
def test_unreadable_storage_loads_empty(raw: str) -> None:
    storage = InMemoryKeyValueStore(values={LOGS_STORAGE_KEY: raw})

    assert LogStore(storage).load() == []


def test_read_failure_loads_empty() -> None:
    assert LogStore(FailingKeyValueStore()).load() == []


def test_load_tolerates_missing_and_unknown_fields() -> None:
    raw = json.dumps(
        [
            {"id": 1700000000001, "foodName": "Toast", "calories": 120, "extra": 1},
            {"foodName": "No id"},
            "garbage",
            {"id": "b", "foodName": "Soup", "calories": -5},
        ]
    )
    storage = InMemoryKeyValueStore(values={LOGS_STORAGE_KEY: raw})

    entries = LogStore(storage).load()

    assert len(entries) == 1
    assert entries[0].id == "1700000000001"
    assert entries[0].food_name == "Toast"
    assert entries[0].protein == 0
    assert entries[0].image_url is None


def test_write_failure_keeps_memory_state() -> None:
    store = LogStore(FailingKeyValueStore())

    store.append(make_entry("a", calories=80))

    assert [entry.id for entry in store.entries()] == ["a"]
    assert store.totals().calories == 80
