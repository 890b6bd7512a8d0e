"""Tests for the ledger store."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime

import pytest

from calorie_tracker.adapters.in_memory_store import InMemoryKeyValueStore
from calorie_tracker.domain.ledger import BalanceKind, DailyLog
from calorie_tracker.services.ledger import LOGS_KEY, LedgerStore
from tests.conftest import TODAY, fixed_clock


class SlowStore(InMemoryKeyValueStore):
    """Store whose reads yield, widening any read-modify-write race."""

    def get(self, key: str) -> object | None:
        value = super().get(key)
        time.sleep(0.001)
        return value


def test_get_day_returns_unsaved_default(
    ledger: LedgerStore, store: InMemoryKeyValueStore
) -> None:
    log = ledger.get_day(TODAY)

    assert log == DailyLog(date=TODAY)
    assert log.calories_burned is None
    assert store.get(LOGS_KEY) is None


def test_append_meal_accumulates_newest_first(ledger: LedgerStore) -> None:
    ledger.append_meal(TODAY, "Oatmeal", 300)
    ledger.append_meal(TODAY, "Salad", 450)
    log = ledger.append_meal(TODAY, "Apple", 95)

    assert log.calories_consumed == 845
    assert [entry.description for entry in log.food_entries] == [
        "Apple",
        "Salad",
        "Oatmeal",
    ]
    assert len({entry.id for entry in log.food_entries}) == 3
    assert ledger.get_day(TODAY) == log


def test_append_meal_stamps_entry_with_clock(ledger: LedgerStore) -> None:
    log = ledger.append_meal(TODAY, "Oatmeal", 300)

    assert log.food_entries[0].timestamp == fixed_clock()


@pytest.mark.parametrize(
    ("description", "calories"),
    [("", 100), ("   ", 100), ("Eggs", 0), ("Eggs", -10), ("Eggs", 1.5)],
)
def test_append_meal_rejects_invalid_input(
    ledger: LedgerStore, description: str, calories: int
) -> None:
    with pytest.raises(ValueError):
        ledger.append_meal(TODAY, description, calories)

    assert ledger.get_day(TODAY).food_entries == ()


def test_set_burned_overwrites_and_is_idempotent(ledger: LedgerStore) -> None:
    ledger.set_burned(TODAY, 2000)
    ledger.set_burned(TODAY, 1800)
    log = ledger.set_burned(TODAY, 1800)

    assert log.calories_burned == 1800


def test_set_burned_zero_is_distinct_from_unset(ledger: LedgerStore) -> None:
    log = ledger.set_burned(TODAY, 0)

    assert log.calories_burned == 0
    assert log.balance is not None


def test_set_burned_rejects_negative(ledger: LedgerStore) -> None:
    with pytest.raises(ValueError):
        ledger.set_burned(TODAY, -1)


def test_clear_burned_resets_to_unset(ledger: LedgerStore) -> None:
    ledger.set_burned(TODAY, 1500)

    assert ledger.clear_burned(TODAY).calories_burned is None


def test_set_burned_keeps_meals(ledger: LedgerStore) -> None:
    ledger.append_meal(TODAY, "Pasta", 700)
    log = ledger.set_burned(TODAY, 2100)

    assert log.calories_consumed == 700
    assert len(log.food_entries) == 1


def test_invalid_date_key_is_rejected(ledger: LedgerStore) -> None:
    with pytest.raises(ValueError):
        ledger.append_meal("2024-1-2", "Pasta", 700)
    with pytest.raises(ValueError):
        ledger.get_day("yesterday")


def test_history_excludes_given_date(ledger: LedgerStore) -> None:
    for day in ("2023-12-30", "2023-12-31", "2024-01-01", TODAY, "2024-01-03"):
        ledger.set_burned(day, 2000)

    history = ledger.history(exclude_date=TODAY)

    assert len(history) == 4
    assert TODAY not in {log.date for log in history}


def test_today_key_uses_configured_timezone(store: InMemoryKeyValueStore) -> None:
    late_utc = LedgerStore(
        store,
        timezone_name="Asia/Tokyo",
        clock=lambda: datetime(2024, 1, 2, 20, 0, tzinfo=UTC),
    )

    assert late_utc.today_key() == "2024-01-03"


def test_today_key_is_not_cached(store: InMemoryKeyValueStore) -> None:
    now = [datetime(2024, 1, 2, 23, 59, tzinfo=UTC)]
    ledger = LedgerStore(store, clock=lambda: now[0])

    assert ledger.today_key() == "2024-01-02"
    now[0] = datetime(2024, 1, 3, 0, 1, tzinfo=UTC)
    assert ledger.today_key() == "2024-01-03"


def test_persisted_records_use_camel_case(
    ledger: LedgerStore, store: InMemoryKeyValueStore
) -> None:
    ledger.append_meal(TODAY, "Pasta", 700)

    record = store.get(LOGS_KEY)[TODAY]

    assert record["caloriesConsumed"] == 700
    assert record["caloriesBurned"] is None
    assert record["foodEntries"][0]["description"] == "Pasta"
    assert record["foodEntries"][0]["timestamp"] == 1704198600000


def test_load_recomputes_diverging_consumed_total(
    store: InMemoryKeyValueStore,
) -> None:
    store.set(
        LOGS_KEY,
        {
            TODAY: {
                "date": TODAY,
                "caloriesConsumed": 9999,
                "caloriesBurned": 1800,
                "foodEntries": [
                    {
                        "id": "7d1f6c1e-8f3c-4e0e-9a65-2f5d1c1c0f11",
                        "description": "Rice",
                        "calories": 200,
                        "timestamp": 1704198600000,
                    }
                ],
            }
        },
    )
    ledger = LedgerStore(store, clock=fixed_clock)

    assert ledger.get_day(TODAY).calories_consumed == 200


def test_invalidate_picks_up_external_change(
    ledger: LedgerStore, store: InMemoryKeyValueStore
) -> None:
    ledger.set_burned(TODAY, 1800)
    other = LedgerStore(store, clock=fixed_clock)
    other.set_burned(TODAY, 2500)

    assert ledger.get_day(TODAY).calories_burned == 1800
    ledger.invalidate()
    assert ledger.get_day(TODAY).calories_burned == 2500


def test_mutation_reads_current_stored_value(
    ledger: LedgerStore, store: InMemoryKeyValueStore
) -> None:
    ledger.get_day(TODAY)
    other = LedgerStore(store, clock=fixed_clock)
    other.append_meal(TODAY, "Toast", 200)

    log = ledger.set_burned(TODAY, 1800)

    assert log.calories_consumed == 200
    assert log.calories_burned == 1800


def test_concurrent_mutations_lose_no_updates() -> None:
    ledger = LedgerStore(SlowStore(), clock=fixed_clock)
    barrier = threading.Barrier(4)

    def _log_meals(worker: int) -> None:
        barrier.wait()
        for _ in range(10):
            ledger.append_meal(TODAY, f"Snack {worker}", 10)
        ledger.set_burned(TODAY, 2000)

    with ThreadPoolExecutor(max_workers=4) as executor:
        list(executor.map(_log_meals, range(4)))

    log = ledger.get_day(TODAY)
    assert log.calories_consumed == 400
    assert len(log.food_entries) == 40
    assert log.calories_burned == 2000


@pytest.mark.parametrize(
    ("consumed", "burned", "value", "kind"),
    [
        (2000, 1800, 200, BalanceKind.SURPLUS),
        (1500, 1800, -300, BalanceKind.DEFICIT),
        (1800, 1800, 0, BalanceKind.EVEN),
    ],
)
def test_balance(consumed: int, burned: int, value: int, kind: BalanceKind) -> None:
    log = DailyLog(date=TODAY, calories_consumed=consumed, calories_burned=burned)

    assert log.balance is not None
    assert log.balance.value == value
    assert log.balance.kind == kind
    assert log.balance.magnitude == abs(value)


def test_balance_undefined_without_burned() -> None:
    assert DailyLog(date=TODAY, calories_consumed=2000).balance is None


def test_non_uuid_entry_ids_do_not_block_mutations(
    store: InMemoryKeyValueStore,
) -> None:
    store.set(
        LOGS_KEY,
        {
            "2024-01-01": {
                "date": "2024-01-01",
                "caloriesConsumed": 250,
                "caloriesBurned": 1900,
                "foodEntries": [
                    {
                        "id": "1704198600123",
                        "description": "Bagel",
                        "calories": 250,
                        "timestamp": 1704198600123,
                    }
                ],
            }
        },
    )
    ledger = LedgerStore(store, clock=fixed_clock)

    today = ledger.append_meal(TODAY, "Toast", 100)
    yesterday = ledger.get_day("2024-01-01")

    assert today.calories_consumed == 100
    assert yesterday.food_entries[0].id == "1704198600123"
    assert yesterday.calories_consumed == 250
    assert store.get(LOGS_KEY)["2024-01-01"]["foodEntries"][0]["id"] == (
        "1704198600123"
    )


def test_unreadable_entries_are_skipped(store: InMemoryKeyValueStore) -> None:
    store.set(
        LOGS_KEY,
        {
            "2024-01-01": {
                "date": "2024-01-01",
                "caloriesConsumed": "lots",
                "caloriesBurned": "n/a",
                "foodEntries": [
                    {"description": "No id", "calories": 300},
                    {"id": "a", "description": "Broken", "calories": "many"},
                    {
                        "id": "b",
                        "description": "Far future",
                        "calories": 50,
                        "timestamp": 10**30,
                    },
                    "not-an-entry",
                ],
            }
        },
    )
    ledger = LedgerStore(store, clock=fixed_clock)

    ledger.set_burned(TODAY, 2000)
    log = ledger.get_day("2024-01-01")

    assert [entry.description for entry in log.food_entries] == [
        "No id",
        "Far future",
    ]
    assert log.food_entries[0].id
    assert log.calories_consumed == 350
    assert log.calories_burned is None
