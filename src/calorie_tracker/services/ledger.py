"""Daily calorie ledger backed by a key-value store."""

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4
from zoneinfo import ZoneInfo

from calorie_tracker.domain.ledger import DATE_KEY_FORMAT, DailyLog, FoodLogEntry

_logger = logging.getLogger(__name__)

LOGS_KEY = "calorieTrackerLogs"


class KeyValueStore(Protocol):
    """Opaque persistence with get/set semantics."""

    def get(self, key: str) -> object | None:
        """Return the stored value for a key, if any."""

    def set(self, key: str, value: object) -> None:
        """Replace the stored value for a key."""


class LedgerStore:
    """Owns the mapping of date keys to daily logs.

    Reads are served from an in-memory cache that is dropped by
    :meth:`invalidate` when the backing store changes externally. Every
    mutation runs under a single writer lock and re-reads the stored mapping
    first, so two updates for the same day never overwrite each other.
    """

    def __init__(
        self,
        store: KeyValueStore,
        timezone_name: str = "UTC",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._tz = ZoneInfo(timezone_name)
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._cache: dict[str, DailyLog] | None = None
        self._write_lock = threading.Lock()

    def today_key(self) -> str:
        """Return today's date key, computed from the clock on every call."""
        return self._clock().astimezone(self._tz).strftime(DATE_KEY_FORMAT)

    def load(self) -> dict[str, DailyLog]:
        """Read the full ledger from the backing store and refresh the cache."""
        raw = self._store.get(LOGS_KEY)
        logs: dict[str, DailyLog] = {}
        if isinstance(raw, dict):
            for key, record in raw.items():
                if isinstance(record, dict):
                    logs[key] = _log_from_record(key, record)
        self._cache = logs
        return dict(logs)

    def save(self, logs: dict[str, DailyLog]) -> None:
        """Write the full ledger to the backing store."""
        self._store.set(
            LOGS_KEY, {key: _log_to_record(log) for key, log in logs.items()}
        )
        self._cache = dict(logs)

    def invalidate(self) -> None:
        """Drop cached logs so the next read goes to the backing store."""
        self._cache = None

    def get_day(self, date_key: str) -> DailyLog:
        """Return the log for a day, or an unsaved empty log."""
        _check_date_key(date_key)
        return self._logs().get(date_key) or DailyLog(date=date_key)

    def append_meal(self, date_key: str, description: str, calories: int) -> DailyLog:
        """Record a meal as the newest entry of the day."""
        _check_date_key(date_key)
        if not description or not description.strip():
            raise ValueError("Meal description must not be empty")
        if isinstance(calories, bool) or not isinstance(calories, int):
            raise ValueError("Meal calories must be an integer")
        if calories <= 0:
            raise ValueError("Meal calories must be greater than zero")

        entry = FoodLogEntry(
            id=str(uuid4()),
            description=description,
            calories=calories,
            timestamp=self._clock(),
        )

        def _apply(current: DailyLog) -> DailyLog:
            return replace(
                current,
                calories_consumed=current.calories_consumed + calories,
                food_entries=(entry, *current.food_entries),
            )

        return self._mutate(date_key, _apply)

    def set_burned(self, date_key: str, calories: int) -> DailyLog:
        """Replace the day's burned calories."""
        _check_date_key(date_key)
        if isinstance(calories, bool) or not isinstance(calories, int):
            raise ValueError("Burned calories must be an integer")
        if calories < 0:
            raise ValueError("Burned calories must not be negative")
        return self._mutate(
            date_key, lambda current: replace(current, calories_burned=calories)
        )

    def clear_burned(self, date_key: str) -> DailyLog:
        """Reset the day's burned calories to unset."""
        _check_date_key(date_key)
        return self._mutate(
            date_key, lambda current: replace(current, calories_burned=None)
        )

    def history(self, exclude_date: str) -> list[DailyLog]:
        """Return every log except the one for ``exclude_date``, unordered."""
        return [log for key, log in self._logs().items() if key != exclude_date]

    def all_logs(self) -> list[DailyLog]:
        """Return every stored log, unordered."""
        return list(self._logs().values())

    def _logs(self) -> dict[str, DailyLog]:
        if self._cache is None:
            return self.load()
        return self._cache

    def _mutate(
        self, date_key: str, apply: Callable[[DailyLog], DailyLog]
    ) -> DailyLog:
        with self._write_lock:
            logs = self.load()
            updated = apply(logs.get(date_key) or DailyLog(date=date_key))
            logs[date_key] = updated
            self.save(logs)
        return updated


def _check_date_key(date_key: str) -> None:
    try:
        parsed = datetime.strptime(date_key, DATE_KEY_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid date key: {date_key!r}") from exc
    if parsed.strftime(DATE_KEY_FORMAT) != date_key:
        raise ValueError(f"Invalid date key: {date_key!r}")


def _log_from_record(date_key: str, record: dict[str, object]) -> DailyLog:
    entries: list[FoodLogEntry] = []
    for item in record.get("foodEntries") or []:
        entry = _entry_from_record(item) if isinstance(item, dict) else None
        if entry is None:
            _logger.warning("Skipping unreadable food entry on %s: %r", date_key, item)
            continue
        entries.append(entry)
    consumed = _to_int(record.get("caloriesConsumed")) or 0
    expected = sum(entry.calories for entry in entries)
    if consumed != expected:
        _logger.warning(
            "Ledger invariant violation on %s: consumed=%s entries_sum=%s; "
            "recomputing from entries",
            date_key,
            consumed,
            expected,
        )
        consumed = expected
    burned = record.get("caloriesBurned")
    calories_burned = _to_int(burned)
    if burned is not None and (calories_burned is None or calories_burned < 0):
        _logger.warning("Ignoring unreadable burned value on %s: %r", date_key, burned)
        calories_burned = None
    return DailyLog(
        date=date_key,
        calories_consumed=consumed,
        calories_burned=calories_burned,
        food_entries=tuple(entries),
    )


def _entry_from_record(record: dict[str, object]) -> FoodLogEntry | None:
    calories = _to_int(record.get("calories"))
    if calories is None:
        return None
    timestamp_ms = record.get("timestamp")
    timestamp = datetime.fromtimestamp(0, tz=UTC)
    if isinstance(timestamp_ms, int | float) and not isinstance(timestamp_ms, bool):
        try:
            timestamp = datetime.fromtimestamp(float(timestamp_ms) / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            _logger.warning("Ignoring unreadable entry timestamp: %r", timestamp_ms)
    return FoodLogEntry(
        id=str(record.get("id") or uuid4()),
        description=str(record.get("description", "")),
        calories=calories,
        timestamp=timestamp,
    )


def _to_int(value: object) -> int | None:
    """Convert a stored number to int; None when it is not a finite number."""
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return None
    try:
        return int(value)
    except (OverflowError, ValueError):
        return None



def _log_to_record(log: DailyLog) -> dict[str, object]:
    return {
        "date": log.date,
        "caloriesConsumed": log.calories_consumed,
        "caloriesBurned": log.calories_burned,
        "foodEntries": [
            {
                "id": entry.id,
                "description": entry.description,
                "calories": entry.calories,
                "timestamp": int(entry.timestamp.timestamp() * 1000),
            }
            for entry in log.food_entries
        ],
    }

