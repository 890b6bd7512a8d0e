"""Domain models for the daily calorie ledger."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

DATE_KEY_FORMAT = "%Y-%m-%d"


class BalanceKind(str, Enum):
    """Direction of a day's energy balance."""

    SURPLUS = "surplus"
    DEFICIT = "deficit"
    EVEN = "even"


@dataclass(frozen=True)
class FoodLogEntry:
    """A single committed meal."""

    id: str
    description: str
    calories: int
    timestamp: datetime


@dataclass(frozen=True)
class DailyBalance:
    """Consumed minus burned for one day."""

    value: int

    @property
    def kind(self) -> BalanceKind:
        if self.value > 0:
            return BalanceKind.SURPLUS
        if self.value < 0:
            return BalanceKind.DEFICIT
        return BalanceKind.EVEN

    @property
    def magnitude(self) -> int:
        return abs(self.value)


@dataclass(frozen=True)
class DailyLog:
    """Calories consumed and burned for one calendar day.

    ``calories_burned`` is ``None`` until an activity level is recorded for
    the day, which is distinct from a recorded value of zero.
    """

    date: str
    calories_consumed: int = 0
    calories_burned: int | None = None
    food_entries: tuple[FoodLogEntry, ...] = field(default_factory=tuple)

    @property
    def balance(self) -> DailyBalance | None:
        """Return consumed minus burned, or None while burned is unset."""
        if self.calories_burned is None:
            return None
        return DailyBalance(self.calories_consumed - self.calories_burned)
