"""Period summaries over the daily ledger."""

from dataclasses import dataclass
from enum import Enum

from calorie_tracker.domain.ledger import DailyLog
from calorie_tracker.services.ledger import LedgerStore


class Period(str, Enum):
    """History views offered on the dashboard."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


PERIOD_DAYS: dict[Period, int] = {
    Period.DAILY: 1,
    Period.WEEKLY: 7,
    Period.MONTHLY: 30,
}


@dataclass
class PeriodSummary:
    """Logs for a period in chart order plus averages."""

    daily: list[DailyLog]
    avg_consumed: float
    avg_burned: float | None


@dataclass
class StatsService:
    """Service for dashboard views of the ledger."""

    ledger: LedgerStore

    def get_today(self) -> DailyLog:
        """Return today's log (unsaved default if nothing was recorded)."""
        return self.ledger.get_day(self.ledger.today_key())

    def needs_activity_prompt(self) -> bool:
        """Return True while today's burned calories are unset."""
        return self.get_today().calories_burned is None

    def get_history(self) -> list[DailyLog]:
        """Return past days, newest first."""
        return sort_newest_first(self.ledger.history(self.ledger.today_key()))

    def get_period(self, period: Period) -> PeriodSummary:
        """Return the most recent logged days for a period, oldest first."""
        if period == Period.DAILY:
            return _summarize([self.get_today()])
        recent = recent_logs(self.ledger.all_logs(), PERIOD_DAYS[period])
        return _summarize(list(reversed(recent)))


def sort_newest_first(logs: list[DailyLog]) -> list[DailyLog]:
    """Sort logs descending by date key."""
    return sorted(logs, key=lambda log: log.date, reverse=True)


def recent_logs(logs: list[DailyLog], limit: int) -> list[DailyLog]:
    """Return the ``limit`` most recent logs, newest first."""
    return sort_newest_first(logs)[:limit]


def _summarize(daily: list[DailyLog]) -> PeriodSummary:
    total_days = max(len(daily), 1)
    consumed = sum(log.calories_consumed for log in daily)
    burned_days = [
        log.calories_burned for log in daily if log.calories_burned is not None
    ]
    avg_burned = sum(burned_days) / len(burned_days) if burned_days else None
    return PeriodSummary(
        daily=daily,
        avg_consumed=consumed / total_days,
        avg_burned=avg_burned,
    )
