"""
Dashboard assembly - today's stats plus historical series.

Each section is fetched independently: a failing section is logged and
reported in Dashboard.errors while the remaining sections still render.
"""

import logging
from datetime import date, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

from .aggregator import DailySummaryService, latest_per_day
from ..models.summary import Dashboard, TodayStats
from ..storage.record_store import RecordStore

logger = logging.getLogger(__name__)


class DashboardService:
    """Builds dashboard payloads for one user from the record store."""

    def __init__(self, store: RecordStore):
        self.store = store
        self.summaries = DailySummaryService(store)

    async def latest_weight(self, user_id: str, on_or_before: Optional[date] = None) -> Optional[float]:
        """Most recent weight (by date, then created_at), or None."""
        entries = await self.store.list("weight", user_id, end=on_or_before)
        if not entries:
            return None
        latest = max(entries, key=lambda e: (e.date, e.created_at))
        return latest.weight

    async def today_stats(self, user_id: str, today: Optional[date] = None) -> TodayStats:
        """
        Headline numbers for one day.

        Calories come from the daily aggregate, sleep from the day's latest
        sleep entry, weight from the latest entry on or before the day.
        """
        today = today or date.today()

        summaries = await self.summaries.aggregate_daily(user_id, today, today)
        summary = summaries[0] if summaries else None

        sleep_entries = await self.store.list("sleep", user_id, today, today)
        latest_sleep = latest_per_day(sleep_entries).get(today)

        activities = await self.store.list("activity", user_id, today, today)

        return TodayStats(
            calories_consumed=summary.calories_consumed if summary else 0,
            calories_burned=summary.calories_burned if summary else 0,
            sleep_hours=latest_sleep.duration_hours if latest_sleep else None,
            weight=await self.latest_weight(user_id, today),
            activities=activities,
        )

    async def _section(self, name: str, errors: Dict[str, str], fetch: Callable[[], Awaitable[Any]], default: Any) -> Any:
        try:
            return await fetch()
        except Exception as e:
            logger.error(
                f"Dashboard section '{name}' failed: {e}",
                exc_info=True,
                extra={"extra_fields": {"section": name, "error": str(e)}}
            )
            errors[name] = str(e)
            return default

    async def build(self, user_id: str, days: int = 7, today: Optional[date] = None) -> Dashboard:
        """
        Assemble the full dashboard for the last `days` days (including today).

        Args:
            user_id: Owner
            days: Window length, at least 1
            today: Reference date (defaults to the server's current date)
        """
        today = today or date.today()
        start = today - timedelta(days=max(days, 1) - 1)
        errors: Dict[str, str] = {}

        return Dashboard(
            today=await self._section(
                "today", errors, lambda: self.today_stats(user_id, today), None),
            daily_summaries=await self._section(
                "daily_summaries", errors, lambda: self.summaries.aggregate_daily(user_id, start, today), []),
            weight_history=await self._section(
                "weight_history", errors, lambda: self.store.list("weight", user_id, start, today), []),
            sleep_history=await self._section(
                "sleep_history", errors, lambda: self.store.list("sleep", user_id, start, today), []),
            calorie_history=await self._section(
                "calorie_history", errors, lambda: self.store.list("calories", user_id, start, today), []),
            errors=errors,
        )
