"""
Daily summary aggregation.

summarize_days is a pure function over already-fetched rows; the
DailySummaryService wraps it with record store reads for one user.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional

from .errors import InvalidArgument
from ..models.tracking import ActivityEntry, CalorieEntry, NutritionLog
from ..models.summary import DailySummary
from ..storage.record_store import RecordStore

logger = logging.getLogger(__name__)


def latest_per_day(rows: Iterable) -> Dict[date, object]:
    """
    Pick one row per calendar date: the one with the greatest created_at.
    Ties keep the row that came last in the input.
    """
    latest: Dict[date, object] = {}
    for row in rows:
        current = latest.get(row.date)
        if current is None or row.created_at >= current.created_at:
            latest[row.date] = row
    return latest


def summarize_days(
    user_id: str,
    start: date,
    end: date,
    activities: Iterable[ActivityEntry] = (),
    calorie_entries: Iterable[CalorieEntry] = (),
    nutrition_logs: Iterable[NutritionLog] = (),
) -> List[DailySummary]:
    """
    Build one DailySummary per date in [start, end] that has any row.

    Args:
        user_id: Owner recorded on each summary
        start: Inclusive first date
        end: Inclusive last date
        activities: ActivityEntry rows
        calorie_entries: CalorieEntry rows (override burned/consumed for their day)
        nutrition_logs: NutritionLog rows (consumed fallback)

    Returns:
        List[DailySummary]: Most recent date first; empty if nothing matched

    Raises:
        InvalidArgument: If start is after end
    """
    if start > end:
        raise InvalidArgument(f"start date {start} is after end date {end}")

    def in_range(row) -> bool:
        return start <= row.date <= end

    activity_by_day: Dict[date, List[ActivityEntry]] = defaultdict(list)
    for activity in filter(in_range, activities):
        activity_by_day[activity.date].append(activity)

    consumed_by_day: Dict[date, float] = defaultdict(float)
    for log in filter(in_range, nutrition_logs):
        consumed_by_day[log.date] += log.calories

    calories_by_day = latest_per_day(filter(in_range, calorie_entries))

    summaries = []
    for day in set(activity_by_day) | set(consumed_by_day) | set(calories_by_day):
        day_activities = activity_by_day.get(day, [])
        total_burned = sum(a.calories_burned for a in day_activities)

        calorie_entry: Optional[CalorieEntry] = calories_by_day.get(day)
        if calorie_entry is not None:
            burned = calorie_entry.calories_burned
            consumed = calorie_entry.calories_consumed
        else:
            burned = total_burned
            consumed = consumed_by_day.get(day, 0)

        summaries.append(DailySummary(
            user_id=user_id,
            date=day,
            total_activities=len(day_activities),
            total_duration=sum(a.duration_minutes for a in day_activities),
            total_calories_burned=total_burned,
            activities_performed=sorted({a.activity_type.value for a in day_activities}),
            calories_consumed=consumed,
            calories_burned=burned,
            net_calories=consumed - burned,
        ))

    summaries.sort(key=lambda s: s.date, reverse=True)
    return summaries


class DailySummaryService:
    """Aggregates a user's stored rows into daily summaries."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def aggregate_daily(self, user_id: str, start_date: date, end_date: date) -> List[DailySummary]:
        """
        Per-day totals for user_id over the inclusive range, most recent first.

        Returns an empty list when no rows fall inside the range.
        """
        if start_date > end_date:
            raise InvalidArgument(f"start date {start_date} is after end date {end_date}")

        activities = await self.store.list("activity", user_id, start_date, end_date)
        calorie_entries = await self.store.list("calories", user_id, start_date, end_date)
        nutrition_logs = await self.store.list("nutrition", user_id, start_date, end_date)

        summaries = summarize_days(
            user_id, start_date, end_date,
            activities=activities,
            calorie_entries=calorie_entries,
            nutrition_logs=nutrition_logs,
        )
        logger.debug(
            f"Aggregated {len(summaries)} day(s) for user {user_id} "
            f"between {start_date} and {end_date}"
        )
        return summaries
