"""
Tracking API endpoints - weight, sleep, calorie and activity logs.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from fastapi import APIRouter, HTTPException, Depends, Query, status

from .deps import (
    get_record_store, get_settings, get_summary_service, get_user_storage, to_http_exception,
)
from ..config import Settings
from ..core.aggregator import DailySummaryService, latest_per_day
from ..core.calories import estimate_calories, lookup_met
from ..core.dates import normalize_date
from ..core.errors import FitTrackError
from ..models import (
    WeightEntry, WeightEntryCreate, SleepEntry, SleepEntryCreate,
    CalorieEntry, CalorieEntryCreate, CalorieEntryUpdate,
    ActivityEntry, ActivityEntryCreate, ActivityEstimate, ActivityEstimateRequest,
    DailySummary,
)
from ..storage import RecordStore, UserStorage
from ..utils.auth import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tracking", tags=["tracking"])


def parse_range(start: Optional[str], end: Optional[str]) -> Tuple[Optional[date], Optional[date]]:
    """Normalize optional start/end query strings; raises domain errors."""
    return (
        normalize_date(start) if start else None,
        normalize_date(end) if end else None,
    )


async def resolve_weight(user_id: str, users: UserStorage, store: RecordStore, settings: Settings) -> float:
    """Profile weight, else the latest logged weight, else the configured default."""
    user = await users.get_user(user_id)
    if user and user.get("weight_kg"):
        return float(user["weight_kg"])

    entries = await store.list("weight", user_id)
    if entries:
        return max(entries, key=lambda e: (e.date, e.created_at)).weight

    return settings.default_weight_kg


async def _list_rows(store: RecordStore, table: str, user_id: str, start: Optional[str], end: Optional[str]):
    try:
        start_date, end_date = parse_range(start, end)
        return await store.list(table, user_id, start_date, end_date)
    except FitTrackError as e:
        raise to_http_exception(e) from e


# Weight

@router.post("/weight", response_model=WeightEntry, status_code=status.HTTP_201_CREATED)
async def add_weight(
    entry: WeightEntryCreate,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    try:
        return await store.insert("weight", user_id, entry)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.get("/weight", response_model=List[WeightEntry])
async def list_weight(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    return await _list_rows(store, "weight", user_id, start, end)


# Sleep

@router.post("/sleep", response_model=SleepEntry, status_code=status.HTTP_201_CREATED)
async def add_sleep(
    entry: SleepEntryCreate,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    try:
        return await store.insert("sleep", user_id, entry)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.get("/sleep", response_model=List[SleepEntry])
async def list_sleep(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    return await _list_rows(store, "sleep", user_id, start, end)


# Calories

@router.post("/calories", response_model=CalorieEntry, status_code=status.HTTP_201_CREATED)
async def add_calories(
    entry: CalorieEntryCreate,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    try:
        return await store.insert("calories", user_id, entry)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.get("/calories", response_model=List[CalorieEntry])
async def list_calories(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    return await _list_rows(store, "calories", user_id, start, end)


@router.put("/calories/{entry_date}", response_model=CalorieEntry)
async def update_calories(
    entry_date: str,
    changes: CalorieEntryUpdate,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    """
    Update the latest calorie entry of a date.

    Earlier rows of the same date are left untouched.
    """
    try:
        day = normalize_date(entry_date)
        latest = latest_per_day(await store.list("calories", user_id, day, day)).get(day)
        if latest is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No calorie entry for {day.isoformat()}"
            )
        return await store.update("calories", user_id, latest.id, changes.model_dump(exclude_unset=True))
    except FitTrackError as e:
        raise to_http_exception(e) from e


# Activity

@router.post("/activity", response_model=ActivityEntry, status_code=status.HTTP_201_CREATED)
async def add_activity(
    entry: ActivityEntryCreate,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
    users: UserStorage = Depends(get_user_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Log an activity session. calories_burned is computed here from the
    MET table and the user's current weight.
    """
    strict = not settings.calorie_unknown_activity_fallback
    try:
        activity_type, intensity, _ = lookup_met(entry.activity_type, entry.intensity, strict=strict)
        weight_kg = await resolve_weight(user_id, users, store, settings)
        calories = estimate_calories(activity_type, entry.duration_minutes, intensity, weight_kg)

        row = await store.insert("activity", user_id, {
            "date": entry.date,
            "activity_type": activity_type,
            "duration_minutes": entry.duration_minutes,
            "intensity": intensity,
            "calories_burned": calories,
            "description": entry.description,
        })
    except FitTrackError as e:
        raise to_http_exception(e) from e

    logger.info(
        "Activity logged",
        extra={"extra_fields": {
            "user_id": user_id,
            "activity_type": activity_type.value,
            "weight_kg": weight_kg,
            "calories_burned": calories,
        }}
    )
    return row


@router.get("/activity", response_model=List[ActivityEntry])
async def list_activity(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    return await _list_rows(store, "activity", user_id, start, end)


@router.post("/activity/estimate", response_model=ActivityEstimate)
async def estimate_activity(
    request: ActivityEstimateRequest,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
    users: UserStorage = Depends(get_user_storage),
    settings: Settings = Depends(get_settings),
):
    """Estimate calories for an activity without storing anything."""
    strict = not settings.calorie_unknown_activity_fallback
    try:
        activity_type, intensity, met = lookup_met(request.activity_type, request.intensity, strict=strict)
        weight_kg = request.weight_kg or await resolve_weight(user_id, users, store, settings)
        calories = estimate_calories(activity_type, request.duration_minutes, intensity, weight_kg)
    except FitTrackError as e:
        raise to_http_exception(e) from e

    return ActivityEstimate(
        activity_type=activity_type,
        intensity=intensity,
        duration_minutes=request.duration_minutes,
        weight_kg=weight_kg,
        met=met,
        calories_burned=calories,
    )


@router.get("/activity/summary", response_model=List[DailySummary])
async def activity_summary(
    start: str = Query(..., description="Inclusive first date (YYYY-MM-DD)"),
    end: str = Query(..., description="Inclusive last date (YYYY-MM-DD)"),
    user_id: str = Depends(get_current_user_id),
    summaries: DailySummaryService = Depends(get_summary_service),
):
    """Per-day activity and calorie totals, most recent date first."""
    try:
        start_date, end_date = parse_range(start, end)
        return await summaries.aggregate_daily(user_id, start_date, end_date)
    except FitTrackError as e:
        raise to_http_exception(e) from e
