"""
Dashboard API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from .deps import get_dashboard_service, get_settings, to_http_exception
from ..config import Settings
from ..core.dashboard import DashboardService
from ..core.errors import FitTrackError
from ..models import Dashboard, TodayStats
from ..utils.auth import get_current_user_id

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/today", response_model=TodayStats)
async def today(
    user_id: str = Depends(get_current_user_id),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Today's calories, sleep, weight and activities (camelCase keys)."""
    try:
        return await dashboard.today_stats(user_id)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.get("", response_model=Dashboard)
async def full_dashboard(
    days: Optional[int] = Query(None, ge=1, le=366),
    user_id: str = Depends(get_current_user_id),
    dashboard: DashboardService = Depends(get_dashboard_service),
    settings: Settings = Depends(get_settings),
):
    """
    Today's stats plus the last `days` days of summaries and logs.

    Sections that fail are listed in `errors`; the rest still render.
    """
    return await dashboard.build(user_id, days or settings.dashboard_default_days)
