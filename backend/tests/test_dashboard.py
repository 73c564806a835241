"""
Tests for dashboard assembly.
"""

from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from fittrack.core.dashboard import DashboardService
from fittrack.core.errors import StorageError

USER = "user-1"
TODAY = date(2024, 1, 10)


async def seed(store):
    await store.insert("weight", USER, {"date": "2024-01-08", "weight": 72.0})
    await store.insert("weight", USER, {"date": "2024-01-09", "weight": 71.6})
    await store.insert("weight", USER, {"date": "2024-01-11", "weight": 70.0})
    await store.insert("sleep", USER, {"date": "2024-01-10", "duration_hours": 6, "quality": "Fair"})
    await store.insert("sleep", USER, {"date": "2024-01-10", "duration_hours": 7.5, "quality": "Good"})
    await store.insert("activity", USER, {
        "date": "2024-01-10", "activity_type": "running", "duration_minutes": 30,
        "intensity": "moderate", "calories_burned": 291,
    })
    await store.insert("nutrition", USER, {
        "date": "2024-01-10", "meal": "Lunch", "food_items": ["salad"], "calories": 650,
    })


class TestTodayStats:

    @pytest.mark.asyncio
    async def test_today_stats(self, store):
        await seed(store)
        stats = await DashboardService(store).today_stats(USER, TODAY)
        assert stats.calories_consumed == 650
        assert stats.calories_burned == 291
        assert stats.sleep_hours == 7.5
        assert stats.weight == 71.6
        assert [a.activity_type.value for a in stats.activities] == ["running"]

    @pytest.mark.asyncio
    async def test_today_stats_empty(self, store):
        stats = await DashboardService(store).today_stats(USER, TODAY)
        assert stats.calories_consumed == 0
        assert stats.sleep_hours is None
        assert stats.weight is None
        assert stats.activities == []

    def test_camel_case_keys(self):
        from fittrack.models import TodayStats
        payload = TodayStats(calories_consumed=1, calories_burned=2, sleep_hours=8).model_dump(by_alias=True)
        assert set(payload) == {"caloriesConsumed", "caloriesBurned", "sleepHours", "weight", "activities"}


class TestDashboardBuild:

    @pytest.mark.asyncio
    async def test_build(self, store):
        await seed(store)
        dashboard = await DashboardService(store).build(USER, days=3, today=TODAY)
        assert dashboard.errors == {}
        assert dashboard.today.weight == 71.6
        assert [w.weight for w in dashboard.weight_history] == [72.0, 71.6]
        assert len(dashboard.sleep_history) == 2
        assert [s.date for s in dashboard.daily_summaries] == [TODAY]

    @pytest.mark.asyncio
    async def test_failing_section_does_not_break_others(self, store):
        await seed(store)
        service = DashboardService(store)
        original_list = store.list

        async def flaky_list(table, *args, **kwargs):
            if table == "sleep":
                raise StorageError("sleep table unreadable")
            return await original_list(table, *args, **kwargs)

        with patch.object(store, "list", side_effect=flaky_list):
            dashboard = await service.build(USER, days=3, today=TODAY)

        assert "sleep_history" in dashboard.errors
        assert "today" in dashboard.errors
        assert dashboard.sleep_history == []
        assert dashboard.today is None
        assert [w.weight for w in dashboard.weight_history] == [72.0, 71.6]
        assert len(dashboard.daily_summaries) == 1

    @pytest.mark.asyncio
    async def test_failing_aggregation(self, store):
        service = DashboardService(store)
        service.summaries.aggregate_daily = AsyncMock(side_effect=RuntimeError("boom"))
        dashboard = await service.build(USER, today=TODAY)
        assert dashboard.errors["daily_summaries"] == "boom"
        assert "today" in dashboard.errors
        assert dashboard.weight_history == []


class TestDashboardAPI:

    def test_today_endpoint_uses_camel_case(self, client, auth_headers):
        response = client.get("/dashboard/today", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["caloriesConsumed"] == 0
        assert data["sleepHours"] is None
        assert data["activities"] == []

    def test_full_dashboard(self, client, auth_headers):
        response = client.get("/dashboard", params={"days": 7}, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["errors"] == {}
        assert "caloriesConsumed" in data["today"]
        assert data["weight_history"] == []

    def test_days_must_be_positive(self, client, auth_headers):
        assert client.get("/dashboard", params={"days": 0}, headers=auth_headers).status_code == 422
