"""
Summary Models - Derived, never-persisted shapes returned to dashboards.
"""

from datetime import date
from typing import Optional, List, Dict
from pydantic import BaseModel, ConfigDict, Field

from .tracking import ActivityEntry, WeightEntry, SleepEntry, CalorieEntry


class DailySummary(BaseModel):
    """Per-day aggregate of a user's activity and calorie rows."""
    user_id: str
    date: date
    total_activities: int = 0
    total_duration: float = 0
    total_calories_burned: int = 0
    activities_performed: List[str] = Field(default_factory=list)
    calories_consumed: float = 0
    calories_burned: float = 0
    net_calories: float = 0


class TodayStats(BaseModel):
    """Today's headline numbers, serialized with camelCase keys."""
    model_config = ConfigDict(populate_by_name=True)

    calories_consumed: float = Field(0, alias="caloriesConsumed")
    calories_burned: float = Field(0, alias="caloriesBurned")
    sleep_hours: Optional[float] = Field(None, alias="sleepHours")
    weight: Optional[float] = None
    activities: List[ActivityEntry] = Field(default_factory=list)


class Dashboard(BaseModel):
    """Today's stats plus historical series; failed sections are listed in errors."""
    today: Optional[TodayStats] = None
    daily_summaries: List[DailySummary] = Field(default_factory=list)
    weight_history: List[WeightEntry] = Field(default_factory=list)
    sleep_history: List[SleepEntry] = Field(default_factory=list)
    calorie_history: List[CalorieEntry] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)


class NutritionAnalysis(BaseModel):
    """Nutrition analysis in the shape the client consumes."""
    model_config = ConfigDict(populate_by_name=True)

    calories: float = 0
    protein: float = 0
    carbohydrates: float = 0
    fats: float = 0
    fiber: float = 0
    food_items: List[str] = Field(default_factory=list, alias="foodItems")
    health_impact: str = Field("", alias="healthImpact")
    recommendations: List[str] = Field(default_factory=list)


class NutritionAnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    food_text: str = Field(..., min_length=1, alias="foodText")


class NutritionAnalysisResponse(BaseModel):
    success: bool = True
    analysis: NutritionAnalysis
