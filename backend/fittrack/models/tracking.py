"""
Tracking Models - Typed per-user time-series rows (weight, sleep, calories,
activity, nutrition) and medical history.

Each entity has a *Create model (what a client submits) and a stored model
(what the record store persists, with id, owner and creation timestamp).
"""

from datetime import datetime, date, timezone
from enum import Enum
from typing import Optional, List
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field, field_validator

from ..core.dates import normalize_date


class _CaseInsensitiveEnum(str, Enum):
    """String enum that also accepts values in any letter case."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None


class ActivityType(_CaseInsensitiveEnum):
    RUNNING = "running"
    WALKING = "walking"
    CYCLING = "cycling"
    SWIMMING = "swimming"
    GYM = "gym"
    YOGA = "yoga"
    DANCING = "dancing"
    SPORTS = "sports"
    HIKING = "hiking"
    OTHER = "other"


class Intensity(_CaseInsensitiveEnum):
    LIGHT = "light"
    MODERATE = "moderate"
    VIGOROUS = "vigorous"
    VERY_VIGOROUS = "very_vigorous"


class SleepQuality(_CaseInsensitiveEnum):
    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"
    EXCELLENT = "Excellent"


class Meal(_CaseInsensitiveEnum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"


class StoredRecord(BaseModel):
    """Fields assigned by the record store to every persisted row."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DatedRecord(BaseModel):
    """Mixin for rows keyed by a calendar date."""
    date: date

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return normalize_date(value)


# Weight

class WeightEntryCreate(DatedRecord):
    weight: float = Field(..., gt=0, description="Body weight in kg")


class WeightEntry(WeightEntryCreate, StoredRecord):
    pass


# Sleep

class SleepEntryCreate(DatedRecord):
    duration_hours: float = Field(..., ge=0, le=24)
    quality: SleepQuality


class SleepEntry(SleepEntryCreate, StoredRecord):
    pass


# Calories

class CalorieEntryCreate(DatedRecord):
    calories_consumed: int = Field(..., ge=0)
    calories_burned: int = Field(0, ge=0)


class CalorieEntryUpdate(BaseModel):
    calories_consumed: Optional[int] = Field(None, ge=0)
    calories_burned: Optional[int] = Field(None, ge=0)


class CalorieEntry(CalorieEntryCreate, StoredRecord):

    @computed_field
    @property
    def net(self) -> int:
        return self.calories_consumed - self.calories_burned


# Activity

class ActivityEntryCreate(DatedRecord):
    """
    Activity submission. Type and intensity stay plain strings here so the
    calorie estimator decides how unknown values are treated.
    """
    activity_type: str = Field(..., min_length=1)
    duration_minutes: float = Field(..., gt=0)
    intensity: str = Field("moderate", min_length=1)
    description: Optional[str] = None


class ActivityEntry(DatedRecord, StoredRecord):
    activity_type: ActivityType
    duration_minutes: float = Field(..., gt=0)
    intensity: Intensity
    calories_burned: int = Field(..., ge=0)
    description: Optional[str] = None


class ActivityEstimateRequest(BaseModel):
    activity_type: str
    duration_minutes: float = Field(..., gt=0)
    intensity: str = "moderate"
    weight_kg: Optional[float] = Field(None, gt=0)


class ActivityEstimate(BaseModel):
    activity_type: ActivityType
    intensity: Intensity
    duration_minutes: float
    weight_kg: float
    met: float
    calories_burned: int


# Nutrition

class NutritionLogCreate(DatedRecord):
    meal: Meal
    food_items: List[str] = Field(..., min_length=1)
    calories: Optional[float] = Field(None, ge=0)
    protein: Optional[float] = Field(None, ge=0)
    carbs: Optional[float] = Field(None, ge=0)
    fat: Optional[float] = Field(None, ge=0)
    fiber: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class NutritionLog(DatedRecord, StoredRecord):
    meal: Meal
    food_items: List[str]
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    fiber: float = 0
    estimated: bool = False  # True when macros came from the LLM
    notes: Optional[str] = None


# Medical history

class MedicalConditionCreate(BaseModel):
    condition: str = Field(..., min_length=1)
    diagnosis_date: date
    treatment: Optional[str] = None
    medications: Optional[str] = None

    @field_validator("diagnosis_date", mode="before")
    @classmethod
    def _normalize_diagnosis_date(cls, value):
        return normalize_date(value)


class MedicalCondition(MedicalConditionCreate, StoredRecord):
    pass
