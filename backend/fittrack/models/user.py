"""
User Model - Defines the user account and health profile structures.
"""

from datetime import datetime, date
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from ..core.dates import normalize_date


class UserBase(BaseModel):
    """Base user model with common fields."""
    username: str = Field(..., min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None


class UserCreate(UserBase):
    """User creation model with password."""
    password: str = Field(..., min_length=6)


class HealthProfile(BaseModel):
    """Body and lifestyle fields used by calorie estimation and the assistant."""
    gender: Optional[str] = None
    dob: Optional[date] = None
    height_cm: Optional[float] = Field(None, gt=0)
    weight_kg: Optional[float] = Field(None, gt=0)
    target_weight_kg: Optional[float] = Field(None, gt=0)
    activity_level: Optional[str] = None
    sleep_hours: Optional[float] = Field(None, ge=0, le=24)

    @field_validator("dob", mode="before")
    @classmethod
    def _normalize_dob(cls, value):
        if value is None or value == "":
            return None
        return normalize_date(value)


class ProfileUpdate(HealthProfile):
    """Profile update model - all fields optional."""
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)


class User(UserBase, HealthProfile):
    """User model with all fields."""
    user_id: str
    created_at: datetime
    updated_at: datetime
    is_active: bool = True

    class Config:
        from_attributes = True


class Token(BaseModel):
    """JWT token response model."""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Token payload data."""
    user_id: Optional[str] = None
    username: Optional[str] = None
