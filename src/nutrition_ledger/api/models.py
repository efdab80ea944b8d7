"""Pydantic models for API request payloads."""

from pydantic import BaseModel, Field


class FoodLogRequest(BaseModel):
    """Food entry submitted by the client."""

    name: str = Field(min_length=1)
    kcal: float
    protein_g: float
    fat_g: float
    carbs_g: float
    time: str | None = None


class WeightLogRequest(BaseModel):
    """Weigh-in submitted by the client."""

    weight_kg: float = Field(gt=0)
    body_fat_pct: float | None = None
    muscle_pct: float | None = None
    water_pct: float | None = None


class ActivityLogRequest(BaseModel):
    """Activity with known calories."""

    description: str = Field(min_length=1)
    kcal: float = Field(gt=0)
    time: str | None = None


class ActivityEstimateRequest(BaseModel):
    """Free-text activity to estimate."""

    description: str = Field(min_length=1)
    weight_kg: float | None = Field(default=None, gt=0)
