from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime, date
from typing import Optional, List, Dict, Any

from models import Confidence, MealTag, MovementIntensity


# ---------------------------------------------------------------------------
# Event create requests (timestamp defaults to now, local time)
# ---------------------------------------------------------------------------

class FoodEventCreate(BaseModel):
    timestamp: Optional[datetime] = None
    text: str = Field(min_length=1, max_length=1000)
    meal_tag: Optional[MealTag] = None
    calories_min: Optional[int] = Field(default=None, ge=0)
    calories_max: Optional[int] = Field(default=None, ge=0)
    protein_g: Optional[float] = Field(default=None, ge=0)
    carbs_g: Optional[float] = Field(default=None, ge=0)
    fat_g: Optional[float] = Field(default=None, ge=0)
    fiber_g: Optional[float] = Field(default=None, ge=0)
    sugar_g: Optional[float] = Field(default=None, ge=0)
    confidence: Optional[Confidence] = None
    supportive_note: Optional[str] = None

    @model_validator(mode="after")
    def _calorie_range(self):
        if (
            self.calories_min is not None
            and self.calories_max is not None
            and self.calories_min > self.calories_max
        ):
            raise ValueError("calories_min must not exceed calories_max")
        return self


class WaterEventCreate(BaseModel):
    timestamp: Optional[datetime] = None
    ounces: float = Field(gt=0)


class CravingEventCreate(BaseModel):
    timestamp: Optional[datetime] = None
    text: str = Field(min_length=1, max_length=1000)
    intensity: Optional[int] = Field(default=None, ge=1, le=5)
    category: Optional[str] = None
    suggestion_text: Optional[str] = None
    alternatives: Optional[List[str]] = None


class MovementEventCreate(BaseModel):
    timestamp: Optional[datetime] = None
    activity_type: str = Field(min_length=1, max_length=200)
    duration_min: Optional[float] = Field(default=None, ge=0)
    intensity: Optional[MovementIntensity] = None
    estimated_burn_min: Optional[float] = Field(default=None, ge=0)
    estimated_burn_max: Optional[float] = Field(default=None, ge=0)
    raw_text: Optional[str] = None
    supportive_note: Optional[str] = None

    @model_validator(mode="after")
    def _burn_range(self):
        if (
            self.estimated_burn_min is not None
            and self.estimated_burn_max is not None
            and self.estimated_burn_min > self.estimated_burn_max
        ):
            raise ValueError("estimated_burn_min must not exceed estimated_burn_max")
        return self


class SleepEventCreate(BaseModel):
    timestamp: Optional[datetime] = None
    sleep_quality: int = Field(ge=1, le=5)
    hours_slept: Optional[float] = Field(default=None, ge=0, le=24)
    notes: Optional[str] = None


class StressEventCreate(BaseModel):
    timestamp: Optional[datetime] = None
    stress_level: int = Field(ge=1, le=5)
    notes: Optional[str] = None


class EventResponse(BaseModel):
    """Any stored event; kind-specific fields pass through as extras."""
    id: str
    kind: str
    timestamp: datetime

    model_config = ConfigDict(extra="allow")


class EventListResponse(BaseModel):
    start: date
    end: date
    food: List[Dict[str, Any]] = []
    water: List[Dict[str, Any]] = []
    craving: List[Dict[str, Any]] = []
    movement: List[Dict[str, Any]] = []
    sleep: List[Dict[str, Any]] = []
    stress: List[Dict[str, Any]] = []


# ---------------------------------------------------------------------------
# Estimate requests / responses
# ---------------------------------------------------------------------------

class FoodEstimateRequest(BaseModel):
    text: str
    meal_tag: Optional[MealTag] = None
    is_restaurant: bool = False
    unsure_portions: bool = False


class MovementEstimateRequest(BaseModel):
    text: str
    intensity: Optional[MovementIntensity] = None


class CravingSuggestionRequest(BaseModel):
    text: str
    intensity: Optional[int] = Field(default=None, ge=1, le=5)
    category: Optional[str] = None


class FoodEstimateResponse(BaseModel):
    calories_min: int
    calories_max: int
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    confidence: str
    supportive_note: str = ""
    optional_followup_question: Optional[str] = None


class MovementEstimateResponse(BaseModel):
    activity_type: str
    duration_min: float
    estimated_burn_min: int
    estimated_burn_max: int
    supportive_note: str = ""


class CravingSuggestionResponse(BaseModel):
    alternatives: List[str]
    honor_option: str
    suggestion: str
    category: Optional[str] = None


# ---------------------------------------------------------------------------
# Rollups / insights
# ---------------------------------------------------------------------------

class DailyRollupResponse(BaseModel):
    user_id: Optional[str] = None
    date: date
    has_data: bool
    calories_min_total: int
    calories_max_total: int
    protein_total: float
    carbs_total: float
    fat_total: float
    fiber_total: float
    sugar_total: float
    water_total: float
    movement_min_total: float
    burn_min_total: float
    burn_max_total: float
    cravings_count: int
    cravings_avg_intensity: float
    sleep_quality_avg: float
    hours_slept_avg: float
    stress_level_avg: float
    food_count: int
    water_count: int
    movement_count: int
    sleep_count: int
    stress_count: int
    craving_intensity_count: int
    hours_slept_count: int


class RollingStatsResponse(BaseModel):
    days: int
    days_with_data: int
    insufficient_data: bool
    avg_calories_min: Optional[float] = None
    avg_calories_max: Optional[float] = None
    avg_calories: Optional[float] = None
    avg_protein: Optional[float] = None
    avg_carbs: Optional[float] = None
    avg_fat: Optional[float] = None
    avg_fiber: Optional[float] = None
    avg_sugar: Optional[float] = None
    avg_water: Optional[float] = None
    avg_movement: Optional[float] = None
    avg_burn_min: Optional[float] = None
    avg_burn_max: Optional[float] = None
    avg_cravings: Optional[float] = None
    avg_craving_intensity: Optional[float] = None
    avg_sleep: Optional[float] = None
    avg_hours_slept: Optional[float] = None
    avg_stress: Optional[float] = None
    total_water: float = 0.0
    total_movement: float = 0.0
    total_cravings: int = 0
    metric_days: Dict[str, int] = {}


class InsightResponse(BaseModel):
    patterns: List[str]
    influences: List[str]
    experiment: str
    supportive_line: str


class TrendResponse(BaseModel):
    days: int
    start: date
    end: date
    stats: RollingStatsResponse
    insights: InsightResponse


class HomeInsightResponse(InsightResponse):
    date: date
    days: int
    cached: bool = False


class SnapshotResponse(BaseModel):
    date: date
    summary_text: str
    insights: List[str]
    suggestion: str
    supportive_line: str
    rollup: DailyRollupResponse
