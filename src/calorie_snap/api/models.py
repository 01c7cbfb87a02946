"""Pydantic models for the local HTTP surface."""

from datetime import date
from pathlib import Path

from pydantic import BaseModel, Field

from calorie_snap.domain.food import FoodAnalysis, FoodLogEntry
from calorie_snap.domain.session import Phase


class CaptureImageRequest(BaseModel):
    """Uploaded or captured photo as base64, optionally as a data URL."""

    image: str = Field(min_length=1)


class CaptureFileRequest(BaseModel):
    """Photo file chosen in the upload fallback; no path means cancelled."""

    path: Path | None = None


class TotalsView(BaseModel):
    calories: float
    protein: float
    carbs: float
    fat: float


class NutrientProgressView(BaseModel):
    name: str
    unit: str
    current: float
    target: float
    remaining: float
    ratio: float


class DailyTotalsView(BaseModel):
    day: date
    calories: float
    protein: float
    carbs: float
    fat: float
    entry_count: int


class SessionView(BaseModel):
    """Current phase and candidate analysis."""

    phase: Phase
    error: str | None
    analysis: FoodAnalysis | None
    image: str | None
    can_confirm: bool
    pending_delete_id: str | None


class DashboardView(BaseModel):
    """Totals, goal progress and the food log."""

    session: SessionView
    totals: TotalsView
    progress: list[NutrientProgressView]
    today: DailyTotalsView
    entries: list[FoodLogEntry]
    entry_count: int


class HistoryView(BaseModel):
    days: list[DailyTotalsView]
