"""Nutrition totals and goals."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class NutritionTotals:
    """Summed calories and macros."""

    calories: float
    protein: float
    carbs: float
    fat: float

    @classmethod
    def zero(cls) -> "NutritionTotals":
        return cls(0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class DailyGoal:
    """Fixed daily targets for calories and macros."""

    calories: float
    protein: float
    carbs: float
    fat: float

    def __post_init__(self) -> None:
        for name in ("calories", "protein", "carbs", "fat"):
            if getattr(self, name) <= 0:
                raise ValueError(f"Daily goal for {name} must be positive")


DEFAULT_GOAL = DailyGoal(calories=2200, protein=150, carbs=250, fat=70)


@dataclass(frozen=True)
class NutrientProgress:
    """Consumed versus target for one nutrient."""

    name: str
    unit: str
    current: float
    target: float
    remaining: float
    ratio: float


@dataclass(frozen=True)
class DailyTotals:
    """Totals for a single calendar day."""

    day: date
    calories: float
    protein: float
    carbs: float
    fat: float
    entry_count: int
