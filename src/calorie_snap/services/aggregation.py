"""Totals and goal progress derived from the food log."""

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from calorie_snap.domain.food import FoodLogEntry
from calorie_snap.domain.nutrition import (
    DailyGoal,
    DailyTotals,
    NutrientProgress,
    NutritionTotals,
)

NUTRIENTS: tuple[tuple[str, str, str], ...] = (
    ("calories", "Calories", "kcal"),
    ("protein", "Protein", "g"),
    ("carbs", "Carbs", "g"),
    ("fat", "Fat", "g"),
)


def remaining(current: float, target: float) -> float:
    """Return what is left of a target, never below zero."""
    return max(0.0, target - current)


def progress(totals: NutritionTotals, goal: DailyGoal) -> list[NutrientProgress]:
    """Return consumed versus target for each nutrient.

    Going over a goal is allowed; the ratio simply exceeds 1.0.
    """
    result = []
    for key, label, unit in NUTRIENTS:
        current = float(getattr(totals, key))
        target = float(getattr(goal, key))
        result.append(
            NutrientProgress(
                name=label,
                unit=unit,
                current=current,
                target=target,
                remaining=remaining(current, target),
                ratio=current / target if target > 0 else 0.0,
            )
        )
    return result


@dataclass
class AggregationService:
    """Computes per-day totals in the configured timezone."""

    timezone_name: str = "UTC"

    def daily_totals(self, entries: list[FoodLogEntry]) -> list[DailyTotals]:
        """Return totals per calendar day, newest day first."""
        tz = ZoneInfo(self.timezone_name)
        by_day: dict[date, DailyTotals] = {}
        for entry in entries:
            day = entry.logged_at.astimezone(tz).date()
            by_day[day] = _add(by_day.get(day) or _empty_day(day), entry)
        return [by_day[day] for day in sorted(by_day, reverse=True)]

    def today_totals(
        self, entries: list[FoodLogEntry], now: datetime | None = None
    ) -> DailyTotals:
        """Return totals for the current day."""
        tz = ZoneInfo(self.timezone_name)
        today = (now or datetime.now(tz=tz)).astimezone(tz).date()
        for totals in self.daily_totals(entries):
            if totals.day == today:
                return totals
        return _empty_day(today)


def _empty_day(day: date) -> DailyTotals:
    return DailyTotals(day=day, calories=0, protein=0, carbs=0, fat=0, entry_count=0)


def _add(total: DailyTotals, entry: FoodLogEntry) -> DailyTotals:
    return DailyTotals(
        day=total.day,
        calories=total.calories + entry.calories,
        protein=total.protein + entry.protein,
        carbs=total.carbs + entry.carbs,
        fat=total.fat + entry.fat,
        entry_count=total.entry_count + 1,
    )
