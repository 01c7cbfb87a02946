"""Application configuration."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from calorie_snap.domain.nutrition import DailyGoal

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    analysis_timeout_seconds: float = Field(default=60.0, gt=0)
    data_path: Path = Path.home() / ".calorie_snap" / "storage.json"
    timezone: str = "UTC"
    goal_calories: float = Field(default=2200, gt=0)
    goal_protein: float = Field(default=150, gt=0)
    goal_carbs: float = Field(default=250, gt=0)
    goal_fat: float = Field(default=70, gt=0)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def daily_goal(self) -> DailyGoal:
        """Return the fixed daily targets."""
        return DailyGoal(
            calories=self.goal_calories,
            protein=self.goal_protein,
            carbs=self.goal_carbs,
            fat=self.goal_fat,
        )
