"""Tests for container wiring."""

import asyncio

from calorie_snap.adapters.file_image_source import FileImageSource
from calorie_snap.config import Settings
from calorie_snap.containers import build_container
from calorie_snap.domain.nutrition import DailyGoal


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert container.session_service.log_store is container.log_store
    assert container.log_store.entries() == []
    assert container.goal == DailyGoal(calories=2200, protein=150, carbs=250, fat=70)
    assert container.open_image_file is FileImageSource
    asyncio.run(container.close_resources())


def test_build_container_without_api_key(settings: Settings) -> None:
    settings.openai_api_key = None

    container = build_container(settings)

    assert container.estimator.client.client is None
    asyncio.run(container.close_resources())


def test_goal_comes_from_settings(settings: Settings) -> None:
    settings.goal_calories = 1800

    assert settings.daily_goal().calories == 1800
