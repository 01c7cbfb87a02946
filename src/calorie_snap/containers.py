"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from calorie_snap.adapters.file_image_source import FileImageSource
from calorie_snap.adapters.json_file_store import JsonFileKeyValueStore
from calorie_snap.adapters.openai_estimator_client import OpenAIEstimatorClient
from calorie_snap.config import Settings
from calorie_snap.domain.nutrition import DailyGoal
from calorie_snap.services.acquisition import ImageSource
from calorie_snap.services.aggregation import AggregationService
from calorie_snap.services.estimator import NutritionEstimator
from calorie_snap.services.log_store import LogStore
from calorie_snap.services.session import SessionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    goal: DailyGoal
    log_store: LogStore
    estimator: NutritionEstimator
    session_service: SessionService
    aggregation_service: AggregationService
    open_image_file: Callable[[Path | None], ImageSource]
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    log_store = LogStore(JsonFileKeyValueStore(resolved_settings.data_path))
    log_store.load()
    openai_client = OpenAIEstimatorClient.create(
        resolved_settings.openai_api_key,
        timeout=resolved_settings.analysis_timeout_seconds,
    )
    estimator = NutritionEstimator(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    session_service = SessionService(
        log_store=log_store,
        estimator=estimator,
        analysis_timeout_seconds=resolved_settings.analysis_timeout_seconds,
        environment=resolved_settings.environment,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        goal=resolved_settings.daily_goal(),
        log_store=log_store,
        estimator=estimator,
        session_service=session_service,
        aggregation_service=AggregationService(resolved_settings.timezone),
        open_image_file=FileImageSource,
        close_resources=close_resources,
    )
