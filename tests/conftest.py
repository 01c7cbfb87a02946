"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from calorie_snap.adapters.file_image_source import FileImageSource
from calorie_snap.config import Settings
from calorie_snap.containers import AppContainer
from calorie_snap.domain.errors import AcquisitionError
from calorie_snap.domain.food import FoodAnalysis, FoodLogEntry
from calorie_snap.services.acquisition import ImageSource
from calorie_snap.services.aggregation import AggregationService
from calorie_snap.services.estimator import EstimatorClient, NutritionEstimator
from calorie_snap.services.log_store import KeyValueStore, LogStore
from calorie_snap.services.session import SessionService

# Base64 of a JPEG file signature followed by filler bytes.
JPEG_IMAGE = "/9j/4AAQSkZJRgABAQAAAQABAAAA"

SALAD_PAYLOAD: dict[str, object] = {
    "foodName": "Salad",
    "calories": 250,
    "protein": 10,
    "carbs": 20,
    "fat": 15,
    "description": "Mixed greens with vinaigrette.",
    "portionEstimate": "1 bowl",
}

NOT_FOOD_PAYLOAD: dict[str, object] = {
    "foodName": "",
    "calories": 0,
    "protein": 0,
    "carbs": 0,
    "fat": 0,
    "description": "The image shows a keyboard, not food.",
    "portionEstimate": "",
}


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value storage for tests."""

    values: dict[str, str] = field(default_factory=dict)
    writes: int = 0

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes += 1


@dataclass
class FailingKeyValueStore(KeyValueStore):
    """Storage whose reads and writes always fail."""

    def get(self, key: str) -> str | None:
        raise OSError("storage unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


@dataclass
class FakeEstimatorClient(EstimatorClient):
    """Fake estimator client returning a fixed payload or raising."""

    payload: dict[str, object] = field(default_factory=lambda: dict(SALAD_PAYLOAD))
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
        instructions: str,
    ) -> dict[str, object]:
        self.calls.append(
            {
                "model": model,
                "image_data_url": image_data_url,
                "prompt": prompt,
                "instructions": instructions,
            }
        )
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class BlockingEstimatorClient(EstimatorClient):
    """Estimator client that waits until released."""

    payload: dict[str, object] = field(default_factory=lambda: dict(SALAD_PAYLOAD))
    release: asyncio.Event = field(default_factory=asyncio.Event)
    started: asyncio.Event = field(default_factory=asyncio.Event)

    async def analyze(self, **kwargs: object) -> dict[str, object]:
        self.started.set()
        await self.release.wait()
        return self.payload


@dataclass
class FakeImageSource(ImageSource):
    """Image source returning a fixed image, None, or an error."""

    image: str | None = JPEG_IMAGE
    error: AcquisitionError | None = None

    async def acquire(self) -> str | None:
        if self.error is not None:
            raise self.error
        return self.image


@dataclass
class BlockingImageSource(ImageSource):
    """Image source that waits until released, like an open camera."""

    image: str | None = JPEG_IMAGE
    error: AcquisitionError | None = None
    release: asyncio.Event = field(default_factory=asyncio.Event)
    started: asyncio.Event = field(default_factory=asyncio.Event)

    async def acquire(self) -> str | None:
        self.started.set()
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.image


def make_estimator(client: EstimatorClient) -> NutritionEstimator:
    return NutritionEstimator(
        client=client, model="gpt-test", reasoning_effort=None, store=False
    )


def make_entry(entry_id: str, **overrides: object) -> FoodLogEntry:
    values: dict[str, object] = {
        "food_name": "Oatmeal",
        "calories": 300,
        "protein": 10,
        "carbs": 50,
        "fat": 6,
        "description": "",
        "portion_estimate": "1 cup",
        "id": entry_id,
        "timestamp": 1_700_000_000_000,
    }
    values.update(overrides)
    return FoodLogEntry(**values)


@pytest.fixture
def salad() -> FoodAnalysis:
    return FoodAnalysis.model_validate(SALAD_PAYLOAD)


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def log_store(storage: InMemoryKeyValueStore) -> LogStore:
    store = LogStore(storage)
    store.load()
    return store


@pytest.fixture
def estimator_client() -> FakeEstimatorClient:
    return FakeEstimatorClient()


@pytest.fixture
def session_service(
    log_store: LogStore, estimator_client: FakeEstimatorClient
) -> SessionService:
    return SessionService(
        log_store=log_store, estimator=make_estimator(estimator_client)
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        data_path=tmp_path / "storage.json",
        environment="test",
    )


@pytest.fixture
def container(
    settings: Settings,
    log_store: LogStore,
    session_service: SessionService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        goal=settings.daily_goal(),
        log_store=log_store,
        estimator=session_service.estimator,
        session_service=session_service,
        aggregation_service=AggregationService(settings.timezone),
        open_image_file=FileImageSource,
        close_resources=close_resources,
    )
