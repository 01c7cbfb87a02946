"""Food analysis and log entry models."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FoodAnalysis(BaseModel):
    """Nutrition estimate for a single photo, not yet logged."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    food_name: str
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    description: str
    portion_estimate: str

    @property
    def is_food(self) -> bool:
        """Return false when every nutrient is zero, the non-food signal."""
        return any((self.calories, self.protein, self.carbs, self.fat))


class FoodLogEntry(FoodAnalysis):
    """A confirmed analysis stored in the food log."""

    id: str = Field(min_length=1)
    timestamp: int
    image_url: str | None = None

    @classmethod
    def from_analysis(
        cls,
        analysis: FoodAnalysis,
        *,
        entry_id: str,
        logged_at: datetime,
        image: str | None,
    ) -> "FoodLogEntry":
        """Build an entry from a confirmed analysis."""
        return cls(
            **analysis.model_dump(),
            id=entry_id,
            timestamp=int(logged_at.timestamp() * 1000),
            image_url=image or None,
        )

    @property
    def logged_at(self) -> datetime:
        """Return the creation time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000, tz=UTC)
