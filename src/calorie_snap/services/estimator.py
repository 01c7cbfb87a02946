"""Nutrition estimation from food photos using LLMs."""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from calorie_snap.domain.errors import EstimationError
from calorie_snap.domain.food import FoodAnalysis

ANALYSIS_PROMPT = (
    "Identify the main food item in this image. "
    "Estimate the portion size visible. "
    "Provide a nutritional breakdown for that estimated portion. "
    "Be as accurate as possible with calorie counts. "
    "If it's a mixed meal, estimate the aggregate."
)

SYSTEM_INSTRUCTIONS = (
    "You are an expert nutritionist and dietitian API. "
    "Your goal is to accurately identify food from images and calculate "
    "nutritional values. If the image does not contain food, fill the fields "
    "with 0 or empty strings, but indicate it in the description."
)

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "foodName": {
            "type": "string",
            "description": "The name of the food item or meal.",
        },
        "calories": {
            "type": "number",
            "description": "Total estimated calories (kcal).",
        },
        "protein": {"type": "number", "description": "Total protein in grams."},
        "carbs": {
            "type": "number",
            "description": "Total carbohydrates in grams.",
        },
        "fat": {"type": "number", "description": "Total fat in grams."},
        "description": {
            "type": "string",
            "description": "A short, appetizing description of the food.",
        },
        "portionEstimate": {
            "type": "string",
            "description": (
                "A text description of the estimated portion size "
                "(e.g., '1 large bowl', '2 slices')."
            ),
        },
    },
    "required": [
        "foodName",
        "calories",
        "protein",
        "carbs",
        "fat",
        "description",
        "portionEstimate",
    ],
    "additionalProperties": False,
}

MISSING_API_KEY_MESSAGE = (
    "OPENAI_API_KEY is not set; nutrition analysis is unavailable"
)

_IMAGE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)

_logger = logging.getLogger(__name__)


class EstimatorClient(Protocol):
    """Interface for LLM nutrition estimation."""

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
        """Return the structured estimate as parsed JSON."""


@dataclass
class NutritionEstimator:
    """Prepares estimation requests and validates results."""

    client: EstimatorClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def estimate(self, image: str) -> FoodAnalysis:
        """Estimate nutrition for a base64-encoded image."""
        data_url = _to_data_url(image)
        try:
            raw = await self.client.analyze(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                image_data_url=data_url,
                schema=ANALYSIS_SCHEMA,
                prompt=ANALYSIS_PROMPT,
                instructions=SYSTEM_INSTRUCTIONS,
            )
        except EstimationError:
            raise
        except Exception as exc:
            raise EstimationError("Nutrition analysis request failed") from exc

        try:
            analysis = FoodAnalysis.model_validate(raw)
        except ValidationError as exc:
            raise EstimationError("Nutrition analysis returned bad data") from exc
        _logger.info(
            "Nutrition estimate: food=%s calories=%s is_food=%s",
            analysis.food_name,
            analysis.calories,
            analysis.is_food,
        )
        return analysis


def _to_data_url(image: str) -> str:
    """Wrap a base64 payload in a data URL with a sniffed MIME type."""
    try:
        head = base64.b64decode(image[:16], validate=False)
    except (binascii.Error, ValueError):
        head = b""
    return f"data:{_detect_mime_type(head)};base64,{image}"


def _detect_mime_type(head: bytes) -> str:
    """Sniff the photo format; cameras and unknown files default to JPEG."""
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    for signature, mime_type in _IMAGE_SIGNATURES:
        if head.startswith(signature):
            return mime_type
    return "image/jpeg"
