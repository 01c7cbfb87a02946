"""OpenAI Responses API client for nutrition estimation."""

import json
from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI

from calorie_snap.domain.errors import ConfigurationError, EstimationError
from calorie_snap.services.estimator import MISSING_API_KEY_MESSAGE, EstimatorClient


@dataclass
class OpenAIEstimatorClient(EstimatorClient):
    """Estimator client backed by OpenAI Responses API."""

    client: AsyncOpenAI | None

    @classmethod
    def create(
        cls, api_key: str | None, timeout: float | None = None
    ) -> "OpenAIEstimatorClient":
        """Create a client; a missing key is reported when first used."""
        if not api_key:
            return cls(client=None)
        return cls(
            client=AsyncOpenAI(
                api_key=api_key,
                timeout=httpx.Timeout(timeout, connect=10.0),
            )
        )

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
        """Call OpenAI Responses API with structured outputs."""
        if self.client is None:
            raise ConfigurationError(MISSING_API_KEY_MESSAGE)
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": instructions,
            "input": [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_image", "image_url": image_data_url},
                        {"type": "input_text", "text": prompt},
                    ],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "food_analysis",
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise EstimationError("OpenAI returned an empty response")
        try:
            return json.loads(output_text)
        except ValueError as exc:
            raise EstimationError("OpenAI returned non-JSON output") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self.client is not None:
            await self.client.close()
