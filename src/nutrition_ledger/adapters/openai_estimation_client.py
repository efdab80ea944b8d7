"""OpenAI Responses API client for nutrition and activity estimates."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrition_ledger.domain.nutrition import ResponseShape
from nutrition_ledger.services.macros import EstimationClient


@dataclass
class OpenAIEstimationClient(EstimationClient):
    """Estimation client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    model: str
    reasoning_effort: str | None = None
    store: bool = False

    @classmethod
    def create(
        cls,
        api_key: str,
        model: str,
        reasoning_effort: str | None = None,
        store: bool = False,
    ) -> "OpenAIEstimationClient":
        """Create an OpenAI estimation client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
        )

    async def complete(self, prompt: str, response_shape: ResponseShape) -> str:
        """Send a single prompt and return the raw output text."""
        request_payload: dict[str, object] = {
            "model": self.model,
            "input": [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": prompt}],
                }
            ],
            "store": self.store,
        }
        if response_shape is ResponseShape.JSON:
            request_payload["text"] = {"format": {"type": "json_object"}}
        if self.reasoning_effort:
            request_payload["reasoning"] = {"effort": self.reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        return response.output_text or ""

    async def close(self) -> None:
        """Close the underlying OpenAI client."""
        await self.client.close()
