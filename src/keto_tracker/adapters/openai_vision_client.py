"""OpenAI Responses API client for label photos."""

from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from keto_tracker.errors import AssistantError
from keto_tracker.services.vision import VisionClient


@dataclass
class OpenAIVisionClient(VisionClient):
    """Vision client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIVisionClient":
        """Create an OpenAI vision client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def describe(
        self, *, model: str, store: bool, image_data_url: str, prompt: str
    ) -> str:
        """Send the image with the prompt and return the raw answer."""
        try:
            response = await self.client.responses.create(
                model=model,
                input=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "input_text", "text": prompt},
                            {"type": "input_image", "image_url": image_data_url},
                        ],
                    }
                ],
                store=store,
            )
        except OpenAIError as exc:
            raise AssistantError(f"OpenAI vision request failed: {exc}") from exc
        return response.output_text or ""

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
