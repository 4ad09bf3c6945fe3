"""OpenAI Responses API client for text answers."""

from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from keto_tracker.errors import AssistantError
from keto_tracker.services.assistant import AssistantClient


@dataclass
class OpenAIAssistantClient(AssistantClient):
    """Assistant client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIAssistantClient":
        """Create an OpenAI assistant client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(
        self, *, model: str, store: bool, messages: list[dict[str, str]]
    ) -> str:
        """Send the conversation and return the output text."""
        try:
            response = await self.client.responses.create(
                model=model, input=messages, store=store
            )
        except OpenAIError as exc:
            raise AssistantError(f"OpenAI request failed: {exc}") from exc
        return response.output_text or ""

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
