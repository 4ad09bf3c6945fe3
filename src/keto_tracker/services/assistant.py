"""Keto assistant backed by a text-completion endpoint."""

import logging
from dataclasses import dataclass
from typing import Protocol

from keto_tracker.domain.assistant import FoodFound, FoodLookupResult
from keto_tracker.errors import AssistantError
from keto_tracker.services.cache import LookupCache
from keto_tracker.services.food_parser import parse_food_response

_logger = logging.getLogger(__name__)

BARCODE_MIN_DIGITS = 8
BARCODE_MAX_DIGITS = 14

_EXPERT = "You are a keto diet nutrition expert assistant."

_LOOKUP_SYSTEM = (
    "You are an accurate nutrition database assistant. "
    "Respond only in the specified key-value format."
)

_LOOKUP_FORMAT = """Status: [Found | NotFound]
Name: [Product Name or Unknown Barcode {query}]
Serving Size: [Serving Size or N/A]
Calories: [Number or 0]
Carbs: [Net carbs, number or 0]
Protein: [Number or 0]
Fat: [Number or 0]"""

_BARCODE_PROMPT = """Analyze the following food query: "{query}"

This is a barcode. Look up the specific product accurately.
If you cannot confidently identify the exact product, set Status to NotFound.

Respond only with the following key-value pairs on separate lines, with no
extra commentary:

{format}"""

_FOOD_PROMPT = """Analyze the specific food item: "{query}"

Provide the most accurate nutritional information for a common serving size.
Report net carbs (total carbohydrates minus fiber and sugar alcohols) as Carbs.
If you do not recognise the item at all, set Status to NotFound.

Respond only with the following key-value pairs on separate lines, with no
extra commentary:

{format}"""


class AssistantClient(Protocol):
    """Interface for a text-completion endpoint."""

    async def complete(
        self, *, model: str, store: bool, messages: list[dict[str, str]]
    ) -> str:
        """Return the model's text answer for the messages."""


@dataclass
class AssistantService:
    """Prompts the text endpoint for answers, suggestions and food lookups."""

    client: AssistantClient
    model: str
    store: bool
    cache: LookupCache

    async def answer_question(self, question: str) -> str:
        """Answer a free-form keto question."""
        return await self._complete(
            [
                {
                    "role": "system",
                    "content": (
                        f"{_EXPERT} Provide accurate, helpful, and concise "
                        "information about the ketogenic diet."
                    ),
                },
                {"role": "user", "content": question},
            ],
            action="answer",
        )

    async def suggest_meals(self, preferences: str | None = None) -> str:
        """Suggest three keto meals, optionally honouring preferences."""
        request = "Suggest 3 keto-friendly meal ideas"
        if preferences:
            request += f" with these preferences: {preferences}"
        return await self._complete(
            [
                {
                    "role": "system",
                    "content": (
                        f"{_EXPERT} Suggest keto-friendly meals based on user "
                        "preferences."
                    ),
                },
                {
                    "role": "user",
                    "content": f"{request}. Include approximate macros for each meal.",
                },
            ],
            action="suggest",
        )

    async def analyze_food(self, food_item: str) -> str:
        """Describe a food's macros and whether it suits a keto diet."""
        return await self._complete(
            [
                {
                    "role": "system",
                    "content": (
                        f"{_EXPERT} Respond concisely. When providing "
                        'macronutrients, use the exact format: "Calories: VALUE, '
                        'Carbs: VALUE, Protein: VALUE, Fat: VALUE" with numbers '
                        "only, per common serving size."
                    ),
                },
                {
                    "role": "user",
                    "content": (
                        f'Analyze the food item or barcode query: "{food_item}". '
                        "Provide its typical macronutrients per common serving "
                        "size and explain if it is generally considered "
                        "keto-friendly."
                    ),
                },
            ],
            action="analyze",
        )

    async def lookup_food(self, query: str) -> FoodLookupResult:
        """Ask for structured nutrition facts and parse the answer.

        Raises ``AssistantError`` when the endpoint itself fails.
        """
        cached = self.cache.get(query)
        if cached is not None:
            return cached
        template = _BARCODE_PROMPT if looks_like_barcode(query) else _FOOD_PROMPT
        prompt = template.format(
            query=query, format=_LOOKUP_FORMAT.format(query=query)
        )
        text = await self._complete(
            [
                {"role": "system", "content": _LOOKUP_SYSTEM},
                {"role": "user", "content": prompt},
            ],
            action="lookup",
        )
        result = parse_food_response(query, text)
        if isinstance(result, FoodFound):
            self.cache.put(query, result)
        else:
            _logger.info("Food lookup %s for query=%r", result.status, query)
        return result

    async def _complete(self, messages: list[dict[str, str]], *, action: str) -> str:
        try:
            text = await self.client.complete(
                model=self.model, store=self.store, messages=messages
            )
        except AssistantError:
            _logger.exception("Assistant %s request failed", action)
            raise
        if not text or not text.strip():
            raise AssistantError(f"Assistant returned an empty {action} response")
        return text


def looks_like_barcode(query: str) -> bool:
    """Return True for queries that are a plain UPC/EAN digit string."""
    cleaned = query.strip()
    if not cleaned.isdigit():
        return False
    return BARCODE_MIN_DIGITS <= len(cleaned) <= BARCODE_MAX_DIGITS
