"""Nutrition-label extraction from photos."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from keto_tracker.domain.vision import NutritionLabel
from keto_tracker.errors import AssistantError

_logger = logging.getLogger(__name__)

LABEL_PROMPT = (
    "Analyze this nutrition facts label image. Extract the following "
    "information in strict JSON format with these keys: name (string, infer "
    "if possible, otherwise null), servingSize (string, e.g., '1 cup (240ml)'), "
    "calories (number), carbs (number, total carbohydrates), protein (number), "
    "fat (number, total fat). Ensure all numeric values are numbers, not "
    "strings. If a value isn't clearly visible or applicable, use null. If "
    "the image is not a nutrition label or is unreadable, return JSON with "
    'an "error" key, like {"error": "Could not read label"}.'
)

PARTIAL_LABEL_ERROR = "AI response format error, partial data extracted."

_DATA_URI_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")
_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")
_CALORIES = re.compile(r'"calories":\s*(\d+)')


class VisionClient(Protocol):
    """Interface for an image-understanding endpoint."""

    async def describe(
        self, *, model: str, store: bool, image_data_url: str, prompt: str
    ) -> str:
        """Return the model's raw text answer about the image."""


@dataclass
class LabelService:
    """Reads nutrition facts from a label photo."""

    client: VisionClient
    model: str
    store: bool

    async def analyze(self, image_base64: str) -> NutritionLabel:
        """Extract label values from a base64 JPEG.

        Accepts raw base64 or a ``data:image/...;base64,`` URI. Raises
        ``AssistantError`` when the endpoint fails or its answer holds no
        usable data.
        """
        payload = _DATA_URI_PREFIX.sub("", image_base64.strip())
        if not payload:
            return NutritionLabel(error="No image base64 data provided.")
        text = await self.client.describe(
            model=self.model,
            store=self.store,
            image_data_url=f"data:image/jpeg;base64,{payload}",
            prompt=LABEL_PROMPT,
        )
        if not text or not text.strip():
            raise AssistantError("Vision endpoint returned an empty response")
        return parse_label_response(text)


def parse_label_response(text: str) -> NutritionLabel:
    """Turn the endpoint's answer into a label, salvaging calories if needed."""
    cleaned = _FENCE.sub("", text.strip()).strip()
    try:
        data = json.loads(cleaned)
        if isinstance(data, dict):
            return NutritionLabel.model_validate(data)
        _logger.warning("Label response was JSON but not an object")
    except (json.JSONDecodeError, ValidationError):
        _logger.warning("Label response was not valid JSON, trying fallback")

    match = _CALORIES.search(cleaned)
    if match:
        return NutritionLabel(calories=float(match.group(1)), error=PARTIAL_LABEL_ERROR)
    raise AssistantError("Could not parse nutrition label response")
