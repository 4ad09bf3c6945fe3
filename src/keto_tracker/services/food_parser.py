"""Parser for the assistant's ``Key: value`` nutrition answers."""

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from keto_tracker.domain.assistant import (
    FoodFound,
    FoodLookupResult,
    FoodNotFound,
    FoodParseFailure,
)
from keto_tracker.domain.nutrition import Food, Macro, is_keto_friendly, keto_rating

_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass
class _ParsedFields:
    status: str = "unknown"
    name: str = "N/A"
    serving_size: str = "N/A"
    calories: float = 0.0
    carbs: float | None = None
    net_carbs: float | None = None
    total_carbs: float | None = None
    fiber: float = 0.0
    sugar_alcohols: float = 0.0
    protein: float = 0.0
    fat: float = 0.0

    def is_empty(self) -> bool:
        """Return True when nothing but initial defaults is present."""
        return (
            self.status == "unknown"
            and self.name == "N/A"
            and self.serving_size == "N/A"
            and not self.calories
            and not self.carbs
            and not self.net_carbs
            and not self.total_carbs
            and not self.fiber
            and not self.sugar_alcohols
            and not self.protein
            and not self.fat
        )

    def resolved_carbs(self) -> float:
        """Return net carbs, preferring an explicit value over derivation."""
        if self.net_carbs is not None:
            return self.net_carbs
        if self.carbs is not None:
            return self.carbs
        if self.total_carbs is not None:
            return max(0.0, self.total_carbs - self.fiber - self.sugar_alcohols)
        return 0.0


def parse_food_response(query: str, text: str) -> FoodLookupResult:
    """Turn the assistant's line protocol into a lookup result."""
    fields = _parse_lines(text)
    if fields.status == "not_found":
        return FoodNotFound(query=query)
    if fields.is_empty():
        return FoodParseFailure(query=query, raw_text=text)

    carbs = fields.resolved_carbs()
    food = Food(
        id=f"ai_{uuid4().hex}",
        name=fields.name,
        brand="AI Analyzed",
        serving_size=fields.serving_size,
        macros=Macro(
            carbs=carbs,
            protein=fields.protein,
            fat=fields.fat,
            calories=fields.calories,
        ),
        is_keto_friendly=is_keto_friendly(carbs),
        keto_rating=keto_rating(carbs),
        date_added=datetime.now(tz=UTC).isoformat(),
        description=text,
    )
    return FoodFound(food=food)


def parse_number(value: str) -> float | None:
    """Parse the leading number of ``value``, if any."""
    match = _NUMBER_PREFIX.match(value.strip())
    if match is None:
        return None
    return float(match.group(0))


def _parse_lines(text: str) -> _ParsedFields:  # noqa: PLR0912
    fields = _ParsedFields()
    for line in text.strip().splitlines():
        key, separator, value = line.partition(":")
        if not separator:
            continue
        key = key.strip(" -*\t").lower()
        value = value.strip()
        if key == "status":
            fields.status = _parse_status(value)
        elif key == "name":
            fields.name = value
        elif key == "serving size":
            fields.serving_size = value
        elif key == "calories":
            fields.calories = parse_number(value) or 0.0
        elif key == "carbs":
            fields.carbs = parse_number(value)
        elif key == "net carbs":
            fields.net_carbs = parse_number(value)
        elif key == "total carbs":
            fields.total_carbs = parse_number(value)
        elif key == "fiber":
            fields.fiber = parse_number(value) or 0.0
        elif key == "sugar alcohols":
            fields.sugar_alcohols = parse_number(value) or 0.0
        elif key == "protein":
            fields.protein = parse_number(value) or 0.0
        elif key == "fat":
            fields.fat = parse_number(value) or 0.0
    return fields


def _parse_status(value: str) -> str:
    normalized = value.lower().replace(" ", "")
    if normalized == "notfound":
        return "not_found"
    if normalized == "found":
        return "found"
    return "unknown"
