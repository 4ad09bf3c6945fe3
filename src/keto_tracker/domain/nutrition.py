"""Nutrition domain models."""

from typing import Literal

from pydantic import Field

from keto_tracker.domain.models import CamelModel

KetoRating = Literal["Keto-Friendly", "Limit", "Strictly Limit", "Avoid"]

KETO_FRIENDLY_MAX_CARBS = 7.0


class Macro(CamelModel):
    """Macronutrient amounts; missing values count as zero."""

    carbs: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    calories: float = 0.0


DEFAULT_MACRO_LIMIT = Macro(carbs=20, protein=120, fat=150, calories=1800)


class Food(CamelModel):
    """A catalog entry or an AI-derived nutrition result."""

    id: str
    name: str
    brand: str | None = None
    serving_size: str = "N/A"
    macros: Macro = Field(default_factory=Macro)
    barcode: str | None = None
    is_keto_friendly: bool = False
    keto_rating: KetoRating | None = None
    date_added: str = ""
    description: str | None = None


def is_keto_friendly(carbs: float) -> bool:
    """Return True when carbs per serving fall within 0-7 grams."""
    return 0 <= carbs <= KETO_FRIENDLY_MAX_CARBS


def keto_rating(net_carbs: float | None) -> KetoRating:
    """Rate a serving by its net carbs."""
    if net_carbs is None or net_carbs < 0:
        return "Limit"
    if net_carbs <= 6:  # noqa: PLR2004
        return "Keto-Friendly"
    if net_carbs <= 10:  # noqa: PLR2004
        return "Limit"
    if net_carbs <= 20:  # noqa: PLR2004
        return "Strictly Limit"
    return "Avoid"
