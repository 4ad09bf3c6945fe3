"""Models for nutrition-label extraction results."""

from pydantic import field_validator

from keto_tracker.domain.models import CamelModel


class NutritionLabel(CamelModel):
    """Structured output read from a nutrition-facts photo."""

    name: str | None = None
    serving_size: str | None = None
    calories: float | None = None
    carbs: float | None = None
    protein: float | None = None
    fat: float | None = None
    error: str | None = None

    @field_validator("calories", "carbs", "protein", "fat", mode="before")
    @classmethod
    def _numeric_or_none(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return None
        return value
