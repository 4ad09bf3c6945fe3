"""Domain models for user profiles and weight history."""

from typing import Literal

from pydantic import field_validator

from keto_tracker.domain.models import CamelModel
from keto_tracker.domain.nutrition import DEFAULT_MACRO_LIMIT, Macro

Goal = Literal["weight_loss", "maintenance", "muscle_gain"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]
WeightUnit = Literal["kg", "lb"]
HeightUnit = Literal["cm", "ft"]

DEFAULT_WEIGHT_KG = 70.0
DEFAULT_HEIGHT_CM = 170.0

_LEGACY_GOALS = {"maintain": "maintenance"}


class UserProfile(CamelModel):
    """Profile stored in canonical units (kg, cm).

    The display units only drive rendering; ``weight`` is always kilograms and
    ``height`` always centimeters.
    """

    id: str
    name: str = "User"
    weight: float = DEFAULT_WEIGHT_KG
    height: float = DEFAULT_HEIGHT_CM
    weight_unit: WeightUnit = "lb"
    height_unit: HeightUnit = "ft"
    goal: Goal = "weight_loss"
    activity_level: ActivityLevel = "moderate"
    daily_macro_limit: Macro = DEFAULT_MACRO_LIMIT
    daily_calorie_limit: float = 1800

    @field_validator("goal", mode="before")
    @classmethod
    def _normalize_goal(cls, value: object) -> object:
        if isinstance(value, str):
            return _LEGACY_GOALS.get(value, value)
        return value


class ProfileUpdate(CamelModel):
    """Partial profile change; only the fields that were set are written."""

    name: str | None = None
    weight: float | None = None
    height: float | None = None
    weight_unit: WeightUnit | None = None
    height_unit: HeightUnit | None = None
    goal: Goal | None = None
    activity_level: ActivityLevel | None = None
    daily_macro_limit: Macro | None = None
    daily_calorie_limit: float | None = None

    def changes(self) -> dict[str, object]:
        """Return the set fields keyed by app field name."""
        return self.to_fields(exclude_unset=True, exclude_none=True)


class WeightEntry(CamelModel):
    """Timestamped weight in kilograms."""

    id: str
    date: str
    weight: float
    unit: WeightUnit = "kg"
    notes: str | None = None
