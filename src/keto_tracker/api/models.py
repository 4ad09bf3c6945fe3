"""Request payloads for the HTTP API."""

from pydantic import Field

from keto_tracker.domain.models import CamelModel
from keto_tracker.domain.nutrition import Macro
from keto_tracker.domain.profile import (
    ActivityLevel,
    Goal,
    HeightUnit,
    ProfileUpdate,
    WeightUnit,
)
from keto_tracker.services.units import height_to_cm, weight_to_kg


class ProfileInput(CamelModel):
    """Profile change as the user typed it, in display units."""

    name: str | None = None
    weight: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    height_inches: float = Field(default=0.0, ge=0)
    weight_unit: WeightUnit | None = None
    height_unit: HeightUnit | None = None
    goal: Goal | None = None
    activity_level: ActivityLevel | None = None
    daily_macro_limit: Macro | None = None
    daily_calorie_limit: float | None = Field(default=None, ge=0)

    def to_update(self) -> ProfileUpdate:
        """Convert weight and height to kg/cm and drop unset fields."""
        values = self.model_dump(
            exclude_unset=True, exclude_none=True, exclude={"height_inches"}
        )
        if self.weight is not None:
            values["weight"] = weight_to_kg(self.weight, self.weight_unit or "kg")
        if self.height is not None:
            values["height"] = height_to_cm(
                self.height, self.height_unit or "cm", self.height_inches
            )
        return ProfileUpdate(**values)


class WeightInput(CamelModel):
    """Weight measurement in the unit the user entered."""

    weight: float = Field(gt=0)
    unit: WeightUnit = "kg"
    notes: str | None = None


class FoodQuery(CamelModel):
    """Free-text food name or barcode."""

    query: str = Field(min_length=1)


class LabelInput(CamelModel):
    """Base64 JPEG of a nutrition label."""

    image_base64: str = ""


class QuestionInput(CamelModel):
    """Message for the assistant."""

    content: str = Field(min_length=1)


class SuggestionInput(CamelModel):
    """Optional preferences for meal suggestions."""

    preferences: str | None = None


class ConversationInput(CamelModel):
    """Title for a new conversation."""

    title: str = "New conversation"


class CurrentConversationInput(CamelModel):
    """Conversation to select, or None to clear the selection."""

    conversation_id: str | None = None
