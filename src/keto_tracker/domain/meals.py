"""Domain models for meal logging."""

from typing import Literal

from pydantic import Field

from keto_tracker.domain.models import CamelModel
from keto_tracker.domain.nutrition import Food, Macro

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class Meal(CamelModel):
    """A logged meal with its aggregate macros."""

    id: str | None = None
    name: str = ""
    foods: list[Food] = Field(default_factory=list)
    date: str
    time: str = ""
    type: MealType = "snack"
    macros: Macro = Field(default_factory=Macro)
