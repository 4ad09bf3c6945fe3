"""Macro domain models."""

from pydantic import Field

from keto_tracker.domain.meals import Meal
from keto_tracker.domain.models import CamelModel
from keto_tracker.domain.nutrition import DEFAULT_MACRO_LIMIT, Macro


class DailyMacros(CamelModel):
    """Totals, limit and remaining budget for one calendar day."""

    date: str
    total: Macro = Field(default_factory=Macro)
    limit: Macro = DEFAULT_MACRO_LIMIT
    remaining: Macro = DEFAULT_MACRO_LIMIT
    meals: list[Meal] = Field(default_factory=list)
