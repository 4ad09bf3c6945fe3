"""Supabase repository for meals."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError
from supabase import Client

from keto_tracker.adapters.field_mapping import MEAL_FIELDS
from keto_tracker.adapters.supabase_support import execute
from keto_tracker.domain.meals import Meal
from keto_tracker.errors import RemoteStoreError
from keto_tracker.services.meals import MealRepository

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals."""

    client: Client

    def list_meals(self, user_id: str) -> list[Meal]:
        """Return every meal of the user."""
        response = execute(
            self.client.table(MEAL_FIELDS.table)
            .select(MEAL_FIELDS.select_clause())
            .eq("user_id", user_id),
            "load meals",
        )
        meals = []
        for row in response.data or []:
            try:
                meals.append(_parse_meal(row))
            except ValidationError as exc:
                _logger.warning(
                    "Skipping malformed meal row id=%s: %s", row.get("id"), exc
                )
        return meals

    def create_meal(self, user_id: str, meal: Meal) -> Meal:
        """Insert a meal and return the stored row."""
        payload = MEAL_FIELDS.to_remote(meal.to_fields(exclude={"id"}))
        payload["user_id"] = user_id
        response = execute(
            self.client.table(MEAL_FIELDS.table).insert(payload), "save meal"
        )
        if not response.data:
            raise RemoteStoreError("save meal failed: no row returned")
        return _parse_meal(response.data[0])

    def delete_meal(self, user_id: str, meal_id: str) -> None:
        """Delete one meal of the user."""
        execute(
            self.client.table(MEAL_FIELDS.table)
            .delete()
            .eq("id", meal_id)
            .eq("user_id", user_id),
            "remove meal",
        )

    def delete_all(self, user_id: str) -> None:
        """Delete every meal of the user."""
        execute(
            self.client.table(MEAL_FIELDS.table).delete().eq("user_id", user_id),
            "clear meals",
        )


def _parse_meal(row: dict[str, object]) -> Meal:
    fields = MEAL_FIELDS.from_remote(row)
    if fields.get("id") is not None:
        fields["id"] = str(fields["id"])
    return Meal.model_validate(fields)
