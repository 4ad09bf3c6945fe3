"""Meal logging service."""

from dataclasses import dataclass
from typing import Protocol

from keto_tracker.domain.meals import Meal


class MealRepository(Protocol):
    """Persistence interface for meals."""

    def list_meals(self, user_id: str) -> list[Meal]:
        """Return every meal the user logged."""

    def create_meal(self, user_id: str, meal: Meal) -> Meal:
        """Store a meal and return it with its assigned id."""

    def delete_meal(self, user_id: str, meal_id: str) -> None:
        """Delete one meal."""

    def delete_all(self, user_id: str) -> None:
        """Delete every meal of the user."""


@dataclass
class MealService:
    """Thin service over the meal repository."""

    repository: MealRepository

    def list_meals(self, user_id: str) -> list[Meal]:
        """Return the user's meals."""
        return self.repository.list_meals(user_id)

    def add_meal(self, user_id: str, meal: Meal) -> Meal:
        """Persist a new meal."""
        fresh = meal.model_copy(update={"id": None})
        return self.repository.create_meal(user_id, fresh)

    def remove_meal(self, user_id: str, meal_id: str) -> None:
        """Delete a meal."""
        self.repository.delete_meal(user_id, meal_id)

    def clear(self, user_id: str) -> None:
        """Delete all of the user's meals."""
        self.repository.delete_all(user_id)
