"""Food catalog, barcode lookups and favorites."""

import logging
from dataclasses import dataclass
from typing import Protocol

from keto_tracker.domain.assistant import FoodFound, FoodLookupResult
from keto_tracker.domain.nutrition import Food
from keto_tracker.services.assistant import AssistantService

_logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 20


class FoodCatalogRepository(Protocol):
    """Read/write interface for the shared food tables."""

    def search_shared(self, query: str, limit: int) -> list[Food]:
        """Return shared barcode foods whose name contains ``query``."""

    def search_custom(self, query: str, limit: int) -> list[Food]:
        """Return custom foods whose name contains ``query``."""

    def get_by_barcode(self, barcode: str) -> Food | None:
        """Return the shared entry for a barcode, if any."""

    def upsert_barcode(self, food: Food, submitted_by: str) -> None:
        """Insert or replace the shared entry for the food's barcode."""


class FavoritesRepository(Protocol):
    """Persistence interface for favorite foods."""

    def list_favorites(self, user_id: str) -> list[Food]:
        """Return the user's favorite foods."""

    def add_favorite(self, user_id: str, food: Food) -> None:
        """Store a favorite food."""

    def remove_favorite(self, user_id: str, food_id: str) -> None:
        """Delete the favorite with the given food id."""


@dataclass
class FoodService:
    """Searches foods and resolves barcodes, asking the assistant last."""

    catalog: FoodCatalogRepository
    favorites: FavoritesRepository
    assistant: AssistantService

    def search(self, query: str) -> list[Food]:
        """Return shared and custom foods matching the query."""
        cleaned = query.strip()
        if len(cleaned) < MIN_SEARCH_LENGTH:
            return []
        shared = self.catalog.search_shared(cleaned, SEARCH_LIMIT)
        custom = self.catalog.search_custom(cleaned, SEARCH_LIMIT)
        seen: set[str] = set()
        merged = []
        for food in [*shared, *custom]:
            if food.id in seen:
                continue
            seen.add(food.id)
            merged.append(food)
        return merged

    def lookup_barcode(self, barcode: str) -> Food | None:
        """Return the shared catalog entry for a barcode."""
        return self.catalog.get_by_barcode(barcode.strip())

    def save_barcode(self, food: Food, submitted_by: str) -> None:
        """Share a food under its barcode."""
        if not food.barcode:
            raise ValueError("Food has no barcode to save")
        self.catalog.upsert_barcode(food, submitted_by)

    async def find_by_barcode(self, barcode: str) -> FoodLookupResult:
        """Resolve a barcode from the shared table, then from the assistant."""
        shared = self.lookup_barcode(barcode)
        if shared is not None:
            return FoodFound(food=shared)
        _logger.info("Barcode %s not shared yet, asking assistant", barcode)
        result = await self.assistant.lookup_food(barcode.strip())
        if isinstance(result, FoodFound) and result.food.barcode is None:
            food = result.food.model_copy(update={"barcode": barcode.strip()})
            return FoodFound(food=food)
        return result

    def list_favorites(self, user_id: str) -> list[Food]:
        """Return the user's favorites."""
        return self.favorites.list_favorites(user_id)

    def add_favorite(self, user_id: str, food: Food) -> None:
        """Store a favorite."""
        self.favorites.add_favorite(user_id, food)

    def remove_favorite(self, user_id: str, food_id: str) -> None:
        """Delete a favorite."""
        self.favorites.remove_favorite(user_id, food_id)
