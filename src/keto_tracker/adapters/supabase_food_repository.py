"""Supabase repositories for shared foods and favorites."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from keto_tracker.adapters.supabase_support import execute
from keto_tracker.domain.nutrition import Food, Macro, is_keto_friendly, keto_rating
from keto_tracker.services.foods import FavoritesRepository, FoodCatalogRepository

SHARED_COLUMNS = "barcode, name, serving_size, calories, carbs, protein, fat"
CUSTOM_COLUMNS = (
    "id, name, brand, serving_size, calories, carbs, protein, fat, description"
)


@dataclass
class SupabaseFoodCatalogRepository(FoodCatalogRepository):
    """Reads ``shared_barcode_data`` and ``custom_foods``."""

    client: Client

    def search_shared(self, query: str, limit: int) -> list[Food]:
        """Return shared foods whose name contains the query."""
        response = execute(
            self.client.table("shared_barcode_data")
            .select(SHARED_COLUMNS)
            .ilike("name", f"%{query}%")
            .limit(limit),
            "search shared foods",
        )
        return [_shared_food(row) for row in response.data or []]

    def search_custom(self, query: str, limit: int) -> list[Food]:
        """Return custom foods whose name contains the query."""
        response = execute(
            self.client.table("custom_foods")
            .select(CUSTOM_COLUMNS)
            .ilike("name", f"%{query}%")
            .limit(limit),
            "search custom foods",
        )
        return [_custom_food(row) for row in response.data or []]

    def get_by_barcode(self, barcode: str) -> Food | None:
        """Return the shared entry for a barcode."""
        response = execute(
            self.client.table("shared_barcode_data")
            .select(SHARED_COLUMNS)
            .eq("barcode", barcode)
            .limit(1),
            "look up barcode",
        )
        if not response.data:
            return None
        return _shared_food(response.data[0])

    def upsert_barcode(self, food: Food, submitted_by: str) -> None:
        """Insert or replace the shared entry for the food's barcode."""
        execute(
            self.client.table("shared_barcode_data").upsert(
                {
                    "barcode": food.barcode,
                    "name": food.name,
                    "serving_size": food.serving_size,
                    "calories": food.macros.calories,
                    "carbs": food.macros.carbs,
                    "protein": food.macros.protein,
                    "fat": food.macros.fat,
                    "submitted_by_user_id": submitted_by,
                },
                on_conflict="barcode",
            ),
            "save barcode",
        )


@dataclass
class SupabaseFavoritesRepository(FavoritesRepository):
    """Stores favorites as JSON snapshots in ``favorite_foods``."""

    client: Client

    def list_favorites(self, user_id: str) -> list[Food]:
        """Return the user's favorite foods."""
        response = execute(
            self.client.table("favorite_foods")
            .select("food_data")
            .eq("user_id", user_id),
            "load favorites",
        )
        return [
            Food.model_validate(row["food_data"])
            for row in response.data or []
            if row.get("food_data")
        ]

    def add_favorite(self, user_id: str, food: Food) -> None:
        """Store a snapshot of the food."""
        execute(
            self.client.table("favorite_foods").insert(
                {"user_id": user_id, "food_data": food.to_fields()}
            ),
            "add favorite",
        )

    def remove_favorite(self, user_id: str, food_id: str) -> None:
        """Delete favorites whose snapshot has the given id."""
        execute(
            self.client.table("favorite_foods")
            .delete()
            .eq("user_id", user_id)
            .eq("food_data->>id", food_id),
            "remove favorite",
        )


def _macros(row: dict[str, object]) -> Macro:
    return Macro(
        calories=float(row.get("calories") or 0),
        carbs=float(row.get("carbs") or 0),
        protein=float(row.get("protein") or 0),
        fat=float(row.get("fat") or 0),
    )


def _shared_food(row: dict[str, object]) -> Food:
    macros = _macros(row)
    return Food(
        id=f"shared_{row['barcode']}",
        name=str(row.get("name") or ""),
        brand="User Submitted",
        serving_size=str(row.get("serving_size") or "N/A"),
        macros=macros,
        barcode=str(row["barcode"]),
        is_keto_friendly=is_keto_friendly(macros.carbs),
        keto_rating=keto_rating(macros.carbs),
        date_added=datetime.now(tz=UTC).isoformat(),
        description="Data from shared user database.",
    )


def _custom_food(row: dict[str, object]) -> Food:
    macros = _macros(row)
    return Food(
        id=f"custom_{row['id']}",
        name=str(row.get("name") or ""),
        brand=row.get("brand"),
        serving_size=str(row.get("serving_size") or "N/A"),
        macros=macros,
        is_keto_friendly=is_keto_friendly(macros.carbs),
        keto_rating=keto_rating(macros.carbs),
        description=row.get("description"),
    )
