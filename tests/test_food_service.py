"""Tests for food search, barcodes and favorites."""

import asyncio

import pytest

from keto_tracker.domain.assistant import FoodFound, FoodNotFound
from keto_tracker.domain.nutrition import Macro
from keto_tracker.services.foods import FoodService
from tests.conftest import (
    FakeAssistantClient,
    InMemoryFavoritesRepository,
    InMemoryFoodCatalogRepository,
    make_food,
)


def test_short_queries_return_nothing(food_service: FoodService) -> None:
    assert food_service.search("a") == []
    assert food_service.search("  ") == []


def test_search_merges_shared_and_custom(
    food_service: FoodService, catalog_repository: InMemoryFoodCatalogRepository
) -> None:
    catalog_repository.shared = [make_food("shared_1", "Almond Butter")]
    catalog_repository.custom = [
        make_food("custom_2", "Almond Flour"),
        make_food("shared_1", "Almond Butter"),
    ]

    results = food_service.search("almond")

    assert [food.id for food in results] == ["shared_1", "custom_2"]


def test_find_by_barcode_prefers_shared_data(
    food_service: FoodService,
    catalog_repository: InMemoryFoodCatalogRepository,
    assistant_client: FakeAssistantClient,
) -> None:
    catalog_repository.shared = [make_food("shared_123", "Jerky", barcode="12345678")]

    result = asyncio.run(food_service.find_by_barcode("12345678"))

    assert isinstance(result, FoodFound)
    assert result.food.name == "Jerky"
    assert assistant_client.calls == []


def test_find_by_barcode_falls_back_to_assistant(
    food_service: FoodService, assistant_client: FakeAssistantClient
) -> None:
    assistant_client.answers.append(
        "Status: Found\nName: Seltzer\nServing Size: 355ml\nCalories: 0\n"
        "Carbs: 0\nProtein: 0\nFat: 0"
    )

    result = asyncio.run(food_service.find_by_barcode("98765432"))

    assert isinstance(result, FoodFound)
    assert result.food.barcode == "98765432"


def test_find_by_barcode_reports_not_found(
    food_service: FoodService, assistant_client: FakeAssistantClient
) -> None:
    assistant_client.answers.append("Status: NotFound\nName: Unknown Barcode 1")

    result = asyncio.run(food_service.find_by_barcode("11112222"))

    assert result == FoodNotFound(query="11112222")


def test_save_barcode_requires_barcode(
    food_service: FoodService, catalog_repository: InMemoryFoodCatalogRepository
) -> None:
    with pytest.raises(ValueError, match="no barcode"):
        food_service.save_barcode(make_food(), "u1")

    food = make_food(barcode="5555", macros=Macro(carbs=2))
    food_service.save_barcode(food, "u1")
    assert catalog_repository.submitted == [(food, "u1")]


def test_favorites_round_trip(
    food_service: FoodService, favorites_repository: InMemoryFavoritesRepository
) -> None:
    food = make_food()

    food_service.add_favorite("u1", food)
    assert food_service.list_favorites("u1") == [food]

    food_service.remove_favorite("u1", food.id)
    assert favorites_repository.favorites["u1"] == []
