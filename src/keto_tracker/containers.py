"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from keto_tracker.adapters.local_storage import JsonFileStorage
from keto_tracker.adapters.openai_assistant_client import OpenAIAssistantClient
from keto_tracker.adapters.openai_vision_client import OpenAIVisionClient
from keto_tracker.adapters.supabase_auth import SupabaseAuthGateway
from keto_tracker.adapters.supabase_food_repository import (
    SupabaseFavoritesRepository,
    SupabaseFoodCatalogRepository,
)
from keto_tracker.adapters.supabase_meal_repository import SupabaseMealRepository
from keto_tracker.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from keto_tracker.adapters.supabase_weight_repository import SupabaseWeightRepository
from keto_tracker.config import Settings
from keto_tracker.services.alerts import RecordingAlertSink
from keto_tracker.services.app_state import AppController
from keto_tracker.services.assistant import AssistantService
from keto_tracker.services.auth import AuthGateway
from keto_tracker.services.cache import InMemoryLookupCache
from keto_tracker.services.foods import FoodService
from keto_tracker.services.meals import MealService
from keto_tracker.services.onboarding import OnboardingService
from keto_tracker.services.profiles import ProfileService
from keto_tracker.services.vision import LabelService
from keto_tracker.services.weights import WeightService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_gateway: AuthGateway
    profile_service: ProfileService
    meal_service: MealService
    weight_service: WeightService
    food_service: FoodService
    onboarding_service: OnboardingService
    assistant_service: AssistantService
    label_service: LabelService
    close_resources: Callable[[], Awaitable[None]]

    def new_controller(self) -> AppController:
        """Create a controller for one signed-in user."""
        return AppController(
            profiles=self.profile_service,
            meals=self.meal_service,
            weights=self.weight_service,
            foods=self.food_service,
            onboarding=self.onboarding_service,
            assistant=self.assistant_service,
            auth=self.auth_gateway,
            alerts=RecordingAlertSink(),
        )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    assistant_client = OpenAIAssistantClient.create(resolved_settings.openai_api_key)
    vision_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
    assistant_service = AssistantService(
        client=assistant_client,
        model=resolved_settings.openai_model,
        store=resolved_settings.openai_store,
        cache=InMemoryLookupCache(
            ttl_seconds=resolved_settings.food_lookup_ttl_seconds
        ),
    )
    label_service = LabelService(
        client=vision_client,
        model=resolved_settings.openai_vision_model,
        store=resolved_settings.openai_store,
    )
    food_service = FoodService(
        catalog=SupabaseFoodCatalogRepository(supabase_client),
        favorites=SupabaseFavoritesRepository(supabase_client),
        assistant=assistant_service,
    )

    async def close_resources() -> None:
        await assistant_client.close()
        await vision_client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_gateway=SupabaseAuthGateway(supabase_client),
        profile_service=ProfileService(SupabaseProfileRepository(supabase_client)),
        meal_service=MealService(SupabaseMealRepository(supabase_client)),
        weight_service=WeightService(SupabaseWeightRepository(supabase_client)),
        food_service=food_service,
        onboarding_service=OnboardingService(
            JsonFileStorage(Path(resolved_settings.local_storage_path))
        ),
        assistant_service=assistant_service,
        label_service=label_service,
        close_resources=close_resources,
    )
