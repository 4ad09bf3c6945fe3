"""Per-user application state and the operations that change it."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta, timezone
from uuid import uuid4

from keto_tracker.domain.assistant import AIConversation, AIMessage, Role
from keto_tracker.domain.macros import DailyMacros
from keto_tracker.domain.meals import Meal
from keto_tracker.domain.nutrition import Food
from keto_tracker.domain.profile import (
    ProfileUpdate,
    UserProfile,
    WeightEntry,
    WeightUnit,
)
from keto_tracker.domain.sessions import AuthEvent, AuthState
from keto_tracker.errors import AssistantError, AuthenticationError, RemoteStoreError
from keto_tracker.services.alerts import Alert, AlertSink
from keto_tracker.services.assistant import AssistantService
from keto_tracker.services.auth import AuthGateway
from keto_tracker.services.foods import FoodService
from keto_tracker.services.macros import (
    compute_daily_macros,
    parse_day,
    remaining_macros,
)
from keto_tracker.services.meals import MealService
from keto_tracker.services.onboarding import OnboardingService
from keto_tracker.services.profiles import ProfileService
from keto_tracker.services.weights import (
    WeightService,
    sync_after_add,
    sync_after_delete,
    sync_after_edit,
)

ASSISTANT_ERROR_MESSAGE = (
    "Sorry, I could not answer your question. Please try again later."
)

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class AppState:
    """Everything one signed-in user sees."""

    user_id: str | None = None
    auth_state: AuthState = AuthState.ANONYMOUS
    is_loading: bool = False
    onboarding_complete: bool = False
    profile: UserProfile | None = None
    today_macros: DailyMacros | None = None
    meals: list[Meal] = field(default_factory=list)
    weight_history: list[WeightEntry] = field(default_factory=list)
    favorite_foods: list[Food] = field(default_factory=list)
    foods: list[Food] = field(default_factory=list)
    conversations: list[AIConversation] = field(default_factory=list)
    current_conversation_id: str | None = None

    @property
    def current_conversation(self) -> AIConversation | None:
        """Return the selected conversation, if it still exists."""
        for conversation in self.conversations:
            if conversation.id == self.current_conversation_id:
                return conversation
        return None


@dataclass
class AppController:  # noqa: PLR0904
    """Owns an ``AppState`` and keeps it in step with the remote store.

    Remote calls are synchronous and run in worker threads. A failed remote
    call publishes an error alert, leaves the state as it was, and re-raises.
    """

    profiles: ProfileService
    meals: MealService
    weights: WeightService
    foods: FoodService
    onboarding: OnboardingService
    assistant: AssistantService
    auth: AuthGateway
    alerts: AlertSink
    now: Callable[[], datetime] = _utc_now
    utc_offset: timedelta = timedelta(0)
    state: AppState = field(default_factory=AppState)
    _generation: int = field(default=0, init=False, repr=False)

    def today(self) -> date:
        """Return the current calendar day at the user's UTC offset."""
        return self.now().astimezone(timezone(self.utc_offset)).date()

    def set_utc_offset(self, minutes: int) -> None:
        """Use the client's UTC offset when deciding what "today" is."""
        self.utc_offset = timedelta(minutes=minutes)

    def current_macros(self) -> DailyMacros | None:
        """Return today's macros, recomputed once the day has rolled over."""
        macros = self.state.today_macros
        if macros is not None and macros.date != self.today().isoformat():
            self._refresh_today()
        return self.state.today_macros

    async def handle_auth_event(self, event: AuthEvent, user_id: str | None) -> None:
        """React to a change reported by the identity provider."""
        if event is AuthEvent.SIGNED_OUT or user_id is None:
            _logger.info("Auth event %s, resetting state", event.value)
            self._reset()
            return
        if self.state.auth_state is AuthState.SIGNING_OUT:
            _logger.info("Ignoring %s while signing out", event.value)
            return
        self.state.user_id = user_id
        self.state.auth_state = AuthState.AUTHENTICATED
        await self.load_data()

    async def load_data(self) -> None:
        """Fetch profile, meals, weights and favorites for the user."""
        user_id = self._require_user("load data")
        self._generation += 1
        generation = self._generation
        self.state.is_loading = True
        try:
            (profile, created), meals, history, favorites = await asyncio.gather(
                asyncio.to_thread(self.profiles.ensure_profile, user_id),
                asyncio.to_thread(self.meals.list_meals, user_id),
                asyncio.to_thread(self.weights.list_entries, user_id),
                asyncio.to_thread(self.foods.list_favorites, user_id),
            )
        except RemoteStoreError as exc:
            if self._is_current(generation, user_id):
                self.state.is_loading = False
                self._fail("Could not load your data", exc)
            raise
        if not self._is_current(generation, user_id):
            _logger.info("Discarding stale load for user_id=%s", user_id)
            return
        if created:
            self.onboarding.reset(user_id)
        self.state.profile = profile
        self.state.meals = meals
        self.state.weight_history = history
        self.state.favorite_foods = favorites
        self.state.onboarding_complete = self.onboarding.is_complete(user_id)
        self._refresh_today()
        self.state.is_loading = False
        _logger.info(
            "Loaded user_id=%s meals=%d weights=%d favorites=%d",
            user_id,
            len(meals),
            len(history),
            len(favorites),
        )

    async def add_meal(self, meal: Meal) -> Meal:
        """Log a meal."""
        user_id = self._require_user("add a meal")
        try:
            stored = await asyncio.to_thread(self.meals.add_meal, user_id, meal)
        except RemoteStoreError as exc:
            self._fail("Could not save meal", exc)
            raise
        self.state.meals = [*self.state.meals, stored]
        if parse_day(stored.date) == self.today():
            self._refresh_today()
        return stored

    async def remove_meal(self, meal_id: str) -> None:
        """Delete a logged meal."""
        user_id = self._require_user("remove a meal")
        removed = next((meal for meal in self.state.meals if meal.id == meal_id), None)
        try:
            await asyncio.to_thread(self.meals.remove_meal, user_id, meal_id)
        except RemoteStoreError as exc:
            self._fail("Could not remove meal", exc)
            raise
        self.state.meals = [meal for meal in self.state.meals if meal.id != meal_id]
        if removed is not None and parse_day(removed.date) == self.today():
            self._refresh_today()

    async def update_profile(self, update: ProfileUpdate) -> UserProfile:
        """Apply a partial profile change."""
        self._require_user("update your profile")
        profile = self._require_profile()
        try:
            merged = await asyncio.to_thread(
                self.profiles.update_profile, profile, update
            )
        except RemoteStoreError as exc:
            self._fail("Could not update profile", exc)
            raise
        self.state.profile = merged
        today = self.state.today_macros
        if today is not None and today.limit != merged.daily_macro_limit:
            self.state.today_macros = today.model_copy(
                update={
                    "limit": merged.daily_macro_limit,
                    "remaining": remaining_macros(
                        today.total, merged.daily_macro_limit
                    ),
                }
            )
        return merged

    def complete_onboarding(self) -> None:
        """Mark onboarding finished for the user."""
        user_id = self._require_user("finish onboarding")
        self.onboarding.mark_complete(user_id)
        self.state.onboarding_complete = True

    async def add_weight_entry(
        self, weight: float, unit: WeightUnit, notes: str | None = None
    ) -> WeightEntry:
        """Record a weight measured now."""
        user_id = self._require_user("add weight entries")
        try:
            entry, history = await asyncio.to_thread(
                self.weights.add_entry,
                user_id,
                self.state.weight_history,
                weight,
                unit,
                self.now(),
                notes,
            )
        except RemoteStoreError as exc:
            self._fail("Could not save weight entry", exc)
            raise
        self.state.weight_history = history
        update = sync_after_add(self._require_profile(), history, entry)
        await self._sync_profile(update)
        return entry

    async def edit_weight_entry(
        self,
        entry_id: str,
        weight: float,
        unit: WeightUnit = "kg",
        notes: str | None = None,
    ) -> WeightEntry:
        """Change the weight of an existing entry."""
        user_id = self._require_user("edit weight entries")
        try:
            entry, history = await asyncio.to_thread(
                self.weights.edit_entry,
                user_id,
                self.state.weight_history,
                entry_id,
                weight,
                unit,
                notes,
            )
        except RemoteStoreError as exc:
            self._fail("Could not update weight entry", exc)
            raise
        self.state.weight_history = history
        await self._sync_profile(
            sync_after_edit(self._require_profile(), history, entry)
        )
        return entry

    async def delete_weight_entry(self, entry_id: str) -> None:
        """Delete a weight entry."""
        user_id = self._require_user("delete weight entries")
        previous = self.state.weight_history
        try:
            remaining = await asyncio.to_thread(
                self.weights.delete_entry, user_id, previous, entry_id
            )
        except RemoteStoreError as exc:
            self._fail("Could not delete weight entry", exc)
            raise
        self.state.weight_history = remaining
        await self._sync_profile(
            sync_after_delete(self._require_profile(), previous, remaining, entry_id)
        )

    def add_food(self, food: Food) -> None:
        """Keep a food in this session's food list."""
        self.state.foods = [*self.state.foods, food]

    async def add_favorite_food(self, food: Food) -> bool:
        """Favorite a food; returns False when it already was one."""
        user_id = self._require_user("add favorites")
        if any(existing.id == food.id for existing in self.state.favorite_foods):
            self.alerts.publish(
                Alert("info", "Info", f"{food.name} is already in your favorites.")
            )
            return False
        try:
            await asyncio.to_thread(self.foods.add_favorite, user_id, food)
        except RemoteStoreError as exc:
            self._fail("Could not add favorite", exc)
            raise
        self.state.favorite_foods = [*self.state.favorite_foods, food]
        self.alerts.publish(
            Alert("info", "Favorite Added", f"{food.name} added to favorites.")
        )
        return True

    async def remove_favorite_food(self, food_id: str) -> None:
        """Remove a favorite food."""
        user_id = self._require_user("remove favorites")
        removed = next(
            (food for food in self.state.favorite_foods if food.id == food_id), None
        )
        try:
            await asyncio.to_thread(self.foods.remove_favorite, user_id, food_id)
        except RemoteStoreError as exc:
            self._fail("Could not remove favorite", exc)
            raise
        self.state.favorite_foods = [
            food for food in self.state.favorite_foods if food.id != food_id
        ]
        name = removed.name if removed else "Item"
        self.alerts.publish(
            Alert("info", "Favorite Removed", f"{name} removed from favorites.")
        )

    async def clear_data(self) -> None:
        """Delete meals and weights, reset the profile, then reload.

        Steps that already succeeded are not rolled back.
        """
        user_id = self._require_user("clear data")
        self.state.is_loading = True
        try:
            results = await asyncio.gather(
                asyncio.to_thread(self.meals.clear, user_id),
                asyncio.to_thread(self.weights.clear, user_id),
                return_exceptions=True,
            )
            failures = [
                result for result in results if isinstance(result, BaseException)
            ]
            for failure in failures:
                if not isinstance(failure, RemoteStoreError):
                    raise failure
            if failures:
                raise RemoteStoreError(
                    "Failed to delete all user data: "
                    + "; ".join(str(failure) for failure in failures)
                )
            await asyncio.to_thread(self.profiles.reset_profile, user_id)
        except RemoteStoreError as exc:
            self.state.is_loading = False
            self._fail("Could not clear all data", exc)
            raise
        _logger.info("Cleared data for user_id=%s", user_id)
        await self.load_data()

    async def sign_out(self, access_token: str) -> None:
        """End the session; stale loads are dropped from here on."""
        self._require_user("sign out")
        self.state.auth_state = AuthState.SIGNING_OUT
        self._generation += 1
        try:
            await asyncio.to_thread(self.auth.sign_out, access_token)
        except (AuthenticationError, RemoteStoreError) as exc:
            self.state.auth_state = AuthState.AUTHENTICATED
            self.state.is_loading = False
            self._fail("Sign out failed", exc)
            raise
        await self.handle_auth_event(AuthEvent.SIGNED_OUT, None)

    def create_conversation(self, title: str) -> AIConversation:
        """Start a conversation and select it."""
        timestamp = self.now().isoformat()
        conversation = AIConversation(
            id=uuid4().hex,
            title=title,
            created_at=timestamp,
            updated_at=timestamp,
        )
        self.state.conversations = [*self.state.conversations, conversation]
        self.state.current_conversation_id = conversation.id
        return conversation

    def set_current_conversation(self, conversation_id: str | None) -> None:
        """Select a conversation, or clear the selection with None."""
        if conversation_id is not None:
            self._find_conversation(conversation_id)
        self.state.current_conversation_id = conversation_id

    def add_message(self, conversation_id: str, role: Role, content: str) -> AIMessage:
        """Append a message to a conversation."""
        conversation = self._find_conversation(conversation_id)
        timestamp = self.now().isoformat()
        message = AIMessage(
            id=uuid4().hex, content=content, role=role, timestamp=timestamp
        )
        updated = conversation.model_copy(
            update={
                "messages": [*conversation.messages, message],
                "updated_at": timestamp,
            }
        )
        self.state.conversations = [
            updated if item.id == conversation_id else item
            for item in self.state.conversations
        ]
        return message

    async def send_message(self, conversation_id: str, content: str) -> AIMessage:
        """Post a user question and append the assistant's reply."""
        self.add_message(conversation_id, "user", content)
        try:
            answer = await self.assistant.answer_question(content)
        except AssistantError:
            _logger.warning("Assistant failed for conversation %s", conversation_id)
            answer = ASSISTANT_ERROR_MESSAGE
        return self.add_message(conversation_id, "assistant", answer)

    async def _sync_profile(self, update: ProfileUpdate | None) -> None:
        if update is not None:
            await self.update_profile(update)

    def _refresh_today(self) -> None:
        self.state.today_macros = compute_daily_macros(
            self.state.meals, self.today(), self.state.profile
        )

    def _reset(self) -> None:
        self._generation += 1
        self.state = AppState()

    def _is_current(self, generation: int, user_id: str) -> bool:
        return (
            generation == self._generation
            and self.state.auth_state is AuthState.AUTHENTICATED
            and self.state.user_id == user_id
        )

    def _require_user(self, action: str) -> str:
        if (
            self.state.user_id is None
            or self.state.auth_state is not AuthState.AUTHENTICATED
        ):
            raise AuthenticationError(f"You must be logged in to {action}.")
        return self.state.user_id

    def _require_profile(self) -> UserProfile:
        if self.state.profile is None:
            raise AuthenticationError("Profile is not loaded yet.")
        return self.state.profile

    def _find_conversation(self, conversation_id: str) -> AIConversation:
        for conversation in self.state.conversations:
            if conversation.id == conversation_id:
                return conversation
        raise KeyError(f"Unknown conversation {conversation_id}")

    def _fail(self, title: str, exc: Exception) -> None:
        _logger.error("%s for user_id=%s: %s", title, self.state.user_id, exc)
        self.alerts.publish(Alert("error", "Error", f"{title}: {exc}"))
