"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from keto_tracker.api.models import (
    ConversationInput,
    CurrentConversationInput,
    FoodQuery,
    LabelInput,
    ProfileInput,
    QuestionInput,
    SuggestionInput,
    WeightInput,
)
from keto_tracker.api.sessions import ControllerRegistry
from keto_tracker.app_logging import configure_logging
from keto_tracker.containers import AppContainer
from keto_tracker.domain.assistant import (
    FoodFound,
    FoodLookupResult,
    FoodNotFound,
)
from keto_tracker.domain.meals import Meal
from keto_tracker.domain.nutrition import Food
from keto_tracker.errors import AssistantError, AuthenticationError, RemoteStoreError
from keto_tracker.services.alerts import RecordingAlertSink
from keto_tracker.services.app_state import AppController, AppState

# UTC-12:00 through UTC+14:00
MIN_UTC_OFFSET_MINUTES = -720
MAX_UTC_OFFSET_MINUTES = 840


@dataclass
class UserSession:
    """Authenticated caller of a request."""

    user_id: str
    access_token: str
    controller: AppController


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.sessions = ControllerRegistry(
        container.new_controller,
        idle_seconds=container.settings.session_idle_seconds,
    )

    @app.exception_handler(AuthenticationError)
    async def authentication_error(
        _: Request, exc: AuthenticationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": str(exc)}
        )

    @app.exception_handler(RemoteStoreError)
    async def remote_store_error(_: Request, exc: RemoteStoreError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": str(exc)}
        )

    @app.exception_handler(AssistantError)
    async def assistant_error(_: Request, exc: AssistantError) -> JSONResponse:
        logger.warning("Assistant request failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": str(exc)}
        )

    async def current_session(
        request: Request,
        authorization: str | None = Header(default=None),
        x_utc_offset: int | None = Header(
            default=None, ge=MIN_UTC_OFFSET_MINUTES, le=MAX_UTC_OFFSET_MINUTES
        ),
    ) -> UserSession:
        token = _bearer_token(authorization)
        state_container: AppContainer = request.app.state.container
        user_id = await asyncio.to_thread(
            state_container.auth_gateway.verify_token, token
        )
        sessions: ControllerRegistry = request.app.state.sessions
        controller = await sessions.get(user_id)
        if x_utc_offset is not None:
            controller.set_utc_offset(x_utc_offset)
        return UserSession(user_id=user_id, access_token=token, controller=controller)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/state")
    async def get_state(
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Return the user's full application state and pending alerts."""
        return _snapshot(session.controller)

    @app.post("/state/reload")
    async def reload_state(
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Re-read everything from the remote store."""
        await session.controller.load_data()
        return _snapshot(session.controller)

    @app.patch("/profile")
    async def update_profile(
        payload: ProfileInput, session: UserSession = Depends(current_session)
    ) -> dict[str, object]:
        """Apply a partial profile change given in display units."""
        profile = await session.controller.update_profile(payload.to_update())
        return profile.to_fields()

    @app.post("/onboarding/complete")
    async def complete_onboarding(
        session: UserSession = Depends(current_session),
    ) -> dict[str, bool]:
        """Mark onboarding finished."""
        session.controller.complete_onboarding()
        return {"onboardingComplete": True}

    @app.get("/macros/today")
    async def today_macros(
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Return today's totals and remaining budget."""
        macros = session.controller.current_macros()
        return macros.to_fields() if macros else {}

    @app.get("/meals")
    async def list_meals(
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Return the user's meals."""
        return {"meals": [meal.to_fields() for meal in session.controller.state.meals]}

    @app.post("/meals", status_code=status.HTTP_201_CREATED)
    async def add_meal(
        meal: Meal, session: UserSession = Depends(current_session)
    ) -> dict[str, object]:
        """Log a meal."""
        stored = await session.controller.add_meal(meal)
        return stored.to_fields()

    @app.delete("/meals/{meal_id}")
    async def remove_meal(
        meal_id: str, session: UserSession = Depends(current_session)
    ) -> dict[str, str]:
        """Delete a meal."""
        await session.controller.remove_meal(meal_id)
        return {"status": "ok"}

    @app.get("/weights")
    async def list_weights(
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Return weight history, newest first."""
        history = session.controller.state.weight_history
        return {"weightHistory": [entry.to_fields() for entry in history]}

    @app.post("/weights", status_code=status.HTTP_201_CREATED)
    async def add_weight(
        payload: WeightInput, session: UserSession = Depends(current_session)
    ) -> dict[str, object]:
        """Record a weight measured now."""
        entry = await session.controller.add_weight_entry(
            payload.weight, payload.unit, payload.notes
        )
        return entry.to_fields()

    @app.put("/weights/{entry_id}")
    async def edit_weight(
        entry_id: str,
        payload: WeightInput,
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Change the weight of an entry."""
        try:
            entry = await session.controller.edit_weight_entry(
                entry_id, payload.weight, payload.unit, payload.notes
            )
        except KeyError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        return entry.to_fields()

    @app.delete("/weights/{entry_id}")
    async def delete_weight(
        entry_id: str, session: UserSession = Depends(current_session)
    ) -> dict[str, str]:
        """Delete a weight entry."""
        try:
            await session.controller.delete_weight_entry(entry_id)
        except KeyError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        return {"status": "ok"}

    @app.get("/favorites")
    async def list_favorites(
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Return favorite foods."""
        favorites = session.controller.state.favorite_foods
        return {"favoriteFoods": [food.to_fields() for food in favorites]}

    @app.post("/favorites")
    async def add_favorite(
        food: Food, session: UserSession = Depends(current_session)
    ) -> dict[str, object]:
        """Favorite a food."""
        added = await session.controller.add_favorite_food(food)
        return {"added": added, "alerts": _pop_alerts(session.controller)}

    @app.delete("/favorites/{food_id}")
    async def remove_favorite(
        food_id: str, session: UserSession = Depends(current_session)
    ) -> dict[str, str]:
        """Remove a favorite food."""
        await session.controller.remove_favorite_food(food_id)
        return {"status": "ok"}

    @app.post("/foods")
    async def add_food(
        food: Food, session: UserSession = Depends(current_session)
    ) -> dict[str, object]:
        """Keep a food in the session's food list."""
        session.controller.add_food(food)
        return {"foods": [item.to_fields() for item in session.controller.state.foods]}

    @app.get("/foods/search")
    async def search_foods(
        request: Request, q: str = "", _: UserSession = Depends(current_session)
    ) -> dict[str, object]:
        """Search the shared and custom food tables."""
        state_container: AppContainer = request.app.state.container
        foods = await asyncio.to_thread(state_container.food_service.search, q)
        return {"items": [food.to_fields() for food in foods]}

    @app.post("/foods/lookup")
    async def lookup_food(
        payload: FoodQuery,
        request: Request,
        _: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Ask the assistant for a food's nutrition facts."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.assistant_service.lookup_food(payload.query)
        return _lookup_payload(result)

    @app.get("/foods/barcode/{barcode}")
    async def find_barcode(
        barcode: str, request: Request, _: UserSession = Depends(current_session)
    ) -> dict[str, object]:
        """Resolve a barcode from shared data, then from the assistant."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.food_service.find_by_barcode(barcode)
        return _lookup_payload(result)

    @app.post("/foods/barcode")
    async def save_barcode(
        food: Food, request: Request, session: UserSession = Depends(current_session)
    ) -> dict[str, str]:
        """Share a food under its barcode."""
        state_container: AppContainer = request.app.state.container
        try:
            await asyncio.to_thread(
                state_container.food_service.save_barcode, food, session.user_id
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        return {"status": "ok"}

    @app.post("/labels/analyze")
    async def analyze_label(
        payload: LabelInput,
        request: Request,
        _: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Read nutrition facts from a label photo."""
        state_container: AppContainer = request.app.state.container
        label = await state_container.label_service.analyze(payload.image_base64)
        return label.to_fields()

    @app.get("/assistant/conversations")
    async def list_conversations(
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Return the session's conversations."""
        state = session.controller.state
        return {
            "conversations": [item.to_fields() for item in state.conversations],
            "currentConversationId": state.current_conversation_id,
        }

    @app.post("/assistant/conversations", status_code=status.HTTP_201_CREATED)
    async def create_conversation(
        payload: ConversationInput, session: UserSession = Depends(current_session)
    ) -> dict[str, object]:
        """Start a conversation and select it."""
        return session.controller.create_conversation(payload.title).to_fields()

    @app.put("/assistant/current")
    async def set_current_conversation(
        payload: CurrentConversationInput,
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Select a conversation."""
        try:
            session.controller.set_current_conversation(payload.conversation_id)
        except KeyError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        return {"currentConversationId": payload.conversation_id}

    @app.post("/assistant/conversations/{conversation_id}/messages")
    async def send_message(
        conversation_id: str,
        payload: QuestionInput,
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Ask the assistant inside a conversation."""
        try:
            reply = await session.controller.send_message(
                conversation_id, payload.content
            )
        except KeyError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        return reply.to_fields()

    @app.post("/assistant/suggestions")
    async def suggest_meals(
        payload: SuggestionInput,
        request: Request,
        _: UserSession = Depends(current_session),
    ) -> dict[str, str]:
        """Suggest keto meals."""
        state_container: AppContainer = request.app.state.container
        assistant = state_container.assistant_service
        text = await assistant.suggest_meals(payload.preferences)
        return {"content": text}

    @app.post("/assistant/analyze")
    async def analyze_food(
        payload: FoodQuery,
        request: Request,
        _: UserSession = Depends(current_session),
    ) -> dict[str, str]:
        """Describe whether a food suits a keto diet."""
        state_container: AppContainer = request.app.state.container
        text = await state_container.assistant_service.analyze_food(payload.query)
        return {"content": text}

    @app.post("/data/reset")
    async def clear_data(
        session: UserSession = Depends(current_session),
    ) -> dict[str, object]:
        """Delete meals and weights and reset the profile."""
        await session.controller.clear_data()
        return _snapshot(session.controller)

    @app.post("/auth/sign-out")
    async def sign_out(
        request: Request, session: UserSession = Depends(current_session)
    ) -> dict[str, str]:
        """End the session."""
        await session.controller.sign_out(session.access_token)
        sessions: ControllerRegistry = request.app.state.sessions
        sessions.drop(session.user_id)
        return {"status": "signed_out"}

    return app


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise AuthenticationError("Missing bearer token")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Missing bearer token")
    return token.strip()


def _pop_alerts(controller: AppController) -> list[dict[str, str]]:
    if not isinstance(controller.alerts, RecordingAlertSink):
        return []
    return [
        {"level": alert.level, "title": alert.title, "message": alert.message}
        for alert in controller.alerts.pop_all()
    ]


def _snapshot(controller: AppController) -> dict[str, object]:
    state: AppState = controller.state
    macros = controller.current_macros()
    return {
        "userId": state.user_id,
        "authState": state.auth_state.value,
        "isLoading": state.is_loading,
        "onboardingComplete": state.onboarding_complete,
        "profile": state.profile.to_fields() if state.profile else None,
        "todayMacros": macros.to_fields() if macros else None,
        "meals": [meal.to_fields() for meal in state.meals],
        "weightHistory": [entry.to_fields() for entry in state.weight_history],
        "favoriteFoods": [food.to_fields() for food in state.favorite_foods],
        "foods": [food.to_fields() for food in state.foods],
        "conversations": [item.to_fields() for item in state.conversations],
        "currentConversationId": state.current_conversation_id,
        "alerts": _pop_alerts(controller),
    }


def _lookup_payload(result: FoodLookupResult) -> dict[str, object]:
    if isinstance(result, FoodFound):
        return {"status": result.status, "food": result.food.to_fields()}
    if isinstance(result, FoodNotFound):
        return {"status": result.status, "query": result.query}
    return {"status": result.status, "query": result.query, "rawText": result.raw_text}
