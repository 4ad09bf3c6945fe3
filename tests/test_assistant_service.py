"""Tests for the keto assistant service."""

import asyncio

import pytest

from keto_tracker.domain.assistant import FoodFound, FoodNotFound
from keto_tracker.errors import AssistantError
from keto_tracker.services.assistant import AssistantService, looks_like_barcode
from tests.conftest import FakeAssistantClient

FOUND_ANSWER = (
    "Status: Found\nName: Cheddar\nServing Size: 28g\n"
    "Calories: 113\nCarbs: 0.4\nProtein: 7\nFat: 9"
)


def test_answer_question_sends_system_and_user_prompt(
    assistant_service: AssistantService, assistant_client: FakeAssistantClient
) -> None:
    answer = asyncio.run(assistant_service.answer_question("Is rice keto?"))

    assert answer == assistant_client.default_answer
    messages = assistant_client.calls[0]
    assert messages[0]["role"] == "system"
    assert messages[1] == {"role": "user", "content": "Is rice keto?"}


def test_suggest_meals_includes_preferences(
    assistant_service: AssistantService, assistant_client: FakeAssistantClient
) -> None:
    asyncio.run(assistant_service.suggest_meals("no dairy"))

    assert "no dairy" in assistant_client.calls[0][1]["content"]


def test_empty_answer_raises(
    assistant_service: AssistantService, assistant_client: FakeAssistantClient
) -> None:
    assistant_client.answers.append("   ")

    with pytest.raises(AssistantError):
        asyncio.run(assistant_service.analyze_food("eggs"))


def test_endpoint_failure_propagates(
    assistant_service: AssistantService, assistant_client: FakeAssistantClient
) -> None:
    assistant_client.error = AssistantError("boom")

    with pytest.raises(AssistantError, match="boom"):
        asyncio.run(assistant_service.answer_question("hi"))


def test_lookup_uses_barcode_prompt_and_parses(
    assistant_service: AssistantService, assistant_client: FakeAssistantClient
) -> None:
    assistant_client.answers.append(
        "Status: NotFound\nName: Unknown Barcode 012345678905\nCalories: 0"
    )

    result = asyncio.run(assistant_service.lookup_food("012345678905"))

    assert result == FoodNotFound(query="012345678905")
    assert "This is a barcode" in assistant_client.calls[0][1]["content"]


def test_found_lookups_are_cached(
    assistant_service: AssistantService, assistant_client: FakeAssistantClient
) -> None:
    assistant_client.answers.append(FOUND_ANSWER)

    first = asyncio.run(assistant_service.lookup_food("Cheddar"))
    second = asyncio.run(assistant_service.lookup_food("  cheddar "))

    assert isinstance(first, FoodFound)
    assert second is first
    assert len(assistant_client.calls) == 1
    assert "specific food item" in assistant_client.calls[0][1]["content"]


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("12345678", True),
        ("01234567890123", True),
        ("1234567", False),
        ("012345678901234", False),
        ("cheddar", False),
        ("1234abcd", False),
    ],
)
def test_looks_like_barcode(query: str, expected: bool) -> None:
    assert looks_like_barcode(query) is expected
