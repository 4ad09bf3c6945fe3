"""Domain models for the AI assistant."""

from dataclasses import dataclass
from typing import Literal

from pydantic import Field

from keto_tracker.domain.models import CamelModel
from keto_tracker.domain.nutrition import Food

Role = Literal["user", "assistant"]


class AIMessage(CamelModel):
    """Single chat message."""

    id: str
    content: str
    role: Role
    timestamp: str


class AIConversation(CamelModel):
    """In-memory chat thread."""

    id: str
    title: str
    messages: list[AIMessage] = Field(default_factory=list)
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class FoodFound:
    """The assistant identified the food."""

    food: Food
    status: Literal["found"] = "found"


@dataclass(frozen=True)
class FoodNotFound:
    """The assistant reported it could not identify the query."""

    query: str
    status: Literal["not_found"] = "not_found"


@dataclass(frozen=True)
class FoodParseFailure:
    """The assistant answered but nothing recognisable could be parsed."""

    query: str
    raw_text: str
    status: Literal["parse_failed"] = "parse_failed"


FoodLookupResult = FoodFound | FoodNotFound | FoodParseFailure
