"""Onboarding completion flag."""

from dataclasses import dataclass
from typing import Protocol

ONBOARDING_KEY = "onboarding_complete_v3"


class LocalStorage(Protocol):
    """String key-value storage local to this server."""

    def get(self, key: str) -> str | None:
        """Return the stored value, if any."""

    def set(self, key: str, value: str) -> None:
        """Store a value."""


@dataclass
class OnboardingService:
    """Reads and writes the per-user onboarding flag."""

    storage: LocalStorage

    def is_complete(self, user_id: str) -> bool:
        """Return True once the user finished onboarding."""
        return self.storage.get(_key(user_id)) == "true"

    def mark_complete(self, user_id: str) -> None:
        """Record that onboarding finished."""
        self.storage.set(_key(user_id), "true")

    def reset(self, user_id: str) -> None:
        """Require onboarding again."""
        self.storage.set(_key(user_id), "false")


def _key(user_id: str) -> str:
    return f"{user_id}:{ONBOARDING_KEY}"
