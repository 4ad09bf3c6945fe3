"""Profile lifecycle."""

import logging
from dataclasses import dataclass
from typing import Protocol

from keto_tracker.domain.profile import ProfileUpdate, UserProfile

_logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for user profiles.

    Field dicts are keyed by app field names (``weightUnit``, ...).
    """

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the stored profile, if any."""

    def create_profile(self, user_id: str) -> None:
        """Insert a bare profile row for the user."""

    def update_profile(self, user_id: str, fields: dict[str, object]) -> None:
        """Write the given fields to the user's profile."""

    def upsert_profile(self, profile: UserProfile) -> None:
        """Insert or overwrite the whole profile."""


@dataclass
class ProfileService:
    """Creates, updates and resets profiles."""

    repository: ProfileRepository

    def ensure_profile(self, user_id: str) -> tuple[UserProfile, bool]:
        """Return the user's profile and whether it was just created."""
        existing = self.repository.get_profile(user_id)
        if existing is not None:
            return existing, False

        _logger.info("Creating profile for user_id=%s", user_id)
        profile = UserProfile(id=user_id)
        self.repository.create_profile(user_id)
        self.repository.update_profile(user_id, _default_fields(profile))
        return profile, True

    def update_profile(
        self, profile: UserProfile, update: ProfileUpdate
    ) -> UserProfile:
        """Persist only the changed fields and return the merged profile."""
        changes = update.changes()
        if not changes:
            return profile
        self.repository.update_profile(profile.id, changes)
        return UserProfile.model_validate({**profile.to_fields(), **changes})

    def reset_profile(self, user_id: str) -> UserProfile:
        """Overwrite the stored profile with defaults."""
        profile = UserProfile(id=user_id)
        self.repository.upsert_profile(profile)
        return profile


def _default_fields(profile: UserProfile) -> dict[str, object]:
    return profile.to_fields(exclude={"id"})
