"""Supabase repository for user profiles."""

from dataclasses import dataclass

from supabase import Client

from keto_tracker.adapters.field_mapping import PROFILE_FIELDS
from keto_tracker.adapters.supabase_support import execute
from keto_tracker.domain.profile import UserProfile
from keto_tracker.errors import RemoteStoreError
from keto_tracker.services.profiles import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for user profiles."""

    client: Client

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the stored profile, if any."""
        response = execute(
            self.client.table(PROFILE_FIELDS.table)
            .select(PROFILE_FIELDS.select_clause())
            .eq("user_id", user_id)
            .limit(1),
            "load profile",
        )
        if not response.data:
            return None
        return UserProfile.model_validate(PROFILE_FIELDS.from_remote(response.data[0]))

    def create_profile(self, user_id: str) -> None:
        """Insert a row holding only the user id."""
        response = execute(
            self.client.table(PROFILE_FIELDS.table).insert({"user_id": user_id}),
            "create profile",
        )
        if not response.data:
            raise RemoteStoreError("create profile failed: no row returned")

    def update_profile(self, user_id: str, fields: dict[str, object]) -> None:
        """Write only the given fields."""
        execute(
            self.client.table(PROFILE_FIELDS.table)
            .update(PROFILE_FIELDS.to_remote(fields))
            .eq("user_id", user_id),
            "update profile",
        )

    def upsert_profile(self, profile: UserProfile) -> None:
        """Insert or overwrite the whole profile row."""
        execute(
            self.client.table(PROFILE_FIELDS.table).upsert(
                PROFILE_FIELDS.to_remote(profile.to_fields()), on_conflict="user_id"
            ),
            "reset profile",
        )
