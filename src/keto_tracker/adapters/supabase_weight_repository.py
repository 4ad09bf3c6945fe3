"""Supabase repository for weight history."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError
from supabase import Client

from keto_tracker.adapters.field_mapping import WEIGHT_FIELDS
from keto_tracker.adapters.supabase_support import execute
from keto_tracker.domain.profile import WeightEntry
from keto_tracker.errors import RemoteStoreError
from keto_tracker.services.weights import WeightRepository

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseWeightRepository(WeightRepository):
    """Supabase implementation for weight history."""

    client: Client

    def list_entries(self, user_id: str) -> list[WeightEntry]:
        """Return the user's entries, newest first."""
        response = execute(
            self.client.table(WEIGHT_FIELDS.table)
            .select(WEIGHT_FIELDS.select_clause())
            .eq("user_id", user_id)
            .order("entry_date", desc=True),
            "load weight history",
        )
        entries = []
        for row in response.data or []:
            try:
                entries.append(_parse_entry(row))
            except ValidationError as exc:
                _logger.warning(
                    "Skipping malformed weight row id=%s: %s", row.get("id"), exc
                )
        return entries

    def create_entry(self, user_id: str, entry_date: str, weight_kg: float) -> str:
        """Insert an entry and return its id."""
        payload = WEIGHT_FIELDS.to_remote({"date": entry_date, "weight": weight_kg})
        payload["user_id"] = user_id
        response = execute(
            self.client.table(WEIGHT_FIELDS.table).insert(payload),
            "save weight entry",
        )
        if not response.data:
            raise RemoteStoreError("save weight entry failed: no row returned")
        return str(response.data[0]["id"])

    def update_entry(self, user_id: str, entry_id: str, weight_kg: float) -> None:
        """Change the stored weight of an entry."""
        execute(
            self.client.table(WEIGHT_FIELDS.table)
            .update(WEIGHT_FIELDS.to_remote({"weight": weight_kg}))
            .eq("id", entry_id)
            .eq("user_id", user_id),
            "update weight entry",
        )

    def delete_entry(self, user_id: str, entry_id: str) -> None:
        """Delete one entry."""
        execute(
            self.client.table(WEIGHT_FIELDS.table)
            .delete()
            .eq("id", entry_id)
            .eq("user_id", user_id),
            "delete weight entry",
        )

    def delete_all(self, user_id: str) -> None:
        """Delete the user's whole history."""
        execute(
            self.client.table(WEIGHT_FIELDS.table).delete().eq("user_id", user_id),
            "clear weight history",
        )


def _parse_entry(row: dict[str, object]) -> WeightEntry:
    fields = WEIGHT_FIELDS.from_remote(row)
    if fields.get("id") is not None:
        fields["id"] = str(fields["id"])
    return WeightEntry.model_validate(fields)
