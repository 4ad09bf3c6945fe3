"""Weight history and its link to the profile weight."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from keto_tracker.domain.profile import (
    DEFAULT_WEIGHT_KG,
    ProfileUpdate,
    UserProfile,
    WeightEntry,
    WeightUnit,
)
from keto_tracker.services.units import weight_to_kg

_logger = logging.getLogger(__name__)

_UNPARSEABLE = datetime.min.replace(tzinfo=UTC)


class WeightRepository(Protocol):
    """Persistence interface for weight history."""

    def list_entries(self, user_id: str) -> list[WeightEntry]:
        """Return the user's weight entries."""

    def create_entry(self, user_id: str, entry_date: str, weight_kg: float) -> str:
        """Store an entry and return its id."""

    def update_entry(self, user_id: str, entry_id: str, weight_kg: float) -> None:
        """Change the stored weight of an entry."""

    def delete_entry(self, user_id: str, entry_id: str) -> None:
        """Delete one entry."""

    def delete_all(self, user_id: str) -> None:
        """Delete the user's whole history."""


@dataclass
class WeightService:
    """Keeps weight history sorted newest first."""

    repository: WeightRepository

    def list_entries(self, user_id: str) -> list[WeightEntry]:
        """Return the stored history, newest first."""
        return sort_weight_history(self.repository.list_entries(user_id))

    def add_entry(  # noqa: PLR0913
        self,
        user_id: str,
        history: list[WeightEntry],
        weight: float,
        unit: WeightUnit,
        recorded_at: datetime,
        notes: str | None = None,
    ) -> tuple[WeightEntry, list[WeightEntry]]:
        """Persist a new entry and return it with the re-sorted history."""
        weight_kg = weight_to_kg(weight, unit)
        entry_date = recorded_at.isoformat()
        entry_id = self.repository.create_entry(user_id, entry_date, weight_kg)
        entry = WeightEntry(
            id=entry_id, date=entry_date, weight=weight_kg, unit=unit, notes=notes
        )
        return entry, sort_weight_history([*history, entry])

    def edit_entry(  # noqa: PLR0913
        self,
        user_id: str,
        history: list[WeightEntry],
        entry_id: str,
        weight: float,
        unit: WeightUnit,
        notes: str | None = None,
    ) -> tuple[WeightEntry, list[WeightEntry]]:
        """Change an entry's weight; the entry keeps its date.

        Raises ``KeyError`` for an unknown entry id.
        """
        current = _find(history, entry_id)
        weight_kg = weight_to_kg(weight, unit)
        self.repository.update_entry(user_id, entry_id, weight_kg)
        edited = current.model_copy(
            update={
                "weight": weight_kg,
                "unit": unit,
                "notes": notes if notes is not None else current.notes,
            }
        )
        updated = [edited if entry.id == entry_id else entry for entry in history]
        return edited, sort_weight_history(updated)

    def delete_entry(
        self, user_id: str, history: list[WeightEntry], entry_id: str
    ) -> list[WeightEntry]:
        """Remove an entry and return the remaining history."""
        _find(history, entry_id)
        self.repository.delete_entry(user_id, entry_id)
        return [entry for entry in history if entry.id != entry_id]

    def clear(self, user_id: str) -> None:
        """Delete the user's whole history."""
        self.repository.delete_all(user_id)


def sort_weight_history(entries: list[WeightEntry]) -> list[WeightEntry]:
    """Sort entries newest first; unparseable dates sink to the end."""
    return sorted(entries, key=lambda entry: _entry_time(entry.date), reverse=True)


def sync_after_add(
    profile: UserProfile, history: list[WeightEntry], entry: WeightEntry
) -> ProfileUpdate | None:
    """Return the profile change needed after adding ``entry``, if any."""
    if not history or history[0].id != entry.id:
        return None
    if profile.weight == entry.weight and profile.weight_unit == entry.unit:
        return None
    return ProfileUpdate(weight=entry.weight, weight_unit=entry.unit)


def sync_after_edit(
    profile: UserProfile, history: list[WeightEntry], entry: WeightEntry
) -> ProfileUpdate | None:
    """Return the profile change needed after editing ``entry``, if any."""
    if not history or history[0].id != entry.id or profile.weight == entry.weight:
        return None
    return ProfileUpdate(weight=entry.weight)


def sync_after_delete(
    profile: UserProfile,
    previous: list[WeightEntry],
    remaining: list[WeightEntry],
    entry_id: str,
) -> ProfileUpdate | None:
    """Return the profile change needed after deleting ``entry_id``, if any."""
    if not previous or previous[0].id != entry_id:
        return None
    latest = remaining[0].weight if remaining else DEFAULT_WEIGHT_KG
    if profile.weight == latest:
        return None
    return ProfileUpdate(weight=latest)


def _find(history: list[WeightEntry], entry_id: str) -> WeightEntry:
    for entry in history:
        if entry.id == entry_id:
            return entry
    raise KeyError(f"Unknown weight entry {entry_id}")


def _entry_time(raw: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(raw)
    except (TypeError, ValueError):
        _logger.debug("Unparseable weight entry date %r", raw)
        return _UNPARSEABLE
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
