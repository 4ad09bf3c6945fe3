"""Tests for weight history handling."""

from datetime import UTC, datetime

import pytest

from keto_tracker.domain.profile import UserProfile, WeightEntry
from keto_tracker.services.weights import (
    WeightService,
    sort_weight_history,
    sync_after_add,
    sync_after_delete,
    sync_after_edit,
)
from tests.conftest import InMemoryWeightRepository


def _entry(entry_id: str, day: str, weight: float) -> WeightEntry:
    return WeightEntry(id=entry_id, date=day, weight=weight)


def test_sort_is_newest_first_with_bad_dates_last() -> None:
    entries = [
        _entry("a", "2024-05-01T08:00:00+00:00", 80),
        _entry("bad", "yesterday", 81),
        _entry("b", "2024-05-03T08:00:00", 79),
        _entry("c", "2024-05-02T08:00:00Z", 79.5),
    ]

    ordered = sort_weight_history(entries)

    assert [entry.id for entry in ordered] == ["b", "c", "a", "bad"]


def test_add_entry_converts_pounds_and_sorts(
    weight_repository: InMemoryWeightRepository,
) -> None:
    service = WeightService(weight_repository)
    history = [_entry("old", "2024-05-01T08:00:00+00:00", 80)]

    entry, updated = service.add_entry(
        "u1", history, 176, "lb", datetime(2024, 5, 10, tzinfo=UTC), notes="am"
    )

    assert entry.weight == pytest.approx(79.832192)
    assert entry.unit == "lb"
    assert entry.notes == "am"
    assert [item.id for item in updated] == [entry.id, "old"]
    assert weight_repository.entries["u1"][0].weight == entry.weight


def test_edit_latest_keeps_it_first(
    weight_repository: InMemoryWeightRepository,
) -> None:
    service = WeightService(weight_repository)
    history = [
        _entry("new", "2024-05-10T08:00:00+00:00", 80),
        _entry("old", "2024-05-01T08:00:00+00:00", 82),
    ]

    edited, updated = service.edit_entry("u1", history, "new", 78, "kg")

    assert edited.date == "2024-05-10T08:00:00+00:00"
    assert updated[0].id == "new"
    assert updated[0].weight == 78


def test_edit_unknown_entry_raises(weight_repository: InMemoryWeightRepository) -> None:
    service = WeightService(weight_repository)

    with pytest.raises(KeyError):
        service.edit_entry("u1", [], "missing", 70, "kg")


def test_delete_entry_removes_it(weight_repository: InMemoryWeightRepository) -> None:
    service = WeightService(weight_repository)
    history = [_entry("a", "2024-05-10", 80), _entry("b", "2024-05-01", 82)]

    remaining = service.delete_entry("u1", history, "a")

    assert [entry.id for entry in remaining] == ["b"]


def test_sync_after_add_only_for_latest_entry() -> None:
    profile = UserProfile(id="u1", weight=82, weight_unit="kg")
    latest = _entry("n", "2024-05-10", 80)
    older = _entry("o", "2024-04-01", 90)

    update = sync_after_add(profile, [latest, older], latest)
    assert update is not None
    assert update.changes() == {"weight": 80.0, "weightUnit": "kg"}
    assert sync_after_add(profile, [latest, older], older) is None


def test_sync_after_add_updates_unit_change() -> None:
    profile = UserProfile(id="u1", weight=80, weight_unit="lb")
    entry = _entry("n", "2024-05-10", 80)

    update = sync_after_add(profile, [entry], entry)

    assert update is not None
    assert update.changes() == {"weight": 80.0, "weightUnit": "kg"}


def test_sync_after_edit_skips_unchanged_or_older() -> None:
    profile = UserProfile(id="u1", weight=80)
    latest = _entry("n", "2024-05-10", 80)
    older = _entry("o", "2024-04-01", 70)

    assert sync_after_edit(profile, [latest, older], latest) is None
    assert sync_after_edit(profile, [latest, older], older) is None
    changed = latest.model_copy(update={"weight": 77})
    update = sync_after_edit(profile, [changed, older], changed)
    assert update is not None
    assert update.changes() == {"weight": 77.0}


def test_sync_after_delete_falls_back_to_default_weight() -> None:
    profile = UserProfile(id="u1", weight=85)
    only = _entry("n", "2024-05-10", 85)

    update = sync_after_delete(profile, [only], [], "n")

    assert update is not None
    assert update.changes() == {"weight": 70.0}


def test_sync_after_delete_ignores_older_entries() -> None:
    profile = UserProfile(id="u1", weight=80)
    latest = _entry("n", "2024-05-10", 80)
    older = _entry("o", "2024-04-01", 90)

    assert sync_after_delete(profile, [latest, older], [latest], "o") is None
    update = sync_after_delete(profile, [latest, older], [older], "n")
    assert update is not None
    assert update.changes() == {"weight": 90.0}
