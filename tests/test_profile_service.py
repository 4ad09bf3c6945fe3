"""Tests for profile lifecycle."""

from keto_tracker.domain.nutrition import DEFAULT_MACRO_LIMIT, Macro
from keto_tracker.domain.profile import ProfileUpdate, UserProfile
from keto_tracker.services.profiles import ProfileService
from tests.conftest import InMemoryProfileRepository


def test_ensure_profile_creates_with_defaults(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service = ProfileService(profile_repository)

    profile, created = service.ensure_profile("u1")

    assert created is True
    assert profile == UserProfile(id="u1")
    defaults = profile_repository.updates[0]
    assert "id" not in defaults
    assert defaults["weightUnit"] == "lb"
    assert defaults["dailyMacroLimit"] == DEFAULT_MACRO_LIMIT.to_fields()


def test_ensure_profile_returns_existing(
    profile_repository: InMemoryProfileRepository,
) -> None:
    profile_repository.rows["u1"] = {"id": "u1", "name": "Sam", "goal": "maintain"}
    service = ProfileService(profile_repository)

    profile, created = service.ensure_profile("u1")

    assert created is False
    assert profile.name == "Sam"
    assert profile.goal == "maintenance"
    assert profile_repository.updates == []


def test_update_writes_only_changed_fields(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service = ProfileService(profile_repository)
    profile = UserProfile(id="u1")

    merged = service.update_profile(profile, ProfileUpdate(weight=80))

    assert profile_repository.updates == [{"weight": 80.0}]
    assert merged.weight == 80
    assert merged.name == "User"


def test_empty_update_skips_remote_write(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service = ProfileService(profile_repository)
    profile = UserProfile(id="u1")

    assert service.update_profile(profile, ProfileUpdate()) is profile
    assert profile_repository.updates == []


def test_nested_limit_update_replaces_limit(
    profile_repository: InMemoryProfileRepository,
) -> None:
    service = ProfileService(profile_repository)
    limit = Macro(carbs=25, protein=100, fat=140, calories=1700)

    merged = service.update_profile(
        UserProfile(id="u1"), ProfileUpdate(daily_macro_limit=limit)
    )

    assert merged.daily_macro_limit == limit


def test_reset_profile_upserts_defaults(
    profile_repository: InMemoryProfileRepository,
) -> None:
    profile_repository.rows["u1"] = {"id": "u1", "name": "Sam", "weight": 95}
    service = ProfileService(profile_repository)

    reset = service.reset_profile("u1")

    assert reset == UserProfile(id="u1")
    assert profile_repository.rows["u1"]["name"] == "User"
