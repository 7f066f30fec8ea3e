from unittest.mock import Mock

from producshine.application.use_cases.ensure_profile import EnsureProfileUseCase
from producshine.domain.entities.profile import ProfileEntity
from producshine.domain.errors import UniqueViolationError
from producshine.infrastructure.database.repositories.profile_repository import ProfileRepository
from producshine.infrastructure.database.supabase_client import UserInfo


def test_creates_profile_on_first_sign_in(backend):
    repo = ProfileRepository(backend)
    user = UserInfo(id="u1", email="a@x.com", user_metadata={"avatar_url": "https://img/a.png"})

    profile = EnsureProfileUseCase(repo).execute(user)

    assert profile.user_id == "u1"
    assert profile.username == "a"
    assert profile.avatar_url == "https://img/a.png"
    assert profile.tagline is None and profile.bio is None


def test_returns_existing_profile_untouched(backend):
    repo = ProfileRepository(backend)
    repo.create(user_id="u1", username="custom", bio="Hello")
    user = UserInfo(id="u1", email="a@x.com")

    profile = EnsureProfileUseCase(repo).execute(user)

    assert profile.username == "custom"
    assert profile.bio == "Hello"
    assert len(backend.select("profiles", {"user_id": "u1"})) == 1


def test_lookup_only_does_not_create(backend):
    repo = ProfileRepository(backend)

    assert EnsureProfileUseCase(repo).execute(UserInfo(id="u1", email="a@x.com"), create_if_missing=False) is None
    assert backend.select("profiles") == []


def test_concurrent_creation_falls_back_to_existing_row():
    existing = ProfileEntity(id="p1", user_id="u1", username="a")
    repo = Mock()
    repo.get_by_user_id.side_effect = [None, existing]
    repo.create.side_effect = UniqueViolationError("duplicate key")

    profile = EnsureProfileUseCase(repo).execute(UserInfo(id="u1", email="a@x.com"))

    assert profile is existing
    assert repo.get_by_user_id.call_count == 2
