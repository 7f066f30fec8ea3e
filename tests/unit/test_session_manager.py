"""
Tests for the session and profile lifecycle.
"""
from __future__ import annotations

from unittest.mock import Mock

import pytest

from producshine.application.services.session_manager import AuthStatus, SessionManager
from producshine.domain.errors import AuthRequiredError, BackendError, ValidationError
from producshine.infrastructure.database.repositories.profile_repository import ProfileRepository
from producshine.infrastructure.database.supabase_client import TOKEN_REFRESHED, SessionInfo, SupabaseAuthAdapter


@pytest.fixture
def auth():
    return SupabaseAuthAdapter()


@pytest.fixture
def profiles(backend):
    return ProfileRepository(backend)


@pytest.fixture
def navigate():
    return Mock()


@pytest.fixture
def manager(auth, profiles, navigate):
    mgr = SessionManager(auth, profiles, navigate, origin="https://launchleap.example")
    yield mgr
    mgr.dispose()


class TestStartup:
    def test_no_session_settles_anonymous(self, manager, navigate):
        state = manager.init()

        assert state.status is AuthStatus.ANONYMOUS
        assert state.loading is False
        assert state.user is None and state.profile is None
        navigate.assert_not_called()

    def test_oauth_redirect_provisions_profile_from_email(self, manager, backend):
        state = manager.init(auth_code="a@x.com")

        assert state.status is AuthStatus.AUTHENTICATED
        assert state.profile.username == "a"
        assert state.profile.tagline is None
        assert state.profile.bio is None
        rows = backend.select("profiles", {"user_id": state.user.id})
        assert len(rows) == 1

    def test_signing_in_again_does_not_duplicate_profile(self, auth, profiles, navigate, backend):
        first = SessionManager(auth, profiles, navigate)
        user_id = first.init(auth_code="a@x.com").user.id
        first.dispose()

        second = SessionManager(SupabaseAuthAdapter(), profiles, navigate)
        second.init(auth_code="a@x.com")
        second.dispose()

        assert len(backend.select("profiles", {"user_id": user_id})) == 1

    def test_session_probe_error_is_swallowed(self, profiles, navigate):
        auth = Mock()
        auth.get_session.side_effect = RuntimeError("network down")

        state = SessionManager(auth, profiles, navigate).init()

        assert state.status is AuthStatus.ANONYMOUS
        assert state.loading is False
        auth.on_auth_state_change.assert_called_once()

    def test_profile_fetch_error_reaches_anonymous(self, auth, navigate):
        auth.exchange_code("a@x.com")
        profiles = Mock()
        profiles.get_by_user_id.side_effect = BackendError("timeout")

        state = SessionManager(auth, profiles, navigate).init()

        assert state.status is AuthStatus.ANONYMOUS
        assert state.loading is False

    def test_failed_code_exchange_still_probes_session(self, profiles, navigate):
        auth = Mock()
        auth.exchange_code.side_effect = ValueError("not a redirect")
        auth.get_session.return_value = None

        state = SessionManager(auth, profiles, navigate).init(auth_code="stale")

        assert state.status is AuthStatus.ANONYMOUS
        auth.get_session.assert_called_once()

    def test_init_twice_subscribes_once(self, profiles, navigate):
        auth = Mock()
        auth.get_session.return_value = None
        mgr = SessionManager(auth, profiles, navigate)

        mgr.init()
        mgr.init()

        assert auth.on_auth_state_change.call_count == 1


class TestAuthEvents:
    def test_sign_in_without_username_goes_to_setup(self, manager, auth, navigate):
        manager.init()

        auth.exchange_code("opaque-code")  # no email, no full name

        assert manager.state.status is AuthStatus.AUTHENTICATED
        assert manager.profile.username is None
        navigate.assert_called_once_with("/profile-setup")

    def test_sign_in_with_username_goes_to_profile(self, manager, auth, navigate):
        manager.init()

        auth.exchange_code("grace@example.com")

        navigate.assert_called_once_with("/profile/grace")

    def test_token_refresh_does_not_navigate(self, manager, auth, navigate):
        manager.init(auth_code="a@x.com")
        profile = manager.profile

        current = auth.get_session()
        auth._set_fake_session(TOKEN_REFRESHED, SessionInfo(access_token="rotated", user=current.user))

        navigate.assert_not_called()
        assert manager.profile == profile
        assert manager.state.session.access_token == "rotated"

    def test_sign_out_resets_and_goes_home(self, manager, navigate):
        manager.init(auth_code="a@x.com")

        manager.sign_out()

        assert manager.state.status is AuthStatus.ANONYMOUS
        assert manager.user is None and manager.profile is None
        navigate.assert_called_once_with("/")

    def test_sign_out_when_already_anonymous_still_goes_home(self, manager, navigate):
        manager.init()

        manager.sign_out()

        assert manager.state.status is AuthStatus.ANONYMOUS
        navigate.assert_called_once_with("/")

    def test_sign_out_failure_propagates(self, profiles, navigate):
        auth = Mock()
        auth.get_session.return_value = None
        auth.sign_out.side_effect = RuntimeError("rejected")
        mgr = SessionManager(auth, profiles, navigate)
        mgr.init()

        with pytest.raises(RuntimeError):
            mgr.sign_out()
        navigate.assert_not_called()

    def test_listeners_see_every_state_in_order(self, manager, auth):
        seen = []
        manager.subscribe(lambda state: seen.append(state.status))

        manager.init()
        auth.exchange_code("a@x.com")
        manager.sign_out()

        assert seen == [AuthStatus.ANONYMOUS, AuthStatus.AUTHENTICATED, AuthStatus.ANONYMOUS]

    def test_dispose_stops_following_events(self, manager, auth, navigate):
        manager.init()
        manager.dispose()

        auth.exchange_code("a@x.com")

        assert manager.user is None
        navigate.assert_not_called()

    def test_profile_error_on_sign_in_keeps_session(self, navigate):
        auth = SupabaseAuthAdapter()
        profiles = Mock()
        profiles.get_by_user_id.side_effect = BackendError("boom")
        mgr = SessionManager(auth, profiles, navigate)
        mgr.init()

        auth.exchange_code("a@x.com")

        assert mgr.state.status is AuthStatus.AUTHENTICATED_NO_PROFILE
        navigate.assert_called_once_with("/profile-setup")


class TestOperations:
    def test_sign_in_with_google_uses_origin(self, manager):
        url = manager.sign_in_with_google()

        assert url.startswith("https://launchleap.example/")

    def test_update_profile_requires_user(self, navigate):
        profiles = Mock()
        mgr = SessionManager(Mock(), profiles, navigate)

        with pytest.raises(AuthRequiredError):
            mgr.update_profile(tagline="hi")
        profiles.update.assert_not_called()

    def test_update_profile_refreshes_cache(self, manager):
        manager.init(auth_code="a@x.com")

        profile = manager.update_profile(tagline="Maker of things")

        assert profile.tagline == "Maker of things"
        assert manager.profile.tagline == "Maker of things"

    def test_update_profile_rejects_non_editable_fields(self, manager):
        manager.init(auth_code="a@x.com")

        with pytest.raises(ValidationError):
            manager.update_profile(user_id="someone-else")
        assert manager.profile.username == "a"

    def test_refresh_profile_without_user_is_noop(self, navigate):
        profiles = Mock()
        mgr = SessionManager(Mock(), profiles, navigate)

        assert mgr.refresh_profile() is None
        profiles.get_by_user_id.assert_not_called()

    def test_complete_setup_navigates_to_profile(self, manager, auth, navigate):
        manager.init()
        auth.exchange_code("opaque-code")
        navigate.reset_mock()

        manager.complete_setup("  ada  ", tagline="  ", bio="Math")

        assert manager.profile.username == "ada"
        assert manager.profile.tagline is None
        assert manager.profile.bio == "Math"
        navigate.assert_called_once_with("/profile/ada")

    def test_open_unknown_profile_goes_home(self, manager, navigate):
        manager.init()

        assert manager.open_profile("nonexistent") is None
        navigate.assert_called_once_with("/")
