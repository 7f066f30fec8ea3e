"""Session and profile lifecycle for one signed-in client.

``SessionManager`` holds the current {session, user, profile, loading}
view and keeps it in step with Supabase Auth. The startup probe and the
auth event callback both go through ``_publish`` under the same lock, so
listeners always observe states in the order they were produced.
"""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from producshine.application.navigation import HOME_ROUTE, landing_route, profile_route
from producshine.application.use_cases.ensure_profile import EnsureProfileUseCase
from producshine.domain.entities.profile import ProfileEntity
from producshine.domain.errors import AuthRequiredError, BackendError, ValidationError
from producshine.infrastructure.database.repositories.profile_repository import ProfileRepository
from producshine.infrastructure.database.supabase_client import (
    SIGNED_IN,
    SessionInfo,
    SupabaseAuthAdapter,
    UserInfo,
)

logger = logging.getLogger(__name__)

Navigator = Callable[[str], None]
StateListener = Callable[["AuthState"], None]


class AuthStatus(str, Enum):
    INITIALIZING = "initializing"
    ANONYMOUS = "anonymous"
    AUTHENTICATED_NO_PROFILE = "authenticated_no_profile"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AuthState:
    status: AuthStatus = AuthStatus.INITIALIZING
    session: SessionInfo | None = None
    profile: ProfileEntity | None = None
    loading: bool = True

    @property
    def user(self) -> UserInfo | None:
        return self.session.user if self.session else None


def _settled(session: SessionInfo | None, profile: ProfileEntity | None) -> AuthState:
    if session is None:
        return AuthState(status=AuthStatus.ANONYMOUS, loading=False)
    status = AuthStatus.AUTHENTICATED if profile is not None else AuthStatus.AUTHENTICATED_NO_PROFILE
    return AuthState(status=status, session=session, profile=profile, loading=False)


class SessionManager:
    def __init__(
        self,
        auth: SupabaseAuthAdapter,
        profiles: ProfileRepository,
        navigate: Navigator,
        *,
        origin: str | None = None,
    ) -> None:
        self.auth = auth
        self.profiles = profiles
        self.ensure_profile = EnsureProfileUseCase(profiles)
        self.navigate = navigate
        self.origin = (origin or os.getenv("APP_ORIGIN", "http://localhost:5173")).rstrip("/")
        self._state = AuthState()
        self._lock = threading.RLock()
        self._listeners: list[StateListener] = []
        self._unsubscribe: Callable[[], None] | None = None
        self._disposed = False
        self._signing_out = False

    # ----------------------------------------------------------------- state
    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> UserInfo | None:
        return self._state.user

    @property
    def profile(self) -> ProfileEntity | None:
        return self._state.profile

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new state; returns an unsubscribe handle."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: AuthState) -> None:
        with self._lock:
            self._state = state
            for listener in list(self._listeners):
                listener(state)

    # ------------------------------------------------------------- lifecycle
    def init(self, auth_code: str | None = None) -> AuthState:
        """Restore any existing session, then start following auth events.

        ``auth_code`` is the code an OAuth redirect came back with, if any.
        Failures here never propagate: the manager settles as anonymous.
        """
        with self._lock:
            if self._disposed:
                raise RuntimeError("SessionManager has been disposed")
            if self._unsubscribe is not None:
                return self._state

            if auth_code:
                try:
                    self.auth.exchange_code(auth_code)
                except Exception as exc:  # not every start is an OAuth redirect
                    logger.debug("Ignoring OAuth code exchange failure: %s", exc)

            try:
                session = self.auth.get_session()
                profile = self.ensure_profile.execute(session.user) if session else None
            except Exception as exc:
                logger.warning("Restoring session failed, continuing signed out: %s", exc)
                session, profile = None, None
            self._publish(_settled(session, profile))

            self._unsubscribe = self.auth.on_auth_state_change(self._on_auth_event)
            return self._state

    def dispose(self) -> None:
        with self._lock:
            self._disposed = True
            if self._unsubscribe is not None:
                self._unsubscribe()
                self._unsubscribe = None
            self._listeners.clear()

    def _on_auth_event(self, event: str, session: SessionInfo | None) -> None:
        with self._lock:
            if self._disposed:
                return
            previous = self._state

            if session is None:
                self._publish(_settled(None, None))
                if previous.user is not None and not self._signing_out:
                    self.navigate(HOME_ROUTE)
                return

            if event == SIGNED_IN:
                profile = self._load_profile(session.user, create=True)
                self._publish(_settled(session, profile))
                self.navigate(landing_route(profile))
                return

            # token refresh and friends: keep the cached profile for the same user
            same_user = previous.user is not None and previous.user.id == session.user.id
            profile = previous.profile if same_user else None
            if profile is None:
                profile = self._load_profile(session.user, create=False)
            self._publish(_settled(session, profile))

    def _load_profile(self, user: UserInfo, *, create: bool) -> ProfileEntity | None:
        try:
            return self.ensure_profile.execute(user, create_if_missing=create)
        except BackendError as exc:
            logger.error("Error loading profile for %s after auth event: %s", user.id, exc)
            return None

    # ------------------------------------------------------------ operations
    def sign_in_with_google(self) -> str:
        """Start Google OAuth; returns the URL to send the browser to."""
        return self.auth.sign_in_with_oauth("google", redirect_to=f"{self.origin}/")

    def sign_out(self) -> None:
        """Sign out and go home. Errors propagate and leave the state alone."""
        with self._lock:
            # the SIGNED_OUT event fired by the call below must not navigate too
            self._signing_out = True
            try:
                self.auth.sign_out()
            finally:
                self._signing_out = False
            if self._state.status is not AuthStatus.ANONYMOUS or self._state.loading:
                self._publish(_settled(None, None))
            self.navigate(HOME_ROUTE)

    def refresh_profile(self) -> ProfileEntity | None:
        user = self.user
        if user is None:
            return None
        profile = self.profiles.get_by_user_id(user.id)
        with self._lock:
            current = self._state
            if current.user is not None and current.user.id == user.id:
                self._publish(_settled(current.session, profile))
        return profile

    def update_profile(self, **fields: Any) -> ProfileEntity | None:
        """Update the signed-in user's profile, then reload it.

        Raises:
            AuthRequiredError: If nobody is signed in. No backend call is made.
        """
        user = self.user
        if user is None:
            raise AuthRequiredError("No user logged in")
        self.profiles.update(user.id, fields)
        return self.refresh_profile()

    def complete_setup(self, username: str, tagline: str | None = None, bio: str | None = None) -> ProfileEntity | None:
        """Save the profile-setup form and move on to the public profile."""
        username = (username or "").strip()
        if not username:
            raise ValidationError("Please enter a username.")
        profile = self.update_profile(
            username=username,
            tagline=(tagline or "").strip() or None,
            bio=(bio or "").strip() or None,
        )
        self.navigate(profile_route(profile.username) if profile and profile.username else HOME_ROUTE)
        return profile

    def open_profile(self, username: str) -> ProfileEntity | None:
        """Look up a public profile; unknown usernames send the viewer home."""
        profile = self.profiles.get_by_username(username)
        if profile is None:
            self.navigate(HOME_ROUTE)
        return profile
