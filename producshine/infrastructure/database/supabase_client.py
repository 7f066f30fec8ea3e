from __future__ import annotations

import logging
import os
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

from supabase import Client, create_client

logger = logging.getLogger(__name__)

# Auth events as named by Supabase Auth
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
USER_UPDATED = "USER_UPDATED"
INITIAL_SESSION = "INITIAL_SESSION"


@dataclass(frozen=True)
class UserInfo:
    id: str
    email: str | None
    user_metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionInfo:
    access_token: str
    user: UserInfo
    refresh_token: str | None = None
    expires_at: int | None = None


AuthListener = Callable[[str, "SessionInfo | None"], None]


def _to_user_info(user: Any) -> UserInfo:
    return UserInfo(
        id=str(user.id),
        email=getattr(user, "email", None),
        user_metadata=dict(getattr(user, "user_metadata", None) or {}),
    )


def _to_session_info(session: Any) -> SessionInfo | None:
    if session is None or getattr(session, "user", None) is None:
        return None
    return SessionInfo(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_at=getattr(session, "expires_at", None),
        user=_to_user_info(session.user),
    )


def _fake_user(seed: str) -> UserInfo:
    email = seed if "@" in seed else None
    return UserInfo(id=str(uuid.uuid5(uuid.NAMESPACE_URL, seed)), email=email)


class SupabaseAuthAdapter:
    """Thin wrapper over Supabase Auth.

    When SUPABASE_DISABLED=1 (or no credentials are configured) it acts as a
    fake identity provider: every token maps to a deterministic user, an
    OAuth code signs that user in, and listeners receive the same events
    Supabase would send.
    """

    def __init__(self) -> None:
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.url = os.getenv("SUPABASE_URL")
        self.key = os.getenv("SUPABASE_ANON_KEY")
        self._client: Client | None = None
        if not self.disabled and self.url and self.key:
            self._client = create_client(self.url, self.key)
        # fake provider state
        self._session: SessionInfo | None = None
        self._listeners: list[AuthListener] = []
        self._lock = threading.Lock()

    @property
    def is_fake(self) -> bool:
        return self.disabled or self._client is None

    def validate_token(self, token: str) -> UserInfo:
        if not token:
            raise ValueError("Missing access token")
        if self.is_fake:
            return _fake_user(token)
        try:
            res = self._client.auth.get_user(token)
            user = res.user if res else None
        except Exception as exc:  # pragma: no cover - network path
            raise ValueError(f"Invalid access token: {exc}") from exc
        if not user:
            raise ValueError("Invalid access token")
        return _to_user_info(user)

    def exchange_code(self, auth_code: str) -> SessionInfo | None:
        """Complete an OAuth redirect by trading its code for a session."""
        if self.is_fake:
            session = SessionInfo(
                access_token=f"fake-token-{auth_code}",
                user=_fake_user(auth_code),
            )
            self._set_fake_session(SIGNED_IN, session)
            return session
        res = self._client.auth.exchange_code_for_session({"auth_code": auth_code})  # pragma: no cover
        return _to_session_info(res.session)  # pragma: no cover

    def get_session(self) -> SessionInfo | None:
        if self.is_fake:
            return self._session
        return _to_session_info(self._client.auth.get_session())  # pragma: no cover

    def sign_in_with_oauth(self, provider: str, redirect_to: str) -> str:
        """Start an OAuth flow and return the provider URL to redirect to."""
        if self.is_fake:
            return f"{redirect_to}?code=fake-{provider}"
        res = self._client.auth.sign_in_with_oauth(  # pragma: no cover - network
            {"provider": provider, "options": {"redirect_to": redirect_to}}
        )
        return res.url  # pragma: no cover

    def sign_out(self) -> None:
        if self.is_fake:
            self._set_fake_session(SIGNED_OUT, None)
            return
        self._client.auth.sign_out()  # pragma: no cover - network

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """Register ``callback(event, session)``; returns an unsubscribe handle."""
        if self.is_fake:
            with self._lock:
                self._listeners.append(callback)

            def unsubscribe() -> None:
                with self._lock:
                    if callback in self._listeners:
                        self._listeners.remove(callback)

            return unsubscribe

        def relay(event: Any, session: Any) -> None:  # pragma: no cover - network
            callback(str(getattr(event, "value", event)), _to_session_info(session))

        subscription = self._client.auth.on_auth_state_change(relay)  # pragma: no cover
        return subscription.unsubscribe  # pragma: no cover

    def _set_fake_session(self, event: str, session: SessionInfo | None) -> None:
        with self._lock:
            self._session = session
            listeners = list(self._listeners)
        logger.debug("Fake auth event %s", event)
        for listener in listeners:
            listener(event, session)


# Simple reusable singleton client getter for repositories/storage
_CLIENT_SINGLETON: Client | None = None


def get_supabase_client() -> Client | None:
    global _CLIENT_SINGLETON
    disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_ANON_KEY")
    if disabled or not url or not key:
        return None
    if _CLIENT_SINGLETON is None:
        _CLIENT_SINGLETON = create_client(url, key)
    return _CLIENT_SINGLETON
