"""Defaults for profiles provisioned on first sign-in."""
from __future__ import annotations

import re
from typing import Any

_WHITESPACE = re.compile(r"\s+")
USERNAME_SEPARATOR = "."


def derive_username(email: str | None, user_metadata: dict[str, Any] | None) -> str | None:
    """Pick a starting username for a new profile.

    The OAuth full name wins (lower-cased, whitespace runs joined with a dot),
    then the local part of the email. Returns None when neither is usable.
    """
    full_name = (user_metadata or {}).get("full_name")
    if isinstance(full_name, str) and full_name.strip():
        return _WHITESPACE.sub(USERNAME_SEPARATOR, full_name.strip().lower())
    if email and "@" in email:
        local = email.split("@", 1)[0]
        if local:
            return local
    return None


def derive_avatar_url(user_metadata: dict[str, Any] | None) -> str | None:
    avatar = (user_metadata or {}).get("avatar_url")
    return avatar if isinstance(avatar, str) and avatar else None
