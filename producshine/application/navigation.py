"""Route names the view layer understands."""
from __future__ import annotations

from urllib.parse import quote

from producshine.domain.entities.profile import ProfileEntity

HOME_ROUTE = "/"
PROFILE_SETUP_ROUTE = "/profile-setup"


def profile_route(username: str) -> str:
    return f"/profile/{quote(username, safe='')}"


def landing_route(profile: ProfileEntity | None) -> str:
    """Where a freshly signed-in user goes: setup until they pick a username."""
    if profile is None or not profile.is_complete:
        return PROFILE_SETUP_ROUTE
    return profile_route(profile.username)
