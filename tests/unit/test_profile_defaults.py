from producshine.application.navigation import landing_route, profile_route
from producshine.domain.entities.profile import ProfileEntity
from producshine.domain.services.profile_defaults import derive_avatar_url, derive_username


def test_username_from_full_name():
    assert derive_username("ada@example.com", {"full_name": "Ada  Lovelace King"}) == "ada.lovelace.king"


def test_username_falls_back_to_email_local_part():
    assert derive_username("a@x.com", {}) == "a"
    assert derive_username("grace@example.com", {"full_name": "   "}) == "grace"


def test_username_missing_when_nothing_usable():
    assert derive_username(None, None) is None
    assert derive_username("@example.com", {}) is None


def test_avatar_from_metadata():
    assert derive_avatar_url({"avatar_url": "https://img/a.png"}) == "https://img/a.png"
    assert derive_avatar_url({"avatar_url": ""}) is None
    assert derive_avatar_url(None) is None


def test_landing_route_depends_on_username():
    with_name = ProfileEntity(id="p1", user_id="u1", username="ada")
    without = ProfileEntity(id="p2", user_id="u2", username=None)

    assert landing_route(with_name) == "/profile/ada"
    assert landing_route(without) == "/profile-setup"
    assert landing_route(None) == "/profile-setup"


def test_profile_route_quotes_username():
    assert profile_route("ada lovelace") == "/profile/ada%20lovelace"
