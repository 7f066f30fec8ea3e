import uuid

ADA = {"Authorization": "Bearer ada@example.com"}


def user_id_for(token: str) -> str:
    # disabled mode maps every token to a deterministic user
    return str(uuid.uuid5(uuid.NAMESPACE_URL, token))


def submit(client, headers, **fields):
    data = {"title": "Linear", "description": "Issue tracking", "url": "https://linear.app"}
    data.update(fields)
    r = client.post("/tools", headers=headers, data=data)
    assert r.status_code == 201, r.text
    return r.json()["tool"]


def test_health_endpoints(client):
    assert client.get("/health").json() == {"status": "healthy", "message": None}
    assert client.get("/api/health").json() == {"status": "ok", "message": "API server running"}
    root = client.get("/").json()
    assert root["service"] == "producshine-backend"


def test_auth_validate_provisions_profile(client):
    r = client.post("/auth/validate", headers=ADA)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["user_id"] == user_id_for("ada@example.com")
    assert data["profile"]["username"] == "ada"
    assert data["redirect_to"] == "/profile/ada"

    again = client.post("/auth/validate", headers=ADA).json()
    assert again["profile"]["id"] == data["profile"]["id"]


def test_auth_validate_without_username_goes_to_setup(client, auth_header):
    data = client.post("/auth/validate", headers=auth_header).json()
    assert data["profile"]["username"] is None
    assert data["redirect_to"] == "/profile-setup"


def test_auth_requires_token(client):
    assert client.post("/auth/validate").status_code == 401
    assert client.get("/auth/me").status_code == 401


def test_profile_crud(client, auth_header):
    user_id = user_id_for("test-token")
    body = {"user_id": user_id, "username": "maker", "tagline": "", "bio": "Builds things"}
    r = client.post("/api/profiles", headers=auth_header, json=body)
    assert r.status_code == 201, r.text
    assert r.json()["tagline"] is None

    assert client.post("/api/profiles", headers=auth_header, json=body).status_code == 409

    r = client.put(f"/api/profiles/{user_id}", headers=auth_header, json={"tagline": "Shipping daily"})
    assert r.status_code == 200
    assert r.json()["tagline"] == "Shipping daily"
    assert r.json()["bio"] == "Builds things"

    assert client.get(f"/api/profiles/{user_id}").json()["username"] == "maker"
    assert client.get("/api/profiles/by-username/maker").json()["user_id"] == user_id
    assert client.get("/auth/me", headers=auth_header).json()["username"] == "maker"


def test_profile_not_found(client):
    assert client.get("/api/profiles/nobody").status_code == 404
    r = client.get("/api/profiles/by-username/nonexistent")
    assert r.status_code == 404
    assert r.json()["detail"] == "Profile not found"


def test_profile_writes_are_owner_only(client, auth_header, other_header):
    user_id = user_id_for("test-token")
    client.post("/api/profiles", headers=auth_header, json={"user_id": user_id})

    assert client.post("/api/profiles", headers=other_header, json={"user_id": user_id}).status_code == 403
    assert client.put(f"/api/profiles/{user_id}", headers=other_header, json={"bio": "x"}).status_code == 403
    assert client.put(f"/api/profiles/{user_id}", json={"bio": "x"}).status_code == 401


def test_submit_and_browse_tools(client, auth_header, png_bytes):
    files = {"logo": ("logo.png", png_bytes, "image/png")}
    data = {"title": " Figma ", "description": "Design tool", "url": "https://figma.com", "is_paid": "true"}
    r = client.post("/tools", headers=auth_header, data=data, files=files)
    assert r.status_code == 201, r.text
    figma = r.json()["tool"]
    assert figma["title"] == "Figma"
    assert figma["is_paid"] is True
    assert figma["logo_url"].endswith(".png")
    submit(client, auth_header)

    listing = client.get("/tools", params={"sort": "newest"}).json()
    assert listing["total"] == 2
    assert {t["title"] for t in listing["tools"]} == {"Figma", "Linear"}

    paid = client.get("/tools", params={"pricing": "paid"}).json()
    assert [t["title"] for t in paid["tools"]] == ["Figma"]

    found = client.get("/tools", params={"search": "ISSUE"}).json()
    assert [t["title"] for t in found["tools"]] == ["Linear"]

    detail = client.get(f"/tools/{figma['id']}").json()["tool"]
    assert detail["upvotes_count"] == 0


def test_submit_validation(client, auth_header):
    r = client.post("/tools", headers=auth_header, data={"title": " ", "description": "d", "url": "https://a.io"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Please fill in all required fields."

    r = client.post("/tools", headers=auth_header, data={"title": "t", "description": "d", "url": "not a url"})
    assert r.status_code == 400

    r = client.post(
        "/tools",
        headers=auth_header,
        data={"title": "t", "description": "d", "url": "https://a.io"},
        files={"logo": ("logo.png", b"garbage", "image/png")},
    )
    assert r.status_code == 400

    r = client.post("/tools", data={"title": "t", "description": "d", "url": "https://a.io"})
    assert r.status_code == 401


def test_missing_tool_is_404(client):
    assert client.get("/tools/999").status_code == 404


def test_upvote_toggle(client, auth_header, other_header):
    tool = submit(client, auth_header)
    path = f"/tools/{tool['id']}/upvote"

    r = client.post(path, headers=other_header)
    assert r.status_code == 200, r.text
    assert r.json() == {"tool_id": tool["id"], "is_upvoted": True, "upvotes_count": 1}

    viewed = client.get(f"/tools/{tool['id']}", headers=other_header).json()["tool"]
    assert viewed["is_upvoted"] is True
    assert viewed["upvotes_count"] == 1

    r = client.post(path, headers=other_header)
    assert r.json() == {"tool_id": tool["id"], "is_upvoted": False, "upvotes_count": 0}


def test_anonymous_upvote_is_rejected(client, auth_header):
    tool = submit(client, auth_header)

    r = client.post(f"/tools/{tool['id']}/upvote")

    assert r.status_code == 401
    assert r.json()["detail"] == "Please sign in to upvote tools."
    assert client.get(f"/tools/{tool['id']}").json()["tool"]["upvotes_count"] == 0


def test_anonymous_upvote_on_missing_tool_is_401(client):
    r = client.post("/tools/999/upvote")

    assert r.status_code == 401
    assert r.json()["detail"] == "Please sign in to upvote tools."


def test_upvote_on_missing_tool_is_404(client, auth_header):
    assert client.post("/tools/999/upvote", headers=auth_header).status_code == 404


def test_trending_orders_by_upvotes(client, auth_header, other_header):
    first = submit(client, auth_header, title="First")
    second = submit(client, auth_header, title="Second")
    client.post(f"/tools/{first['id']}/upvote", headers=other_header)

    trending = client.get("/tools/trending").json()["tools"]
    assert [t["id"] for t in trending] == [first["id"], second["id"]]

    mine = client.get("/tools/trending", headers=other_header).json()["tools"]
    assert mine[0]["is_upvoted"] is True


def test_delete_tool(client, auth_header, other_header):
    tool = submit(client, auth_header)

    assert client.delete(f"/tools/{tool['id']}", headers=other_header).status_code == 403
    r = client.delete(f"/tools/{tool['id']}", headers=auth_header)
    assert r.status_code == 200
    assert r.json()["message"] == "Tool deleted"
    assert client.get(f"/tools/{tool['id']}").status_code == 404


def test_delete_account(client, auth_header, other_header):
    client.post("/auth/validate", headers=auth_header)
    theirs = submit(client, other_header, title="Theirs")
    submit(client, auth_header, title="Mine")
    client.post(f"/tools/{theirs['id']}/upvote", headers=auth_header)

    r = client.delete("/auth/account", headers=auth_header)
    assert r.status_code == 200, r.text
    assert r.json() == {"ok": True, "tools_deleted": 1, "upvotes_deleted": 1, "profile_deleted": True}

    remaining = client.get("/tools").json()["tools"]
    assert [t["title"] for t in remaining] == ["Theirs"]
    assert client.get("/tools", headers=other_header).json()["tools"][0]["upvotes_count"] == 0
