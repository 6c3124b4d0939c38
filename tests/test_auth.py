from deadline_api.backend.auth import role_allowed


def test_role_allowed():
    assert role_allowed("admin", ["admin"])
    assert role_allowed("user", ("user", "admin"))
    assert not role_allowed("user", ["admin"])
    assert not role_allowed("admin", [])


def test_missing_identity_is_401(client):
    resp = client.get("/api/deadlines")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Not authorized, no user identity"}


def test_unknown_role_is_401(client):
    resp = client.get("/api/deadlines", headers={"X-User-Id": "u1", "X-User-Role": "superuser"})
    assert resp.status_code == 401


def test_role_defaults_to_user(client):
    resp = client.get("/api/submissions", headers={"X-User-Id": "u1"})
    assert resp.status_code == 403


def test_api_key_enforced_when_configured(client, monkeypatch, admin):
    monkeypatch.setenv("API_KEY", "testkey")

    assert client.get("/api/deadlines", headers=admin).status_code == 401
    assert client.get("/api/deadlines", headers={**admin, "X-API-Key": "wrong"}).status_code == 401
    assert client.get("/api/deadlines", headers={**admin, "X-API-Key": "testkey"}).status_code == 200


def test_health_needs_no_identity(client):
    assert client.get("/health").status_code == 200
