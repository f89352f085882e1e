from datetime import timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from jose import JWTError, jwt
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from album_finder.config import Settings
from album_finder.main import create_app
from album_finder.services.favorite_service import favorite_service

from conftest import make_settings, register


ALBUM = {"album_id": "A1", "album_name": "X", "artist_name": "Y"}


def test_root_lists_endpoints(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["endpoints"]["register"] == "POST /api/auth/register"


def test_health_reports_database(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["database"] == "Connected"
    assert body["timestamp"]


def test_unknown_route(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Route not found"}


def test_register_and_login_scenario(client):
    r = register(client)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"]["email"] == "a@x.com"
    assert "password_hash" not in body["user"]
    user_id = body["user"]["id"]

    r = client.post("/api/auth/login", json={"email": "a@x.com", "password": "wrong"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Invalid email or password"}

    r = client.post("/api/auth/login", json={"email": "A@x.com", "password": "secret1"})
    assert r.status_code == 200
    tokens = client.app.state.user_service.tokens
    assert tokens.decode_access_token(r.json()["token"]).id == user_id
    assert r.json()["user"]["last_login"] is not None


def test_login_unknown_email_matches_wrong_password(client):
    register(client)
    wrong_password = client.post("/api/auth/login", json={"email": "a@x.com", "password": "nope"})
    unknown_email = client.post("/api/auth/login", json={"email": "z@x.com", "password": "secret1"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()


def test_register_duplicate(client):
    register(client)
    r = register(client, email="A@X.COM", username="other")
    assert r.status_code == 400
    assert r.json()["message"] == "Email or username already exists"

    r = register(client, email="b@x.com", username="alice")
    assert r.status_code == 400


def test_register_validation(client):
    r = register(client, username="al")
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Username must be 3-30 characters"
    assert body["errors"][0]["field"] == "username"

    r = register(client, password="12345")
    assert r.status_code == 400
    assert r.json()["message"] == "Password must be at least 6 characters"

    r = register(client, email="not-an-email")
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "email"


def test_protected_routes_require_token(client):
    for method, path in [
        ("get", "/api/auth/profile"),
        ("get", "/api/favorites"),
        ("post", "/api/favorites"),
        ("delete", "/api/favorites/A1"),
        ("get", "/api/favorites/check/A1"),
    ]:
        r = getattr(client, method)(path)
        assert r.status_code == 401, path
        assert r.json() == {"success": False, "message": "Access token required"}
        assert r.headers["www-authenticate"] == "Bearer"


def test_invalid_and_expired_tokens_are_rejected(client, app_settings):
    user = SimpleNamespace(id=1, email="a@x.com", username="alice")
    tokens = client.app.state.user_service.tokens
    expired = tokens.create_access_token(user, expires_delta=timedelta(seconds=-1))

    for token in ("garbage", expired):
        r = client.get("/api/favorites", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401
        assert r.json()["message"] == "Invalid or expired token"

    r = client.get("/api/favorites", headers={"Authorization": "Basic abc"})
    assert r.status_code == 401


def test_profile(client, auth_headers):
    r = client.get("/api/auth/profile", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["user"]["username"] == "alice"
    assert "password_hash" not in r.json()["user"]

    r = client.put("/api/auth/profile", json={"username": "alicia"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["user"]["username"] == "alicia"


def test_profile_username_taken(client, auth_headers):
    register(client, email="b@x.com", username="bob")
    r = client.put("/api/auth/profile", json={"username": "bob"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Username already taken"


def test_change_password(client, auth_headers):
    r = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "wrong", "newPassword": "another1"},
        headers=auth_headers,
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Current password is incorrect"

    r = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "secret1", "newPassword": "123"},
        headers=auth_headers,
    )
    assert r.status_code == 400

    r = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "secret1", "newPassword": "another1"},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Password changed successfully"}

    r = client.post("/api/auth/login", json={"email": "a@x.com", "password": "another1"})
    assert r.status_code == 200


def test_favorites_scenario(client, auth_headers):
    r = client.post("/api/favorites", json=ALBUM, headers=auth_headers)
    assert r.status_code == 201
    assert r.json()["favorite"]["album_id"] == "A1"

    r = client.post("/api/favorites", json=ALBUM, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Album already in favorites"

    r = client.get("/api/favorites", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["count"] == 1
    assert r.json()["favorites"][0]["album_name"] == "X"


def test_add_favorite_missing_fields(client, auth_headers):
    r = client.post("/api/favorites", json={"album_id": "A1"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Album ID, name, and artist name are required"


def test_remove_then_check(client, auth_headers):
    client.post("/api/favorites", json=ALBUM, headers=auth_headers)

    r = client.get("/api/favorites/check/A1", headers=auth_headers)
    assert r.json()["isFavorite"] is True
    assert r.json()["favorite"]["album_id"] == "A1"

    r = client.delete("/api/favorites/A1", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["favorite"]["album_id"] == "A1"

    r = client.get("/api/favorites/check/A1", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "isFavorite": False, "favorite": None}

    r = client.delete("/api/favorites/A1", headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Favorite not found"


def test_album_search_without_spotify_credentials(client):
    r = client.get("/api/albums/search", params={"q": "radiohead"})
    assert r.status_code == 503
    assert r.json()["message"] == "Spotify integration is not configured"


def test_app_signs_tokens_with_its_own_settings(tmp_path):
    app = create_app(make_settings(tmp_path, SECRET_KEY="injected-secret"))
    with TestClient(app) as c:
        r = register(c)
        assert r.status_code == 201, r.text
        token = r.json()["token"]

        assert jwt.decode(token, "injected-secret", algorithms=["HS256"])["username"] == "alice"
        with pytest.raises(JWTError):
            jwt.decode(token, Settings.model_fields["SECRET_KEY"].default, algorithms=["HS256"])

        r = c.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200


def test_update_profile_validation(client, auth_headers):
    r = client.put("/api/auth/profile", json={"username": "al"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Username must be 3-30 characters"
    assert r.json()["errors"][0]["field"] == "username"


def test_add_favorite_rejects_overlong_values(client, auth_headers):
    r = client.post(
        "/api/favorites",
        json=dict(ALBUM, release_date="1997-05-21T00:00:00Z"),
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert r.json()["errors"][0]["field"] == "release_date"

    r = client.post("/api/favorites", json=dict(ALBUM, album_id="x" * 65), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "album_id"

    r = client.get("/api/favorites", headers=auth_headers)
    assert r.json()["count"] == 0


def _database_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_database_errors_are_redacted(client, auth_headers, monkeypatch):
    monkeypatch.setattr(favorite_service, "get_user_favorites", _database_down)

    r = client.get("/api/favorites", headers=auth_headers)
    assert r.status_code == 500
    assert r.json() == {
        "success": False,
        "message": "Database error",
        "error": "Internal server error",
    }


def test_database_errors_are_detailed_in_debug(client, auth_headers, app_settings, monkeypatch):
    monkeypatch.setattr(favorite_service, "get_user_favorites", _database_down)
    client.app.state.settings = app_settings.model_copy(update={"DEBUG": True})

    r = client.get("/api/favorites", headers=auth_headers)
    assert r.status_code == 500
    assert r.json()["message"] == "Database error"
    assert "connection refused" in r.json()["error"]


def test_pool_timeout_is_reported_as_unavailable(client, auth_headers, monkeypatch):
    async def pool_exhausted(*args, **kwargs):
        raise PoolTimeoutError("QueuePool limit of size 20 overflow 0 reached")

    monkeypatch.setattr(favorite_service, "get_user_favorites", pool_exhausted)

    r = client.get("/api/favorites", headers=auth_headers)
    assert r.status_code == 500
    assert r.json() == {
        "success": False,
        "message": "Database unavailable",
        "error": "Internal server error",
    }


def test_unexpected_errors_are_redacted(app_settings, monkeypatch):
    async def boom(*args, **kwargs):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(favorite_service, "get_user_favorites", boom)
    with TestClient(create_app(app_settings), raise_server_exceptions=False) as c:
        headers = {"Authorization": f"Bearer {register(c).json()['token']}"}
        r = c.get("/api/favorites", headers=headers)

    assert r.status_code == 500
    assert r.json() == {
        "success": False,
        "message": "Something went wrong!",
        "error": "Internal server error",
    }


def test_health_reports_database_down(client, monkeypatch):
    async def now():
        _database_down()

    monkeypatch.setattr(client.app.state.db, "now", now)

    r = client.get("/api/health")
    assert r.status_code == 500
    assert r.json() == {
        "success": False,
        "message": "Database connection error",
        "error": "Internal server error",
    }
