from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from album_finder.config import Settings
from album_finder.db.session import Database
from album_finder.main import create_app
from album_finder.services.user_service import UserService


def make_settings(tmp_path: Path, **overrides) -> Settings:
    """Settings on a throwaway SQLite file with Redis and Spotify disabled."""
    values = {
        "DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        "REDIS_URL": "",
        "SECRET_KEY": "test-secret-key",
        "BCRYPT_ROUNDS": 4,
        "SPOTIFY_CLIENT_ID": "",
        "SPOTIFY_CLIENT_SECRET": "",
        "DEBUG": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def app_settings(tmp_path: Path):
    return make_settings(tmp_path)


@pytest.fixture()
def client(app_settings):
    app = create_app(app_settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def user_service(app_settings):
    return UserService(app_settings)


@pytest.fixture()
async def db_session(app_settings):
    database = Database(app_settings)
    await database.create_all()
    try:
        async with database.session_factory() as session:
            yield session
    finally:
        await database.dispose()


def register(client, email="a@x.com", username="alice", password="secret1"):
    return client.post(
        "/api/auth/register",
        json={"email": email, "username": username, "password": password},
    )


@pytest.fixture()
def auth_headers(client):
    r = register(client)
    assert r.status_code == 201, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}
