from contextlib import contextmanager
from types import SimpleNamespace

from fastapi.testclient import TestClient

from app.core.database import get_db
from app.core.permissions import AccessLevel
from app.core.security import create_access_token, create_refresh_token, decode_token
from app.main import app


class _StubQuery:
    def __init__(self, result):
        self._result = result

    def filter(self, *args, **kwargs):
        return self

    def first(self):
        return self._result


class _StubSession:
    def __init__(self, user):
        self._user = user

    def query(self, *args, **kwargs):
        return _StubQuery(self._user)


@contextmanager
def _client_with_user(user):
    app.dependency_overrides.clear()

    def _override_get_db():
        yield _StubSession(user)

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def _refresh(client, token):
    return client.post("/api/v1/auth/refresh", json={"data": {"refreshToken": token}})


def test_refresh_rejects_access_token():
    user = SimpleNamespace(id="u1", is_banned=False, access_level=AccessLevel.STANDARD)

    access = create_access_token("u1", AccessLevel.STANDARD)
    with _client_with_user(user) as client:
        res = _refresh(client, access)

    assert res.status_code == 401
    assert res.json()["error"]["detail"] == "Invalid refresh token"


def test_refresh_rejects_invalid_token():
    user = SimpleNamespace(id="u1", is_banned=False, access_level=AccessLevel.STANDARD)
    with _client_with_user(user) as client:
        res = _refresh(client, "not-a-jwt")

    assert res.status_code == 401
    assert res.json()["error"]["detail"] == "Invalid refresh token"


def test_refresh_rejects_banned_user():
    user = SimpleNamespace(id="u1", is_banned=True, access_level=AccessLevel.STANDARD)

    refresh = create_refresh_token("u1", AccessLevel.STANDARD)
    with _client_with_user(user) as client:
        res = _refresh(client, refresh)

    assert res.status_code == 401
    assert res.json()["error"]["detail"] == "User not found or banned"


def test_refresh_success_returns_new_pair():
    user = SimpleNamespace(id="u1", is_banned=False, access_level=AccessLevel.MODERATOR)

    refresh = create_refresh_token("u1", AccessLevel.MODERATOR)
    with _client_with_user(user) as client:
        res = _refresh(client, refresh)
    assert res.status_code == 200

    body = res.json()["data"]
    assert body["tokenType"] == "bearer"

    decoded_access = decode_token(body["accessToken"])
    assert decoded_access["type"] == "access"
    assert decoded_access["sub"] == "u1"

    decoded_refresh = decode_token(body["refreshToken"])
    assert decoded_refresh["type"] == "refresh"
    assert decoded_refresh["sub"] == "u1"
