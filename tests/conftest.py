import os


def _set_test_env() -> None:
    defaults = {
        "APP_NAME": "Lantern Test",
        "ENVIRONMENT": "test",
        "SECRET_KEY": "test-secret",
        "ACCESS_TOKEN_EXPIRE_MINUTES": "30",
        "REFRESH_TOKEN_EXPIRE_DAYS": "7",
        "PASSWORD_BCRYPT_ROUNDS": "4",
        "AUTO_CREATE_TABLES": "false",
        "DATABASE_URL": "sqlite+pysqlite:///:memory:",
        "RATE_LIMIT_ENABLED": "false",
        "REQUIRE_VERIFICATION": "false",
        "EMAIL_PROVIDER": "console",
        "DEFAULT_WALLET_AMOUNT": "10",
        "WALLET_MINIMUM_AMOUNT": "0",
        "OVERDRAFT_SWEEP_INTERVAL_SECONDS": "0",
        "LANTERN_SIGNAL_RESET_INTERVAL_SECONDS": "0",
        "TRIGGER_EVENT_INTERVAL_SECONDS": "0",
        "HACKING_API_URL": "",
        "BOOTSTRAP_ADMIN_USERNAMES": "",
        "CORS_ORIGINS": "http://localhost:5173,http://localhost:3000",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


_set_test_env()

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine, get_db
from app.core.permissions import AccessLevel
from app.core.security import create_access_token
from app.main import app
from app.services import connector, users
from app.services.messenger import Messenger


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides.clear()

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(username: str, access_level: int = AccessLevel.STANDARD, **updates):
        user = users.register_user(db, Messenger(), username=username, password="secret-pass")
        updates = {"access_level": int(access_level), **updates}
        return connector.update_object(db, user, updates)

    return _make


def _auth_headers(user) -> dict:
    token = create_access_token(str(user.id), int(user.access_level))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return _auth_headers
