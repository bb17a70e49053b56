# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlmodel import Session

from src.api.deps import get_email_service, get_oauth_client
from src.config import Settings, get_settings
from src.database.database import build_engine, create_db_and_tables, get_engine
from src.main import app
from src.models.user import User
from src.services.token_service import TokenService
from src.services.user_service import UserService

from .fakes import FakeEmailService
from .helpers import DEFAULT_PASSWORD


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings for one test: a throwaway SQLite file and the cheapest bcrypt cost.

    _env_file=None keeps a developer's local .env out of the tests.
    """
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'tasks.sqlite3'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        environment="test",
        client_url="http://testserver",
    )


@pytest.fixture()
def engine(settings: Settings) -> Iterator[Engine]:
    engine = build_engine(settings.database_url)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture()
def token_service(settings: Settings) -> TokenService:
    return TokenService.from_settings(settings)


@pytest.fixture()
def email_service() -> FakeEmailService:
    return FakeEmailService()


@pytest.fixture()
def client(settings: Settings, engine: Engine, email_service: FakeEmailService) -> Iterator[TestClient]:
    """TestClient with settings, database and outbound capabilities replaced by test doubles."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_oauth_client] = lambda: None
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def register(client: TestClient) -> Callable[..., dict]:
    """Register a user through the API and return the response data (id, username, email, token)."""

    def _register(username: str, password: str = DEFAULT_PASSWORD, email: str | None = None) -> dict:
        response = client.post(
            "/api/auth/register",
            json={"username": username, "email": email or f"{username}@example.com", "password": password},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register


@pytest.fixture()
def make_user(session: Session) -> Callable[..., User]:
    """Insert a user row directly, bypassing the API."""

    def _make_user(username: str, **fields) -> User:
        fields.setdefault("email", f"{username}@example.com")
        return UserService.create(session, User(username=username, **fields))

    return _make_user
