"""
Shared fixtures for the test suite.

Every test gets its own SQLite file under pytest's tmp_path, so tests never
share users or todos.
"""

import os

os.environ.setdefault("LOG_TO_FILE", "false")

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tasklist.config import MIN_BCRYPT_ROUNDS, Settings
from tasklist.db import Database
from tasklist.db_handlers import TodoDBHandler, UserDBHandler
from tasklist.services import AccountService, PasswordHasher, TokenService

TEST_SECRET_KEY = "test-secret-key-with-at-least-32-characters"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        secret_key=TEST_SECRET_KEY,
        bcrypt_rounds=MIN_BCRYPT_ROUNDS,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    from main import create_app

    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """
    Test client for API requests. Entering the context runs the lifespan,
    which creates the tables.
    """
    with TestClient(app) as c:
        yield c


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    db = Database(settings)
    await db.init_db()
    yield db
    await db.close()


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=MIN_BCRYPT_ROUNDS)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret_key=TEST_SECRET_KEY)


@pytest.fixture
def user_db_handler(database: Database) -> UserDBHandler:
    return UserDBHandler(database.session_factory)


@pytest.fixture
def todo_db_handler(database: Database) -> TodoDBHandler:
    return TodoDBHandler(database.session_factory)


@pytest.fixture
def account_service(
    user_db_handler: UserDBHandler,
    password_hasher: PasswordHasher,
    token_service: TokenService,
) -> AccountService:
    return AccountService(user_db_handler, password_hasher, token_service)


@pytest.fixture
def register_and_login(client: TestClient):
    """Returns a helper that registers an account and returns its auth headers."""

    def _register_and_login(
        username: str = "alice", email: str = "a@x.com", password: str = "secret1"
    ) -> dict[str, str]:
        response = client.post(
            "/register", json={"username": username, "email": email, "password": password}
        )
        assert response.status_code == 201, response.text
        response = client.post("/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register_and_login
