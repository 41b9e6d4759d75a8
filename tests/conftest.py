"""Pytest configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from src.api.main import create_app
from src.config import Settings
from src.domain.services.auth import AuthService
from src.domain.services.tokens import ResetTokenService, SessionTokenService
from src.storage import database
from src.storage.users import InMemoryUserStore, SqlUserStore

TEST_SECRET = "test-secret-key"


class CapturingNotifier:
    """Stands in for the reset-link mailer and records what it was given."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    async def __call__(self, to_email: str, reset_token: str) -> bool:
        self.sent.append((to_email, reset_token))
        return True

    @property
    def last_token(self) -> str:
        return self.sent[-1][1]


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite database per test."""
    # Import models to ensure they're registered
    from src.storage import models  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_campus_auth.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture(params=["memory", "database"])
def user_store(request, session_factory):
    """Each store contract test runs once per backend."""
    if request.param == "memory":
        return InMemoryUserStore()
    return SqlUserStore(session_factory)


@pytest.fixture
def session_tokens() -> SessionTokenService:
    return SessionTokenService(TEST_SECRET)


@pytest.fixture
def reset_tokens() -> ResetTokenService:
    return ResetTokenService(TEST_SECRET)


@pytest.fixture
def notifier() -> CapturingNotifier:
    return CapturingNotifier()


@pytest.fixture
def auth_service(user_store, session_tokens, reset_tokens, notifier) -> AuthService:
    return AuthService(user_store, session_tokens, reset_tokens, notifier)


@pytest.fixture
def app(notifier):
    """Application on the in-memory backend with a capturing notifier."""
    application = create_app(Settings(jwt_secret_key=TEST_SECRET, use_database=False))
    application.state.reset_notifier = notifier
    return application


@pytest.fixture
def db_app(app, session_factory, monkeypatch):
    """Same application, switched to the database backend."""
    monkeypatch.setattr(database, "async_session", session_factory)
    app.state.use_database = True
    return app


@pytest.fixture
async def client(app):
    """Async test client for FastAPI app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
async def db_client(db_app):
    async with AsyncClient(
        transport=ASGITransport(app=db_app),
        base_url="http://test"
    ) as ac:
        yield ac
