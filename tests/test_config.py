"""Tests for settings and startup configuration checks."""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from src.api.main import create_app
from src.config import DEV_JWT_SECRET_KEY, ConfigurationError, Settings
from src.storage import database
from src.storage.database import normalize_database_url


class TestSigningKey:
    def test_explicit_secret_is_used(self):
        settings = Settings(jwt_secret_key="s3cret", environment="production")
        assert settings.signing_key() == "s3cret"

    def test_development_falls_back(self):
        settings = Settings(jwt_secret_key=None, environment="development")
        assert settings.signing_key() == DEV_JWT_SECRET_KEY

    def test_production_without_secret_is_fatal(self):
        settings = Settings(jwt_secret_key=None, environment="production")
        with pytest.raises(ConfigurationError):
            settings.signing_key()

    def test_app_refuses_to_start_without_secret_in_production(self):
        with pytest.raises(ConfigurationError):
            create_app(Settings(jwt_secret_key=None, environment="production"))


class TestDatabaseUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("postgres://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
            ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
            ("sqlite+aiosqlite:///./data/x.db", "sqlite+aiosqlite:///./data/x.db"),
        ],
    )
    def test_normalize(self, url, expected):
        assert normalize_database_url(url) == expected


class TestLifespan:
    """Startup decides once whether the database backend is usable."""

    @pytest.mark.asyncio
    async def test_unreachable_database_falls_back_to_memory(self, tmp_path, monkeypatch):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
        monkeypatch.setattr(database, "engine", engine)
        app = create_app(Settings(jwt_secret_key="s3cret", use_database=True))

        async with app.router.lifespan_context(app):
            assert app.state.use_database is False

    @pytest.mark.asyncio
    async def test_reachable_database_is_used(self, tmp_path, monkeypatch):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'db.sqlite'}")
        monkeypatch.setattr(database, "engine", engine)
        app = create_app(Settings(jwt_secret_key="s3cret", use_database=True))

        async with app.router.lifespan_context(app):
            assert app.state.use_database is True
        assert (tmp_path / "db.sqlite").exists()

    @pytest.mark.asyncio
    async def test_database_disabled_by_setting(self, tmp_path, monkeypatch):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'db.sqlite'}")
        monkeypatch.setattr(database, "engine", engine)
        app = create_app(Settings(jwt_secret_key="s3cret", use_database=False))

        async with app.router.lifespan_context(app):
            assert app.state.use_database is False
        assert not (tmp_path / "db.sqlite").exists()
