"""Unit tests for content_pricing/infrastructure/database.py.

Tests cover Settings defaults, env var override, object types, and the
handler configuration derived from Settings.
No database connection is required.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from content_pricing.application.config import HandlerConfig
from content_pricing.infrastructure.database import (
    AsyncSessionLocal,
    Base,
    Settings,
    build_engine,
    engine,
)


def test_settings_default_url_uses_asyncpg():
    assert "postgresql+asyncpg" in Settings().database_url


def test_settings_default_url_targets_localhost():
    assert "localhost" in Settings().database_url


def test_settings_reads_database_url_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@myhost/mydb")
    assert Settings().database_url == "postgresql+asyncpg://u:p@myhost/mydb"


def test_settings_reads_collaborator_timeout_from_env(monkeypatch):
    monkeypatch.setenv("COLLABORATOR_TIMEOUT_SECONDS", "0.5")
    assert Settings().collaborator_timeout_seconds == 0.5


def test_base_is_declarative_base():
    assert issubclass(Base, DeclarativeBase)


def test_engine_is_async():
    assert isinstance(engine, AsyncEngine)


def test_session_factory_produces_async_sessions():
    assert isinstance(AsyncSessionLocal, async_sessionmaker)
    assert AsyncSessionLocal.class_ is AsyncSession


# --- HandlerConfig ---

def test_handler_config_defaults_match_settings_defaults():
    assert HandlerConfig.from_settings(Settings()) == HandlerConfig()


def test_handler_config_from_settings_converts_units(monkeypatch):
    monkeypatch.setenv("MARKET_DATA_MAX_AGE_HOURS", "6")
    monkeypatch.setenv("QUOTE_VALIDITY_DAYS", "3")
    config = HandlerConfig.from_settings(Settings())
    assert config.market_data_max_age == timedelta(hours=6)
    assert config.quote_validity == timedelta(days=3)


def test_build_engine_honours_echo_setting():
    assert build_engine(Settings(database_echo=True)).echo is True


def test_settings_reject_non_positive_timeout():
    with pytest.raises(ValidationError):
        Settings(collaborator_timeout_seconds=0)
