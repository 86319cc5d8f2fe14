"""Tests for the get_repositories() DI factory."""

from unittest.mock import AsyncMock

from content_pricing.infrastructure.persistence.repositories import (
    Repositories,
    SqlClientProfileRepository,
    SqlExperimentRepository,
    SqlMarketDataRepository,
    SqlPricingModelRepository,
    SqlQuoteRepository,
    get_repositories,
)


def _repos():
    return get_repositories(AsyncMock())


def test_get_repositories_returns_repositories_instance():
    assert isinstance(_repos(), Repositories)


def test_repositories_pricing_models_is_correct_type():
    assert isinstance(_repos().pricing_models, SqlPricingModelRepository)


def test_repositories_market_data_is_correct_type():
    assert isinstance(_repos().market_data, SqlMarketDataRepository)


def test_repositories_client_profiles_is_correct_type():
    assert isinstance(_repos().client_profiles, SqlClientProfileRepository)


def test_repositories_quotes_is_correct_type():
    assert isinstance(_repos().quotes, SqlQuoteRepository)


def test_repositories_experiments_is_correct_type():
    assert isinstance(_repos().experiments, SqlExperimentRepository)


def test_repositories_dataclass_has_five_fields():
    assert len(Repositories.__dataclass_fields__) == 5
