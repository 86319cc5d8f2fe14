"""Tests for content_pricing/domain/repositories/market_data.py and clients.py."""

import asyncio

import pytest

from content_pricing.domain.models.enums import ContentType
from content_pricing.domain.repositories.clients import ClientProfileRepository
from content_pricing.domain.repositories.market_data import MarketDataRepository


def _market_data() -> MarketDataRepository:
    class _Impl(MarketDataRepository):
        async def get_latest_market_data(self, content_type, segment): return "latest"
        async def get_price_elasticity(self, content_type, time_range): return None
        async def get_competitor_analysis(self, content_type, time_range): return "analysis"
        async def add(self, market_data): return market_data

    return _Impl()


def _clients() -> ClientProfileRepository:
    class _Impl(ClientProfileRepository):
        async def get_by_client(self, client_id): return client_id
        async def upsert(self, profile): return profile

    return _Impl()


def test_market_data_repository_is_abstract():
    with pytest.raises(TypeError):
        MarketDataRepository()  # type: ignore[abstract]


def test_market_data_repository_latest():
    result = asyncio.run(_market_data().get_latest_market_data(ContentType.BLOG_POST, "general"))
    assert result == "latest"


def test_market_data_repository_missing_elasticity_is_none():
    assert asyncio.run(_market_data().get_price_elasticity(ContentType.BLOG_POST, None)) is None


def test_client_profile_repository_is_abstract():
    with pytest.raises(TypeError):
        ClientProfileRepository()  # type: ignore[abstract]


def test_client_profile_repository_get_by_client():
    assert asyncio.run(_clients().get_by_client("client-1")) == "client-1"
