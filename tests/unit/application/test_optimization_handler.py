"""Tests for content_pricing/application/optimization.py."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from content_pricing.application.optimization import PriceOptimizationHandler
from content_pricing.domain.errors import OptimizationDataUnavailable
from content_pricing.domain.models.enums import (
    BusinessObjective,
    ContentType,
    DemandLevel,
    TrendDirection,
)
from content_pricing.domain.models.market_data import (
    CompetitorAnalysis,
    MarketData,
    PriceElasticity,
)
from content_pricing.domain.models.optimization import PriceOptimizationRequest

NOW = datetime(2024, 3, 12, 14, 0, tzinfo=timezone.utc)


def _request(objective, **overrides):
    defaults = dict(
        content_type=ContentType.BLOG_POST, current_price=Decimal("200"), objective=objective
    )
    defaults.update(overrides)
    return PriceOptimizationRequest(**defaults)


def _market(collected_at=NOW - timedelta(hours=1), segment="general"):
    return MarketData(
        content_type=ContentType.BLOG_POST,
        segment=segment,
        average_price=Decimal("210"),
        median_price=Decimal("200"),
        min_price=Decimal("80"),
        max_price=Decimal("400"),
        sample_size=20,
        demand_level=DemandLevel.MEDIUM,
        trend_direction=TrendDirection.UP,
        confidence_score=0.8,
        collected_at=collected_at,
    )


@pytest.fixture
def handler(market_data, config):
    return PriceOptimizationHandler(market_data, config=config)


def test_objective_is_mandatory():
    with pytest.raises(ValueError):
        PriceOptimizationRequest(content_type=ContentType.BLOG_POST, current_price=Decimal("10"))


async def test_revenue_uses_elasticity_window(handler, market_data, config):
    market_data.elasticity = PriceElasticity(
        content_type=ContentType.BLOG_POST, elasticity_score=-1.4, confidence_level=0.6
    )
    result = await handler.optimize(_request(BusinessObjective.REVENUE), now=NOW)
    assert result.objective == BusinessObjective.REVENUE
    assert result.optimal_price == Decimal("180.00")
    [window] = market_data.requested_windows
    assert window.end == NOW
    assert window.start == datetime(2023, 12, 12, 14, 0, tzinfo=timezone.utc)


async def test_revenue_without_elasticity_is_unavailable(handler):
    with pytest.raises(OptimizationDataUnavailable) as exc_info:
        await handler.optimize(_request(BusinessObjective.REVENUE), now=NOW)
    assert exc_info.value.objective == "revenue"


async def test_conversion_uses_fresh_market_data(handler, market_data):
    market_data.market_data = _market()
    result = await handler.optimize(_request(BusinessObjective.CONVERSION), now=NOW)
    assert result.optimal_price == Decimal("190.00")


async def test_conversion_uses_requested_segment(handler, market_data):
    market_data.market_data = _market(segment="enterprise")
    with pytest.raises(OptimizationDataUnavailable):
        await handler.optimize(_request(BusinessObjective.CONVERSION), now=NOW)
    result = await handler.optimize(
        _request(BusinessObjective.CONVERSION, segment="enterprise"), now=NOW
    )
    assert result.optimal_price == Decimal("190.00")


async def test_conversion_with_stale_data_is_unavailable(handler, market_data):
    market_data.market_data = _market(collected_at=NOW - timedelta(days=3))
    with pytest.raises(OptimizationDataUnavailable, match="stale"):
        await handler.optimize(_request(BusinessObjective.CONVERSION), now=NOW)


async def test_market_share_uses_competitor_window(handler, market_data):
    market_data.analysis = CompetitorAnalysis(
        content_type=ContentType.BLOG_POST, market_average_price=Decimal("240"), competitor_count=5
    )
    result = await handler.optimize(_request(BusinessObjective.MARKET_SHARE), now=NOW)
    assert result.optimal_price == Decimal("204.00")
    [window] = market_data.requested_windows
    assert window.start == datetime(2024, 2, 12, 14, 0, tzinfo=timezone.utc)


async def test_slow_collaborator_is_unavailable(handler, market_data):
    market_data.analysis = CompetitorAnalysis(
        content_type=ContentType.BLOG_POST, market_average_price=Decimal("240")
    )
    market_data.delay = 0.5
    with pytest.raises(OptimizationDataUnavailable, match="timed out"):
        await handler.optimize(_request(BusinessObjective.MARKET_SHARE), now=NOW)
