"""Market intelligence repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from content_pricing.domain.models.enums import ContentType
from content_pricing.domain.models.market_data import (
    CompetitorAnalysis,
    MarketData,
    PriceElasticity,
    TimeRange,
)


class MarketDataRepository(ABC):
    """Read interface over market intelligence collected elsewhere.

    Freshness is the caller's concern: get_latest_market_data() returns the
    newest snapshot regardless of age and the pricing handler applies
    MarketData.is_stale().
    """

    @abstractmethod
    async def get_latest_market_data(
        self, content_type: ContentType, segment: str
    ) -> MarketData | None:
        """Return the newest snapshot for (content_type, segment), or None."""

    @abstractmethod
    async def get_price_elasticity(
        self, content_type: ContentType, time_range: TimeRange
    ) -> PriceElasticity | None:
        """Return the elasticity estimate over the window, or None when there is too little data."""

    @abstractmethod
    async def get_competitor_analysis(
        self, content_type: ContentType, time_range: TimeRange
    ) -> CompetitorAnalysis | None:
        """Return aggregate competitor pricing over the window, or None."""

    @abstractmethod
    async def add(self, market_data: MarketData) -> MarketData:
        """Store one collected snapshot."""
