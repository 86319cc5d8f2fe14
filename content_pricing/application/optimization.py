"""Price optimization handler.

Dispatches on the mandatory BusinessObjective and fetches only the
collaborator data that objective needs:

    revenue      → price elasticity over the trailing elasticity window
    conversion   → latest fresh market data
    market share → competitor analysis over the trailing competitor window
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime, timezone
from typing import TypeVar

from content_pricing.domain.errors import OptimizationDataUnavailable
from content_pricing.domain.models.enums import BusinessObjective
from content_pricing.domain.models.market_data import TimeRange
from content_pricing.domain.models.optimization import (
    PriceOptimizationRequest,
    PriceOptimizationResult,
)
from content_pricing.domain.repositories.market_data import MarketDataRepository
from content_pricing.domain.services.optimization import PriceOptimizationService

from .config import HandlerConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PriceOptimizationHandler:
    def __init__(
        self,
        market_data: MarketDataRepository,
        config: HandlerConfig | None = None,
        service: PriceOptimizationService | None = None,
    ) -> None:
        self._market_data = market_data
        self._config = config or HandlerConfig()
        self._service = service or PriceOptimizationService()

    async def optimize(
        self, request: PriceOptimizationRequest, now: datetime | None = None
    ) -> PriceOptimizationResult:
        moment = now or datetime.now(timezone.utc)
        handlers = {
            BusinessObjective.REVENUE: self._for_revenue,
            BusinessObjective.CONVERSION: self._for_conversion,
            BusinessObjective.MARKET_SHARE: self._for_market_share,
        }
        result = await handlers[request.objective](request, moment)
        logger.info(
            "Optimized %s for %s: %s -> %s",
            request.content_type.value,
            request.objective.value,
            result.current_price,
            result.optimal_price,
        )
        return result

    async def _for_revenue(
        self, request: PriceOptimizationRequest, now: datetime
    ) -> PriceOptimizationResult:
        window = TimeRange.trailing(self._config.elasticity_window_months, now)
        elasticity = await self._required(
            self._market_data.get_price_elasticity(request.content_type, window),
            request,
            "price elasticity",
        )
        return self._service.optimize_for_revenue(
            request.current_price, elasticity, request.constraints
        )

    async def _for_conversion(
        self, request: PriceOptimizationRequest, now: datetime
    ) -> PriceOptimizationResult:
        segment = request.segment or self._config.market_segment
        market_data = await self._required(
            self._market_data.get_latest_market_data(request.content_type, segment),
            request,
            f"market data for segment {segment!r}",
        )
        if market_data.is_stale(self._config.market_data_max_age, now):
            raise OptimizationDataUnavailable(
                request.content_type.value,
                request.objective.value,
                f"market data collected at {market_data.collected_at.isoformat()} is stale",
            )
        return self._service.optimize_for_conversion(
            request.current_price, market_data, request.constraints
        )

    async def _for_market_share(
        self, request: PriceOptimizationRequest, now: datetime
    ) -> PriceOptimizationResult:
        window = TimeRange.trailing(self._config.competitor_window_months, now)
        analysis = await self._required(
            self._market_data.get_competitor_analysis(request.content_type, window),
            request,
            "competitor analysis",
        )
        return self._service.optimize_for_market_share(
            request.current_price, analysis, request.constraints
        )

    async def _required(
        self, lookup: Awaitable[T | None], request: PriceOptimizationRequest, what: str
    ) -> T:
        try:
            value = await asyncio.wait_for(lookup, self._config.collaborator_timeout)
        except asyncio.TimeoutError as exc:
            raise OptimizationDataUnavailable(
                request.content_type.value,
                request.objective.value,
                f"{what} lookup timed out after {self._config.collaborator_timeout:.2f}s",
            ) from exc
        if value is None:
            raise OptimizationDataUnavailable(
                request.content_type.value, request.objective.value, f"no {what} available"
            )
        return value
