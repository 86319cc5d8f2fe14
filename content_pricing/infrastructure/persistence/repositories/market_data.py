"""SQLAlchemy implementation of MarketDataRepository.

Elasticity is estimated on read from decided price quotes in the window
(ElasticityEstimator); competitor analysis aggregates market_data snapshots
collected in the window across all segments.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from content_pricing.domain.models.enums import (
    ContentType,
    DemandLevel,
    QuoteStatus,
    TrendDirection,
)
from content_pricing.domain.models.market_data import (
    CompetitorAnalysis,
    MarketData as DomainMarketData,
    PriceElasticity,
    TimeRange,
)
from content_pricing.domain.repositories.market_data import MarketDataRepository
from content_pricing.domain.services.elasticity import ElasticityEstimator, QuoteOutcome
from content_pricing.infrastructure.persistence.models.pricing import (
    MarketData as OrmMarketData,
    PriceQuote as OrmQuote,
)

_DECIDED = (QuoteStatus.ACCEPTED.value, QuoteStatus.REJECTED.value)


class SqlMarketDataRepository(MarketDataRepository):
    def __init__(
        self, session: AsyncSession, estimator: ElasticityEstimator | None = None
    ) -> None:
        self._session = session
        self._estimator = estimator or ElasticityEstimator()

    @staticmethod
    def _to_domain(row: OrmMarketData) -> DomainMarketData:
        return DomainMarketData(
            market_data_id=row.market_data_id,
            content_type=ContentType(row.content_type),
            segment=row.segment,
            average_price=row.average_price,
            median_price=row.median_price,
            min_price=row.min_price,
            max_price=row.max_price,
            sample_size=row.sample_size,
            demand_level=DemandLevel(row.demand_level),
            trend_direction=TrendDirection(row.trend_direction),
            confidence_score=row.confidence_score,
            data_source=row.data_source,
            collected_at=row.collected_at,
        )

    async def get_latest_market_data(
        self, content_type: ContentType, segment: str
    ) -> DomainMarketData | None:
        stmt = (
            select(OrmMarketData)
            .where(
                OrmMarketData.content_type == content_type.value,
                OrmMarketData.segment == segment,
            )
            .order_by(OrmMarketData.collected_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row else None

    async def get_price_elasticity(
        self, content_type: ContentType, time_range: TimeRange
    ) -> PriceElasticity | None:
        stmt = select(OrmQuote.final_price, OrmQuote.status).where(
            OrmQuote.content_type == content_type.value,
            OrmQuote.status.in_(_DECIDED),
            OrmQuote.created_at >= time_range.start,
            OrmQuote.created_at <= time_range.end,
        )
        result = await self._session.execute(stmt)
        outcomes = [
            QuoteOutcome(price=price, accepted=status == QuoteStatus.ACCEPTED.value)
            for price, status in result.all()
        ]
        return self._estimator.estimate(content_type, outcomes, time_range)

    async def get_competitor_analysis(
        self, content_type: ContentType, time_range: TimeRange
    ) -> CompetitorAnalysis | None:
        stmt = select(
            func.avg(OrmMarketData.average_price),
            func.count(func.distinct(OrmMarketData.data_source)),
            func.count(),
        ).where(
            OrmMarketData.content_type == content_type.value,
            OrmMarketData.collected_at >= time_range.start,
            OrmMarketData.collected_at <= time_range.end,
        )
        result = await self._session.execute(stmt)
        average, sources, snapshots = result.one()
        if not snapshots:
            return None
        return CompetitorAnalysis(
            content_type=content_type,
            market_average_price=average,
            competitor_count=sources or 0,
            time_range=time_range,
        )

    async def add(self, market_data: DomainMarketData) -> DomainMarketData:
        self._session.add(
            OrmMarketData(
                market_data_id=market_data.market_data_id,
                content_type=market_data.content_type.value,
                segment=market_data.segment,
                average_price=market_data.average_price,
                median_price=market_data.median_price,
                min_price=market_data.min_price,
                max_price=market_data.max_price,
                sample_size=market_data.sample_size,
                demand_level=market_data.demand_level.value,
                trend_direction=market_data.trend_direction.value,
                confidence_score=market_data.confidence_score,
                data_source=market_data.data_source,
                collected_at=market_data.collected_at,
            )
        )
        return market_data
