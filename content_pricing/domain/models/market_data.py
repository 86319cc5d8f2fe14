"""Market intelligence domain models.

MarketData         — one collected snapshot of competitor pricing for a content type + segment
PriceElasticity    — elasticity estimate over a time window
CompetitorAnalysis — aggregate competitor pricing over a time window
TimeRange          — closed [start, end] window used by collaborator queries

All are immutable value objects produced by the market intelligence
collaborators; the pricing engine only reads them.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import ContentType, DemandLevel, MarketPosition, TrendDirection

MARKET_DATA_MAX_AGE = timedelta(hours=24)

_BELOW_MARKET_RATIO = Decimal("0.8")
_ABOVE_MARKET_RATIO = Decimal("1.2")


class TimeRange(BaseModel):
    """Closed time window; start must precede end."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _ordered(self) -> TimeRange:
        if self.start >= self.end:
            raise ValueError(f"start ({self.start}) must precede end ({self.end})")
        return self

    @classmethod
    def trailing(cls, months: int, now: datetime | None = None) -> TimeRange:
        """Window covering the last `months` calendar months up to now."""
        end = now or datetime.now(timezone.utc)
        return cls(start=end - relativedelta(months=months), end=end)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class MarketData(BaseModel):
    """Competitor pricing snapshot for a content type within a market segment.

    Data older than the freshness window must not influence pricing; callers
    check is_stale() and treat stale data exactly like missing data.
    """

    model_config = ConfigDict(frozen=True)

    market_data_id: UUID = Field(default_factory=uuid4)
    content_type: ContentType
    segment: str = "general"
    average_price: Decimal = Field(ge=0)
    median_price: Decimal = Field(ge=0)
    min_price: Decimal = Field(ge=0)
    max_price: Decimal = Field(ge=0)
    sample_size: int = Field(ge=0)
    demand_level: DemandLevel
    trend_direction: TrendDirection
    confidence_score: float = Field(ge=0.0, le=1.0)
    data_source: str | None = None
    collected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _price_range_consistent(self) -> MarketData:
        if self.min_price > self.max_price:
            raise ValueError(
                f"min_price ({self.min_price}) must not exceed max_price ({self.max_price})"
            )
        return self

    @model_validator(mode="after")
    def _aware_collected_at(self) -> MarketData:
        if self.collected_at.tzinfo is None:
            raise ValueError("collected_at must be timezone-aware")
        return self

    def is_stale(self, max_age: timedelta = MARKET_DATA_MAX_AGE, now: datetime | None = None) -> bool:
        reference = now or datetime.now(timezone.utc)
        return reference - self.collected_at > max_age

    def market_position(self, price: Decimal) -> MarketPosition:
        """Bucket `price` against this snapshot's min / median / max."""
        if price <= self.min_price:
            return MarketPosition.LOWEST
        if price <= self.median_price * _BELOW_MARKET_RATIO:
            return MarketPosition.BELOW_MARKET
        if price <= self.median_price * _ABOVE_MARKET_RATIO:
            return MarketPosition.MARKET_RATE
        if price <= self.max_price:
            return MarketPosition.ABOVE_MARKET
        return MarketPosition.HIGHEST


class PriceElasticity(BaseModel):
    """Price elasticity of demand over a window.

    elasticity_score = %Δdemand / %Δprice (signed; usually negative).
    |score| > 1 is elastic, |score| < 1 inelastic.
    """

    model_config = ConfigDict(frozen=True)

    content_type: ContentType
    elasticity_score: float
    confidence_level: float = Field(ge=0.0, le=1.0)
    data_points: int = Field(default=0, ge=0)
    time_range: TimeRange | None = None


class CompetitorAnalysis(BaseModel):
    """Aggregated competitor pricing for a content type over a window.

    competitor_count is the number of distinct data sources that reported a
    snapshot inside the window.
    """

    model_config = ConfigDict(frozen=True)

    content_type: ContentType
    market_average_price: Decimal = Field(ge=0)
    competitor_count: int = Field(default=0, ge=0)
    time_range: TimeRange | None = None
