"""Adjustment catalog — versioned lookup tables for the pricing pipeline.

The catalog maps every discrete factor level to its price effect.  It is
configuration data injected into PricingService, never a module constant
baked into the calculation, so a catalog change is a new catalog version
rather than a redeploy.

Every enum-keyed table must cover every member of its enum; a missing key
is rejected at construction instead of silently meaning "no adjustment".
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import (
    ClientTier,
    ComplexityLevel,
    ContentType,
    DemandLevel,
    MarketPosition,
    PaymentTerms,
    ResearchDepth,
    RiskLevel,
    TechnicalLevel,
    TrendDirection,
)


class ThresholdTier(BaseModel):
    """One step of a threshold table: applies when the input is above/below bound."""

    model_config = ConfigDict(frozen=True)

    bound: float
    factor: Decimal = Field(gt=0)


class SurgePolicy(BaseModel):
    """Urgency tiers keyed on delivery_time / standard_time.

    tiers are checked in order; the first tier whose bound is strictly
    below the ratio applies.  fallback applies when no tier matches.
    """

    model_config = ConfigDict(frozen=True)

    tiers: list[ThresholdTier] = Field(
        default_factory=lambda: [
            ThresholdTier(bound=0.75, factor=Decimal("1.0")),
            ThresholdTier(bound=0.5, factor=Decimal("1.2")),
            ThresholdTier(bound=0.25, factor=Decimal("1.5")),
        ]
    )
    fallback: Decimal = Field(default=Decimal("2.0"), gt=0)

    def factor_for(self, ratio: float) -> Decimal:
        if ratio >= 1.0:
            return Decimal("1.0")
        for tier in self.tiers:
            if ratio > tier.bound:
                return tier.factor
        return self.fallback


class CapacityPolicy(BaseModel):
    """System-load tiers: the first tier whose bound is strictly above the load applies."""

    model_config = ConfigDict(frozen=True)

    tiers: list[ThresholdTier] = Field(
        default_factory=lambda: [
            ThresholdTier(bound=0.5, factor=Decimal("0.95")),
            ThresholdTier(bound=0.7, factor=Decimal("1.0")),
            ThresholdTier(bound=0.85, factor=Decimal("1.10")),
        ]
    )
    fallback: Decimal = Field(default=Decimal("1.25"), gt=0)

    def factor_for(self, load: float) -> Decimal:
        for tier in self.tiers:
            if load < tier.bound:
                return tier.factor
        return self.fallback


class TimingPolicy(BaseModel):
    """Weekend / off-hours / holiday premiums; they stack multiplicatively.

    Off-hours means hour < business_start_hour or hour > business_end_hour.
    holidays are (month, day) pairs recognized every year.
    """

    model_config = ConfigDict(frozen=True)

    weekend_factor: Decimal = Field(default=Decimal("1.15"), gt=0)
    off_hours_factor: Decimal = Field(default=Decimal("1.10"), gt=0)
    holiday_factor: Decimal = Field(default=Decimal("1.20"), gt=0)
    business_start_hour: int = Field(default=9, ge=0, le=23)
    business_end_hour: int = Field(default=18, ge=0, le=23)
    holidays: list[tuple[int, int]] = Field(
        default_factory=lambda: [(1, 1), (7, 4), (12, 25)]
    )


class WordCountPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    baseline_words: int = Field(default=1000, gt=0)
    step_words: int = Field(default=1000, gt=0)
    step_increment: Decimal = Field(default=Decimal("0.10"), ge=0)


class RequirementsPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    included: int = Field(default=3, ge=0)
    surcharge_rate: Decimal = Field(default=Decimal("0.10"), ge=0)  # of base price, per extra


def _decimals(values: dict[Enum, str]) -> dict:
    return {key: Decimal(value) for key, value in values.items()}


class AdjustmentCatalog(BaseModel):
    """Typed, versioned lookup tables consumed by PricingService.

    Use default() for the stock tables; override individual tables with
    model_copy(update=...) and bump version when publishing a change.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    complexity_level: dict[ComplexityLevel, Decimal]
    research_depth: dict[ResearchDepth, Decimal]
    technical_level: dict[TechnicalLevel, Decimal]
    demand_level: dict[DemandLevel, Decimal]
    market_position: dict[MarketPosition, Decimal]
    trend_direction: dict[TrendDirection, Decimal]
    client_tier: dict[ClientTier, Decimal]
    risk_level: dict[RiskLevel, Decimal]
    payment_terms: dict[PaymentTerms, Decimal]
    realtime_demand: dict[DemandLevel, Decimal]
    standard_delivery: dict[ContentType, timedelta]
    word_count: WordCountPolicy = Field(default_factory=WordCountPolicy)
    requirements: RequirementsPolicy = Field(default_factory=RequirementsPolicy)
    surge: SurgePolicy = Field(default_factory=SurgePolicy)
    capacity: CapacityPolicy = Field(default_factory=CapacityPolicy)
    timing: TimingPolicy = Field(default_factory=TimingPolicy)
    default_confidence: float = Field(default=0.85, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _tables_complete(self) -> AdjustmentCatalog:
        tables: dict[str, tuple[type[Enum], dict]] = {
            "complexity_level": (ComplexityLevel, self.complexity_level),
            "research_depth": (ResearchDepth, self.research_depth),
            "technical_level": (TechnicalLevel, self.technical_level),
            "demand_level": (DemandLevel, self.demand_level),
            "market_position": (MarketPosition, self.market_position),
            "trend_direction": (TrendDirection, self.trend_direction),
            "client_tier": (ClientTier, self.client_tier),
            "risk_level": (RiskLevel, self.risk_level),
            "payment_terms": (PaymentTerms, self.payment_terms),
            "realtime_demand": (DemandLevel, self.realtime_demand),
            "standard_delivery": (ContentType, self.standard_delivery),
        }
        for name, (enum_cls, table) in tables.items():
            missing = [member.value for member in enum_cls if member not in table]
            if missing:
                raise ValueError(f"catalog table {name!r} is missing entries for {missing}")
        for level, delivery in self.standard_delivery.items():
            if delivery <= timedelta(0):
                raise ValueError(f"standard delivery time for {level.value} must be positive")
        return self

    @classmethod
    def default(cls) -> AdjustmentCatalog:
        """Stock catalog (version 2024.1)."""
        demand = _decimals(
            {
                DemandLevel.VERY_LOW: "0.9",
                DemandLevel.LOW: "0.95",
                DemandLevel.MEDIUM: "1.0",
                DemandLevel.HIGH: "1.1",
                DemandLevel.VERY_HIGH: "1.25",
            }
        )
        return cls(
            version="2024.1",
            complexity_level=_decimals(
                {
                    ComplexityLevel.BASIC: "1.0",
                    ComplexityLevel.INTERMEDIATE: "1.2",
                    ComplexityLevel.ADVANCED: "1.5",
                    ComplexityLevel.EXPERT: "2.0",
                }
            ),
            research_depth=_decimals(
                {
                    ResearchDepth.MINIMAL: "1.0",
                    ResearchDepth.BASIC: "1.1",
                    ResearchDepth.THOROUGH: "1.3",
                    ResearchDepth.EXTENSIVE: "1.6",
                    ResearchDepth.COMPREHENSIVE: "2.0",
                }
            ),
            technical_level=_decimals(
                {
                    TechnicalLevel.GENERAL: "1.0",
                    TechnicalLevel.TECHNICAL: "1.3",
                    TechnicalLevel.SPECIALIZED: "1.7",
                    TechnicalLevel.EXPERT: "2.2",
                }
            ),
            demand_level=demand,
            market_position=_decimals(
                {
                    MarketPosition.LOWEST: "1.0",
                    MarketPosition.BELOW_MARKET: "1.05",
                    MarketPosition.MARKET_RATE: "1.0",
                    MarketPosition.ABOVE_MARKET: "0.95",
                    MarketPosition.HIGHEST: "0.9",
                }
            ),
            trend_direction=_decimals(
                {
                    TrendDirection.DOWN: "0.95",
                    TrendDirection.STABLE: "1.0",
                    TrendDirection.UP: "1.05",
                    TrendDirection.VOLATILE: "1.0",
                }
            ),
            client_tier=_decimals(
                {
                    ClientTier.BASIC: "1.0",
                    ClientTier.PREMIUM: "0.95",
                    ClientTier.ENTERPRISE: "0.9",
                    ClientTier.VIP: "0.85",
                }
            ),
            risk_level=_decimals(
                {
                    RiskLevel.LOW: "0.98",
                    RiskLevel.MEDIUM: "1.0",
                    RiskLevel.HIGH: "1.05",
                    RiskLevel.CRITICAL: "1.15",
                }
            ),
            payment_terms=_decimals(
                {
                    PaymentTerms.IMMEDIATE: "0.98",
                    PaymentTerms.NET_15: "1.0",
                    PaymentTerms.NET_30: "1.02",
                    PaymentTerms.NET_60: "1.05",
                    PaymentTerms.CUSTOM: "1.0",
                }
            ),
            realtime_demand=dict(demand),
            standard_delivery={
                ContentType.BLOG_POST: timedelta(hours=24),
                ContentType.SOCIAL_POST: timedelta(hours=4),
                ContentType.EMAIL_NEWSLETTER: timedelta(hours=24),
                ContentType.WEBSITE_COPY: timedelta(hours=12),
                ContentType.TECHNICAL_ARTICLE: timedelta(hours=48),
                ContentType.PRODUCT_DESCRIPTION: timedelta(hours=12),
                ContentType.PRESS_RELEASE: timedelta(hours=24),
            },
        )
