"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .catalog import (
    AdjustmentCatalog,
    CapacityPolicy,
    RequirementsPolicy,
    SurgePolicy,
    ThresholdTier,
    TimingPolicy,
    WordCountPolicy,
)
from .clients import ClientPricingProfile
from .enums import (
    AdjustmentType,
    BusinessObjective,
    ClientTier,
    ComplexityLevel,
    ContentType,
    DemandLevel,
    EventType,
    ExperimentStatus,
    MarketPosition,
    MetricKind,
    PaymentTerms,
    PriceStage,
    PricingUnit,
    QuoteStatus,
    ResearchDepth,
    RiskLevel,
    TargetMetric,
    TechnicalLevel,
    TrendDirection,
)
from .experiments import (
    PRICE_MULTIPLIER,
    PRICE_OFFSET,
    VARIANT_PARAMETERS,
    ExperimentAssignment,
    ExperimentDesign,
    ExperimentEvent,
    ExperimentRecommendation,
    ExperimentResults,
    PricingExperiment,
    PricingVariant,
    VariantSignificance,
)
from .market_data import (
    MARKET_DATA_MAX_AGE,
    CompetitorAnalysis,
    MarketData,
    PriceElasticity,
    TimeRange,
)
from .optimization import PriceConstraints, PriceOptimizationRequest, PriceOptimizationResult
from .pricing import (
    ContentSpecification,
    PriceAdjustment,
    PriceCalculation,
    PriceOperation,
    PriceQuote,
    PriceRequest,
    PricingModel,
    PricingSnapshot,
)

__all__ = [
    # enums
    "AdjustmentType",
    "BusinessObjective",
    "ClientTier",
    "ComplexityLevel",
    "ContentType",
    "DemandLevel",
    "EventType",
    "ExperimentStatus",
    "MarketPosition",
    "MetricKind",
    "PaymentTerms",
    "PriceStage",
    "PricingUnit",
    "QuoteStatus",
    "ResearchDepth",
    "RiskLevel",
    "TargetMetric",
    "TechnicalLevel",
    "TrendDirection",
    # catalog
    "AdjustmentCatalog",
    "CapacityPolicy",
    "RequirementsPolicy",
    "SurgePolicy",
    "ThresholdTier",
    "TimingPolicy",
    "WordCountPolicy",
    # clients
    "ClientPricingProfile",
    # market data
    "MARKET_DATA_MAX_AGE",
    "CompetitorAnalysis",
    "MarketData",
    "PriceElasticity",
    "TimeRange",
    # pricing
    "ContentSpecification",
    "PriceAdjustment",
    "PriceCalculation",
    "PriceOperation",
    "PriceQuote",
    "PriceRequest",
    "PricingModel",
    "PricingSnapshot",
    # optimization
    "PriceConstraints",
    "PriceOptimizationRequest",
    "PriceOptimizationResult",
    # experiments
    "PRICE_MULTIPLIER",
    "PRICE_OFFSET",
    "VARIANT_PARAMETERS",
    "ExperimentAssignment",
    "ExperimentDesign",
    "ExperimentEvent",
    "ExperimentRecommendation",
    "ExperimentResults",
    "PricingExperiment",
    "PricingVariant",
    "VariantSignificance",
]
