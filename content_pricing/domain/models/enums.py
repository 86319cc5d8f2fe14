"""Domain enumerations for the content pricing engine.

All string-valued enums use str mixin so they serialize cleanly to JSON
and remain comparable to plain strings (Pydantic default behaviour).
"""

from enum import Enum


class ContentType(str, Enum):
    BLOG_POST = "BlogPost"
    SOCIAL_POST = "SocialPost"
    EMAIL_NEWSLETTER = "EmailNewsletter"
    WEBSITE_COPY = "WebsiteCopy"
    TECHNICAL_ARTICLE = "TechnicalArticle"
    PRODUCT_DESCRIPTION = "ProductDescription"
    PRESS_RELEASE = "PressRelease"


class PricingUnit(str, Enum):
    """How a pricing model's base price scales with the request."""

    PER_WORD = "per_word"
    PER_ITEM = "per_item"


class ComplexityLevel(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class ResearchDepth(str, Enum):
    MINIMAL = "minimal"
    BASIC = "basic"
    THOROUGH = "thorough"
    EXTENSIVE = "extensive"
    COMPREHENSIVE = "comprehensive"


class TechnicalLevel(str, Enum):
    GENERAL = "general"
    TECHNICAL = "technical"
    SPECIALIZED = "specialized"
    EXPERT = "expert"


class ClientTier(str, Enum):
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"
    VIP = "vip"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class PaymentTerms(str, Enum):
    IMMEDIATE = "immediate"
    NET_15 = "net_15"
    NET_30 = "net_30"
    NET_60 = "net_60"
    CUSTOM = "custom"


class DemandLevel(str, Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class TrendDirection(str, Enum):
    DOWN = "down"
    STABLE = "stable"
    UP = "up"
    VOLATILE = "volatile"


class MarketPosition(str, Enum):
    """Bucketed comparison of a price against the market median."""

    LOWEST = "lowest"
    BELOW_MARKET = "below_market"
    MARKET_RATE = "market_rate"
    ABOVE_MARKET = "above_market"
    HIGHEST = "highest"


class AdjustmentType(str, Enum):
    COMPLEXITY = "complexity"
    MARKET = "market"
    CLIENT = "client"
    EXPERIMENT = "experiment"


class PriceStage(str, Enum):
    """Stage of the pricing fold that produced a PriceOperation."""

    COMPLEXITY = "complexity"
    MARKET = "market"
    CLIENT = "client"
    EXPERIMENT = "experiment"
    SURGE = "surge"
    DEMAND = "demand"
    CAPACITY = "capacity"
    TIMING = "timing"


class QuoteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self != QuoteStatus.PENDING


class BusinessObjective(str, Enum):
    REVENUE = "revenue"
    CONVERSION = "conversion"
    MARKET_SHARE = "market_share"


class ExperimentStatus(str, Enum):
    DRAFT = "draft"
    RUNNING = "running"
    STOPPED = "stopped"
    ANALYZED = "analyzed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExperimentStatus.STOPPED, ExperimentStatus.ANALYZED)


class MetricKind(str, Enum):
    """Which significance test a target metric calls for."""

    PROPORTION = "proportion"
    MEAN = "mean"


class TargetMetric(str, Enum):
    CONVERSION_RATE = "conversion_rate"
    AVERAGE_ORDER_VALUE = "average_order_value"
    AVERAGE_QUOTED_PRICE = "average_quoted_price"

    @property
    def kind(self) -> MetricKind:
        return {
            TargetMetric.CONVERSION_RATE: MetricKind.PROPORTION,
            TargetMetric.AVERAGE_ORDER_VALUE: MetricKind.MEAN,
            TargetMetric.AVERAGE_QUOTED_PRICE: MetricKind.MEAN,
        }[self]


class EventType(str, Enum):
    IMPRESSION = "impression"
    CONVERSION = "conversion"
    REJECTION = "rejection"
