"""ORM model registry — imports all layer modules so every mapper class is
registered with Base.metadata before Alembic or SQLAlchemy runs.

Experiments are imported first: price_quotes references pricing_experiments
and pricing_variants.
"""

from content_pricing.infrastructure.persistence.models.experiments import (
    ExperimentAssignment,
    ExperimentEvent,
    PricingExperiment,
    PricingVariant,
)
from content_pricing.infrastructure.persistence.models.pricing import (
    ClientPricingProfile,
    MarketData,
    PriceQuote,
    PricingModel,
)

__all__ = [
    # Pricing
    "PricingModel",
    "MarketData",
    "ClientPricingProfile",
    "PriceQuote",
    # Experiments
    "PricingExperiment",
    "PricingVariant",
    "ExperimentAssignment",
    "ExperimentEvent",
]
