"""Domain services package."""

from .elasticity import ElasticityEstimator, QuoteOutcome
from .experiments import ExperimentService, assignment_bucket
from .optimization import PriceOptimizationService
from .pricing import PricingService, fold_price, quantize_price

__all__ = [
    "ElasticityEstimator",
    "ExperimentService",
    "PriceOptimizationService",
    "PricingService",
    "QuoteOutcome",
    "assignment_bucket",
    "fold_price",
    "quantize_price",
]
