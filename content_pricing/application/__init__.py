"""Application handlers: async orchestration over domain services and repositories."""

from .config import HandlerConfig
from .experiments import ExperimentHandler
from .optimization import PriceOptimizationHandler
from .pricing import PriceCalculationHandler

__all__ = [
    "HandlerConfig",
    "ExperimentHandler",
    "PriceCalculationHandler",
    "PriceOptimizationHandler",
]
