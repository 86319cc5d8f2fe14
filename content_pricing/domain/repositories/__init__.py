"""Domain repository interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in content_pricing/infrastructure/persistence/
and are wired at the application boundary via dependency injection.

Import from this package rather than individual modules to avoid coupling
handlers to specific repository module paths.
"""

from .base import Repository
from .clients import ClientProfileRepository
from .experiments import ExperimentRepository
from .market_data import MarketDataRepository
from .pricing_models import PricingModelRepository
from .quotes import QuoteRepository

__all__ = [
    "Repository",
    "PricingModelRepository",
    "MarketDataRepository",
    "ClientProfileRepository",
    "QuoteRepository",
    "ExperimentRepository",
]
