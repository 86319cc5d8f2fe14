"""Persistence package.

Importing this package registers every ORM mapper with Base.metadata
(required for Alembic and SQLAlchemy mapper configuration) and exports all
repository implementations and the DI factory.
"""

from content_pricing.infrastructure.persistence.models import *  # noqa: F401, F403
from content_pricing.infrastructure.persistence.models import __all__ as _orm_all
from content_pricing.infrastructure.persistence.repositories import (
    Repositories,
    SqlClientProfileRepository,
    SqlExperimentRepository,
    SqlMarketDataRepository,
    SqlPricingModelRepository,
    SqlQuoteRepository,
    get_repositories,
)

__all__ = _orm_all + [
    "Repositories",
    "SqlPricingModelRepository",
    "SqlMarketDataRepository",
    "SqlClientProfileRepository",
    "SqlQuoteRepository",
    "SqlExperimentRepository",
    "get_repositories",
]
