"""Concrete SQLAlchemy repository implementations.

Exports all SqlRepository classes and the get_repositories() factory function
for wiring at the application boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .clients import SqlClientProfileRepository
from .experiments import SqlExperimentRepository
from .market_data import SqlMarketDataRepository
from .pricing_models import SqlPricingModelRepository
from .quotes import SqlQuoteRepository


@dataclass
class Repositories:
    """All repository instances bound to a single AsyncSession."""

    pricing_models: SqlPricingModelRepository
    market_data: SqlMarketDataRepository
    client_profiles: SqlClientProfileRepository
    quotes: SqlQuoteRepository
    experiments: SqlExperimentRepository


def get_repositories(session: AsyncSession) -> Repositories:
    """Construct all repositories bound to the given session.

        async with AsyncSessionLocal() as session, session.begin():
            repos = get_repositories(session)
            handler = PriceCalculationHandler(
                repos.pricing_models, repos.market_data,
                repos.client_profiles, repos.quotes,
                ExperimentHandler(repos.experiments),
            )
    """
    return Repositories(
        pricing_models=SqlPricingModelRepository(session),
        market_data=SqlMarketDataRepository(session),
        client_profiles=SqlClientProfileRepository(session),
        quotes=SqlQuoteRepository(session),
        experiments=SqlExperimentRepository(session),
    )


__all__ = [
    "SqlPricingModelRepository",
    "SqlMarketDataRepository",
    "SqlClientProfileRepository",
    "SqlQuoteRepository",
    "SqlExperimentRepository",
    "Repositories",
    "get_repositories",
]
