"""SQLAlchemy implementation of ClientProfileRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from content_pricing.domain.models.clients import ClientPricingProfile as DomainProfile
from content_pricing.domain.models.enums import ClientTier, PaymentTerms, RiskLevel
from content_pricing.domain.repositories.clients import ClientProfileRepository
from content_pricing.infrastructure.persistence.models.pricing import (
    ClientPricingProfile as OrmProfile,
)


class SqlClientProfileRepository(ClientProfileRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _to_domain(row: OrmProfile) -> DomainProfile:
        return DomainProfile(
            profile_id=row.profile_id,
            client_id=row.client_id,
            tier=ClientTier(row.tier),
            risk_level=RiskLevel(row.risk_level),
            payment_terms=PaymentTerms(row.payment_terms),
            loyalty_discount_pct=row.loyalty_discount_pct,
            credit_limit=row.credit_limit,
            updated_at=row.updated_at,
        )

    async def get_by_client(self, client_id: str) -> DomainProfile | None:
        stmt = select(OrmProfile).where(OrmProfile.client_id == client_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row else None

    async def upsert(self, profile: DomainProfile) -> DomainProfile:
        stmt = pg_insert(OrmProfile).values(
            profile_id=profile.profile_id,
            client_id=profile.client_id,
            tier=profile.tier.value,
            risk_level=profile.risk_level.value,
            payment_terms=profile.payment_terms.value,
            loyalty_discount_pct=profile.loyalty_discount_pct,
            credit_limit=profile.credit_limit,
            updated_at=profile.updated_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["client_id"],
            set_={
                "tier": stmt.excluded.tier,
                "risk_level": stmt.excluded.risk_level,
                "payment_terms": stmt.excluded.payment_terms,
                "loyalty_discount_pct": stmt.excluded.loyalty_discount_pct,
                "credit_limit": stmt.excluded.credit_limit,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(OrmProfile.profile_id)
        result = await self._session.execute(stmt)
        # an existing row keeps its original profile_id
        return profile.model_copy(update={"profile_id": result.scalar_one()})
