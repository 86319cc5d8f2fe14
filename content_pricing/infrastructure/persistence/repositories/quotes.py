"""SQLAlchemy implementation of QuoteRepository."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from content_pricing.domain.models.enums import ContentType, QuoteStatus
from content_pricing.domain.models.pricing import PriceAdjustment
from content_pricing.domain.models.pricing import PriceQuote as DomainQuote
from content_pricing.domain.repositories.quotes import QuoteRepository
from content_pricing.infrastructure.persistence.models.pricing import PriceQuote as OrmQuote


def _to_domain(row: OrmQuote) -> DomainQuote:
    return DomainQuote(
        quote_id=row.quote_id,
        project_id=row.project_id,
        client_id=row.client_id,
        content_type=ContentType(row.content_type),
        pricing_model_id=row.pricing_model_id,
        base_price=row.base_price,
        final_price=row.final_price,
        currency=row.currency,
        adjustments=[PriceAdjustment.model_validate(a) for a in row.adjustments or []],
        experiment_id=row.experiment_id,
        variant_id=row.variant_id,
        valid_until=row.valid_until,
        status=QuoteStatus(row.status),
        created_at=row.created_at,
        decided_at=row.decided_at,
    )


class SqlQuoteRepository(QuoteRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, quote_id: UUID) -> DomainQuote | None:
        stmt = select(OrmQuote).where(OrmQuote.quote_id == quote_id)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_domain(row) if row else None

    async def list(
        self,
        client_id: str | None = None,
        status: QuoteStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[DomainQuote]:
        stmt = select(OrmQuote).order_by(OrmQuote.created_at.desc()).limit(limit).offset(offset)
        if client_id is not None:
            stmt = stmt.where(OrmQuote.client_id == client_id)
        if status is not None:
            stmt = stmt.where(OrmQuote.status == status.value)
        result = await self._session.execute(stmt)
        return [_to_domain(row) for row in result.scalars().all()]

    async def create(self, entity: DomainQuote) -> DomainQuote:
        self._session.add(
            OrmQuote(
                quote_id=entity.quote_id,
                project_id=entity.project_id,
                client_id=entity.client_id,
                content_type=entity.content_type.value,
                pricing_model_id=entity.pricing_model_id,
                base_price=entity.base_price,
                final_price=entity.final_price,
                currency=entity.currency,
                adjustments=[a.model_dump(mode="json") for a in entity.adjustments],
                experiment_id=entity.experiment_id,
                variant_id=entity.variant_id,
                valid_until=entity.valid_until,
                status=entity.status.value,
                created_at=entity.created_at,
                decided_at=entity.decided_at,
            )
        )
        await self._session.flush()
        return entity

    async def transition(self, decided: DomainQuote, expected: QuoteStatus) -> bool:
        stmt = (
            update(OrmQuote)
            .where(OrmQuote.quote_id == decided.quote_id, OrmQuote.status == expected.value)
            .values(status=decided.status.value, decided_at=decided.decided_at)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def update(self, entity: DomainQuote) -> DomainQuote:
        raise NotImplementedError("PriceQuotes change only through transition()")

    async def delete(self, id: UUID) -> None:
        raise NotImplementedError("PriceQuotes are retained for audit")
