"""SQLAlchemy implementation of PricingModelRepository."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from content_pricing.domain.models.enums import ContentType, PricingUnit
from content_pricing.domain.models.pricing import PricingModel as DomainPricingModel
from content_pricing.domain.repositories.pricing_models import PricingModelRepository
from content_pricing.infrastructure.persistence.models.pricing import (
    PricingModel as OrmPricingModel,
)


def _to_domain(row: OrmPricingModel) -> DomainPricingModel:
    return DomainPricingModel(
        pricing_model_id=row.pricing_model_id,
        name=row.name,
        content_type=ContentType(row.content_type),
        base_price=row.base_price,
        currency=row.currency,
        pricing_unit=PricingUnit(row.pricing_unit),
        default_word_count=row.default_word_count,
        complexity_rules=row.complexity_rules or {},
        catalog_version=row.catalog_version,
        version=row.version,
        is_active=row.is_active,
        created_at=row.created_at,
    )


def _to_orm(entity: DomainPricingModel) -> OrmPricingModel:
    return OrmPricingModel(
        pricing_model_id=entity.pricing_model_id,
        name=entity.name,
        content_type=entity.content_type.value,
        base_price=entity.base_price,
        currency=entity.currency,
        pricing_unit=entity.pricing_unit.value,
        default_word_count=entity.default_word_count,
        complexity_rules=entity.complexity_rules,
        catalog_version=entity.catalog_version,
        version=entity.version,
        is_active=entity.is_active,
        created_at=entity.created_at,
    )


class SqlPricingModelRepository(PricingModelRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, pricing_model_id: UUID) -> DomainPricingModel | None:
        row = await self._session.get(OrmPricingModel, pricing_model_id)
        return _to_domain(row) if row else None

    async def get_active_by_content_type(
        self, content_type: ContentType
    ) -> DomainPricingModel | None:
        stmt = select(OrmPricingModel).where(
            OrmPricingModel.content_type == content_type.value,
            OrmPricingModel.is_active.is_(True),
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_domain(row) if row else None

    async def list(
        self,
        content_type: ContentType | None = None,
        active_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> list[DomainPricingModel]:
        stmt = (
            select(OrmPricingModel)
            .order_by(OrmPricingModel.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        if content_type is not None:
            stmt = stmt.where(OrmPricingModel.content_type == content_type.value)
        if active_only:
            stmt = stmt.where(OrmPricingModel.is_active.is_(True))
        result = await self._session.execute(stmt)
        return [_to_domain(row) for row in result.scalars().all()]

    async def create(self, entity: DomainPricingModel) -> DomainPricingModel:
        self._session.add(_to_orm(entity))
        return entity

    async def supersede(
        self, current: DomainPricingModel, successor: DomainPricingModel
    ) -> DomainPricingModel:
        # deactivate first: the partial unique index allows one active row per type
        await self._session.execute(
            update(OrmPricingModel)
            .where(OrmPricingModel.pricing_model_id == current.pricing_model_id)
            .values(is_active=False)
        )
        self._session.add(_to_orm(successor))
        await self._session.flush()
        return successor

    async def update(self, entity: DomainPricingModel) -> DomainPricingModel:
        raise NotImplementedError("PricingModels are immutable per version; use supersede()")

    async def delete(self, id: UUID) -> None:
        raise NotImplementedError("PricingModels are immutable per version; use supersede()")
