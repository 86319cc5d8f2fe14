"""SQLAlchemy implementation of ExperimentRepository."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from content_pricing.domain.models.enums import (
    ContentType,
    EventType,
    ExperimentStatus,
    TargetMetric,
)
from content_pricing.domain.models.experiments import (
    ExperimentAssignment as DomainAssignment,
    ExperimentEvent as DomainEvent,
    ExperimentResults,
    PricingExperiment as DomainExperiment,
    PricingVariant as DomainVariant,
)
from content_pricing.domain.repositories.experiments import ExperimentRepository
from content_pricing.infrastructure.persistence.models.experiments import (
    ExperimentAssignment as OrmAssignment,
    ExperimentEvent as OrmEvent,
    PricingExperiment as OrmExperiment,
    PricingVariant as OrmVariant,
)


def _variant_to_domain(row: OrmVariant) -> DomainVariant:
    return DomainVariant(
        variant_id=row.variant_id,
        name=row.name,
        is_control=row.is_control,
        traffic_share=row.traffic_share,
        parameters={key: Decimal(value) for key, value in (row.parameters or {}).items()},
        description=row.description,
    )


def _experiment_to_domain(row: OrmExperiment) -> DomainExperiment:
    return DomainExperiment(
        experiment_id=row.experiment_id,
        name=row.name,
        hypothesis=row.hypothesis,
        description=row.description,
        content_type=ContentType(row.content_type),
        target_metric=TargetMetric(row.target_metric),
        variants=[_variant_to_domain(v) for v in row.variants],
        status=ExperimentStatus(row.status),
        required_sample_size=row.required_sample_size,
        significance_level=row.significance_level,
        planned_duration=row.planned_duration,
        start_time=row.start_time,
        end_time=row.end_time,
        results=ExperimentResults.model_validate(row.results) if row.results else None,
        created_at=row.created_at,
    )


def _assignment_to_domain(row: OrmAssignment) -> DomainAssignment:
    return DomainAssignment(
        experiment_id=row.experiment_id,
        client_id=row.client_id,
        variant_id=row.variant_id,
        assigned_at=row.assigned_at,
    )


def _event_to_domain(row: OrmEvent) -> DomainEvent:
    return DomainEvent(
        event_id=row.event_id,
        experiment_id=row.experiment_id,
        variant_id=row.variant_id,
        client_id=row.client_id,
        event_type=EventType(row.event_type),
        value=row.value,
        recorded_at=row.recorded_at,
    )


class SqlExperimentRepository(ExperimentRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, experiment_id: UUID) -> DomainExperiment | None:
        stmt = (
            select(OrmExperiment)
            .options(selectinload(OrmExperiment.variants))
            .where(OrmExperiment.experiment_id == experiment_id)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _experiment_to_domain(row) if row else None

    async def list(
        self,
        status: ExperimentStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[DomainExperiment]:
        stmt = (
            select(OrmExperiment)
            .options(selectinload(OrmExperiment.variants))
            .order_by(OrmExperiment.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        if status is not None:
            stmt = stmt.where(OrmExperiment.status == status.value)
        result = await self._session.execute(stmt)
        return [_experiment_to_domain(row) for row in result.scalars().all()]

    async def list_running(self, content_type: ContentType) -> list[DomainExperiment]:
        stmt = (
            select(OrmExperiment)
            .options(selectinload(OrmExperiment.variants))
            .where(
                OrmExperiment.content_type == content_type.value,
                OrmExperiment.status == ExperimentStatus.RUNNING.value,
            )
            .order_by(OrmExperiment.start_time)
        )
        result = await self._session.execute(stmt)
        return [_experiment_to_domain(row) for row in result.scalars().all()]

    async def create(self, entity: DomainExperiment) -> DomainExperiment:
        self._session.add(
            OrmExperiment(
                experiment_id=entity.experiment_id,
                name=entity.name,
                hypothesis=entity.hypothesis,
                description=entity.description,
                content_type=entity.content_type.value,
                target_metric=entity.target_metric.value,
                status=entity.status.value,
                required_sample_size=entity.required_sample_size,
                significance_level=entity.significance_level,
                planned_duration=entity.planned_duration,
                start_time=entity.start_time,
                end_time=entity.end_time,
                results=entity.results.model_dump(mode="json") if entity.results else None,
                created_at=entity.created_at,
            )
        )
        self._session.add_all(
            [
                OrmVariant(
                    variant_id=v.variant_id,
                    experiment_id=entity.experiment_id,
                    position=position,
                    name=v.name,
                    is_control=v.is_control,
                    traffic_share=v.traffic_share,
                    parameters={key: str(value) for key, value in v.parameters.items()},
                    description=v.description,
                )
                for position, v in enumerate(entity.variants)
            ]
        )
        await self._session.flush()
        return entity

    async def transition(self, target: DomainExperiment, expected: ExperimentStatus) -> bool:
        stmt = (
            update(OrmExperiment)
            .where(
                OrmExperiment.experiment_id == target.experiment_id,
                OrmExperiment.status == expected.value,
            )
            .values(
                status=target.status.value,
                start_time=target.start_time,
                end_time=target.end_time,
                results=target.results.model_dump(mode="json") if target.results else None,
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def update(self, entity: DomainExperiment) -> DomainExperiment:
        raise NotImplementedError("PricingExperiments change only through transition()")

    async def delete(self, id: UUID) -> None:
        raise NotImplementedError("PricingExperiments are retained for audit")

    # ------------------------------------------------------------------ #
    # Assignments                                                          #
    # ------------------------------------------------------------------ #

    async def get_or_create_assignment(self, assignment: DomainAssignment) -> DomainAssignment:
        stmt = (
            pg_insert(OrmAssignment)
            .values(
                experiment_id=assignment.experiment_id,
                client_id=assignment.client_id,
                variant_id=assignment.variant_id,
                assigned_at=assignment.assigned_at,
            )
            .on_conflict_do_nothing(index_elements=["experiment_id", "client_id"])
        )
        await self._session.execute(stmt)
        stored = await self.get_assignment(assignment.experiment_id, assignment.client_id)
        return stored if stored is not None else assignment

    async def get_assignment(self, experiment_id: UUID, client_id: str) -> DomainAssignment | None:
        stmt = select(OrmAssignment).where(
            OrmAssignment.experiment_id == experiment_id,
            OrmAssignment.client_id == client_id,
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _assignment_to_domain(row) if row else None

    # ------------------------------------------------------------------ #
    # Events                                                               #
    # ------------------------------------------------------------------ #

    async def append_event(self, event: DomainEvent) -> DomainEvent:
        self._session.add(
            OrmEvent(
                event_id=event.event_id,
                experiment_id=event.experiment_id,
                variant_id=event.variant_id,
                client_id=event.client_id,
                event_type=event.event_type.value,
                value=event.value,
                recorded_at=event.recorded_at,
            )
        )
        return event

    async def list_events(
        self, experiment_id: UUID, variant_id: UUID | None = None
    ) -> list[DomainEvent]:
        stmt = (
            select(OrmEvent)
            .where(OrmEvent.experiment_id == experiment_id)
            .order_by(OrmEvent.recorded_at)
        )
        if variant_id is not None:
            stmt = stmt.where(OrmEvent.variant_id == variant_id)
        result = await self._session.execute(stmt)
        return [_event_to_domain(row) for row in result.scalars().all()]
