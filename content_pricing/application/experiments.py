"""Experiment lifecycle handler.

Orchestrates ExperimentService (pure) and ExperimentRepository (storage).
Every status change is a compare-and-set on the stored status, so concurrent
administrative calls cannot double-start or double-stop an experiment.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from content_pricing.domain.errors import (
    EventOutsideWindowError,
    ExperimentNotFound,
    ExperimentStateError,
    ExperimentValidationError,
)
from content_pricing.domain.models.enums import ContentType, ExperimentStatus
from content_pricing.domain.models.experiments import (
    ExperimentAssignment,
    ExperimentDesign,
    ExperimentEvent,
    ExperimentRecommendation,
    ExperimentResults,
    PricingExperiment,
    PricingVariant,
    VariantSignificance,
)
from content_pricing.domain.repositories.experiments import ExperimentRepository
from content_pricing.domain.services.experiments import ExperimentService

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ExperimentHandler:
    """Design, run, analyze and conclude pricing experiments."""

    def __init__(
        self,
        repository: ExperimentRepository,
        service: ExperimentService | None = None,
    ) -> None:
        self._repository = repository
        self._service = service or ExperimentService()

    # ------------------------------------------------------------------ #
    # Lifecycle                                                            #
    # ------------------------------------------------------------------ #

    async def design_experiment(self, design: ExperimentDesign) -> PricingExperiment:
        """Validate the design and persist it as a draft."""
        issues = self._service.validate_design(design)
        if issues:
            raise ExperimentValidationError(issues)
        experiment = await self._repository.create(PricingExperiment.from_design(design))
        logger.info(
            "Designed experiment %s (%s, %d variants)",
            experiment.experiment_id,
            experiment.name,
            len(experiment.variants),
        )
        return experiment

    async def start_experiment(
        self, experiment_id: UUID, now: datetime | None = None
    ) -> PricingExperiment:
        experiment = await self._get(experiment_id)
        if experiment.status != ExperimentStatus.DRAFT:
            raise ExperimentStateError(
                experiment_id, experiment.status.value, ExperimentStatus.RUNNING.value
            )
        issues = self._service.validate_design(experiment.to_design())
        if issues:
            raise ExperimentValidationError(issues, experiment_id)

        started_at = now or _now()
        end_time = (
            started_at + experiment.planned_duration
            if experiment.planned_duration is not None
            else None
        )
        started = experiment.model_copy(
            update={
                "status": ExperimentStatus.RUNNING,
                "start_time": started_at,
                "end_time": end_time,
            }
        )
        await self._transition(started, ExperimentStatus.DRAFT)
        logger.info("Started experiment %s at %s", experiment_id, started_at.isoformat())
        return started

    async def stop_experiment(
        self, experiment_id: UUID, now: datetime | None = None
    ) -> PricingExperiment:
        experiment = await self._get(experiment_id)
        if experiment.status != ExperimentStatus.RUNNING:
            raise ExperimentStateError(
                experiment_id, experiment.status.value, ExperimentStatus.STOPPED.value
            )
        stopped = experiment.model_copy(
            update={"status": ExperimentStatus.STOPPED, "end_time": now or _now()}
        )
        await self._transition(stopped, ExperimentStatus.RUNNING)
        logger.info("Stopped experiment %s", experiment_id)
        return stopped

    async def conclude_experiment(
        self, experiment_id: UUID, now: datetime | None = None
    ) -> ExperimentRecommendation:
        """Analyze a running experiment, store the outcome and mark it analyzed."""
        experiment = await self._get(experiment_id)
        if experiment.status != ExperimentStatus.RUNNING:
            raise ExperimentStateError(
                experiment_id, experiment.status.value, ExperimentStatus.ANALYZED.value
            )
        recommendation = await self._recommend(experiment)
        analyzed_at = now or _now()
        winner = next(
            (
                r
                for r in recommendation.results
                if r.variant_id == recommendation.winning_variant_id
            ),
            None,
        )
        results = ExperimentResults(
            winning_variant_id=recommendation.winning_variant_id,
            is_significant=winner is not None,
            p_value=winner.p_value if winner else None,
            effect_size=winner.effect_size if winner else None,
            relative_lift=winner.relative_lift if winner else None,
            recommendation="; ".join(recommendation.reasoning),
            analyzed_at=analyzed_at,
        )
        analyzed = experiment.model_copy(
            update={
                "status": ExperimentStatus.ANALYZED,
                "end_time": experiment.end_time or analyzed_at,
                "results": results,
            }
        )
        await self._transition(analyzed, ExperimentStatus.RUNNING)
        logger.info(
            "Concluded experiment %s: winner=%s",
            experiment_id,
            recommendation.winning_variant_name or "none",
        )
        return recommendation

    # ------------------------------------------------------------------ #
    # Assignment & events                                                  #
    # ------------------------------------------------------------------ #

    async def assign_client_to_variant(
        self, experiment_id: UUID, client_id: str
    ) -> ExperimentAssignment | None:
        """Stable variant for the client, or None when the client falls
        outside the enrolled traffic."""
        experiment = await self._get(experiment_id)
        return await self._assign(experiment, client_id)

    async def active_variant_for_client(
        self,
        client_id: str,
        content_type: ContentType,
        now: datetime | None = None,
    ) -> tuple[UUID, PricingVariant] | None:
        """(experiment_id, variant) of the first running experiment for the
        content type that enrolls the client, or None."""
        moment = now or _now()
        for experiment in await self._repository.list_running(content_type):
            if not experiment.is_active_at(moment):
                continue
            assignment = await self._assign(experiment, client_id)
            if assignment is None:
                continue
            variant = experiment.variant(assignment.variant_id)
            if variant is not None:
                return experiment.experiment_id, variant
        return None

    async def record_experiment_event(self, event: ExperimentEvent) -> ExperimentEvent:
        experiment = await self._get(event.experiment_id)
        if experiment.variant(event.variant_id) is None:
            raise ExperimentValidationError(
                [f"variant {event.variant_id} does not belong to the experiment"],
                event.experiment_id,
            )
        if not experiment.is_active_at(event.recorded_at):
            raise EventOutsideWindowError(event.experiment_id, event.recorded_at)
        return await self._repository.append_event(event)

    # ------------------------------------------------------------------ #
    # Analysis                                                             #
    # ------------------------------------------------------------------ #

    async def calculate_statistical_significance(
        self, experiment_id: UUID
    ) -> list[VariantSignificance]:
        experiment = await self._get(experiment_id)
        events = await self._repository.list_events(experiment_id)
        return self._service.calculate_significance(experiment, events)

    async def recommend_winning_variant(self, experiment_id: UUID) -> ExperimentRecommendation:
        return await self._recommend(await self._get(experiment_id))

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    async def _get(self, experiment_id: UUID) -> PricingExperiment:
        experiment = await self._repository.get_by_id(experiment_id)
        if experiment is None:
            raise ExperimentNotFound(experiment_id)
        return experiment

    async def _assign(
        self, experiment: PricingExperiment, client_id: str
    ) -> ExperimentAssignment | None:
        if experiment.status != ExperimentStatus.RUNNING:
            raise ExperimentStateError(
                experiment.experiment_id, experiment.status.value, "assign"
            )
        variant = self._service.choose_variant(experiment, client_id)
        if variant is None:
            return None
        return await self._repository.get_or_create_assignment(
            ExperimentAssignment(
                experiment_id=experiment.experiment_id,
                client_id=client_id,
                variant_id=variant.variant_id,
            )
        )

    async def _recommend(self, experiment: PricingExperiment) -> ExperimentRecommendation:
        events = await self._repository.list_events(experiment.experiment_id)
        results = self._service.calculate_significance(experiment, events)
        return self._service.recommend(experiment, results)

    async def _transition(self, target: PricingExperiment, expected: ExperimentStatus) -> None:
        if await self._repository.transition(target, expected):
            return
        current = await self._repository.get_by_id(target.experiment_id)
        raise ExperimentStateError(
            target.experiment_id,
            current.status.value if current else "missing",
            target.status.value,
        )
