"""Pricing experiment repository interface."""

from __future__ import annotations

from abc import abstractmethod
from uuid import UUID

from content_pricing.domain.models.enums import ContentType, ExperimentStatus
from content_pricing.domain.models.experiments import (
    ExperimentAssignment,
    ExperimentEvent,
    PricingExperiment,
)

from .base import Repository


class ExperimentRepository(Repository[PricingExperiment]):
    """Read/write interface for PricingExperiment aggregates and their
    assignments and events.

    create() persists the experiment and its variants atomically.
    Lifecycle changes go through transition() (compare-and-set on status).
    Assignments are get-or-create on the (experiment_id, client_id) key.
    Events are append-only.
    """

    async def get(self, id: UUID) -> PricingExperiment | None:
        return await self.get_by_id(id)

    @abstractmethod
    async def get_by_id(self, experiment_id: UUID) -> PricingExperiment | None:
        """Return the experiment with its variants, or None."""

    @abstractmethod
    async def list(
        self,
        status: ExperimentStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PricingExperiment]:
        """Return a page of experiments, newest first, optionally filtered by status."""

    @abstractmethod
    async def list_running(self, content_type: ContentType) -> list[PricingExperiment]:
        """Return running experiments for the content type, oldest start first."""

    @abstractmethod
    async def transition(self, target: PricingExperiment, expected: ExperimentStatus) -> bool:
        """Write target's status, start/end time and results only if the stored
        status equals `expected`.  Returns False when the check fails."""

    # ------------------------------------------------------------------ #
    # Assignments                                                          #
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def get_or_create_assignment(
        self, assignment: ExperimentAssignment
    ) -> ExperimentAssignment:
        """Insert the assignment unless one exists for (experiment_id, client_id),
        then return the stored one.  Concurrent first-time calls converge."""

    @abstractmethod
    async def get_assignment(
        self, experiment_id: UUID, client_id: str
    ) -> ExperimentAssignment | None:
        """Return the stored assignment, or None."""

    # ------------------------------------------------------------------ #
    # Events                                                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def append_event(self, event: ExperimentEvent) -> ExperimentEvent:
        """Append one event.  No locking; events are independent."""

    @abstractmethod
    async def list_events(
        self, experiment_id: UUID, variant_id: UUID | None = None
    ) -> list[ExperimentEvent]:
        """Return the experiment's events ordered by recorded_at."""
