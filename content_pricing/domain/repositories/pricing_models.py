"""Pricing model repository interface."""

from __future__ import annotations

from abc import abstractmethod
from uuid import UUID

from content_pricing.domain.models.enums import ContentType
from content_pricing.domain.models.pricing import PricingModel

from .base import Repository


class PricingModelRepository(Repository[PricingModel]):
    """Read/write interface for versioned PricingModel rows.

    A pricing model is never updated in place.  supersede() deactivates the
    current version and inserts its successor in one transaction, so at most
    one model per content type is active at any time.
    """

    async def get(self, id: UUID) -> PricingModel | None:
        return await self.get_by_id(id)

    @abstractmethod
    async def get_by_id(self, pricing_model_id: UUID) -> PricingModel | None:
        """Return the model version, or None."""

    @abstractmethod
    async def get_active_by_content_type(self, content_type: ContentType) -> PricingModel | None:
        """Return the active model for the content type, or None when none is active."""

    @abstractmethod
    async def list(
        self,
        content_type: ContentType | None = None,
        active_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PricingModel]:
        """Return a page of model versions, optionally filtered."""

    @abstractmethod
    async def supersede(self, current: PricingModel, successor: PricingModel) -> PricingModel:
        """Deactivate `current` and persist `successor` atomically."""
