"""Client pricing profile repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from content_pricing.domain.models.clients import ClientPricingProfile


class ClientProfileRepository(ABC):
    """One profile per client_id; upsert() is last-write-wins."""

    @abstractmethod
    async def get_by_client(self, client_id: str) -> ClientPricingProfile | None:
        """Return the client's profile, or None."""

    @abstractmethod
    async def upsert(self, profile: ClientPricingProfile) -> ClientPricingProfile:
        """Insert or replace the profile for profile.client_id."""
