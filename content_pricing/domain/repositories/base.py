"""Common base for the engine's own stores.

Repository[T] covers the aggregates this service owns: pricing models,
quotes and experiments.  Market data and client profiles are read from
collaborators and get narrower, non-generic interfaces.  Concrete classes
live in content_pricing/infrastructure/persistence/ and are wired through
get_repositories().

  - Every method is a coroutine; implementations run on one AsyncSession.
  - T is always the domain model, never the ORM row.
  - Filters belong to the specialised list() signatures; the base only pages.
  - Aggregates that change through compare-and-set transitions raise
    NotImplementedError from update() / delete().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar
from uuid import UUID

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Paged CRUD over one aggregate type."""

    @abstractmethod
    async def get(self, id: UUID) -> T | None:
        """Look up by primary key; None when absent."""

    @abstractmethod
    async def list(self, limit: int = 50, offset: int = 0) -> list[T]:
        """One page, newest first."""

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Stage the new aggregate on the session and return it."""

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Overwrite a stored aggregate."""

    @abstractmethod
    async def delete(self, id: UUID) -> None:
        """Remove a stored aggregate."""
