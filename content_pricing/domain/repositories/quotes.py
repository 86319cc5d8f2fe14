"""Price quote repository interface."""

from __future__ import annotations

from abc import abstractmethod
from uuid import UUID

from content_pricing.domain.models.enums import QuoteStatus
from content_pricing.domain.models.pricing import PriceQuote

from .base import Repository


class QuoteRepository(Repository[PriceQuote]):
    """Read/write interface for PriceQuote aggregates.

    Quotes change only through transition(): an UPDATE guarded by the
    expected current status, so a quote is decided exactly once even under
    concurrent accept / reject / expire calls.
    """

    async def get(self, id: UUID) -> PriceQuote | None:
        return await self.get_by_id(id)

    @abstractmethod
    async def get_by_id(self, quote_id: UUID) -> PriceQuote | None:
        """Return the quote, or None."""

    @abstractmethod
    async def list(
        self,
        client_id: str | None = None,
        status: QuoteStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PriceQuote]:
        """Return a page of quotes, newest first, optionally filtered."""

    @abstractmethod
    async def transition(self, decided: PriceQuote, expected: QuoteStatus) -> bool:
        """Write decided.status / decided_at only if the stored status equals `expected`.

        Returns False when another caller changed the status first.
        """
