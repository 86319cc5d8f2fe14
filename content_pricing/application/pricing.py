"""Price calculation and quote handler.

calculate_price
    → _fetch_model       (mandatory; timeout or absence is fatal)
    → _fetch_market_data (optional; timeout, error or staleness → None)
    → _fetch_profile     (optional; timeout or error → None)
    → _fetch_variant     (optional; timeout or error → None)
    → PricingService.calculate_price over the frozen snapshot

Collaborators are awaited one after another: the SQL repositories share a
single AsyncSession, which does not support concurrent operations.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime, timezone
from typing import TypeVar
from uuid import UUID

from content_pricing.domain.errors import (
    ExperimentError,
    ModelLookupTimeout,
    ModelNotFound,
    QuoteNotFound,
    QuoteStateError,
)
from content_pricing.domain.models.catalog import AdjustmentCatalog
from content_pricing.domain.models.clients import ClientPricingProfile
from content_pricing.domain.models.enums import ContentType, EventType, QuoteStatus
from content_pricing.domain.models.experiments import ExperimentEvent, PricingVariant
from content_pricing.domain.models.market_data import MarketData
from content_pricing.domain.models.pricing import (
    PriceCalculation,
    PriceQuote,
    PriceRequest,
    PricingModel,
    PricingSnapshot,
)
from content_pricing.domain.repositories.clients import ClientProfileRepository
from content_pricing.domain.repositories.market_data import MarketDataRepository
from content_pricing.domain.repositories.pricing_models import PricingModelRepository
from content_pricing.domain.repositories.quotes import QuoteRepository
from content_pricing.domain.services.pricing import PricingService

from .config import HandlerConfig
from .experiments import ExperimentHandler

logger = logging.getLogger(__name__)

T = TypeVar("T")

_QUOTE_EVENTS = {
    QuoteStatus.ACCEPTED: EventType.CONVERSION,
    QuoteStatus.REJECTED: EventType.REJECTION,
}


class PriceCalculationHandler:
    """Entry point for CalculatePrice and the quote lifecycle."""

    def __init__(
        self,
        pricing_models: PricingModelRepository,
        market_data: MarketDataRepository,
        client_profiles: ClientProfileRepository,
        quotes: QuoteRepository,
        experiments: ExperimentHandler | None = None,
        catalog: AdjustmentCatalog | None = None,
        config: HandlerConfig | None = None,
        service: PricingService | None = None,
    ) -> None:
        self._pricing_models = pricing_models
        self._market_data = market_data
        self._client_profiles = client_profiles
        self._quotes = quotes
        self._experiments = experiments
        self._catalog = catalog or AdjustmentCatalog.default()
        self._config = config or HandlerConfig()
        self._service = service or PricingService()

    # ------------------------------------------------------------------ #
    # Price calculation                                                    #
    # ------------------------------------------------------------------ #

    async def calculate_price(self, request: PriceRequest) -> PriceCalculation:
        snapshot = await self.fetch_snapshot(request)
        calculation = self._service.calculate_price(snapshot, request, self._catalog)
        if calculation.skipped_categories:
            logger.info(
                "Priced %s for client %s without %s adjustments",
                request.content_type.value,
                request.client_id,
                ", ".join(c.value for c in calculation.skipped_categories),
            )
        return calculation

    async def fetch_snapshot(self, request: PriceRequest) -> PricingSnapshot:
        """Read every collaborator once; the calculation never re-reads."""
        model = await self._fetch_model(request.content_type)
        market_data = await self._fetch_market_data(request)
        profile = await self._fetch_profile(request.client_id)
        enrolled = await self._fetch_variant(request)
        experiment_id, variant = enrolled if enrolled is not None else (None, None)
        return PricingSnapshot(
            model=model,
            market_data=market_data,
            client_profile=profile,
            experiment_id=experiment_id,
            variant=variant,
        )

    # ------------------------------------------------------------------ #
    # Quotes                                                               #
    # ------------------------------------------------------------------ #

    async def generate_quote(self, request: PriceRequest) -> PriceQuote:
        calculation = await self.calculate_price(request)
        quote = PriceQuote.from_calculation(
            calculation,
            client_id=request.client_id,
            validity=self._config.quote_validity,
            project_id=request.project_id,
        )
        quote = await self._quotes.create(quote)
        if quote.variant_id is not None:
            await self._record_quote_event(quote, EventType.IMPRESSION, quote.created_at)
        logger.info(
            "Issued quote %s to client %s: %s %s",
            quote.quote_id,
            quote.client_id,
            quote.final_price,
            quote.currency,
        )
        return quote

    async def accept_quote(self, quote_id: UUID, now: datetime | None = None) -> PriceQuote:
        return await self._decide(quote_id, QuoteStatus.ACCEPTED, now)

    async def reject_quote(self, quote_id: UUID, now: datetime | None = None) -> PriceQuote:
        return await self._decide(quote_id, QuoteStatus.REJECTED, now)

    async def expire_quote(self, quote_id: UUID, now: datetime | None = None) -> PriceQuote:
        return await self._decide(quote_id, QuoteStatus.EXPIRED, now)

    # ------------------------------------------------------------------ #
    # Collaborator lookups                                                 #
    # ------------------------------------------------------------------ #

    async def _fetch_model(self, content_type: ContentType) -> PricingModel:
        timeout = self._config.collaborator_timeout
        try:
            model = await asyncio.wait_for(
                self._pricing_models.get_active_by_content_type(content_type), timeout
            )
        except asyncio.TimeoutError as exc:
            raise ModelLookupTimeout(content_type.value, timeout) from exc
        if model is None:
            raise ModelNotFound(content_type.value)
        return model

    async def _fetch_market_data(self, request: PriceRequest) -> MarketData | None:
        segment = request.segment or self._config.market_segment
        market_data = await self._optional(
            self._market_data.get_latest_market_data(request.content_type, segment),
            f"market data for {request.content_type.value}/{segment}",
        )
        if market_data is not None and market_data.is_stale(
            self._config.market_data_max_age, request.request_time
        ):
            logger.warning(
                "Ignoring stale market data for %s/%s collected at %s",
                request.content_type.value,
                segment,
                market_data.collected_at.isoformat(),
            )
            return None
        return market_data

    async def _fetch_profile(self, client_id: str) -> ClientPricingProfile | None:
        return await self._optional(
            self._client_profiles.get_by_client(client_id),
            f"pricing profile for client {client_id}",
        )

    async def _fetch_variant(self, request: PriceRequest) -> tuple[UUID, PricingVariant] | None:
        if self._experiments is None:
            return None
        return await self._optional(
            self._experiments.active_variant_for_client(
                request.client_id, request.content_type, request.request_time
            ),
            f"experiment variant for client {request.client_id}",
        )

    async def _optional(self, lookup: Awaitable[T], what: str) -> T | None:
        """Await a non-mandatory lookup; any failure degrades to None."""
        try:
            return await asyncio.wait_for(lookup, self._config.collaborator_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Timed out after %.2fs fetching %s; continuing without it",
                self._config.collaborator_timeout,
                what,
            )
        except Exception:
            logger.warning("Failed fetching %s; continuing without it", what, exc_info=True)
        return None

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    async def _decide(
        self, quote_id: UUID, target: QuoteStatus, now: datetime | None
    ) -> PriceQuote:
        moment = now or datetime.now(timezone.utc)
        quote = await self._quotes.get_by_id(quote_id)
        if quote is None:
            raise QuoteNotFound(quote_id)
        if (
            target != QuoteStatus.EXPIRED
            and quote.status == QuoteStatus.PENDING
            and quote.is_expired(moment)
        ):
            await self._apply(quote, quote.transition(QuoteStatus.EXPIRED, moment))
            raise QuoteStateError(quote_id, QuoteStatus.EXPIRED.value, target.value)

        decided = await self._apply(quote, quote.transition(target, moment))
        logger.info("Quote %s %s", quote_id, target.value)
        event_type = _QUOTE_EVENTS.get(target)
        if event_type is not None and decided.variant_id is not None:
            await self._record_quote_event(decided, event_type, moment)
        return decided

    async def _apply(self, quote: PriceQuote, decided: PriceQuote) -> PriceQuote:
        if await self._quotes.transition(decided, QuoteStatus.PENDING):
            return decided
        current = await self._quotes.get_by_id(quote.quote_id)
        raise QuoteStateError(
            quote.quote_id,
            current.status.value if current else "missing",
            decided.status.value,
        )

    async def _record_quote_event(
        self, quote: PriceQuote, event_type: EventType, recorded_at: datetime
    ) -> None:
        if self._experiments is None or quote.experiment_id is None or quote.variant_id is None:
            return
        event = ExperimentEvent(
            experiment_id=quote.experiment_id,
            variant_id=quote.variant_id,
            client_id=quote.client_id,
            event_type=event_type,
            value=float(quote.final_price),
            recorded_at=recorded_at,
        )
        try:
            await self._experiments.record_experiment_event(event)
        except ExperimentError as exc:
            # the quote decision stands even when the experiment has closed
            logger.warning(
                "Experiment event %s for quote %s not recorded: %s",
                event_type.value,
                quote.quote_id,
                exc,
            )
