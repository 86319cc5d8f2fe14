"""In-memory repositories and shared fixtures for handler tests."""

import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest

from content_pricing.application.config import HandlerConfig
from content_pricing.domain.models.enums import ContentType, PricingUnit, QuoteStatus
from content_pricing.domain.models.pricing import PricingModel
from content_pricing.domain.repositories.clients import ClientProfileRepository
from content_pricing.domain.repositories.experiments import ExperimentRepository
from content_pricing.domain.repositories.market_data import MarketDataRepository
from content_pricing.domain.repositories.pricing_models import PricingModelRepository
from content_pricing.domain.repositories.quotes import QuoteRepository


class _Slow:
    """Mixin: await `delay` seconds, or raise `error`, before answering."""

    delay: float = 0.0
    error: Exception | None = None

    async def _pause(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error


class InMemoryPricingModels(_Slow, PricingModelRepository):
    def __init__(self, *models):
        self.models = {m.pricing_model_id: m for m in models}

    async def get_by_id(self, pricing_model_id):
        return self.models.get(pricing_model_id)

    async def get_active_by_content_type(self, content_type):
        await self._pause()
        return next(
            (m for m in self.models.values() if m.content_type == content_type and m.is_active),
            None,
        )

    async def list(self, content_type=None, active_only=False, limit=50, offset=0):
        return list(self.models.values())[offset : offset + limit]

    async def create(self, entity):
        self.models[entity.pricing_model_id] = entity
        return entity

    async def update(self, entity):
        raise NotImplementedError

    async def delete(self, id):
        raise NotImplementedError

    async def supersede(self, current, successor):
        self.models[current.pricing_model_id] = current.model_copy(update={"is_active": False})
        self.models[successor.pricing_model_id] = successor
        return successor


class InMemoryMarketData(_Slow, MarketDataRepository):
    def __init__(self, market_data=None, elasticity=None, analysis=None):
        self.market_data = market_data
        self.elasticity = elasticity
        self.analysis = analysis
        self.requested_windows = []

    async def get_latest_market_data(self, content_type, segment):
        await self._pause()
        if self.market_data is None or self.market_data.segment != segment:
            return None
        return self.market_data

    async def get_price_elasticity(self, content_type, time_range):
        await self._pause()
        self.requested_windows.append(time_range)
        return self.elasticity

    async def get_competitor_analysis(self, content_type, time_range):
        await self._pause()
        self.requested_windows.append(time_range)
        return self.analysis

    async def add(self, market_data):
        self.market_data = market_data
        return market_data


class InMemoryClientProfiles(_Slow, ClientProfileRepository):
    def __init__(self, *profiles):
        self.profiles = {p.client_id: p for p in profiles}

    async def get_by_client(self, client_id):
        await self._pause()
        return self.profiles.get(client_id)

    async def upsert(self, profile):
        self.profiles[profile.client_id] = profile
        return profile


class InMemoryQuotes(QuoteRepository):
    def __init__(self):
        self.quotes = {}
        self.lose_race = False

    async def get_by_id(self, quote_id):
        return self.quotes.get(quote_id)

    async def list(self, client_id=None, status=None, limit=50, offset=0):
        return list(self.quotes.values())[offset : offset + limit]

    async def create(self, entity):
        self.quotes[entity.quote_id] = entity
        return entity

    async def update(self, entity):
        raise NotImplementedError

    async def delete(self, id):
        raise NotImplementedError

    async def transition(self, decided, expected):
        stored = self.quotes.get(decided.quote_id)
        if self.lose_race:
            # another caller decided the quote between our read and write
            self.quotes[decided.quote_id] = stored.model_copy(update={"status": QuoteStatus.REJECTED})
            return False
        if stored is None or stored.status != expected:
            return False
        self.quotes[decided.quote_id] = decided
        return True


class InMemoryExperiments(ExperimentRepository):
    def __init__(self, *experiments):
        self.experiments = {e.experiment_id: e for e in experiments}
        self.assignments = {}
        self.events = []

    async def get_by_id(self, experiment_id):
        return self.experiments.get(experiment_id)

    async def list(self, status=None, limit=50, offset=0):
        found = [e for e in self.experiments.values() if status is None or e.status == status]
        return found[offset : offset + limit]

    async def list_running(self, content_type):
        return [
            e
            for e in self.experiments.values()
            if e.status == "running" and e.content_type == content_type
        ]

    async def create(self, entity):
        self.experiments[entity.experiment_id] = entity
        return entity

    async def update(self, entity):
        raise NotImplementedError

    async def delete(self, id):
        raise NotImplementedError

    async def transition(self, target, expected):
        stored = self.experiments.get(target.experiment_id)
        if stored is None or stored.status != expected:
            return False
        self.experiments[target.experiment_id] = target
        return True

    async def get_or_create_assignment(self, assignment):
        key = (assignment.experiment_id, assignment.client_id)
        return self.assignments.setdefault(key, assignment)

    async def get_assignment(self, experiment_id, client_id):
        return self.assignments.get((experiment_id, client_id))

    async def append_event(self, event):
        self.events.append(event)
        return event

    async def list_events(self, experiment_id, variant_id=None):
        return [
            e
            for e in self.events
            if e.experiment_id == experiment_id and (variant_id is None or e.variant_id == variant_id)
        ]


@pytest.fixture
def config():
    return HandlerConfig(collaborator_timeout=0.05, quote_validity=timedelta(days=7))


@pytest.fixture
def blog_model():
    return PricingModel(
        name="Blog per word",
        content_type=ContentType.BLOG_POST,
        base_price=Decimal("0.08"),
        pricing_unit=PricingUnit.PER_WORD,
    )


@pytest.fixture
def pricing_models(blog_model):
    return InMemoryPricingModels(blog_model)


@pytest.fixture
def market_data():
    return InMemoryMarketData()


@pytest.fixture
def client_profiles():
    return InMemoryClientProfiles()


@pytest.fixture
def quotes():
    return InMemoryQuotes()


@pytest.fixture
def experiments():
    return InMemoryExperiments()
