"""Tests for content_pricing/application/pricing.py."""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from content_pricing.application.experiments import ExperimentHandler
from content_pricing.application.pricing import PriceCalculationHandler
from content_pricing.domain.errors import (
    ModelLookupTimeout,
    ModelNotFound,
    QuoteNotFound,
    QuoteStateError,
)
from content_pricing.domain.models.clients import ClientPricingProfile
from content_pricing.domain.models.enums import (
    AdjustmentType,
    ClientTier,
    ComplexityLevel,
    ContentType,
    DemandLevel,
    EventType,
    ExperimentStatus,
    QuoteStatus,
    TargetMetric,
    TrendDirection,
)
from content_pricing.domain.models.experiments import PricingExperiment, PricingVariant
from content_pricing.domain.models.market_data import MarketData
from content_pricing.domain.models.pricing import ContentSpecification, PriceRequest

TUESDAY_2PM = datetime(2024, 3, 12, 14, 0, tzinfo=timezone.utc)


def _request(**overrides):
    defaults = dict(
        client_id="client-1",
        content_type=ContentType.BLOG_POST,
        content_spec=ContentSpecification(
            word_count=2000, complexity_level=ComplexityLevel.ADVANCED
        ),
        expected_delivery_time=timedelta(hours=24),
        current_system_load=0.4,
        request_time=TUESDAY_2PM,
    )
    defaults.update(overrides)
    return PriceRequest(**defaults)


def _market(collected_at=TUESDAY_2PM - timedelta(hours=2)):
    return MarketData(
        content_type=ContentType.BLOG_POST,
        average_price=Decimal("170"),
        median_price=Decimal("160"),
        min_price=Decimal("60"),
        max_price=Decimal("400"),
        sample_size=30,
        demand_level=DemandLevel.HIGH,
        trend_direction=TrendDirection.STABLE,
        confidence_score=0.7,
        collected_at=collected_at,
    )


def _running_experiment():
    return PricingExperiment(
        name="Blog surcharge",
        content_type=ContentType.BLOG_POST,
        target_metric=TargetMetric.CONVERSION_RATE,
        variants=[
            PricingVariant(
                name="control",
                is_control=True,
                traffic_share=0.5,
                parameters={"price_multiplier": Decimal("1")},
            ),
            PricingVariant(
                name="plus-ten",
                traffic_share=0.5,
                parameters={"price_multiplier": Decimal("1.1")},
            ),
        ],
        status=ExperimentStatus.RUNNING,
        required_sample_size=1000,
        start_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def handler(pricing_models, market_data, client_profiles, quotes, config):
    return PriceCalculationHandler(
        pricing_models, market_data, client_profiles, quotes, config=config
    )


@pytest.fixture
def experiment(experiments):
    running = _running_experiment()
    experiments.experiments[running.experiment_id] = running
    return running


@pytest.fixture
def experiment_handler(pricing_models, market_data, client_profiles, quotes, experiments, config):
    return PriceCalculationHandler(
        pricing_models,
        market_data,
        client_profiles,
        quotes,
        experiments=ExperimentHandler(experiments),
        config=config,
    )


# --- calculate_price ---

async def test_calculate_price_without_optional_data(handler):
    result = await handler.calculate_price(_request())
    assert result.final_price == Decimal("250.80")
    assert result.skipped_categories == [AdjustmentType.MARKET, AdjustmentType.CLIENT]


async def test_missing_model_is_fatal(handler, pricing_models):
    pricing_models.models = {}
    with pytest.raises(ModelNotFound) as exc_info:
        await handler.calculate_price(_request())
    assert exc_info.value.content_type == "BlogPost"


async def test_slow_model_lookup_is_fatal(handler, pricing_models):
    pricing_models.delay = 0.5
    with pytest.raises(ModelLookupTimeout):
        await handler.calculate_price(_request())


async def test_slow_market_data_degrades(handler, market_data, caplog):
    market_data.market_data = _market()
    market_data.delay = 0.5
    result = await handler.calculate_price(_request())
    assert result.market_adjustments == []
    assert AdjustmentType.MARKET in result.skipped_categories
    assert "Timed out" in caplog.text


async def test_failing_market_data_degrades(handler, market_data, caplog):
    market_data.error = ConnectionError("market feed down")
    result = await handler.calculate_price(_request())
    assert result.market_adjustments == []
    assert "Failed fetching market data" in caplog.text


async def test_naive_market_snapshot_degrades(handler, market_data, caplog):
    with pytest.raises(ValidationError) as invalid:
        _market(collected_at=datetime(2024, 3, 12, 12, 0))
    market_data.error = invalid.value
    result = await handler.calculate_price(_request())
    assert result.market_adjustments == []
    assert AdjustmentType.MARKET in result.skipped_categories
    assert "Failed fetching market data" in caplog.text


async def test_fresh_market_data_is_applied(handler, market_data):
    market_data.market_data = _market()
    result = await handler.calculate_price(_request())
    assert [a.reason for a in result.market_adjustments] == [
        "demand_level",
        "market_position",
        "trend_direction",
    ]
    assert result.demand_factor == Decimal("1.1")
    assert result.confidence_level == pytest.approx(0.7)


async def test_stale_market_data_is_ignored(handler, market_data, caplog):
    market_data.market_data = _market(collected_at=TUESDAY_2PM - timedelta(hours=30))
    result = await handler.calculate_price(_request())
    assert result.market_adjustments == []
    assert result.demand_factor == Decimal("1")
    assert "stale" in caplog.text


async def test_slow_client_profile_degrades(handler, client_profiles):
    client_profiles.profiles["client-1"] = ClientPricingProfile(
        client_id="client-1", tier=ClientTier.VIP
    )
    client_profiles.delay = 0.5
    result = await handler.calculate_price(_request())
    assert result.client_adjustments == []


async def test_client_profile_is_applied(handler, client_profiles):
    client_profiles.profiles["client-1"] = ClientPricingProfile(
        client_id="client-1", tier=ClientTier.VIP
    )
    result = await handler.calculate_price(_request())
    assert result.client_adjustments[0].factor == Decimal("0.85")
    assert AdjustmentType.CLIENT not in result.skipped_categories


async def test_enrolled_client_gets_variant_adjustment(experiment_handler, experiment):
    result = await experiment_handler.calculate_price(_request())
    assert result.experiment_id == experiment.experiment_id
    assert result.variant_id in {v.variant_id for v in experiment.variants}
    assert len(result.experiment_adjustments) == 1


async def test_without_experiments_no_variant_is_applied(handler):
    result = await handler.calculate_price(_request())
    assert result.experiment_adjustments == []
    assert result.variant_id is None


# --- quotes ---

async def test_generate_quote_persists_pending_quote(handler, quotes, config):
    quote = await handler.generate_quote(_request())
    assert quote.status == QuoteStatus.PENDING
    assert quote.final_price == Decimal("250.80")
    assert quote.valid_until - quote.created_at == config.quote_validity
    assert quotes.quotes[quote.quote_id] == quote


async def test_generate_quote_records_impression(experiment_handler, experiment, experiments):
    quote = await experiment_handler.generate_quote(_request())
    [event] = experiments.events
    assert event.event_type == EventType.IMPRESSION
    assert event.variant_id == quote.variant_id
    assert event.value == pytest.approx(float(quote.final_price))


async def test_accept_quote(handler, quotes):
    quote = await handler.generate_quote(_request())
    accepted = await handler.accept_quote(quote.quote_id)
    assert accepted.status == QuoteStatus.ACCEPTED
    assert accepted.decided_at is not None
    assert quotes.quotes[quote.quote_id].status == QuoteStatus.ACCEPTED


async def test_accept_quote_records_conversion(experiment_handler, experiment, experiments):
    quote = await experiment_handler.generate_quote(_request())
    await experiment_handler.accept_quote(quote.quote_id)
    assert [e.event_type for e in experiments.events] == [EventType.IMPRESSION, EventType.CONVERSION]


async def test_reject_quote_records_rejection(experiment_handler, experiment, experiments):
    quote = await experiment_handler.generate_quote(_request())
    rejected = await experiment_handler.reject_quote(quote.quote_id)
    assert rejected.status == QuoteStatus.REJECTED
    assert experiments.events[-1].event_type == EventType.REJECTION


async def test_decided_quote_cannot_be_accepted(handler):
    quote = await handler.generate_quote(_request())
    await handler.reject_quote(quote.quote_id)
    with pytest.raises(QuoteStateError) as exc_info:
        await handler.accept_quote(quote.quote_id)
    assert exc_info.value.current == "rejected"


async def test_accepting_an_expired_quote_expires_it(handler, quotes):
    quote = await handler.generate_quote(_request())
    later = datetime.now(timezone.utc) + timedelta(days=8)
    with pytest.raises(QuoteStateError) as exc_info:
        await handler.accept_quote(quote.quote_id, now=later)
    assert exc_info.value.current == "expired"
    assert quotes.quotes[quote.quote_id].status == QuoteStatus.EXPIRED


async def test_expire_quote(handler):
    quote = await handler.generate_quote(_request())
    expired = await handler.expire_quote(quote.quote_id)
    assert expired.status == QuoteStatus.EXPIRED


async def test_unknown_quote_is_not_found(handler):
    with pytest.raises(QuoteNotFound):
        await handler.accept_quote(uuid4())


async def test_concurrent_decision_loses_compare_and_set(handler, quotes):
    quote = await handler.generate_quote(_request())
    quotes.lose_race = True
    with pytest.raises(QuoteStateError) as exc_info:
        await handler.accept_quote(quote.quote_id)
    assert exc_info.value.current == "rejected"


async def test_quote_decision_stands_when_experiment_closed(
    experiment_handler, experiment, experiments, caplog
):
    quote = await experiment_handler.generate_quote(_request())
    experiments.experiments[experiment.experiment_id] = experiment.model_copy(
        update={"status": ExperimentStatus.STOPPED}
    )
    with caplog.at_level(logging.WARNING):
        accepted = await experiment_handler.accept_quote(quote.quote_id)
    assert accepted.status == QuoteStatus.ACCEPTED
    assert len(experiments.events) == 1
    assert "not recorded" in caplog.text
