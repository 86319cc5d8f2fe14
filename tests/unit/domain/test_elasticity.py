import warnings
from decimal import Decimal

import pytest

from content_pricing.domain.models.enums import ContentType
from content_pricing.domain.services.elasticity import ElasticityEstimator, QuoteOutcome


def _outcomes(rates):
    """Ten quotes per price level with the given acceptance rate."""
    outcomes = []
    for price, rate in rates.items():
        accepted = round(rate * 10)
        outcomes += [QuoteOutcome(Decimal(price), i < accepted) for i in range(10)]
    return outcomes


def test_falling_acceptance_gives_negative_elasticity():
    outcomes = _outcomes({"50": 0.8, "100": 0.6, "150": 0.4, "200": 0.3, "250": 0.2})
    result = ElasticityEstimator().estimate(ContentType.BLOG_POST, outcomes)
    assert result is not None
    assert result.elasticity_score < 0
    assert 0.0 <= result.confidence_level <= 1.0
    assert result.data_points == 50


def test_too_few_outcomes_returns_none():
    outcomes = _outcomes({"50": 0.5})
    assert ElasticityEstimator(min_observations=20).estimate(ContentType.BLOG_POST, outcomes) is None


def test_single_price_returns_none():
    outcomes = [QuoteOutcome(Decimal("100"), i % 2 == 0) for i in range(40)]
    assert ElasticityEstimator().estimate(ContentType.BLOG_POST, outcomes) is None


def test_never_accepted_returns_none():
    outcomes = _outcomes({"50": 0.0, "100": 0.0, "150": 0.0})
    assert ElasticityEstimator().estimate(ContentType.BLOG_POST, outcomes) is None


def test_bins_must_be_at_least_two():
    with pytest.raises(ValueError):
        ElasticityEstimator(bins=1)


def test_free_quotes_are_dropped_without_copy_warnings():
    outcomes = _outcomes({"50": 0.8, "100": 0.6, "150": 0.4, "200": 0.3})
    outcomes += [QuoteOutcome(Decimal("0"), True) for _ in range(10)]
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        result = ElasticityEstimator().estimate(ContentType.BLOG_POST, outcomes)
    assert not [w for w in caught if "SettingWithCopy" in w.category.__name__]
    assert result is not None
    assert result.elasticity_score < 0
