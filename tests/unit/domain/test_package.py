"""Tests for content_pricing/domain/models/__init__.py — package exports."""

from content_pricing.domain.models import __all__ as domain_all
from content_pricing.domain.models import (
    # spot-check one import from each module
    AdjustmentCatalog,
    ClientPricingProfile,
    ContentType,
    MarketData,
    PriceConstraints,
    PriceQuote,
    PricingExperiment,
)
from content_pricing.domain.services import __all__ as services_all


def test_domain_models_exports_54_names():
    assert len(domain_all) == 54


def test_content_type_importable_from_package():
    assert ContentType.BLOG_POST == "BlogPost"


def test_catalog_importable_from_package():
    assert AdjustmentCatalog.__name__ == "AdjustmentCatalog"


def test_client_profile_importable_from_package():
    assert ClientPricingProfile.__name__ == "ClientPricingProfile"


def test_market_data_importable_from_package():
    assert MarketData.__name__ == "MarketData"


def test_price_quote_importable_from_package():
    assert PriceQuote.__name__ == "PriceQuote"


def test_price_constraints_importable_from_package():
    assert PriceConstraints.__name__ == "PriceConstraints"


def test_pricing_experiment_importable_from_package():
    assert PricingExperiment.__name__ == "PricingExperiment"


def test_services_package_exports():
    assert "PricingService" in services_all
    assert "ExperimentService" in services_all
    assert "assignment_bucket" in services_all
