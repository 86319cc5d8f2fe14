"""Tests for content_pricing/domain/models/catalog.py."""

from datetime import timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError

from content_pricing.domain.models.catalog import AdjustmentCatalog, CapacityPolicy, SurgePolicy
from content_pricing.domain.models.enums import ComplexityLevel, ContentType, DemandLevel


def test_default_catalog_version():
    assert AdjustmentCatalog.default().version == "2024.1"


def test_default_catalog_covers_every_content_type():
    catalog = AdjustmentCatalog.default()
    assert set(catalog.standard_delivery) == set(ContentType)


def test_catalog_is_frozen():
    catalog = AdjustmentCatalog.default()
    with pytest.raises(ValidationError):
        catalog.version = "2025.1"


def test_incomplete_table_is_rejected():
    data = AdjustmentCatalog.default().model_dump()
    del data["complexity_level"][ComplexityLevel.EXPERT]
    with pytest.raises(ValidationError, match="complexity_level"):
        AdjustmentCatalog(**data)


def test_non_positive_standard_delivery_is_rejected():
    data = AdjustmentCatalog.default().model_dump()
    data["standard_delivery"][ContentType.BLOG_POST] = timedelta(0)
    with pytest.raises(ValidationError):
        AdjustmentCatalog(**data)


def test_table_override_via_model_copy():
    catalog = AdjustmentCatalog.default()
    demand = dict(catalog.realtime_demand)
    demand[DemandLevel.VERY_HIGH] = Decimal("1.5")
    updated = catalog.model_copy(update={"realtime_demand": demand, "version": "2024.2"})
    assert updated.realtime_demand[DemandLevel.VERY_HIGH] == Decimal("1.5")
    assert catalog.realtime_demand[DemandLevel.VERY_HIGH] == Decimal("1.25")


# --- SurgePolicy ---

def test_surge_at_or_beyond_standard_is_neutral():
    assert SurgePolicy().factor_for(1.0) == Decimal("1.0")
    assert SurgePolicy().factor_for(3.0) == Decimal("1.0")


def test_surge_bounds_are_strict():
    assert SurgePolicy().factor_for(0.5) == Decimal("1.5")
    assert SurgePolicy().factor_for(0.75) == Decimal("1.2")


# --- CapacityPolicy ---

def test_capacity_full_load_uses_fallback():
    assert CapacityPolicy().factor_for(1.0) == Decimal("1.25")
