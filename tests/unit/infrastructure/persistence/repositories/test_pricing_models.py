"""Tests for SqlPricingModelRepository — mapping and versioning."""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from content_pricing.domain.models.enums import ContentType, PricingUnit
from content_pricing.domain.models.pricing import PricingModel
from content_pricing.infrastructure.persistence.repositories.pricing_models import (
    SqlPricingModelRepository,
    _to_domain,
    _to_orm,
)


def _orm_model(**overrides):
    defaults = {
        "pricing_model_id": uuid4(),
        "name": "Blog per word",
        "content_type": "BlogPost",
        "base_price": Decimal("0.08"),
        "currency": "USD",
        "pricing_unit": "per_word",
        "default_word_count": 1000,
        "complexity_rules": None,
        "catalog_version": "2024.1",
        "version": 3,
        "is_active": True,
        "created_at": datetime.now(timezone.utc),
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _session():
    session = AsyncMock()
    session.add = MagicMock()
    return session


# --- mapping ---

def test_to_domain_maps_enums():
    model = _to_domain(_orm_model())
    assert model.content_type == ContentType.BLOG_POST
    assert model.pricing_unit == PricingUnit.PER_WORD


def test_to_domain_null_rules_become_empty_dict():
    assert _to_domain(_orm_model()).complexity_rules == {}


def test_to_domain_keeps_version():
    assert _to_domain(_orm_model(version=3)).version == 3


def test_to_orm_stores_enum_values():
    model = PricingModel(
        name="Social", content_type=ContentType.SOCIAL_POST, base_price=Decimal("40")
    )
    row = _to_orm(model)
    assert row.content_type == "SocialPost"
    assert row.pricing_unit == "per_item"


# --- queries ---

async def test_get_active_by_content_type_returns_domain():
    session = _session()
    session.execute.return_value = MagicMock(
        scalar_one_or_none=MagicMock(return_value=_orm_model())
    )
    repo = SqlPricingModelRepository(session)
    model = await repo.get_active_by_content_type(ContentType.BLOG_POST)
    assert model.base_price == Decimal("0.08")


async def test_get_active_by_content_type_none():
    session = _session()
    session.execute.return_value = MagicMock(scalar_one_or_none=MagicMock(return_value=None))
    repo = SqlPricingModelRepository(session)
    assert await repo.get_active_by_content_type(ContentType.BLOG_POST) is None


async def test_get_by_id_missing_returns_none():
    session = _session()
    session.get.return_value = None
    assert await SqlPricingModelRepository(session).get_by_id(uuid4()) is None


async def test_supersede_deactivates_then_inserts():
    session = _session()
    current = PricingModel(name="Blog", content_type=ContentType.BLOG_POST, base_price=Decimal("100"))
    successor = current.supersede(base_price=Decimal("110"))
    result = await SqlPricingModelRepository(session).supersede(current, successor)
    assert result == successor
    session.execute.assert_awaited_once()
    session.add.assert_called_once()
    session.flush.assert_awaited_once()


# --- immutability ---

async def test_update_raises_not_implemented():
    with pytest.raises(NotImplementedError):
        await SqlPricingModelRepository(_session()).update(None)


async def test_delete_raises_not_implemented():
    with pytest.raises(NotImplementedError):
        await SqlPricingModelRepository(_session()).delete(uuid4())
