"""Tests for SqlQuoteRepository — mapping and compare-and-set transitions."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from content_pricing.domain.models.enums import AdjustmentType, QuoteStatus
from content_pricing.infrastructure.persistence.repositories.quotes import (
    SqlQuoteRepository,
    _to_domain,
)

NOW = datetime(2024, 3, 12, 14, 0, tzinfo=timezone.utc)


def _orm_quote(**overrides):
    defaults = {
        "quote_id": uuid4(),
        "project_id": None,
        "client_id": "client-1",
        "content_type": "BlogPost",
        "pricing_model_id": uuid4(),
        "base_price": Decimal("160.00"),
        "final_price": Decimal("250.80"),
        "currency": "USD",
        "adjustments": [
            {
                "adjustment_type": "complexity",
                "reason": "complexity_level",
                "amount": "0",
                "factor": "1.5",
                "description": "advanced complexity",
            }
        ],
        "experiment_id": None,
        "variant_id": None,
        "valid_until": NOW + timedelta(days=7),
        "status": "pending",
        "created_at": NOW,
        "decided_at": None,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _session():
    session = AsyncMock()
    session.add = MagicMock()
    return session


# --- mapping ---

def test_to_domain_maps_status():
    assert _to_domain(_orm_quote(status="accepted", decided_at=NOW)).status == QuoteStatus.ACCEPTED


def test_to_domain_deserializes_adjustments():
    [adjustment] = _to_domain(_orm_quote()).adjustments
    assert adjustment.adjustment_type == AdjustmentType.COMPLEXITY
    assert adjustment.factor == Decimal("1.5")


def test_to_domain_null_adjustments_become_empty():
    assert _to_domain(_orm_quote(adjustments=None)).adjustments == []


# --- create / transition ---

async def test_create_adds_and_flushes():
    session = _session()
    quote = _to_domain(_orm_quote())
    assert await SqlQuoteRepository(session).create(quote) == quote
    row = session.add.call_args.args[0]
    assert row.status == "pending"
    assert row.adjustments[0]["factor"] == "1.5"
    session.flush.assert_awaited_once()


async def test_transition_succeeds_when_one_row_updated():
    session = _session()
    session.execute.return_value = MagicMock(rowcount=1)
    decided = _to_domain(_orm_quote()).transition(QuoteStatus.ACCEPTED, NOW)
    assert await SqlQuoteRepository(session).transition(decided, QuoteStatus.PENDING) is True


async def test_transition_fails_when_status_changed():
    session = _session()
    session.execute.return_value = MagicMock(rowcount=0)
    decided = _to_domain(_orm_quote()).transition(QuoteStatus.ACCEPTED, NOW)
    assert await SqlQuoteRepository(session).transition(decided, QuoteStatus.PENDING) is False


async def test_get_by_id_none():
    session = _session()
    session.execute.return_value = MagicMock(scalar_one_or_none=MagicMock(return_value=None))
    assert await SqlQuoteRepository(session).get_by_id(uuid4()) is None


async def test_update_raises_not_implemented():
    with pytest.raises(NotImplementedError):
        await SqlQuoteRepository(_session()).update(None)
