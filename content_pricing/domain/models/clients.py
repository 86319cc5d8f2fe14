"""Client pricing profile domain model."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from .enums import ClientTier, PaymentTerms, RiskLevel


class ClientPricingProfile(BaseModel):
    """Client-specific pricing terms.

    One profile per client_id; writes are last-write-wins (upsert).
    loyalty_discount_pct is a percentage (10 means 10 %) applied to the
    base price as an additive discount.
    """

    model_config = ConfigDict(frozen=True)

    profile_id: UUID = Field(default_factory=uuid4)
    client_id: str = Field(min_length=1)
    tier: ClientTier = ClientTier.BASIC
    risk_level: RiskLevel = RiskLevel.MEDIUM
    payment_terms: PaymentTerms = PaymentTerms.NET_15
    loyalty_discount_pct: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    credit_limit: Decimal = Field(default=Decimal("0"), ge=0)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
