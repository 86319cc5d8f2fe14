"""Pricing layer ORM models: pricing_models, market_data, client_pricing_profiles, price_quotes."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Double,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from content_pricing.infrastructure.database import Base


class PricingModel(Base):
    """One version of a content type's pricing model.

    Versions are immutable.  The partial unique index keeps at most one
    active version per content type.
    """

    __tablename__ = "pricing_models"
    __table_args__ = (
        UniqueConstraint("content_type", "version", name="uq_pricing_models_type_version"),
        Index(
            "uq_pricing_models_active_type",
            "content_type",
            unique=True,
            postgresql_where=text("is_active"),
        ),
    )

    pricing_model_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(Text, nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    currency: Mapped[str] = mapped_column(Text, nullable=False)       # ISO-4217
    pricing_unit: Mapped[str] = mapped_column(Text, nullable=False)   # per_word / per_item
    default_word_count: Mapped[int] = mapped_column(Integer, nullable=False)
    complexity_rules: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    catalog_version: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    quotes: Mapped[list["PriceQuote"]] = relationship(back_populates="pricing_model")


class MarketData(Base):
    """Competitor pricing snapshot for (content_type, segment)."""

    __tablename__ = "market_data"
    __table_args__ = (
        Index("ix_market_data_type_segment_collected", "content_type", "segment", "collected_at"),
    )

    market_data_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    content_type: Mapped[str] = mapped_column(Text, nullable=False)
    segment: Mapped[str] = mapped_column(Text, nullable=False)
    average_price: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    median_price: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    min_price: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    max_price: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    sample_size: Mapped[int] = mapped_column(Integer, nullable=False)
    demand_level: Mapped[str] = mapped_column(Text, nullable=False)
    trend_direction: Mapped[str] = mapped_column(Text, nullable=False)
    confidence_score: Mapped[float] = mapped_column(Double, nullable=False)
    data_source: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    collected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ClientPricingProfile(Base):
    """Client pricing terms.  client_id is unique: one profile per client."""

    __tablename__ = "client_pricing_profiles"

    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    client_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    tier: Mapped[str] = mapped_column(Text, nullable=False)
    risk_level: Mapped[str] = mapped_column(Text, nullable=False)
    payment_terms: Mapped[str] = mapped_column(Text, nullable=False)
    loyalty_discount_pct: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    credit_limit: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class PriceQuote(Base):
    """Issued quote.  status moves off 'pending' exactly once (guarded UPDATE)."""

    __tablename__ = "price_quotes"
    __table_args__ = (
        Index("ix_price_quotes_client_created", "client_id", "created_at"),
        Index("ix_price_quotes_type_status_created", "content_type", "status", "created_at"),
    )

    quote_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    project_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    client_id: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(Text, nullable=False)
    pricing_model_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pricing_models.pricing_model_id"), nullable=False
    )
    base_price: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    final_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    currency: Mapped[str] = mapped_column(Text, nullable=False)
    adjustments: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    experiment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pricing_experiments.experiment_id"), nullable=True
    )
    variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pricing_variants.variant_id"), nullable=True
    )
    valid_until: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)  # pending / accepted / rejected / expired
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    decided_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    pricing_model: Mapped["PricingModel"] = relationship(back_populates="quotes")
