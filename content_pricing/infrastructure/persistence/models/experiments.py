"""Experiment layer ORM models: pricing_experiments, pricing_variants,
experiment_assignments, experiment_events."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Double,
    ForeignKey,
    Index,
    Integer,
    Interval,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from content_pricing.infrastructure.database import Base


class PricingExperiment(Base):
    """Experiment header.  status changes only through a guarded UPDATE."""

    __tablename__ = "pricing_experiments"
    __table_args__ = (Index("ix_pricing_experiments_type_status", "content_type", "status"),)

    experiment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    hypothesis: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content_type: Mapped[str] = mapped_column(Text, nullable=False)
    target_metric: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)  # draft / running / stopped / analyzed
    required_sample_size: Mapped[int] = mapped_column(Integer, nullable=False)
    significance_level: Mapped[float] = mapped_column(Double, nullable=False)
    planned_duration: Mapped[Optional[timedelta]] = mapped_column(Interval, nullable=True)
    start_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    results: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    variants: Mapped[list["PricingVariant"]] = relationship(
        back_populates="experiment",
        cascade="all, delete-orphan",
        order_by="PricingVariant.position",
    )


class PricingVariant(Base):
    """Treatment arm.  position preserves the declared order used for bucketing."""

    __tablename__ = "pricing_variants"
    __table_args__ = (
        UniqueConstraint("experiment_id", "name", name="uq_pricing_variants_experiment_name"),
    )

    variant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    experiment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("pricing_experiments.experiment_id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    is_control: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    traffic_share: Mapped[float] = mapped_column(Double, nullable=False)
    parameters: Mapped[dict] = mapped_column(JSONB, nullable=False)  # decimal strings
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    experiment: Mapped["PricingExperiment"] = relationship(back_populates="variants")


class ExperimentAssignment(Base):
    """Stable client → variant mapping.  Composite PK: (experiment_id, client_id)."""

    __tablename__ = "experiment_assignments"

    experiment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("pricing_experiments.experiment_id", ondelete="CASCADE"),
        primary_key=True,
    )
    client_id: Mapped[str] = mapped_column(Text, primary_key=True)
    variant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pricing_variants.variant_id"), nullable=False
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ExperimentEvent(Base):
    """Append-only observation.  Never updated or deleted by the engine."""

    __tablename__ = "experiment_events"
    __table_args__ = (
        Index("ix_experiment_events_experiment_variant", "experiment_id", "variant_id"),
    )

    event_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    experiment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("pricing_experiments.experiment_id", ondelete="CASCADE"),
        nullable=False,
    )
    variant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pricing_variants.variant_id"), nullable=False
    )
    client_id: Mapped[str] = mapped_column(Text, nullable=False)
    event_type: Mapped[str] = mapped_column(Text, nullable=False)  # impression / conversion / rejection
    value: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
