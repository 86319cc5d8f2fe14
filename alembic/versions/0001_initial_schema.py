"""Initial schema: pricing, market intelligence, quotes and experiments.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def upgrade() -> None:
    # ------------------------------------------------------------------ #
    # 1. PRICING LAYER                                                     #
    # ------------------------------------------------------------------ #

    op.create_table(
        "pricing_models",
        sa.Column("pricing_model_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("content_type", sa.Text, nullable=False),
        sa.Column("base_price", sa.Numeric(14, 4), nullable=False),
        sa.Column("currency", sa.Text, nullable=False),
        sa.Column("pricing_unit", sa.Text, nullable=False),
        sa.Column("default_word_count", sa.Integer, nullable=False),
        sa.Column("complexity_rules", postgresql.JSONB, nullable=False),
        sa.Column("catalog_version", sa.Text, nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False),
        _created_at(),
        sa.UniqueConstraint("content_type", "version", name="uq_pricing_models_type_version"),
    )
    op.create_index(
        "uq_pricing_models_active_type",
        "pricing_models",
        ["content_type"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "market_data",
        sa.Column("market_data_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("content_type", sa.Text, nullable=False),
        sa.Column("segment", sa.Text, nullable=False),
        sa.Column("average_price", sa.Numeric(14, 4), nullable=False),
        sa.Column("median_price", sa.Numeric(14, 4), nullable=False),
        sa.Column("min_price", sa.Numeric(14, 4), nullable=False),
        sa.Column("max_price", sa.Numeric(14, 4), nullable=False),
        sa.Column("sample_size", sa.Integer, nullable=False),
        sa.Column("demand_level", sa.Text, nullable=False),
        sa.Column("trend_direction", sa.Text, nullable=False),
        sa.Column("confidence_score", sa.Double, nullable=False),
        sa.Column("data_source", sa.Text, nullable=True),
        _created_at("collected_at"),
    )
    op.create_index(
        "ix_market_data_type_segment_collected",
        "market_data",
        ["content_type", "segment", "collected_at"],
    )

    op.create_table(
        "client_pricing_profiles",
        sa.Column("profile_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("client_id", sa.Text, nullable=False, unique=True),
        sa.Column("tier", sa.Text, nullable=False),
        sa.Column("risk_level", sa.Text, nullable=False),
        sa.Column("payment_terms", sa.Text, nullable=False),
        sa.Column("loyalty_discount_pct", sa.Numeric(5, 2), nullable=False),
        sa.Column("credit_limit", sa.Numeric(14, 2), nullable=False),
        _created_at("updated_at"),
    )

    # ------------------------------------------------------------------ #
    # 2. EXPERIMENT LAYER                                                  #
    # ------------------------------------------------------------------ #

    op.create_table(
        "pricing_experiments",
        sa.Column("experiment_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("hypothesis", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("content_type", sa.Text, nullable=False),
        sa.Column("target_metric", sa.Text, nullable=False),
        sa.Column("status", sa.Text, nullable=False),
        sa.Column("required_sample_size", sa.Integer, nullable=False),
        sa.Column("significance_level", sa.Double, nullable=False),
        sa.Column("planned_duration", sa.Interval, nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("results", postgresql.JSONB, nullable=True),
        _created_at(),
    )
    op.create_index(
        "ix_pricing_experiments_type_status",
        "pricing_experiments",
        ["content_type", "status"],
    )

    op.create_table(
        "pricing_variants",
        sa.Column("variant_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "experiment_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pricing_experiments.experiment_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("is_control", sa.Boolean, nullable=False),
        sa.Column("traffic_share", sa.Double, nullable=False),
        sa.Column("parameters", postgresql.JSONB, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.UniqueConstraint("experiment_id", "name", name="uq_pricing_variants_experiment_name"),
    )

    op.create_table(
        "experiment_assignments",
        sa.Column(
            "experiment_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pricing_experiments.experiment_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("client_id", sa.Text, primary_key=True),
        sa.Column(
            "variant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pricing_variants.variant_id"),
            nullable=False,
        ),
        _created_at("assigned_at"),
    )

    op.create_table(
        "experiment_events",
        sa.Column("event_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "experiment_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pricing_experiments.experiment_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "variant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pricing_variants.variant_id"),
            nullable=False,
        ),
        sa.Column("client_id", sa.Text, nullable=False),
        sa.Column("event_type", sa.Text, nullable=False),
        sa.Column("value", sa.Double, nullable=False),
        _created_at("recorded_at"),
    )
    op.create_index(
        "ix_experiment_events_experiment_variant",
        "experiment_events",
        ["experiment_id", "variant_id"],
    )

    # ------------------------------------------------------------------ #
    # 3. QUOTES                                                            #
    # ------------------------------------------------------------------ #

    op.create_table(
        "price_quotes",
        sa.Column("quote_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("project_id", sa.Text, nullable=True),
        sa.Column("client_id", sa.Text, nullable=False),
        sa.Column("content_type", sa.Text, nullable=False),
        sa.Column(
            "pricing_model_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pricing_models.pricing_model_id"),
            nullable=False,
        ),
        sa.Column("base_price", sa.Numeric(14, 4), nullable=False),
        sa.Column("final_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("currency", sa.Text, nullable=False),
        sa.Column("adjustments", postgresql.JSONB, nullable=False),
        sa.Column(
            "experiment_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pricing_experiments.experiment_id"),
            nullable=True,
        ),
        sa.Column(
            "variant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pricing_variants.variant_id"),
            nullable=True,
        ),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.Text, nullable=False),
        _created_at(),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_price_quotes_client_created", "price_quotes", ["client_id", "created_at"]
    )
    op.create_index(
        "ix_price_quotes_type_status_created",
        "price_quotes",
        ["content_type", "status", "created_at"],
    )


def downgrade() -> None:
    # Drop in reverse dependency order (leaves first, roots last).
    op.drop_index("ix_price_quotes_type_status_created", table_name="price_quotes")
    op.drop_index("ix_price_quotes_client_created", table_name="price_quotes")
    op.drop_table("price_quotes")

    op.drop_index("ix_experiment_events_experiment_variant", table_name="experiment_events")
    op.drop_table("experiment_events")
    op.drop_table("experiment_assignments")
    op.drop_table("pricing_variants")
    op.drop_index("ix_pricing_experiments_type_status", table_name="pricing_experiments")
    op.drop_table("pricing_experiments")

    op.drop_table("client_pricing_profiles")
    op.drop_index("ix_market_data_type_segment_collected", table_name="market_data")
    op.drop_table("market_data")
    op.drop_index("uq_pricing_models_active_type", table_name="pricing_models")
    op.drop_table("pricing_models")
