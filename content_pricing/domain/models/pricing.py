"""Pricing domain models.

PricingModel         — versioned base-price definition for one content type
ContentSpecification — what the client wants written; drives complexity adjustments
PriceRequest         — inputs of one CalculatePrice call
PriceAdjustment      — one named adjustment record (factor and/or amount)
PriceOperation       — one step of the pricing fold with before/after prices
PricingSnapshot      — collaborator data fetched once per calculation
PriceCalculation     — itemized result of the pipeline
PriceQuote           — persisted, time-limited offer built from a calculation
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from content_pricing.domain.errors import QuoteStateError

from .clients import ClientPricingProfile
from .enums import (
    AdjustmentType,
    ComplexityLevel,
    ContentType,
    PriceStage,
    PricingUnit,
    QuoteStatus,
    ResearchDepth,
    TechnicalLevel,
)
from .experiments import PricingVariant
from .market_data import MarketData

CURRENCY_PATTERN = r"^[A-Z]{3}$"


class PricingModel(BaseModel):
    """Base price definition for a content type.

    Immutable per version: a change produces a new version through
    supersede(); the repository deactivates the previous one.
    complexity_rules are named free-form rules kept for audit only; the
    numeric effect of complexity lives in the AdjustmentCatalog.
    """

    model_config = ConfigDict(frozen=True)

    pricing_model_id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1)
    content_type: ContentType
    base_price: Decimal = Field(gt=0)
    currency: str = Field(default="USD", pattern=CURRENCY_PATTERN)
    pricing_unit: PricingUnit = PricingUnit.PER_ITEM
    default_word_count: int = Field(default=1000, gt=0)
    complexity_rules: dict[str, str] = Field(default_factory=dict)
    catalog_version: str = "2024.1"
    version: int = Field(default=1, ge=1)
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def supersede(self, **changes) -> PricingModel:
        """Return the next active version with `changes` applied."""
        data = self.model_dump()
        data.update(changes)
        data.update(
            pricing_model_id=uuid4(),
            version=self.version + 1,
            is_active=True,
            created_at=datetime.now(timezone.utc),
        )
        return PricingModel(**data)

    def request_base_price(self, spec: ContentSpecification | None) -> Decimal:
        """Base price of one request before any adjustment."""
        if self.pricing_unit == PricingUnit.PER_WORD:
            words = self.default_word_count
            if spec is not None and spec.word_count is not None:
                words = spec.word_count
            return self.base_price * words
        return self.base_price


class ContentSpecification(BaseModel):
    """Content requirements.  Discrete levels are enum-validated; an
    unrecognized level is a validation error, never a silent no-op."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    word_count: int | None = Field(default=None, ge=0)
    complexity_level: ComplexityLevel | None = None
    research_depth: ResearchDepth | None = None
    technical_level: TechnicalLevel | None = None
    target_audience: str | None = None
    requirements: list[str] = Field(default_factory=list)


class PriceRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1)
    content_type: ContentType
    content_spec: ContentSpecification | None = None
    expected_delivery_time: timedelta
    current_system_load: float = Field(ge=0.0, le=1.0)
    request_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    project_id: str | None = None
    segment: str | None = None  # None = configured default segment

    @model_validator(mode="after")
    def _positive_delivery(self) -> PriceRequest:
        if self.expected_delivery_time <= timedelta(0):
            raise ValueError("expected_delivery_time must be positive")
        return self

    @model_validator(mode="after")
    def _aware_request_time(self) -> PriceRequest:
        if self.request_time.tzinfo is None:
            raise ValueError("request_time must be timezone-aware")
        return self


class PriceAdjustment(BaseModel):
    """One adjustment record.

    Applied as price × factor (when factor > 0) then + amount.  A record
    whose factor is 1 and amount 0 is still kept for the audit trail.
    """

    model_config = ConfigDict(frozen=True)

    adjustment_type: AdjustmentType
    reason: str
    amount: Decimal = Decimal("0")
    factor: Decimal = Field(default=Decimal("1"), ge=0)
    description: str = ""

    @property
    def is_noop(self) -> bool:
        return self.factor == 1 and self.amount == 0


class PriceOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: PriceStage
    label: str
    factor: Decimal
    amount: Decimal
    price_before: Decimal
    price_after: Decimal


class PricingSnapshot(BaseModel):
    """Point-in-time collaborator data for one calculation.

    market_data is None when absent, stale or timed out; client_profile and
    variant are None when absent.  The pipeline never re-reads collaborators.
    """

    model_config = ConfigDict(frozen=True)

    model: PricingModel
    market_data: MarketData | None = None
    client_profile: ClientPricingProfile | None = None
    experiment_id: UUID | None = None
    variant: PricingVariant | None = None

    @model_validator(mode="after")
    def _variant_has_experiment(self) -> PricingSnapshot:
        if self.variant is not None and self.experiment_id is None:
            raise ValueError("a variant requires its experiment_id")
        return self


class PriceCalculation(BaseModel):
    """Itemized pipeline output.

    An empty adjustment list listed in skipped_categories means the category's
    collaborator data was unavailable, not that it had no effect.
    """

    model_config = ConfigDict(frozen=True)

    content_type: ContentType
    pricing_model_id: UUID
    catalog_version: str
    base_price: Decimal
    currency: str = Field(pattern=CURRENCY_PATTERN)
    complexity_adjustments: list[PriceAdjustment] = Field(default_factory=list)
    market_adjustments: list[PriceAdjustment] = Field(default_factory=list)
    client_adjustments: list[PriceAdjustment] = Field(default_factory=list)
    experiment_adjustments: list[PriceAdjustment] = Field(default_factory=list)
    surge_multiplier: Decimal
    demand_factor: Decimal
    capacity_factor: Decimal
    timing_factor: Decimal
    final_price: Decimal = Field(ge=0)
    confidence_level: float = Field(ge=0.0, le=1.0)
    breakdown: dict[str, Decimal] = Field(default_factory=dict)
    operations: list[PriceOperation] = Field(default_factory=list)
    experiment_id: UUID | None = None
    variant_id: UUID | None = None
    skipped_categories: list[AdjustmentType] = Field(default_factory=list)
    calculated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def adjustments(self) -> list[PriceAdjustment]:
        return [
            *self.complexity_adjustments,
            *self.market_adjustments,
            *self.client_adjustments,
            *self.experiment_adjustments,
        ]


class PriceQuote(BaseModel):
    """Offer issued to a client.

    Created pending; moves to accepted, rejected or expired exactly once.
    transition() returns the decided copy; persistence applies it with an
    atomic status compare-and-set.
    """

    model_config = ConfigDict(frozen=True)

    quote_id: UUID = Field(default_factory=uuid4)
    project_id: str | None = None
    client_id: str = Field(min_length=1)
    content_type: ContentType
    pricing_model_id: UUID
    base_price: Decimal = Field(ge=0)
    final_price: Decimal = Field(ge=0)
    currency: str = Field(pattern=CURRENCY_PATTERN)
    adjustments: list[PriceAdjustment] = Field(default_factory=list)
    experiment_id: UUID | None = None
    variant_id: UUID | None = None
    valid_until: datetime
    status: QuoteStatus = QuoteStatus.PENDING
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    decided_at: datetime | None = None

    @model_validator(mode="after")
    def _validity_after_creation(self) -> PriceQuote:
        if self.valid_until <= self.created_at:
            raise ValueError("valid_until must be after created_at")
        return self

    @classmethod
    def from_calculation(
        cls,
        calculation: PriceCalculation,
        client_id: str,
        validity: timedelta,
        project_id: str | None = None,
        now: datetime | None = None,
    ) -> PriceQuote:
        created = now or datetime.now(timezone.utc)
        return cls(
            project_id=project_id,
            client_id=client_id,
            content_type=calculation.content_type,
            pricing_model_id=calculation.pricing_model_id,
            base_price=calculation.base_price,
            final_price=calculation.final_price,
            currency=calculation.currency,
            adjustments=calculation.adjustments,
            experiment_id=calculation.experiment_id,
            variant_id=calculation.variant_id,
            valid_until=created + validity,
            created_at=created,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(timezone.utc)) > self.valid_until

    def transition(self, target: QuoteStatus, now: datetime | None = None) -> PriceQuote:
        if self.status.is_terminal or not target.is_terminal:
            raise QuoteStateError(self.quote_id, self.status.value, target.value)
        return self.model_copy(
            update={"status": target, "decided_at": now or datetime.now(timezone.utc)}
        )
