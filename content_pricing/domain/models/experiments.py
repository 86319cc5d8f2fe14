"""Pricing experiment domain models.

PricingVariant         — one treatment arm: traffic share + price overrides
ExperimentDesign       — unvalidated proposal for a new experiment
PricingExperiment      — experiment aggregate with lifecycle status
ExperimentAssignment   — stable (experiment, client) → variant mapping
ExperimentEvent        — append-only impression / conversion / rejection record
VariantSignificance    — one variant-vs-control significance test
ExperimentRecommendation — winning variant (or explicit "no winner")

Designs and variants are deliberately permissive: ExperimentService
.validate_design() collects every problem in one pass instead of failing on
the first bad field.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import ContentType, EventType, ExperimentStatus, TargetMetric

PRICE_MULTIPLIER = "price_multiplier"
PRICE_OFFSET = "price_offset"
VARIANT_PARAMETERS = frozenset({PRICE_MULTIPLIER, PRICE_OFFSET})


class PricingVariant(BaseModel):
    """Treatment arm.

    parameters override the price: price_multiplier is applied as a factor,
    price_offset as an additive amount in the model's currency.
    """

    model_config = ConfigDict(frozen=True)

    variant_id: UUID = Field(default_factory=uuid4)
    name: str
    is_control: bool = False
    traffic_share: float
    parameters: dict[str, Decimal] = Field(default_factory=dict)
    description: str = ""

    @property
    def price_multiplier(self) -> Decimal:
        return self.parameters.get(PRICE_MULTIPLIER, Decimal("1"))

    @property
    def price_offset(self) -> Decimal:
        return self.parameters.get(PRICE_OFFSET, Decimal("0"))


class ExperimentDesign(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    hypothesis: str = ""
    description: str = ""
    content_type: ContentType
    target_metric: str
    variants: list[PricingVariant] = Field(default_factory=list)
    required_sample_size: int
    significance_level: float = 0.05
    planned_duration: timedelta | None = None


class ExperimentResults(BaseModel):
    """Stored outcome of a concluded experiment."""

    model_config = ConfigDict(frozen=True)

    winning_variant_id: UUID | None = None
    is_significant: bool = False
    p_value: float | None = None
    effect_size: float | None = None
    relative_lift: float | None = None
    recommendation: str
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PricingExperiment(BaseModel):
    """Experiment aggregate.

    Lifecycle: draft → running → stopped | analyzed.  Terminal states are
    final.  end_time is the planned end once running and the actual end once
    stopped; None means open-ended.
    """

    model_config = ConfigDict(frozen=True)

    experiment_id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1)
    hypothesis: str = ""
    description: str = ""
    content_type: ContentType
    target_metric: TargetMetric
    variants: list[PricingVariant]
    status: ExperimentStatus = ExperimentStatus.DRAFT
    required_sample_size: int = Field(gt=0)
    significance_level: float = Field(default=0.05, gt=0.0, lt=1.0)
    planned_duration: timedelta | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    results: ExperimentResults | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_design(cls, design: ExperimentDesign) -> PricingExperiment:
        return cls(
            name=design.name,
            hypothesis=design.hypothesis,
            description=design.description,
            content_type=design.content_type,
            target_metric=TargetMetric(design.target_metric),
            variants=design.variants,
            required_sample_size=design.required_sample_size,
            significance_level=design.significance_level,
            planned_duration=design.planned_duration,
        )

    def to_design(self) -> ExperimentDesign:
        return ExperimentDesign(
            name=self.name,
            hypothesis=self.hypothesis,
            description=self.description,
            content_type=self.content_type,
            target_metric=self.target_metric.value,
            variants=self.variants,
            required_sample_size=self.required_sample_size,
            significance_level=self.significance_level,
            planned_duration=self.planned_duration,
        )

    @property
    def control(self) -> PricingVariant:
        return next(v for v in self.variants if v.is_control)

    def variant(self, variant_id: UUID) -> PricingVariant | None:
        return next((v for v in self.variants if v.variant_id == variant_id), None)

    def is_active_at(self, moment: datetime) -> bool:
        if self.status != ExperimentStatus.RUNNING or self.start_time is None:
            return False
        if moment < self.start_time:
            return False
        return self.end_time is None or moment <= self.end_time


class ExperimentAssignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    experiment_id: UUID
    client_id: str = Field(min_length=1)
    variant_id: UUID
    assigned_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ExperimentEvent(BaseModel):
    """Append-only experiment observation.

    value carries the metric payload: the quoted or order amount for
    conversion events, 0 otherwise unless the caller supplies one.
    """

    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(default_factory=uuid4)
    experiment_id: UUID
    variant_id: UUID
    client_id: str = Field(min_length=1)
    event_type: EventType
    value: float = 0.0
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _aware_recorded_at(self) -> ExperimentEvent:
        if self.recorded_at.tzinfo is None:
            raise ValueError("recorded_at must be timezone-aware")
        return self


class VariantSignificance(BaseModel):
    """Variant vs control test result.

    effect_size is variant metric − control metric; relative_lift divides
    it by the control metric (None when the control metric is 0).
    sample_size = control observations + variant observations.
    """

    model_config = ConfigDict(frozen=True)

    variant_id: UUID
    variant_name: str
    test: str  # "two_proportion_z" | "welch_t"
    control_metric: float
    variant_metric: float
    p_value: float = Field(ge=0.0, le=1.0)
    effect_size: float
    relative_lift: float | None = None
    sample_size: int = Field(ge=0)
    required_sample_size: int
    significance_level: float
    confidence: float = Field(ge=0.0, le=1.0)  # 1 − p_value
    power: float | None = None
    is_significant: bool


class ExperimentRecommendation(BaseModel):
    """Winning variant, or winner=None with an explicit "no winner" reason."""

    model_config = ConfigDict(frozen=True)

    experiment_id: UUID
    winning_variant_id: UUID | None = None
    winning_variant_name: str | None = None
    expected_lift: float | None = None
    reasoning: list[str] = Field(default_factory=list)
    results: list[VariantSignificance] = Field(default_factory=list)

    @property
    def has_winner(self) -> bool:
        return self.winning_variant_id is not None
