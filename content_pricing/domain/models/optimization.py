"""Price optimization domain models.

PriceConstraints          — optional [min_price, max_price] clamp
PriceOptimizationRequest  — objective-driven optimization input
PriceOptimizationResult   — recommended price with expected volume / revenue effect
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import BusinessObjective, ContentType


class PriceConstraints(BaseModel):
    """Bounds on the recommended price.  Either side may be open (None)."""

    model_config = ConfigDict(frozen=True)

    min_price: Decimal | None = Field(default=None, ge=0)
    max_price: Decimal | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _valid_range(self) -> PriceConstraints:
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError(
                f"min_price ({self.min_price}) must not exceed max_price ({self.max_price})"
            )
        return self

    def clamp(self, price: Decimal) -> Decimal:
        if self.min_price is not None and price < self.min_price:
            return self.min_price
        if self.max_price is not None and price > self.max_price:
            return self.max_price
        return price


class PriceOptimizationRequest(BaseModel):
    """objective is mandatory: there is no default business goal."""

    model_config = ConfigDict(frozen=True)

    content_type: ContentType
    current_price: Decimal = Field(gt=0)
    objective: BusinessObjective
    constraints: PriceConstraints | None = None
    segment: str | None = None


class PriceOptimizationResult(BaseModel):
    """Recommendation under one objective.

    price_change, expected_volume_change and expected_revenue_change are
    fractions (−0.10 = −10 %).
    """

    model_config = ConfigDict(frozen=True)

    objective: BusinessObjective
    current_price: Decimal
    optimal_price: Decimal = Field(ge=0)
    price_change: float
    expected_volume_change: float
    expected_revenue_change: float
    confidence: float = Field(ge=0.0, le=1.0)
    recommendations: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
