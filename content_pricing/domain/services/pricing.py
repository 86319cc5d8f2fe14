"""Price calculation pipeline.

Stage order is a contract; changing it changes prices:

    base price (PricingModel.request_base_price)
        → complexity adjustments  (word count, level, research, technical, requirements)
        → market adjustments      (demand, market position, trend)
        → client adjustments      (tier, risk, payment terms, loyalty)
        → experiment adjustment   (variant price_multiplier / price_offset)
        → × surge × realtime demand × capacity × timing
        → quantize to 0.01 (ROUND_HALF_UP), floor at 0

Each adjustment record is applied as price × factor (when factor > 0) then
+ amount.  The fold returns the total together with the operation log, so
the breakdown is a by-product of the calculation rather than a separately
maintained map.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from content_pricing.domain.models.catalog import AdjustmentCatalog
from content_pricing.domain.models.clients import ClientPricingProfile
from content_pricing.domain.models.enums import AdjustmentType, ContentType, PriceStage
from content_pricing.domain.models.experiments import PricingVariant
from content_pricing.domain.models.market_data import MarketData
from content_pricing.domain.models.pricing import (
    ContentSpecification,
    PriceAdjustment,
    PriceCalculation,
    PriceOperation,
    PriceRequest,
    PricingSnapshot,
)

_CENT = Decimal("0.01")
_ONE = Decimal("1")
_ZERO = Decimal("0")
_HUNDRED = Decimal("100")

_CATEGORY_STAGES: dict[AdjustmentType, PriceStage] = {
    AdjustmentType.COMPLEXITY: PriceStage.COMPLEXITY,
    AdjustmentType.MARKET: PriceStage.MARKET,
    AdjustmentType.CLIENT: PriceStage.CLIENT,
    AdjustmentType.EXPERIMENT: PriceStage.EXPERIMENT,
}


def fold_price(
    base: Decimal,
    adjustments: Iterable[PriceAdjustment],
    scalars: Iterable[tuple[PriceStage, str, Decimal]] = (),
) -> tuple[Decimal, list[PriceOperation]]:
    """Left-fold `adjustments` then `scalars` over `base`.

    Returns the unrounded total and one PriceOperation per step.
    """
    price = base
    operations: list[PriceOperation] = []
    for adjustment in adjustments:
        before = price
        if adjustment.factor > 0:
            price = price * adjustment.factor
        price = price + adjustment.amount
        operations.append(
            PriceOperation(
                stage=_CATEGORY_STAGES[adjustment.adjustment_type],
                label=adjustment.reason,
                factor=adjustment.factor,
                amount=adjustment.amount,
                price_before=before,
                price_after=price,
            )
        )
    for stage, label, factor in scalars:
        before = price
        price = price * factor
        operations.append(
            PriceOperation(
                stage=stage,
                label=label,
                factor=factor,
                amount=_ZERO,
                price_before=before,
                price_after=price,
            )
        )
    return price, operations


def quantize_price(price: Decimal) -> Decimal:
    """Round to the currency minor unit and floor at zero."""
    return max(price, _ZERO).quantize(_CENT, rounding=ROUND_HALF_UP)


class PricingService:
    """Pure computation service for the price calculation pipeline.

    Responsibilities (single, focused):
    - Derive every adjustment record from an already-fetched PricingSnapshot.
    - Derive the surge, realtime demand, capacity and timing factors.
    - Fold them in the documented order and itemize the result.

    The class is stateless; the AdjustmentCatalog is passed per-call.
    Missing market data or client profile yields an empty list for that
    category and lists the category in skipped_categories.
    """

    # ------------------------------------------------------------------ #
    # Public API                                                           #
    # ------------------------------------------------------------------ #

    def calculate_price(
        self,
        snapshot: PricingSnapshot,
        request: PriceRequest,
        catalog: AdjustmentCatalog,
    ) -> PriceCalculation:
        model = snapshot.model
        base = model.request_base_price(request.content_spec)

        complexity = self.complexity_adjustments(base, request.content_spec, catalog)
        market = self.market_adjustments(base, snapshot.market_data, catalog)
        client = self.client_adjustments(base, snapshot.client_profile, catalog)
        experiment = self.experiment_adjustments(snapshot.variant)

        surge = self.surge_multiplier(request.content_type, request.expected_delivery_time, catalog)
        demand = self.demand_factor(snapshot.market_data, catalog)
        capacity = self.capacity_factor(request.current_system_load, catalog)
        timing = self.timing_factor(request.request_time, catalog)

        total, operations = fold_price(
            base,
            [*complexity, *market, *client, *experiment],
            [
                (PriceStage.SURGE, "surge", surge),
                (PriceStage.DEMAND, "realtime_demand", demand),
                (PriceStage.CAPACITY, "capacity", capacity),
                (PriceStage.TIMING, "timing", timing),
            ],
        )
        final_price = quantize_price(total)

        skipped: list[AdjustmentType] = []
        if snapshot.market_data is None:
            skipped.append(AdjustmentType.MARKET)
        if snapshot.client_profile is None:
            skipped.append(AdjustmentType.CLIENT)

        confidence = (
            snapshot.market_data.confidence_score
            if snapshot.market_data is not None
            else catalog.default_confidence
        )

        return PriceCalculation(
            content_type=request.content_type,
            pricing_model_id=model.pricing_model_id,
            catalog_version=catalog.version,
            base_price=base,
            currency=model.currency,
            complexity_adjustments=complexity,
            market_adjustments=market,
            client_adjustments=client,
            experiment_adjustments=experiment,
            surge_multiplier=surge,
            demand_factor=demand,
            capacity_factor=capacity,
            timing_factor=timing,
            final_price=final_price,
            confidence_level=confidence,
            breakdown=self._breakdown(base, final_price, surge, demand, capacity, timing, operations),
            operations=operations,
            experiment_id=snapshot.experiment_id if snapshot.variant is not None else None,
            variant_id=snapshot.variant.variant_id if snapshot.variant is not None else None,
            skipped_categories=skipped,
        )

    # ------------------------------------------------------------------ #
    # Adjustment categories                                                #
    # ------------------------------------------------------------------ #

    def complexity_adjustments(
        self,
        base: Decimal,
        spec: ContentSpecification | None,
        catalog: AdjustmentCatalog,
    ) -> list[PriceAdjustment]:
        if spec is None:
            return []

        adjustments: list[PriceAdjustment] = []
        if spec.word_count is not None:
            policy = catalog.word_count
            factor = _ONE
            if spec.word_count > policy.baseline_words:
                extra = Decimal(spec.word_count - policy.baseline_words)
                factor = _ONE + extra / Decimal(policy.step_words) * policy.step_increment
            adjustments.append(
                PriceAdjustment(
                    adjustment_type=AdjustmentType.COMPLEXITY,
                    reason="word_count",
                    factor=factor,
                    description=f"{spec.word_count} words (baseline {policy.baseline_words})",
                )
            )
        if spec.complexity_level is not None:
            adjustments.append(
                PriceAdjustment(
                    adjustment_type=AdjustmentType.COMPLEXITY,
                    reason="complexity_level",
                    factor=catalog.complexity_level[spec.complexity_level],
                    description=f"{spec.complexity_level.value} complexity",
                )
            )
        if spec.research_depth is not None:
            adjustments.append(
                PriceAdjustment(
                    adjustment_type=AdjustmentType.COMPLEXITY,
                    reason="research_depth",
                    factor=catalog.research_depth[spec.research_depth],
                    description=f"{spec.research_depth.value} research",
                )
            )
        if spec.technical_level is not None:
            adjustments.append(
                PriceAdjustment(
                    adjustment_type=AdjustmentType.COMPLEXITY,
                    reason="technical_level",
                    factor=catalog.technical_level[spec.technical_level],
                    description=f"{spec.technical_level.value} technical level",
                )
            )

        policy = catalog.requirements
        extra_requirements = max(len(spec.requirements) - policy.included, 0)
        adjustments.append(
            PriceAdjustment(
                adjustment_type=AdjustmentType.COMPLEXITY,
                reason="special_requirements",
                amount=base * policy.surcharge_rate * extra_requirements,
                description=(
                    f"{len(spec.requirements)} requirements, {policy.included} included"
                ),
            )
        )
        return adjustments

    def market_adjustments(
        self,
        base: Decimal,
        market_data: MarketData | None,
        catalog: AdjustmentCatalog,
    ) -> list[PriceAdjustment]:
        if market_data is None:
            return []

        position = market_data.market_position(base)
        return [
            PriceAdjustment(
                adjustment_type=AdjustmentType.MARKET,
                reason="demand_level",
                factor=catalog.demand_level[market_data.demand_level],
                description=f"{market_data.demand_level.value} market demand",
            ),
            PriceAdjustment(
                adjustment_type=AdjustmentType.MARKET,
                reason="market_position",
                factor=catalog.market_position[position],
                description=(
                    f"base {base} is {position.value} "
                    f"(median {market_data.median_price})"
                ),
            ),
            PriceAdjustment(
                adjustment_type=AdjustmentType.MARKET,
                reason="trend_direction",
                factor=catalog.trend_direction[market_data.trend_direction],
                description=f"{market_data.trend_direction.value} price trend",
            ),
        ]

    def client_adjustments(
        self,
        base: Decimal,
        profile: ClientPricingProfile | None,
        catalog: AdjustmentCatalog,
    ) -> list[PriceAdjustment]:
        if profile is None:
            return []

        return [
            PriceAdjustment(
                adjustment_type=AdjustmentType.CLIENT,
                reason="client_tier",
                factor=catalog.client_tier[profile.tier],
                description=f"{profile.tier.value} tier",
            ),
            PriceAdjustment(
                adjustment_type=AdjustmentType.CLIENT,
                reason="risk_level",
                factor=catalog.risk_level[profile.risk_level],
                description=f"{profile.risk_level.value} risk",
            ),
            PriceAdjustment(
                adjustment_type=AdjustmentType.CLIENT,
                reason="payment_terms",
                factor=catalog.payment_terms[profile.payment_terms],
                description=f"{profile.payment_terms.value} payment terms",
            ),
            # additive: a percentage of the base price, never of the running total
            PriceAdjustment(
                adjustment_type=AdjustmentType.CLIENT,
                reason="loyalty_discount",
                amount=-(base * profile.loyalty_discount_pct / _HUNDRED),
                description=f"{profile.loyalty_discount_pct}% loyalty discount",
            ),
        ]

    def experiment_adjustments(self, variant: PricingVariant | None) -> list[PriceAdjustment]:
        if variant is None:
            return []
        return [
            PriceAdjustment(
                adjustment_type=AdjustmentType.EXPERIMENT,
                reason=f"experiment_variant:{variant.name}",
                factor=variant.price_multiplier,
                amount=variant.price_offset,
                description=f"variant {variant.name} ({variant.variant_id})",
            )
        ]

    # ------------------------------------------------------------------ #
    # Scalar factors                                                       #
    # ------------------------------------------------------------------ #

    def surge_multiplier(
        self,
        content_type: ContentType,
        expected_delivery_time: timedelta,
        catalog: AdjustmentCatalog,
    ) -> Decimal:
        ratio = expected_delivery_time / catalog.standard_delivery[content_type]
        return catalog.surge.factor_for(ratio)

    def demand_factor(self, market_data: MarketData | None, catalog: AdjustmentCatalog) -> Decimal:
        if market_data is None:
            return _ONE
        return catalog.realtime_demand[market_data.demand_level]

    def capacity_factor(self, current_system_load: float, catalog: AdjustmentCatalog) -> Decimal:
        return catalog.capacity.factor_for(current_system_load)

    def timing_factor(self, moment: datetime, catalog: AdjustmentCatalog) -> Decimal:
        """Weekend, off-hours and holiday premiums, evaluated in moment's own timezone."""
        policy = catalog.timing
        factor = _ONE
        if moment.weekday() >= 5:
            factor *= policy.weekend_factor
        if moment.hour < policy.business_start_hour or moment.hour > policy.business_end_hour:
            factor *= policy.off_hours_factor
        if (moment.month, moment.day) in policy.holidays:
            factor *= policy.holiday_factor
        return factor

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _breakdown(
        self,
        base: Decimal,
        final_price: Decimal,
        surge: Decimal,
        demand: Decimal,
        capacity: Decimal,
        timing: Decimal,
        operations: list[PriceOperation],
    ) -> dict[str, Decimal]:
        breakdown: dict[str, Decimal] = {
            "base_price": base,
            "final_price": final_price,
            "surge_factor": surge,
            "demand_factor": demand,
            "capacity_factor": capacity,
            "timing_factor": timing,
            "adjustments": final_price - base,
        }
        for stage in (
            PriceStage.COMPLEXITY,
            PriceStage.MARKET,
            PriceStage.CLIENT,
            PriceStage.EXPERIMENT,
        ):
            steps = [op for op in operations if op.stage == stage]
            delta = steps[-1].price_after - steps[0].price_before if steps else _ZERO
            breakdown[f"{stage.value}_adjustment"] = delta
        return breakdown
