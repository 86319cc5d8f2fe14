"""Price optimization service.

Three objective-specific heuristics; none claims a global revenue optimum.

    revenue      — elasticity-driven ±10 % step
    conversion   — 5 % below the market median
    market share — 15 % below the competitor average

Optional PriceConstraints clamp the recommended price; the expected volume
and revenue effects are computed from the clamped price.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from content_pricing.domain.models.enums import BusinessObjective
from content_pricing.domain.models.market_data import (
    CompetitorAnalysis,
    MarketData,
    PriceElasticity,
)
from content_pricing.domain.models.optimization import PriceConstraints, PriceOptimizationResult

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")

ELASTIC_THRESHOLD = 1.0
INELASTIC_THRESHOLD = 0.5
REVENUE_STEP = Decimal("0.10")
CONVERSION_MEDIAN_RATIO = Decimal("0.95")
CONVERSION_VOLUME_MULTIPLIER = 1.5
MARKET_SHARE_AVERAGE_RATIO = Decimal("0.85")
MARKET_SHARE_VOLUME_MULTIPLIER = 2.0
MARKET_SHARE_CONFIDENCE = 0.7


class PriceOptimizationService:
    """Pure computation service for objective-driven price recommendations.

    Responsibilities (single, focused):
    - Pick a target price for one business objective from collaborator data.
    - Apply optional min/max constraints.
    - Estimate volume and revenue effects and explain the recommendation.

    The class is stateless; all inputs are passed per-call.
    """

    # ------------------------------------------------------------------ #
    # Public API                                                           #
    # ------------------------------------------------------------------ #

    def optimize_for_revenue(
        self,
        current_price: Decimal,
        elasticity: PriceElasticity,
        constraints: PriceConstraints | None = None,
    ) -> PriceOptimizationResult:
        score = abs(elasticity.elasticity_score)
        if score > ELASTIC_THRESHOLD:
            target = current_price * (1 - REVENUE_STEP)
            rationale = f"Demand is elastic (|e| = {score:.2f}); lower the price to grow volume"
        elif score < INELASTIC_THRESHOLD:
            target = current_price * (1 + REVENUE_STEP)
            rationale = f"Demand is inelastic (|e| = {score:.2f}); there is room to raise the price"
        else:
            target = current_price
            rationale = f"Demand is near unit elasticity (|e| = {score:.2f}); keep the current price"

        optimal, clamp_note = self._constrain(target, constraints)
        price_change = self._price_change(current_price, optimal)
        volume_change = -score * price_change
        revenue_change = (1 + price_change) * (1 + volume_change) - 1

        recommendations = [
            rationale,
            f"Adjust price from {current_price:.2f} to {optimal:.2f}",
            f"Expected revenue change: {revenue_change * 100:.1f}%",
        ]
        risk_factors = []
        if elasticity.confidence_level < 0.5:
            risk_factors.append(
                f"Elasticity estimate is weak (confidence {elasticity.confidence_level:.2f})"
            )
        if clamp_note:
            recommendations.append(clamp_note)

        return PriceOptimizationResult(
            objective=BusinessObjective.REVENUE,
            current_price=current_price,
            optimal_price=optimal,
            price_change=price_change,
            expected_volume_change=volume_change,
            expected_revenue_change=revenue_change,
            confidence=elasticity.confidence_level,
            recommendations=recommendations,
            risk_factors=risk_factors,
        )

    def optimize_for_conversion(
        self,
        current_price: Decimal,
        market_data: MarketData,
        constraints: PriceConstraints | None = None,
    ) -> PriceOptimizationResult:
        target = market_data.median_price * CONVERSION_MEDIAN_RATIO
        optimal, clamp_note = self._constrain(target, constraints)
        price_change = self._price_change(current_price, optimal)

        recommendations = [
            "Price positioned for conversion optimization",
            f"Set price 5% below market median ({market_data.median_price:.2f})",
        ]
        risk_factors = []
        if price_change > 0:
            risk_factors.append("Recommended price is above the current price; conversion may drop")
        if clamp_note:
            recommendations.append(clamp_note)

        return PriceOptimizationResult(
            objective=BusinessObjective.CONVERSION,
            current_price=current_price,
            optimal_price=optimal,
            price_change=price_change,
            expected_volume_change=abs(price_change) * CONVERSION_VOLUME_MULTIPLIER,
            expected_revenue_change=price_change * CONVERSION_VOLUME_MULTIPLIER,
            confidence=market_data.confidence_score,
            recommendations=recommendations,
            risk_factors=risk_factors,
        )

    def optimize_for_market_share(
        self,
        current_price: Decimal,
        competitor_analysis: CompetitorAnalysis,
        constraints: PriceConstraints | None = None,
    ) -> PriceOptimizationResult:
        target = competitor_analysis.market_average_price * MARKET_SHARE_AVERAGE_RATIO
        optimal, clamp_note = self._constrain(target, constraints)
        price_change = self._price_change(current_price, optimal)

        recommendations = [
            "Aggressive pricing for market share capture",
            f"Price 15% below market average ({competitor_analysis.market_average_price:.2f})",
            "Monitor competitor responses closely",
        ]
        if clamp_note:
            recommendations.append(clamp_note)

        return PriceOptimizationResult(
            objective=BusinessObjective.MARKET_SHARE,
            current_price=current_price,
            optimal_price=optimal,
            price_change=price_change,
            expected_volume_change=abs(price_change) * MARKET_SHARE_VOLUME_MULTIPLIER,
            expected_revenue_change=price_change * MARKET_SHARE_VOLUME_MULTIPLIER,
            confidence=MARKET_SHARE_CONFIDENCE,
            recommendations=recommendations,
            risk_factors=[
                "Volume-aggressive strategy: margin per unit falls",
                "Competitors may match the price cut",
            ],
        )

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _constrain(
        self, target: Decimal, constraints: PriceConstraints | None
    ) -> tuple[Decimal, str | None]:
        target = target.quantize(_CENT, rounding=ROUND_HALF_UP)
        if constraints is None:
            return target, None
        clamped = constraints.clamp(target)
        if clamped == target:
            return target, None
        logger.warning("Optimized price %s clamped to %s by constraints", target, clamped)
        return clamped, f"Price {target:.2f} clamped to {clamped:.2f} by constraints"

    @staticmethod
    def _price_change(current_price: Decimal, optimal: Decimal) -> float:
        return float((optimal - current_price) / current_price)
