"""Pricing experiment service.

Design validation, deterministic variant bucketing, and variant-vs-control
significance testing.

Bucketing:
    bucket = int(sha256("{experiment_id}:{client_id}")[:8]) / 2⁶⁴  ∈ [0, 1)
    The client gets the first variant (in declared order) whose cumulative
    traffic share exceeds the bucket; a bucket at or beyond the total share
    is not enrolled.  Same inputs always give the same variant.

Significance:
    conversion_rate          — pooled two-proportion z-test, two-sided
                               (trials = impressions, successes = conversions)
    average_order_value      — Welch's t-test over conversion event values
    average_quoted_price     — Welch's t-test over impression event values

    is_significant requires BOTH p < α AND control n + variant n ≥ the
    experiment's required sample size.
"""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass
from uuid import UUID

import numpy as np
import pandas as pd
from scipy import stats

from content_pricing.domain.models.enums import EventType, MetricKind, TargetMetric
from content_pricing.domain.models.experiments import (
    VARIANT_PARAMETERS,
    ExperimentDesign,
    ExperimentEvent,
    ExperimentRecommendation,
    PricingExperiment,
    PricingVariant,
    VariantSignificance,
)

_BUCKET_SPACE = 2**64
_SHARE_TOLERANCE = 1e-9

_VALUE_EVENT = {
    TargetMetric.AVERAGE_ORDER_VALUE: EventType.CONVERSION,
    TargetMetric.AVERAGE_QUOTED_PRICE: EventType.IMPRESSION,
}


@dataclass(frozen=True)
class _ArmSample:
    """Observations for one variant, reduced to what the tests need."""

    n: int
    successes: int = 0            # proportion metrics only
    values: np.ndarray | None = None  # mean metrics only

    @property
    def metric(self) -> float:
        if self.values is not None:
            return float(self.values.mean()) if self.values.size else 0.0
        return self.successes / self.n if self.n else 0.0


def assignment_bucket(experiment_id: UUID, client_id: str) -> float:
    """Stable position of a client in [0, 1) for one experiment."""
    digest = hashlib.sha256(f"{experiment_id}:{client_id}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") / _BUCKET_SPACE


class ExperimentService:
    """Pure computation service for pricing experiments.

    Responsibilities (single, focused):
    - Validate an experiment design, reporting every issue at once.
    - Map a client to a variant deterministically.
    - Test each non-control variant against the control.
    - Pick the winning variant or report that there is none.

    The class is stateless; experiments and events are passed per-call.
    """

    # ------------------------------------------------------------------ #
    # Design validation                                                    #
    # ------------------------------------------------------------------ #

    def validate_design(self, design: ExperimentDesign) -> list[str]:
        """Return every problem with the design; an empty list means valid."""
        issues: list[str] = []
        variants = design.variants

        if not design.name.strip():
            issues.append("experiment name must not be empty")
        if len(variants) < 2:
            issues.append(f"at least 2 variants are required, got {len(variants)}")

        controls = [v for v in variants if v.is_control]
        if len(controls) != 1:
            issues.append(f"exactly one control variant is required, got {len(controls)}")

        names = [v.name for v in variants]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            issues.append(f"variant names must be unique, duplicated: {duplicates}")

        for variant in variants:
            issues.extend(self._variant_issues(variant))

        total_share = sum(v.traffic_share for v in variants)
        if total_share > 1.0 + _SHARE_TOLERANCE:
            issues.append(f"traffic shares sum to {total_share:.4f}, must be <= 1.0")

        if design.target_metric not in {m.value for m in TargetMetric}:
            issues.append(
                f"unrecognized target metric {design.target_metric!r}; "
                f"expected one of {[m.value for m in TargetMetric]}"
            )
        if design.required_sample_size <= 0:
            issues.append(
                f"required sample size must be positive, got {design.required_sample_size}"
            )
        if not 0.0 < design.significance_level < 1.0:
            issues.append(
                f"significance level must be in (0, 1), got {design.significance_level}"
            )
        if design.planned_duration is not None and design.planned_duration.total_seconds() <= 0:
            issues.append("planned duration must be positive")
        return issues

    # ------------------------------------------------------------------ #
    # Assignment                                                           #
    # ------------------------------------------------------------------ #

    def choose_variant(
        self, experiment: PricingExperiment, client_id: str
    ) -> PricingVariant | None:
        bucket = assignment_bucket(experiment.experiment_id, client_id)
        cumulative = 0.0
        for variant in experiment.variants:
            cumulative += variant.traffic_share
            if bucket < cumulative:
                return variant
        return None

    # ------------------------------------------------------------------ #
    # Significance                                                         #
    # ------------------------------------------------------------------ #

    def calculate_significance(
        self,
        experiment: PricingExperiment,
        events: list[ExperimentEvent],
    ) -> list[VariantSignificance]:
        """Test every non-control variant against the control."""
        frame = self._events_frame(events)
        control = experiment.control
        control_sample = self._arm_sample(frame, control.variant_id, experiment.target_metric)

        results: list[VariantSignificance] = []
        for variant in experiment.variants:
            if variant.is_control:
                continue
            sample = self._arm_sample(frame, variant.variant_id, experiment.target_metric)
            results.append(self._compare(experiment, variant, control_sample, sample))
        return results

    def recommend(
        self,
        experiment: PricingExperiment,
        results: list[VariantSignificance],
    ) -> ExperimentRecommendation:
        """Best metric among significant variants that beat the control.

        Never falls back to the control or to the best raw number.
        """
        winners = [
            r for r in results if r.is_significant and r.variant_metric > r.control_metric
        ]
        if not winners:
            reasoning = ["No winner: no variant beat the control with statistical significance"]
            for r in results:
                if r.p_value < r.significance_level and r.sample_size < r.required_sample_size:
                    reasoning.append(
                        f"{r.variant_name}: p={r.p_value:.4f} but sample size "
                        f"{r.sample_size} < required {r.required_sample_size}"
                    )
            return ExperimentRecommendation(
                experiment_id=experiment.experiment_id,
                reasoning=reasoning,
                results=results,
            )

        best = max(winners, key=lambda r: r.variant_metric)
        return ExperimentRecommendation(
            experiment_id=experiment.experiment_id,
            winning_variant_id=best.variant_id,
            winning_variant_name=best.variant_name,
            expected_lift=best.relative_lift,
            reasoning=[
                f"{best.variant_name} {experiment.target_metric.value} = {best.variant_metric:.4f} "
                f"vs control {best.control_metric:.4f} (p={best.p_value:.4f}, "
                f"n={best.sample_size})",
            ],
            results=results,
        )

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _variant_issues(self, variant: PricingVariant) -> list[str]:
        issues: list[str] = []
        label = variant.name or str(variant.variant_id)
        if not variant.name.strip():
            issues.append(f"variant {variant.variant_id} has no name")
        if not 0.0 < variant.traffic_share <= 1.0:
            issues.append(
                f"variant {label!r} traffic share {variant.traffic_share} must be in (0, 1]"
            )
        if not variant.parameters:
            issues.append(f"variant {label!r} has no parameters")
        unknown = sorted(set(variant.parameters) - VARIANT_PARAMETERS)
        if unknown:
            issues.append(
                f"variant {label!r} has unrecognized parameters {unknown}; "
                f"expected {sorted(VARIANT_PARAMETERS)}"
            )
        if variant.price_multiplier < 0:
            issues.append(f"variant {label!r} price_multiplier must not be negative")
        return issues

    @staticmethod
    def _events_frame(events: list[ExperimentEvent]) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "variant_id": [e.variant_id for e in events],
                "event_type": [e.event_type.value for e in events],
                "value": [e.value for e in events],
            },
            columns=["variant_id", "event_type", "value"],
        )

    @staticmethod
    def _arm_sample(frame: pd.DataFrame, variant_id: UUID, metric: TargetMetric) -> _ArmSample:
        arm = frame[frame["variant_id"] == variant_id]
        counts = arm["event_type"].value_counts()
        if metric.kind == MetricKind.PROPORTION:
            impressions = int(counts.get(EventType.IMPRESSION.value, 0))
            conversions = int(counts.get(EventType.CONVERSION.value, 0))
            # a conversion recorded without its impression still counts once
            return _ArmSample(n=max(impressions, conversions), successes=conversions)
        values = arm.loc[arm["event_type"] == _VALUE_EVENT[metric].value, "value"]
        array = values.to_numpy(dtype=float)
        return _ArmSample(n=int(array.size), values=array)

    def _compare(
        self,
        experiment: PricingExperiment,
        variant: PricingVariant,
        control: _ArmSample,
        sample: _ArmSample,
    ) -> VariantSignificance:
        alpha = experiment.significance_level
        if experiment.target_metric.kind == MetricKind.PROPORTION:
            test = "two_proportion_z"
            statistic, p_value = self._two_proportion_z(control, sample)
        else:
            test = "welch_t"
            statistic, p_value = self._welch_t(control, sample)

        effect = sample.metric - control.metric
        lift = effect / control.metric if control.metric else None
        total = control.n + sample.n
        return VariantSignificance(
            variant_id=variant.variant_id,
            variant_name=variant.name,
            test=test,
            control_metric=control.metric,
            variant_metric=sample.metric,
            p_value=p_value,
            effect_size=effect,
            relative_lift=lift,
            sample_size=total,
            required_sample_size=experiment.required_sample_size,
            significance_level=alpha,
            confidence=1.0 - p_value,
            power=self._power(statistic, alpha),
            is_significant=p_value < alpha and total >= experiment.required_sample_size,
        )

    @staticmethod
    def _two_proportion_z(control: _ArmSample, sample: _ArmSample) -> tuple[float, float]:
        if control.n == 0 or sample.n == 0:
            return 0.0, 1.0
        pooled = (control.successes + sample.successes) / (control.n + sample.n)
        se = math.sqrt(pooled * (1 - pooled) * (1 / control.n + 1 / sample.n))
        if se == 0:
            return 0.0, 1.0
        z = (sample.metric - control.metric) / se
        return z, float(2 * stats.norm.sf(abs(z)))

    @staticmethod
    def _welch_t(control: _ArmSample, sample: _ArmSample) -> tuple[float, float]:
        if control.n < 2 or sample.n < 2:
            return 0.0, 1.0
        result = stats.ttest_ind(sample.values, control.values, equal_var=False)
        statistic, p_value = float(result.statistic), float(result.pvalue)
        if math.isnan(p_value):
            # both arms constant: no evidence either way
            return 0.0, 1.0
        return statistic, p_value

    @staticmethod
    def _power(statistic: float, alpha: float) -> float:
        """Post-hoc power of a two-sided test at the observed effect (normal approximation)."""
        critical = stats.norm.ppf(1 - alpha / 2)
        shift = abs(statistic)
        return float(stats.norm.cdf(shift - critical) + stats.norm.cdf(-shift - critical))
