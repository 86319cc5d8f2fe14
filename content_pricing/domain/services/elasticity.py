"""Price elasticity estimation from historic quote outcomes.

Quotes are binned into price quantiles; each bin's acceptance rate stands in
for demand at that bin's mean price.  The elasticity score is the slope of

    log(acceptance rate) = a + e · log(price)

and the confidence level is the R² of that fit.  Bins with no accepted quote
are dropped (log 0 is undefined).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import numpy as np
import pandas as pd

from content_pricing.domain.models.enums import ContentType
from content_pricing.domain.models.market_data import PriceElasticity, TimeRange


@dataclass(frozen=True)
class QuoteOutcome:
    price: Decimal
    accepted: bool


class ElasticityEstimator:
    """Pure log-log elasticity fit.

    Returns None when there are fewer than min_observations outcomes or
    fewer than two usable bins; callers treat that as missing data.
    """

    def __init__(self, bins: int = 5, min_observations: int = 20) -> None:
        if bins < 2:
            raise ValueError(f"bins must be at least 2, got {bins}")
        self.bins = bins
        self.min_observations = min_observations

    def estimate(
        self,
        content_type: ContentType,
        outcomes: list[QuoteOutcome],
        time_range: TimeRange | None = None,
    ) -> PriceElasticity | None:
        if len(outcomes) < self.min_observations:
            return None

        frame = pd.DataFrame(
            {
                "price": [float(o.price) for o in outcomes],
                "accepted": [1.0 if o.accepted else 0.0 for o in outcomes],
            }
        )
        frame = frame[frame["price"] > 0].copy()
        if frame["price"].nunique() < 2:
            return None

        frame["bin"] = pd.qcut(frame["price"], q=self.bins, duplicates="drop")
        grouped = frame.groupby("bin", observed=True).agg(
            price=("price", "mean"), rate=("accepted", "mean")
        )
        grouped = grouped[grouped["rate"] > 0]
        if len(grouped) < 2:
            return None

        log_price = np.log(grouped["price"].to_numpy())
        log_rate = np.log(grouped["rate"].to_numpy())
        slope, intercept = np.polyfit(log_price, log_rate, 1)

        fitted = intercept + slope * log_price
        ss_res = float(np.sum((log_rate - fitted) ** 2))
        ss_tot = float(np.sum((log_rate - log_rate.mean()) ** 2))
        r_squared = 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0

        return PriceElasticity(
            content_type=content_type,
            elasticity_score=float(slope),
            confidence_level=float(np.clip(r_squared, 0.0, 1.0)),
            data_points=len(frame),
            time_range=time_range,
        )
