"""Handler configuration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from content_pricing.infrastructure.database import Settings


@dataclass(frozen=True)
class HandlerConfig:
    collaborator_timeout: float = 2.0  # seconds, per collaborator call
    market_data_max_age: timedelta = timedelta(hours=24)
    market_segment: str = "general"
    quote_validity: timedelta = timedelta(days=7)
    elasticity_window_months: int = 3
    competitor_window_months: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> HandlerConfig:
        return cls(
            collaborator_timeout=settings.collaborator_timeout_seconds,
            market_data_max_age=timedelta(hours=settings.market_data_max_age_hours),
            market_segment=settings.market_segment,
            quote_validity=timedelta(days=settings.quote_validity_days),
            elasticity_window_months=settings.elasticity_window_months,
            competitor_window_months=settings.competitor_window_months,
        )
