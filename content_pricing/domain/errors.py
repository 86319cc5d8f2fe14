"""Domain exception taxonomy.

PricingError and ExperimentError are the two roots.  Every exception
carries the identifiers (content type, quote id, experiment id) needed to
reproduce the failure; the message is built from them.

Degraded paths (missing or stale market data, missing client profile) are
not errors: they surface as empty adjustment lists on PriceCalculation.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID


class PricingError(Exception):
    """Base class for price calculation, optimization and quote failures."""


class ModelNotFound(PricingError):
    """No active pricing model exists for the content type.  Fatal for the call."""

    def __init__(self, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(f"No active pricing model for content type {content_type!r}")


class ModelLookupTimeout(PricingError):
    """The mandatory pricing model lookup did not complete within the timeout."""

    def __init__(self, content_type: str, timeout: float) -> None:
        self.content_type = content_type
        self.timeout = timeout
        super().__init__(
            f"Pricing model lookup for {content_type!r} timed out after {timeout:.2f}s"
        )


class OptimizationDataUnavailable(PricingError):
    """The collaborator data an optimization objective requires is missing or stale."""

    def __init__(self, content_type: str, objective: str, detail: str) -> None:
        self.content_type = content_type
        self.objective = objective
        super().__init__(
            f"Cannot optimize {content_type!r} for {objective}: {detail}"
        )


class QuoteNotFound(PricingError):
    def __init__(self, quote_id: UUID) -> None:
        self.quote_id = quote_id
        super().__init__(f"Price quote {quote_id} not found")


class QuoteStateError(PricingError):
    """A quote left pending already; it cannot transition again."""

    def __init__(self, quote_id: UUID, current: str, target: str) -> None:
        self.quote_id = quote_id
        self.current = current
        self.target = target
        super().__init__(
            f"Price quote {quote_id} cannot move from {current!r} to {target!r}"
        )


class ExperimentError(Exception):
    """Base class for experiment design, lifecycle and event failures."""


class ExperimentNotFound(ExperimentError):
    def __init__(self, experiment_id: UUID) -> None:
        self.experiment_id = experiment_id
        super().__init__(f"Pricing experiment {experiment_id} not found")


class ExperimentValidationError(ExperimentError):
    """Malformed experiment design or event.  issues lists every problem found."""

    def __init__(self, issues: Sequence[str], experiment_id: UUID | None = None) -> None:
        self.issues = list(issues)
        self.experiment_id = experiment_id
        subject = f"experiment {experiment_id}" if experiment_id else "experiment design"
        super().__init__(
            f"Invalid {subject} ({len(self.issues)} issue(s)): " + "; ".join(self.issues)
        )


class ExperimentStateError(ExperimentError):
    """Illegal lifecycle transition (e.g. stopping an already-stopped experiment)."""

    def __init__(self, experiment_id: UUID, current: str, target: str) -> None:
        self.experiment_id = experiment_id
        self.current = current
        self.target = target
        super().__init__(
            f"Pricing experiment {experiment_id} cannot move from {current!r} to {target!r}"
        )


class EventOutsideWindowError(ExperimentError):
    """Event timestamp falls outside the experiment's active window."""

    def __init__(self, experiment_id: UUID, recorded_at: datetime) -> None:
        self.experiment_id = experiment_id
        self.recorded_at = recorded_at
        super().__init__(
            f"Event at {recorded_at.isoformat()} is outside the active window "
            f"of experiment {experiment_id}"
        )
