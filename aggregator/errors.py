"""Error taxonomy for the aggregation pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aggregator.records import SourceOutcome


class SourceUnavailable(Exception):
    """Raised by a source client on network failure, non-success response, or timeout."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class AllSourcesFailed(Exception):
    """Every extractor failed; the only hard failure of an analysis."""

    def __init__(self, outcomes: list[SourceOutcome]):
        self.outcomes = list(outcomes)
        super().__init__(
            "Unable to fetch data from any source. "
            "Stock symbol might be invalid or services are unavailable."
        )

    @property
    def failures(self) -> dict[str, str]:
        return {o.source: o.error or "" for o in self.outcomes}


class InvalidSymbol(ValueError):
    """Empty or missing symbol, rejected before any fetch."""


class EnrichmentUnavailable(Exception):
    """Missing credential or enrichment service failure. Never fatal."""
