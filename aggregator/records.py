"""Record types shared by every stage of the aggregation pipeline.

The field vocabulary is closed: every source maps its native payload onto
``PartialRecord`` and nothing else, so a missing value is always an explicit
``None`` rather than a missing dict key.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

# Source identifiers
YAHOO_FINANCE = "yahoo_finance"
NSE = "nse"
SCREENER = "screener"
TRADINGVIEW = "tradingview"

SOURCE_NAMES = {
    YAHOO_FINANCE: "Yahoo Finance",
    NSE: "NSE India",
    SCREENER: "Screener.in",
    TRADINGVIEW: "TradingView",
}


def source_name(source: str) -> str:
    return SOURCE_NAMES.get(source, source)


@dataclass(frozen=True)
class PartialRecord:
    """Sparse single-source field set. ``None`` means the source did not supply the field."""

    current_price: float | None = None
    previous_close: float | None = None
    change_percent: float | None = None
    volume: int | None = None
    market_cap: float | None = None  # crore rupees
    pe_ratio: float | None = None
    roe: float | None = None
    roce: float | None = None
    book_value: float | None = None
    company_name: str | None = None
    exchange: str | None = None

    def get(self, name: str) -> Any:
        if name not in FIELDS:
            raise KeyError(f"Unknown field '{name}'")
        return getattr(self, name)

    def present(self) -> dict[str, Any]:
        """Fields with a value, in vocabulary order."""
        return {name: getattr(self, name) for name in FIELDS if getattr(self, name) is not None}

    def is_empty(self) -> bool:
        return not self.present()


FIELDS: tuple[str, ...] = tuple(f.name for f in fields(PartialRecord))


@dataclass(frozen=True)
class SourceOutcome:
    """Result of one extractor call: a record on success, a reason on failure."""

    source: str
    record: PartialRecord = field(default_factory=PartialRecord)
    error: str | None = None

    @classmethod
    def success(cls, source: str, record: PartialRecord) -> SourceOutcome:
        return cls(source=source, record=record)

    @classmethod
    def failure(cls, source: str, reason: str) -> SourceOutcome:
        return cls(source=source, error=reason or "unknown error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def name(self) -> str:
        return source_name(self.source)

    def to_dict(self) -> dict:
        if not self.ok:
            return {"source": self.name, "status": "failed", "error": self.error}
        return {"source": self.name, "status": "ok", "fields": self.record.present()}


@dataclass(frozen=True)
class CanonicalRecord(PartialRecord):
    """Merged record. ``provenance`` maps each resolved field to the source that supplied it."""

    provenance: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "provenance", MappingProxyType(dict(self.provenance)))

    def source_of(self, name: str) -> str | None:
        return self.provenance.get(name)

    @property
    def unresolved(self) -> tuple[str, ...]:
        return tuple(name for name in FIELDS if getattr(self, name) is None)

    def to_dict(self) -> dict:
        values = {name: getattr(self, name) for name in FIELDS}
        return {
            "values": values,
            "provenance": {name: source_name(src) for name, src in self.provenance.items()},
            "unresolved": list(self.unresolved),
        }


class ValuationTier(str, Enum):
    CHEAP = "Cheap"
    FAIR = "Fair"
    EXPENSIVE = "Expensive"
    VERY_EXPENSIVE = "Very Expensive"


class RiskTier(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class DerivedMetrics:
    valuation: ValuationTier = ValuationTier.FAIR
    risk: RiskTier = RiskTier.MEDIUM

    def to_dict(self) -> dict:
        return {"valuation": self.valuation.value, "risk": self.risk.value}


@dataclass(frozen=True)
class Report:
    """Rendered analysis for one symbol.

    ``summary`` is the deterministic line report and is always present.
    ``final_summary`` is the enriched text when enrichment succeeded, otherwise
    the deterministic analyst summary, with ``enrichment_error`` explaining why.
    """

    symbol: str
    summary: str
    final_summary: str
    sources: tuple[str, ...]
    record: CanonicalRecord
    metrics: DerivedMetrics
    outcomes: tuple[SourceOutcome, ...] = ()
    prompt: str = ""
    model: str = "basic"
    enrichment_error: str | None = None

    @property
    def enriched(self) -> bool:
        return self.enrichment_error is None

    @property
    def enriched_summary(self) -> str | None:
        return self.final_summary if self.enriched else None

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "summary": self.summary,
            "final_summary": self.final_summary,
            "ai_prompt": self.prompt,
            "ai_model": self.model,
            "ai_error": self.enrichment_error,
            "sources": list(self.sources),
            "metrics": self.metrics.to_dict(),
            "raw_data": {o.source: o.to_dict() for o in self.outcomes},
            "combined_data": self.record.to_dict(),
        }
