"""Priority-based merge of per-source records into one canonical record."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from aggregator.records import (
    FIELDS,
    NSE,
    SCREENER,
    TRADINGVIEW,
    YAHOO_FINANCE,
    CanonicalRecord,
    PartialRecord,
    SourceOutcome,
)

# Per-field source authority, highest first. Sources disagree in practice
# (stale caches, different fiscal bases), so the first value in this order
# wins outright; values are never averaged.
FIELD_PRIORITY: dict[str, tuple[str, ...]] = {
    "current_price": (YAHOO_FINANCE, NSE, SCREENER, TRADINGVIEW),
    "previous_close": (YAHOO_FINANCE, NSE),
    "change_percent": (YAHOO_FINANCE, NSE, TRADINGVIEW),
    "volume": (YAHOO_FINANCE, NSE),
    "market_cap": (SCREENER,),
    "pe_ratio": (SCREENER, NSE),
    "roe": (SCREENER,),
    "roce": (SCREENER,),
    "book_value": (SCREENER,),
    "company_name": (NSE, SCREENER, YAHOO_FINANCE),
    "exchange": (YAHOO_FINANCE,),
}


def merge(
    outcomes: Iterable[SourceOutcome],
    priority: Mapping[str, tuple[str, ...]] = FIELD_PRIORITY,
) -> CanonicalRecord:
    """Resolve each field to the first non-absent value along its priority list.

    Failed outcomes contribute nothing. A field no listed source supplied stays
    unresolved (``None``) with no provenance entry.
    """
    records: dict[str, PartialRecord] = {}
    for outcome in outcomes:
        if outcome.ok:
            records.setdefault(outcome.source, outcome.record)

    values: dict[str, Any] = {}
    provenance: dict[str, str] = {}
    for name in FIELDS:
        for source in priority.get(name, ()):
            record = records.get(source)
            if record is None:
                continue
            value = record.get(name)
            if value is not None:
                values[name] = value
                provenance[name] = source
                break

    return CanonicalRecord(**values, provenance=provenance)
