"""Valuation and risk tiers derived from a canonical record."""

from __future__ import annotations

from aggregator.records import CanonicalRecord, DerivedMetrics, RiskTier, ValuationTier

CHEAP_BELOW = 15
FAIR_UP_TO = 30
EXPENSIVE_UP_TO = 50

LOW_RISK_PE_BELOW = 20
LOW_RISK_ROE_ABOVE = 15
HIGH_RISK_PE_ABOVE = 50


def valuation_tier(pe_ratio: float | None) -> ValuationTier:
    """<15 Cheap, 15-30 Fair, (30, 50] Expensive, >50 Very Expensive. Unknown ratio is Fair."""
    if pe_ratio is None:
        return ValuationTier.FAIR
    if pe_ratio < CHEAP_BELOW:
        return ValuationTier.CHEAP
    if pe_ratio <= FAIR_UP_TO:
        return ValuationTier.FAIR
    if pe_ratio <= EXPENSIVE_UP_TO:
        return ValuationTier.EXPENSIVE
    return ValuationTier.VERY_EXPENSIVE


def risk_tier(pe_ratio: float | None, roe: float | None) -> RiskTier:
    """Medium by default; High when P/E > 50, which takes precedence over Low."""
    if pe_ratio is None:
        return RiskTier.MEDIUM
    if pe_ratio > HIGH_RISK_PE_ABOVE:
        return RiskTier.HIGH
    if roe is not None and pe_ratio < LOW_RISK_PE_BELOW and roe > LOW_RISK_ROE_ABOVE:
        return RiskTier.LOW
    return RiskTier.MEDIUM


def classify(record: CanonicalRecord) -> DerivedMetrics:
    return DerivedMetrics(
        valuation=valuation_tier(record.pe_ratio),
        risk=risk_tier(record.pe_ratio, record.roe),
    )
