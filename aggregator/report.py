"""Report rendering: deterministic line report, analyst summary, and enrichment prompt.

Both deterministic texts are pure functions of the canonical record, the
derived tiers and the source list, so identical inputs render byte-identical
output. Placeholder text ("N/A", the symbol standing in for a company name)
is introduced here and nowhere upstream.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from aggregator._helpers import _format_inr
from aggregator.enrichment import BASIC_MODEL, Enrichment, Summarizer
from aggregator.orchestrator import DEADLINE_EXCEEDED
from aggregator.records import CanonicalRecord, DerivedMetrics, Report, SourceOutcome

logger = logging.getLogger(__name__)

NA = "N/A"

# Crore rupees; above this a company counts as large-cap
LARGE_CAP_THRESHOLD = 100_000
STRONG_ROE_ABOVE = 15

STRENGTH_PROFITABILITY = "Good ROE indicating profitability"
CONCERN_PROFITABILITY = "Low ROE, profitability concerns"
STRENGTH_STABILITY = "Large-cap stock, stable"
STRENGTH_MOMENTUM = "Positive price momentum"
CONCERN_MOMENTUM = "Recent price decline"
NO_STRENGTHS = "Data limited for full analysis"
NO_CONCERNS = "Limited historical data available"


def _display_name(symbol: str, record: CanonicalRecord) -> str:
    return record.company_name or symbol


def _price(record: CanonicalRecord) -> str:
    return f"₹{record.current_price:.2f}" if record.current_price is not None else NA


def _change(record: CanonicalRecord) -> str:
    return f"{record.change_percent:.2f}%" if record.change_percent is not None else NA


def strengths_and_concerns(record: CanonicalRecord) -> tuple[list[str], list[str]]:
    """Derive strengths and concerns; neither list is ever empty."""
    strengths: list[str] = []
    concerns: list[str] = []

    if record.roe is not None:
        if record.roe > STRONG_ROE_ABOVE:
            strengths.append(STRENGTH_PROFITABILITY)
        else:
            concerns.append(CONCERN_PROFITABILITY)

    if record.market_cap is not None and record.market_cap > LARGE_CAP_THRESHOLD:
        strengths.append(STRENGTH_STABILITY)

    if record.change_percent is not None:
        if record.change_percent > 0:
            strengths.append(STRENGTH_MOMENTUM)
        else:
            concerns.append(CONCERN_MOMENTUM)

    return strengths or [NO_STRENGTHS], concerns or [NO_CONCERNS]


def reliability(source_count: int) -> str:
    label = "Good" if source_count >= 2 else "Fair"
    return f"{label} ({source_count} Sources Verified)"


def render_summary(symbol: str, record: CanonicalRecord, metrics: DerivedMetrics) -> str:
    """Fixed-shape line report. Price falls back to N/A; other optional lines are omitted."""
    lines = [f"📊 {_display_name(symbol, record)}", f"💰 Current Price: {_price(record)}"]

    if record.change_percent is not None:
        direction = "UP" if record.change_percent >= 0 else "DOWN"
        lines.append(f"📈 Today's Change: {record.change_percent:.2f}% {direction}")

    if record.market_cap is not None:
        lines.append(f"🏢 Market Cap: ₹{_format_inr(record.market_cap)} Cr")

    if record.pe_ratio is not None:
        lines.append(f"📊 P/E Ratio: {record.pe_ratio:.2f} ({metrics.valuation.value})")

    if record.roe is not None:
        lines.append(f"💹 Return on Equity: {record.roe:.2f}%")

    if record.book_value is not None:
        lines.append(f"📖 Book Value: ₹{record.book_value:.2f}")

    lines.append(f"⚠️ Risk Level: {metrics.risk.value} Risk")
    return "\n".join(lines)


def render_analyst_summary(
    symbol: str,
    record: CanonicalRecord,
    metrics: DerivedMetrics,
    source_count: int,
) -> str:
    """Deterministic rendition of the analyst format requested from the enrichment service."""
    strengths, concerns = strengths_and_concerns(record)
    lines = [
        f"Stock: {_display_name(symbol, record)} ({symbol})",
        f"Current Price: {_price(record)}  |  Change: {_change(record)}",
        f"Valuation: {metrics.valuation.value}",
        f"Risk Level: {metrics.risk.value}",
        "Strengths:",
        *(f"* {s}" for s in strengths),
        "Concerns:",
        *(f"* {c}" for c in concerns),
        f"Data Reliability: {reliability(source_count)}",
    ]
    return "\n".join(lines)


def _value(value: float | None, fmt: str = "{:.2f}", prefix: str = "", suffix: str = "") -> str:
    if value is None:
        return NA
    return f"{prefix}{fmt.format(value)}{suffix}"


def build_prompt(
    symbol: str,
    record: CanonicalRecord,
    metrics: DerivedMetrics,
    source_count: int,
) -> str:
    strengths, concerns = strengths_and_concerns(record)
    name = _display_name(symbol, record)
    market_cap = f"₹{_format_inr(record.market_cap)} Cr" if record.market_cap is not None else NA

    return "\n".join([
        "You are a professional stock analyst. Analyze the following stock data and "
        "provide a concise summary in this EXACT format:",
        "",
        f"Stock: {name} ({symbol})",
        f"Current Price: {_price(record)}  |  Change: {_change(record)}",
        "Valuation: [Cheap/Fair/Expensive/Very Expensive] (explain briefly)",
        "Risk Level: [Low/Medium/High]",
        "Strengths:",
        "* [strength 1]",
        "* [strength 2]",
        "Concerns:",
        "* [concern 1]",
        "* [concern 2]",
        f"Data Reliability: [Good/Fair/Limited] ({source_count} Sources Verified)",
        "",
        "Stock Data:",
        f"- Stock Symbol: {symbol}",
        f"- Company Name: {record.company_name or NA}",
        f"- Current Price: {_price(record)}",
        f"- Price Change: {_change(record)}",
        f"- P/E Ratio: {_value(record.pe_ratio)}",
        f"- Return on Equity (ROE): {_value(record.roe, suffix='%')}",
        f"- Return on Capital Employed (ROCE): {_value(record.roce, suffix='%')}",
        f"- Market Cap: {market_cap}",
        f"- Book Value: {_value(record.book_value, prefix='₹')}",
        "",
        "Rule-based assessment:",
        f"- Valuation tier: {metrics.valuation.value}",
        f"- Risk tier: {metrics.risk.value}",
        f"- Indicative strengths: {'; '.join(strengths)}",
        f"- Indicative concerns: {'; '.join(concerns)}",
        f"- Contributing sources: {source_count}",
        "",
        "Instructions:",
        "1. Keep the response concise and professional",
        "2. Valuation should be based on P/E ratio: <15 = Cheap, 15-30 = Fair, "
        "30-50 = Expensive, >50 = Very Expensive",
        "3. Risk level should consider P/E, ROE and market cap",
        "4. List 2-3 strengths and 2-3 concerns based on the metrics",
        f"5. Data reliability must name the number of contributing sources ({source_count})",
        "6. Use the exact format shown above",
    ])


async def render(
    symbol: str,
    record: CanonicalRecord,
    metrics: DerivedMetrics,
    sources: Sequence[str],
    summarizer: Summarizer,
    *,
    outcomes: Sequence[SourceOutcome] = (),
    timeout: float | None = None,
) -> Report:
    """Render the deterministic report and attempt enrichment within ``timeout`` seconds."""
    summary = render_summary(symbol, record, metrics)
    fallback = render_analyst_summary(symbol, record, metrics, len(sources))
    prompt = build_prompt(symbol, record, metrics, len(sources))

    if timeout is not None and timeout <= 0:
        enrichment = Enrichment(text=fallback, error=DEADLINE_EXCEEDED)
    else:
        try:
            enrichment = await asyncio.wait_for(summarizer.summarize(prompt, fallback), timeout)
        except asyncio.TimeoutError:
            logger.warning("Enrichment for %s exceeded the request deadline", symbol)
            enrichment = Enrichment(text=fallback, error=DEADLINE_EXCEEDED)

    return Report(
        symbol=symbol,
        summary=summary,
        final_summary=enrichment.text,
        sources=tuple(sources),
        record=record,
        metrics=metrics,
        outcomes=tuple(outcomes),
        prompt=prompt,
        model=enrichment.model if enrichment.error is None else BASIC_MODEL,
        enrichment_error=enrichment.error,
    )
