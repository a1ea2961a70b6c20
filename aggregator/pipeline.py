"""End-to-end analysis: fan-out fetch, reconcile, classify, render."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Sequence

from aggregator.classify import classify
from aggregator.enrichment import DeterministicSummarizer, Summarizer
from aggregator.errors import InvalidSymbol
from aggregator.orchestrator import DEFAULT_SOURCE_TIMEOUT, Extractor, run_all
from aggregator.reconcile import merge
from aggregator.records import Report
from aggregator.report import render

logger = logging.getLogger(__name__)

# NSE tickers: letters, digits and the punctuation used in listings like M&M or BAJAJ-AUTO
SYMBOL_RE = re.compile(r"[A-Z0-9&._-]+")


def normalize_symbol(symbol: str | None) -> str:
    """Strip and uppercase a ticker.

    Raises:
        InvalidSymbol: If the symbol is missing, blank, or not a ticker token
    """
    cleaned = (symbol or "").strip().upper()
    if not cleaned:
        raise InvalidSymbol("Stock symbol is required")
    if not SYMBOL_RE.fullmatch(cleaned):
        raise InvalidSymbol(f"Invalid stock symbol: {cleaned!r}")
    return cleaned


class StockAnalyzer:
    """Runs one independent analysis per call; holds configuration only."""

    def __init__(
        self,
        extractors: Sequence[Extractor],
        summarizer: Summarizer | None = None,
        *,
        source_timeout: float = DEFAULT_SOURCE_TIMEOUT,
        deadline: float | None = None,
    ):
        self.extractors = tuple(extractors)
        self.summarizer = summarizer or DeterministicSummarizer()
        self.source_timeout = source_timeout
        self.deadline = deadline

    async def analyze(self, symbol: str | None, *, deadline: float | None = None) -> Report:
        """Analyze ``symbol`` and return a best-effort report.

        Raises:
            InvalidSymbol: If the symbol is missing or blank
            AllSourcesFailed: If every source failed
        """
        symbol = normalize_symbol(symbol)
        deadline = deadline if deadline is not None else self.deadline
        started = time.monotonic()

        logger.info("Analyzing stock: %s", symbol)
        outcomes = await run_all(symbol, self.extractors, timeout=self.source_timeout, deadline=deadline)

        record = merge(outcomes)
        metrics = classify(record)
        sources = [o.name for o in outcomes if o.ok]
        logger.info("Sources used for %s: %s", symbol, ", ".join(sources))

        remaining = None if deadline is None else deadline - (time.monotonic() - started)
        return await render(
            symbol,
            record,
            metrics,
            sources,
            self.summarizer,
            outcomes=outcomes,
            timeout=remaining,
        )
