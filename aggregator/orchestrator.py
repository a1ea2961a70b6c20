"""Concurrent fan-out over source extractors with per-source failure isolation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from aggregator.errors import AllSourcesFailed, SourceUnavailable
from aggregator.records import PartialRecord, SourceOutcome

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_TIMEOUT = 15.0
DEADLINE_EXCEEDED = "request deadline exceeded"


class Extractor(Protocol):
    SOURCE: str

    async def extract(self, symbol: str) -> PartialRecord: ...


async def _settle(extractor: Extractor, symbol: str, timeout: float) -> SourceOutcome:
    """Run one extractor to completion, converting its failure into an outcome."""
    source = extractor.SOURCE
    try:
        record = await asyncio.wait_for(extractor.extract(symbol), timeout)
    except SourceUnavailable as e:
        logger.warning("Source %s unavailable for %s: %s", source, symbol, e)
        return SourceOutcome.failure(source, str(e))
    except asyncio.TimeoutError:
        logger.warning("Source %s timed out for %s after %gs", source, symbol, timeout)
        return SourceOutcome.failure(source, f"timed out after {timeout:g}s")
    return SourceOutcome.success(source, record)


async def run_all(
    symbol: str,
    extractors: Sequence[Extractor],
    *,
    timeout: float = DEFAULT_SOURCE_TIMEOUT,
    deadline: float | None = None,
) -> list[SourceOutcome]:
    """Launch every extractor concurrently and wait for all of them to settle.

    Outcomes are returned in extractor order. Calls still pending when
    ``deadline`` (seconds) expires are cancelled and recorded as failures.

    Raises:
        AllSourcesFailed: If no extractor succeeded
    """
    if not extractors:
        raise AllSourcesFailed([])

    tasks = [asyncio.create_task(_settle(e, symbol, timeout)) for e in extractors]
    try:
        done, pending = await asyncio.wait(tasks, timeout=deadline)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    if pending:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning("Deadline of %gs hit for %s with %d source(s) pending", deadline, symbol, len(pending))

    outcomes = [
        task.result() if task in done else SourceOutcome.failure(extractor.SOURCE, DEADLINE_EXCEEDED)
        for extractor, task in zip(extractors, tasks)
    ]

    if not any(o.ok for o in outcomes):
        logger.error("All sources failed for %s", symbol)
        raise AllSourcesFailed(outcomes)
    return outcomes
