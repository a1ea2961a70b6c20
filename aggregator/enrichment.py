"""Summarizer strategies: external generative enrichment or deterministic-only.

The strategy is chosen once, when the analyzer is built, from whether an
enrichment client (i.e. a credential) is available.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from aggregator.errors import EnrichmentUnavailable

if TYPE_CHECKING:
    from openai_client import OpenAIClient

logger = logging.getLogger(__name__)

BASIC_MODEL = "basic"
NO_CREDENTIAL = "OpenAI API key not configured"


@dataclass(frozen=True)
class Enrichment:
    text: str
    model: str = BASIC_MODEL
    error: str | None = None


class Summarizer(Protocol):
    async def summarize(self, prompt: str, fallback: str) -> Enrichment: ...


class DeterministicSummarizer:
    """Used when no credential is configured. Always returns the fallback."""

    def __init__(self, reason: str = NO_CREDENTIAL):
        self.reason = reason

    async def summarize(self, prompt: str, fallback: str) -> Enrichment:
        return Enrichment(text=fallback, error=self.reason)


class EnrichedSummarizer:
    """Asks the enrichment service for the summary, substituting the fallback on failure."""

    def __init__(self, client: OpenAIClient):
        self.client = client

    async def summarize(self, prompt: str, fallback: str) -> Enrichment:
        try:
            text = await self.client.complete(prompt)
        except EnrichmentUnavailable as e:
            logger.warning("Enrichment unavailable, using deterministic summary: %s", e)
            return Enrichment(text=fallback, error=str(e))
        return Enrichment(text=text, model=self.client.model)


def build_summarizer(client: OpenAIClient | None) -> Summarizer:
    if client is None:
        return DeterministicSummarizer()
    return EnrichedSummarizer(client)
