"""Async Screener.in client (document source: company page scrape)."""

from __future__ import annotations

import re

import httpx
from bs4 import ParserRejectedMarkup

from aggregator._helpers import BROWSER_HEADERS
from aggregator.errors import SourceUnavailable
from aggregator.probes import PERCENT, RUPEE_AMOUNT, RUPEE_CRORE, Probe, parse_markup, run_probes, text_probe
from aggregator.records import SCREENER, PartialRecord

TOP_RATIOS = "#top-ratios li"

# Ordered; the first probe to yield a value for a field wins
SCREENER_PROBES: tuple[Probe, ...] = (
    text_probe("company_name", "h1"),
    Probe("current_price", TOP_RATIOS, RUPEE_AMOUNT, label="Current Price"),
    Probe("market_cap", TOP_RATIOS, RUPEE_CRORE, label="Market Cap"),
    Probe("market_cap", 'li[class*="flex"]', RUPEE_CRORE, label="Market Cap"),
    Probe("pe_ratio", TOP_RATIOS, re.compile(r"Stock P/E\s*([\d.]+)"), label="Stock P/E"),
    Probe("book_value", TOP_RATIOS, RUPEE_AMOUNT, label="Book Value"),
    Probe("roce", TOP_RATIOS, PERCENT, label="ROCE"),
    Probe("roe", TOP_RATIOS, PERCENT, label="ROE"),
)


class ScreenerError(SourceUnavailable):
    """Raised when Screener.in cannot be fetched."""


class ScreenerClient:
    """Async HTTP client for Screener.in consolidated company pages."""

    BASE_URL = "https://www.screener.in"
    SOURCE = SCREENER
    TIMEOUT = 15.0

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout or self.TIMEOUT
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=self.timeout,
                headers=BROWSER_HEADERS,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def get_page(self, path: str) -> str:
        """Fetch a page and return its markup.

        Raises:
            ScreenerError: On HTTP errors or transport failures
        """
        try:
            resp = await self._get_client().get(path)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ScreenerError(
                f"Screener.in error {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise ScreenerError(f"Request failed: {e!r}") from e
        return resp.text

    async def extract(self, symbol: str) -> PartialRecord:
        html = await self.get_page(f"/company/{symbol}/consolidated/")
        try:
            soup = parse_markup(html)
        except ParserRejectedMarkup as e:
            raise ScreenerError(f"Screener.in page could not be parsed: {e}") from e
        return run_probes(soup, SCREENER_PROBES)
