"""Async TradingView symbol page client (document source: price and day change)."""

from __future__ import annotations

import re

import httpx
from bs4 import ParserRejectedMarkup

from aggregator._helpers import BROWSER_HEADERS
from aggregator.errors import SourceUnavailable
from aggregator.probes import SIGNED_PERCENT, Probe, parse_markup, run_probes
from aggregator.records import TRADINGVIEW, PartialRecord

TRADINGVIEW_PROBES: tuple[Probe, ...] = (
    Probe(
        "current_price",
        '[class*="price"], [class*="last"], [class*="quote"]',
        re.compile(r"₹?\s*(\d[\d,]*\.?\d*)"),
    ),
    Probe("change_percent", '[class*="change"], [class*="percent"]', SIGNED_PERCENT),
)


class TradingViewError(SourceUnavailable):
    """Raised when a TradingView page cannot be fetched."""


class TradingViewClient:
    """Async HTTP client for TradingView NSE symbol pages."""

    BASE_URL = "https://in.tradingview.com"
    SOURCE = TRADINGVIEW
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
            TradingViewError: On HTTP errors or transport failures
        """
        try:
            resp = await self._get_client().get(path)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TradingViewError(
                f"TradingView error {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise TradingViewError(f"Request failed: {e!r}") from e
        return resp.text

    async def extract(self, symbol: str) -> PartialRecord:
        html = await self.get_page(f"/symbols/NSE-{symbol}/")
        try:
            soup = parse_markup(html)
        except ParserRejectedMarkup as e:
            raise TradingViewError(f"TradingView page could not be parsed: {e}") from e
        return run_probes(soup, TRADINGVIEW_PROBES)
