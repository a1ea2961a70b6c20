"""Async Yahoo Finance chart API client (structured market data source)."""

from __future__ import annotations

from typing import Any

import httpx

from aggregator._helpers import BROWSER_HEADERS, _as_dict, _pct_change, _safe_first, _to_float, _to_int, _to_text
from aggregator.errors import SourceUnavailable
from aggregator.records import YAHOO_FINANCE, PartialRecord


class YahooError(SourceUnavailable):
    """Raised when the Yahoo Finance API returns an error."""


class YahooClient:
    """Async HTTP client for the Yahoo Finance v8 chart endpoint.

    NSE listings are addressed with the ``.NS`` suffix.
    """

    BASE_URL = "https://query1.finance.yahoo.com"
    SOURCE = YAHOO_FINANCE
    SUFFIX = ".NS"
    TIMEOUT = 10.0

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout or self.TIMEOUT
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=self.timeout,
                headers={**BROWSER_HEADERS, "Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def get(self, path: str, params: dict | None = None) -> Any:
        """Make a GET request to the Yahoo Finance API.

        Raises:
            YahooError: On HTTP errors, transport failures, or non-JSON bodies
        """
        try:
            resp = await self._get_client().get(path, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise YahooError(
                f"Yahoo Finance API error {e.response.status_code}: {e.response.text[:200]}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise YahooError(f"Request failed: {e!r}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise YahooError("Yahoo Finance returned a non-JSON body") from e

    async def extract(self, symbol: str) -> PartialRecord:
        """Fetch the chart quote for ``symbol`` and map its meta block onto the field vocabulary."""
        data = await self.get(f"/v8/finance/chart/{symbol}{self.SUFFIX}")

        chart = _as_dict(_as_dict(data).get("chart"))
        error = chart.get("error")
        if error:
            description = _as_dict(error).get("description") or str(error)
            raise YahooError(f"Yahoo Finance chart error: {description}")

        meta = _as_dict(_safe_first(chart.get("result")).get("meta"))
        price = _to_float(meta.get("regularMarketPrice"))
        previous_close = _to_float(meta.get("previousClose"))
        if previous_close is None:
            previous_close = _to_float(meta.get("chartPreviousClose"))

        return PartialRecord(
            current_price=price,
            previous_close=previous_close,
            change_percent=_pct_change(price, previous_close),
            volume=_to_int(meta.get("regularMarketVolume")),
            exchange=_to_text(meta.get("exchangeName")),
            company_name=_to_text(meta.get("longName") or meta.get("shortName")),
        )
