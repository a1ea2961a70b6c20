"""Async NSE India quote API client (regulated exchange data source)."""

from __future__ import annotations

from typing import Any

import httpx

from aggregator._helpers import BROWSER_HEADERS, _as_dict, _to_float, _to_int, _to_text
from aggregator.errors import SourceUnavailable
from aggregator.records import NSE, PartialRecord


class NSEError(SourceUnavailable):
    """Raised when the NSE India API returns an error."""


class NSEClient:
    """Async HTTP client for the NSE India ``quote-equity`` endpoint.

    The endpoint rejects requests that do not look like they come from the
    nseindia.com front end, hence the Referer and X-Requested-With headers.
    """

    BASE_URL = "https://www.nseindia.com"
    SOURCE = NSE
    TIMEOUT = 10.0

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout or self.TIMEOUT
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=self.timeout,
                headers={
                    **BROWSER_HEADERS,
                    "Accept": "application/json",
                    "Referer": "https://www.nseindia.com/",
                    "X-Requested-With": "XMLHttpRequest",
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def get(self, path: str, params: dict | None = None) -> Any:
        """Make a GET request to the NSE API.

        Raises:
            NSEError: On HTTP errors, transport failures, or non-JSON bodies
        """
        try:
            resp = await self._get_client().get(path, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NSEError(
                f"NSE API error {e.response.status_code}: {e.response.text[:200]}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise NSEError(f"Request failed: {e!r}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise NSEError("NSE returned a non-JSON body") from e

    async def extract(self, symbol: str) -> PartialRecord:
        data = _as_dict(await self.get("/api/quote-equity", params={"symbol": symbol}))

        price_info = _as_dict(data.get("priceInfo"))
        metadata = _as_dict(data.get("metadata"))
        pre_open = _as_dict(data.get("preOpenMarket"))
        info = _as_dict(data.get("info"))

        return PartialRecord(
            current_price=_to_float(price_info.get("lastPrice")),
            previous_close=_to_float(price_info.get("previousClose")),
            change_percent=_to_float(price_info.get("pChange")),
            volume=_to_int(pre_open.get("totalTradedVolume")),
            # pdSymbolPe is the stock's own P/E; pdSectorPe is the sector average
            pe_ratio=_to_float(metadata.get("pdSymbolPe")),
            company_name=_to_text(info.get("companyName")),
        )
