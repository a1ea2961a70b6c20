"""Shared test fixtures."""

from __future__ import annotations

import asyncio

import pytest

from aggregator.errors import SourceUnavailable
from aggregator.records import PartialRecord
from nse_client import NSEClient
from screener_client import ScreenerClient
from tradingview_client import TradingViewClient
from yahoo_client import YahooClient

YAHOO_BASE = "https://query1.finance.yahoo.com"
NSE_BASE = "https://www.nseindia.com"
SCREENER_BASE = "https://www.screener.in"
TRADINGVIEW_BASE = "https://in.tradingview.com"
OPENAI_BASE = "https://api.openai.com"

YAHOO_URL = f"{YAHOO_BASE}/v8/finance/chart/RELIANCE.NS"
NSE_URL = f"{NSE_BASE}/api/quote-equity"
SCREENER_URL = f"{SCREENER_BASE}/company/RELIANCE/consolidated/"
TRADINGVIEW_URL = f"{TRADINGVIEW_BASE}/symbols/NSE-RELIANCE/"
OPENAI_URL = f"{OPENAI_BASE}/v1/chat/completions"


@pytest.fixture
def yahoo_client():
    return YahooClient()


@pytest.fixture
def nse_client():
    return NSEClient()


@pytest.fixture
def screener_client():
    return ScreenerClient()


@pytest.fixture
def tradingview_client():
    return TradingViewClient()


# --- Fake extractors for pipeline tests ---


class FakeExtractor:
    """In-memory extractor returning a canned record, raising, or stalling."""

    def __init__(
        self,
        source: str,
        record: PartialRecord | None = None,
        *,
        error: str | None = None,
        delay: float = 0.0,
    ):
        self.SOURCE = source
        self.record = record or PartialRecord()
        self.error = error
        self.delay = delay
        self.calls: list[str] = []
        self.cancelled = False

    async def extract(self, symbol: str) -> PartialRecord:
        self.calls.append(symbol)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise SourceUnavailable(self.error)
        return self.record


class FakeCompletionClient:
    """Stands in for OpenAIClient in summarizer tests."""

    def __init__(self, text: str = "", *, error: Exception | None = None, model: str = "gpt-test"):
        self.text = text
        self.error = error
        self.model = model
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


# --- Sample response data ---

YAHOO_CHART = {
    "chart": {
        "result": [
            {
                "meta": {
                    "currency": "INR",
                    "symbol": "RELIANCE.NS",
                    "exchangeName": "NSI",
                    "regularMarketPrice": 2950.5,
                    "previousClose": 2900.0,
                    "chartPreviousClose": 2890.0,
                    "regularMarketVolume": 5123456,
                    "longName": "Reliance Industries Limited",
                },
                "timestamp": [1700000000],
                "indicators": {"quote": [{"close": [2950.5]}]},
            }
        ],
        "error": None,
    }
}

YAHOO_NOT_FOUND = {
    "chart": {
        "result": None,
        "error": {"code": "Not Found", "description": "No data found, symbol may be delisted"},
    }
}

NSE_QUOTE = {
    "info": {"symbol": "RELIANCE", "companyName": "Reliance Industries Limited"},
    "metadata": {"pdSymbolPe": 24.6, "pdSectorPe": 18.1, "pdSectorInd": "NIFTY 50"},
    "priceInfo": {
        "lastPrice": 2948.0,
        "previousClose": 2900.0,
        "change": 48.0,
        "pChange": 1.655,
        "intraDayHighLow": {"min": 2890.0, "max": 2960.0},
    },
    "preOpenMarket": {"totalTradedVolume": 123456},
}

SCREENER_HTML = """
<html><body>
<div class="company-info">
  <h1 class="h2 shrink-text">Reliance Industries Ltd</h1>
  <ul id="top-ratios">
    <li class="flex flex-space-between"><span class="name">Market Cap</span>
      <span class="nowrap value">₹ <span class="number">19,96,000</span> Cr.</span></li>
    <li class="flex flex-space-between"><span class="name">Current Price</span>
      <span class="nowrap value">₹ <span class="number">2,949</span></span></li>
    <li class="flex flex-space-between"><span class="name">High / Low</span>
      <span class="nowrap value">₹ <span class="number">3,218</span> / <span class="number">2,221</span></span></li>
    <li class="flex flex-space-between"><span class="name">Stock P/E</span>
      <span class="nowrap value"><span class="number">28.4</span></span></li>
    <li class="flex flex-space-between"><span class="name">Book Value</span>
      <span class="nowrap value">₹ <span class="number">1,305</span></span></li>
    <li class="flex flex-space-between"><span class="name">ROCE</span>
      <span class="nowrap value"><span class="number">9.69</span> %</span></li>
    <li class="flex flex-space-between"><span class="name">ROE</span>
      <span class="nowrap value"><span class="number">8.25</span> %</span></li>
  </ul>
</div>
</body></html>
"""

TRADINGVIEW_HTML = """
<html><body>
<div class="tv-symbol-header">
  <span class="js-symbol-last lastPrice">2,951.20</span>
  <span class="js-symbol-change-pt change-percent">+1.76%</span>
</div>
</body></html>
"""

OPENAI_COMPLETION = {
    "id": "chatcmpl-test",
    "object": "chat.completion",
    "model": "gpt-3.5-turbo",
    "choices": [
        {
            "index": 0,
            "message": {
                "role": "assistant",
                "content": "Stock: Reliance Industries Limited (RELIANCE)\nValuation: Fair\nRisk Level: Medium",
            },
            "finish_reason": "stop",
        }
    ],
}

# html.parser refuses this declaration outright
REJECTED_MARKUP = "<html><![ ]>x</html>"
