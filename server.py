"""StockAI - multi-source NSE stock analysis MCP server."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastmcp import FastMCP

from aggregator.enrichment import build_summarizer
from aggregator.pipeline import StockAnalyzer
from nse_client import NSEClient
from openai_client import OpenAIClient
from screener_client import ScreenerClient
from tools import analysis, meta
from tradingview_client import TradingViewClient
from yahoo_client import YahooClient

load_dotenv()


def _env_float(name: str, default: float | None) -> float | None:
    """Positive float from the environment; unset, malformed, zero or negative values give the default."""
    value = os.environ.get(name)
    if not value:
        return default
    try:
        number = float(value)
    except ValueError:
        return default
    return number if number > 0 else default


SOURCE_TIMEOUT = _env_float("SOURCE_TIMEOUT", 15.0)
# Unset or 0 disables the request-level deadline
REQUEST_DEADLINE = _env_float("REQUEST_DEADLINE", None)
ENVIRONMENT = os.environ.get("STOCKAI_ENV", "production")

yahoo_client = YahooClient()
nse_client = NSEClient()
screener_client = ScreenerClient()
tradingview_client = TradingViewClient()

# Optional enrichment: without a key the analyzer renders deterministic summaries only
openai_api_key = os.environ.get("OPENAI_API_KEY", "")
openai_client: OpenAIClient | None = None
if openai_api_key:
    openai_client = OpenAIClient(
        openai_api_key,
        model=os.environ.get("OPENAI_MODEL") or None,
        timeout=_env_float("OPENAI_TIMEOUT", None),
    )

analyzer = StockAnalyzer(
    [yahoo_client, nse_client, screener_client, tradingview_client],
    build_summarizer(openai_client),
    source_timeout=SOURCE_TIMEOUT,
    deadline=REQUEST_DEADLINE,
)


@asynccontextmanager
async def lifespan(server):
    """Manage client lifecycles."""
    yield
    for client in (yahoo_client, nse_client, screener_client, tradingview_client):
        await client.close()
    if openai_client is not None:
        await openai_client.close()


mcp = FastMCP(
    "StockAI",
    instructions=(
        "NSE stock analysis. Call analyze_stock with a ticker (e.g. RELIANCE) to get "
        "price, valuation and risk aggregated from Yahoo Finance, NSE India, Screener.in "
        "and TradingView. Data is best-effort: 'sources' lists which providers responded "
        "and 'combined_data.provenance' shows where each field came from."
    ),
    lifespan=lifespan,
)

analysis.register(mcp, analyzer)
meta.register(mcp, environment=ENVIRONMENT)
