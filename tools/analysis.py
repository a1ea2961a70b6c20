"""Stock analysis tool: multi-source aggregation with an optional AI summary."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from aggregator.errors import AllSourcesFailed, InvalidSymbol

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from aggregator.pipeline import StockAnalyzer

MARKET_TZ = ZoneInfo("Asia/Kolkata")


def register(mcp: FastMCP, analyzer: StockAnalyzer) -> None:
    @mcp.tool(
        annotations={
            "title": "Analyze Stock",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": True,
        }
    )
    async def analyze_stock(symbol: str) -> dict:
        """Aggregate price and fundamentals for an NSE stock from several sources and summarize them.

        Fetches Yahoo Finance, NSE India, Screener.in and TradingView
        concurrently, keeps whichever respond, resolves each field from the
        most trusted source that supplied it, and classifies valuation (by P/E)
        and risk. Returns a fixed-format summary plus an AI analyst summary
        when an OpenAI key is configured (deterministic otherwise, with the
        reason in ``ai_error``).

        Args:
            symbol: NSE ticker symbol (e.g. "RELIANCE", "TCS")
        """
        try:
            report = await analyzer.analyze(symbol)
        except InvalidSymbol as e:
            return {"success": False, "error": str(e)}
        except AllSourcesFailed as e:
            return {"success": False, "error": str(e), "failures": e.failures}

        return {
            "success": True,
            "timestamp": datetime.now(MARKET_TZ).strftime("%d/%m/%Y, %I:%M:%S %p"),
            **report.to_dict(),
        }
