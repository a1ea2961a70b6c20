"""Probe every market data source to see which fields each one still yields.

Usage:
    pip install -e . && python scripts/source_probe.py [SYMBOL ...]

Reads SOURCE_TIMEOUT from the .env file. Scraped pages change their markup
without notice; run this after a source starts reporting empty records to
see which probes stopped matching.
"""

import asyncio
import os
import sys
import time

from dotenv import load_dotenv

from aggregator.errors import SourceUnavailable
from aggregator.orchestrator import DEFAULT_SOURCE_TIMEOUT
from aggregator.records import FIELDS, source_name
from nse_client import NSEClient
from screener_client import ScreenerClient
from tradingview_client import TradingViewClient
from yahoo_client import YahooClient

load_dotenv()

TIMEOUT = float(os.environ.get("SOURCE_TIMEOUT") or DEFAULT_SOURCE_TIMEOUT)

DEFAULT_SYMBOLS = ["RELIANCE", "TCS", "INFY", "HDFCBANK", "ITC"]


async def probe(client, symbol: str) -> dict:
    """Run one extractor and time it."""
    start = time.monotonic()
    try:
        record = await asyncio.wait_for(client.extract(symbol), TIMEOUT)
    except SourceUnavailable as e:
        return {"status": f"ERROR: {e}", "elapsed": time.monotonic() - start, "fields": {}}
    except asyncio.TimeoutError:
        return {"status": "TIMEOUT", "elapsed": time.monotonic() - start, "fields": {}}
    return {"status": "OK", "elapsed": time.monotonic() - start, "fields": record.present()}


async def main(symbols: list[str]):
    clients = [YahooClient(), NSEClient(), ScreenerClient(), TradingViewClient()]

    print("Source Probe")
    print(f"Symbols: {', '.join(symbols)}")
    print(f"Per-source timeout: {TIMEOUT:g}s")
    print("=" * 70)

    coverage = {c.SOURCE: {name: 0 for name in FIELDS} for c in clients}
    try:
        for symbol in symbols:
            print(f"\n--- {symbol} ---")
            results = await asyncio.gather(*[probe(c, symbol) for c in clients])
            for client, result in zip(clients, results):
                fields = result["fields"]
                for name in fields:
                    coverage[client.SOURCE][name] += 1
                detail = ", ".join(f"{k}={v}" for k, v in fields.items()) or "no fields"
                print(f"  {source_name(client.SOURCE):14s} {result['status']:<8.60s} {result['elapsed']*1000:6.0f}ms  {detail}")
    finally:
        for client in clients:
            await client.close()

    print("\n" + "=" * 70)
    print("Field coverage (symbols yielding each field):")
    for source, counts in coverage.items():
        hits = {name: n for name, n in counts.items() if n}
        summary = ", ".join(f"{k}={v}/{len(symbols)}" for k, v in hits.items()) or "nothing"
        print(f"  {source_name(source):14s} {summary}")


if __name__ == "__main__":
    asyncio.run(main([s.upper() for s in sys.argv[1:]] or DEFAULT_SYMBOLS))
