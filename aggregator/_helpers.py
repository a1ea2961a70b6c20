"""Shared coercion and formatting helpers for source clients and the report renderer."""

from __future__ import annotations

import math
import re
from typing import Any

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "DNT": "1",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "max-age=0",
}

# Characters that decorate numbers on Indian market pages: rupee sign, grouping commas, percent
_NUMBER_NOISE_RE = re.compile(r"[₹,%\s]|Rs\.?")


def _to_float(value: Any) -> float | None:
    """Coerce numbers and decorated numeric strings ("₹1,234.5", "2.3%") to float."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = _NUMBER_NOISE_RE.sub("", str(value)).replace("−", "-")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _to_int(value: Any) -> int | None:
    number = _to_float(value)
    return int(number) if number is not None else None


def _to_text(value: Any) -> str | None:
    """Collapse whitespace; empty strings count as absent."""
    if value is None:
        return None
    text = " ".join(str(value).split())
    return text or None


def _as_dict(value: Any) -> dict:
    """Return value if it is a dict, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def _safe_first(value: Any) -> dict:
    """Return first dict from a list payload if present, otherwise empty dict."""
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return {}


def _pct_change(new: float | None, old: float | None) -> float | None:
    """Safe percentage change."""
    if new is None or old is None or old == 0:
        return None
    return round((new / old - 1) * 100, 2)


def _format_inr(value: float) -> str:
    """Format a number with Indian digit grouping (12,34,567.8)."""
    whole, _, frac = f"{abs(value):.2f}".partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    frac = frac.rstrip("0")
    sign = "-" if value < 0 else ""
    return f"{sign}{whole}.{frac}" if frac else f"{sign}{whole}"
