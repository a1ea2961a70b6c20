"""Heuristic field probes for document (HTML) sources.

A probe finds nodes by CSS selector, optionally keeps only nodes whose text
contains a label, and applies a regex to the node text. Probes run in list
order and the first probe that yields a value for a field wins; later probes
for that field are skipped. A probe that finds nothing leaves the field
absent and never affects other probes.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup

from aggregator._helpers import _to_float, _to_text
from aggregator.records import FIELDS, PartialRecord

logger = logging.getLogger(__name__)

# Common patterns
RUPEE_AMOUNT = re.compile(r"₹\s*([\d,]+\.?\d*)")
RUPEE_CRORE = re.compile(r"₹\s*([\d,]+\.?\d*)\s*Cr")
PERCENT = re.compile(r"([\d.]+)\s*%")
SIGNED_PERCENT = re.compile(r"([-+−]?\d+\.?\d*)\s*%")
WHOLE_TEXT = re.compile(r"(.+)", re.DOTALL)


@dataclass(frozen=True)
class Probe:
    field: str
    selector: str
    pattern: re.Pattern[str]
    label: str | None = None
    coerce: Callable[[Any], Any] = _to_float

    def __post_init__(self) -> None:
        if self.field not in FIELDS:
            raise ValueError(f"Probe targets unknown field '{self.field}'")

    def apply(self, soup: BeautifulSoup) -> Any:
        """Return the first coercible match among selected nodes, or None."""
        for node in soup.select(self.selector):
            text = node.get_text(" ", strip=True)
            if self.label is not None and self.label not in text:
                continue
            match = self.pattern.search(text)
            if not match:
                continue
            value = self.coerce(match.group(1))
            if value is not None:
                return value
        return None


def parse_markup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def run_probes(soup: BeautifulSoup, probes: Iterable[Probe]) -> PartialRecord:
    """Apply probes in order with first-match-wins per field."""
    values: dict[str, Any] = {}
    for probe in probes:
        if probe.field in values:
            continue
        value = probe.apply(soup)
        if value is not None:
            values[probe.field] = value
        else:
            logger.debug("Probe %s %r found nothing", probe.field, probe.label or probe.selector)
    return PartialRecord(**values)


def text_probe(field: str, selector: str) -> Probe:
    """Probe that takes a node's whole text (e.g. a heading) as a string value."""
    return Probe(field=field, selector=selector, pattern=WHOLE_TEXT, coerce=_to_text)
