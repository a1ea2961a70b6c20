"""Tests for document probes and the numeric coercion helpers they rely on."""

from __future__ import annotations

import re

import pytest

from aggregator._helpers import _format_inr, _pct_change, _to_float, _to_int, _to_text
from aggregator.probes import PERCENT, RUPEE_AMOUNT, Probe, parse_markup, run_probes, text_probe


class TestCoercion:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (12, 12.0),
            (3.5, 3.5),
            ("₹ 1,23,456.7", 123456.7),
            ("2.5%", 2.5),
            ("−1.2", -1.2),
            ("+0.4", 0.4),
            ("Rs. 100", 100.0),
        ],
    )
    def test_to_float(self, raw, expected):
        assert _to_float(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "N/A", "abc", True, float("nan"), float("inf"), "-"])
    def test_to_float_rejects(self, raw):
        assert _to_float(raw) is None

    def test_to_int(self):
        assert _to_int("1,234") == 1234
        assert _to_int(None) is None

    def test_to_text(self):
        assert _to_text("  Reliance \n Industries ") == "Reliance Industries"
        assert _to_text("   ") is None

    def test_pct_change(self):
        assert _pct_change(110.0, 100.0) == 10.0
        assert _pct_change(110.0, 0) is None
        assert _pct_change(None, 100.0) is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1996000, "19,96,000"),
            (999, "999"),
            (1000, "1,000"),
            (123456.78, "1,23,456.78"),
            (100000.5, "1,00,000.5"),
        ],
    )
    def test_format_inr(self, value, expected):
        assert _format_inr(value) == expected


class TestProbes:
    HTML = """
    <ul>
      <li>Current Price ₹ 100</li>
      <li>Book Value ₹ ,,</li>
      <li>Book Value ₹ 55</li>
      <li>ROE 12 %</li>
      <li>ROE 99 %</li>
    </ul>
    <h1>  Acme   Corp </h1>
    """

    def test_first_match_wins_within_probe(self):
        soup = parse_markup(self.HTML)
        probe = Probe("roe", "li", PERCENT, label="ROE")
        assert probe.apply(soup) == 12.0

    def test_uncoercible_match_moves_to_next_node(self):
        soup = parse_markup(self.HTML)
        probe = Probe("book_value", "li", RUPEE_AMOUNT, label="Book Value")
        assert probe.apply(soup) == 55.0

    def test_first_successful_probe_wins_across_probes(self):
        soup = parse_markup(self.HTML)
        probes = [
            Probe("current_price", "li", re.compile(r"Missing\s*(\d+)"), label="Current Price"),
            Probe("current_price", "li", RUPEE_AMOUNT, label="Current Price"),
            Probe("current_price", "li", PERCENT, label="ROE"),
        ]
        record = run_probes(soup, probes)
        assert record.current_price == 100.0

    def test_failed_probe_does_not_block_others(self):
        soup = parse_markup(self.HTML)
        probes = [
            Probe("pe_ratio", "li", re.compile(r"Stock P/E\s*([\d.]+)"), label="Stock P/E"),
            Probe("roe", "li", PERCENT, label="ROE"),
            text_probe("company_name", "h1"),
        ]
        record = run_probes(soup, probes)
        assert record.pe_ratio is None
        assert record.roe == 12.0
        assert record.company_name == "Acme Corp"

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="unknown field"):
            Probe("dividend_yield", "li", PERCENT)
