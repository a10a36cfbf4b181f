"""Tests for sequence annotation and number formatting."""

import math
import sys

import pytest

from pcqnet.graph.sequence import annotate_sequence, format_number, format_number_more_decimals, to_html
from pcqnet.model.nodes import PositionInPeptide


class TestAnnotateSequence:
    """Markup of modifications and highlighted positions."""

    def test_plain_sequence_unchanged(self):
        """A sequence with no brackets and no positions renders unchanged."""
        assert annotate_sequence("PEPTIDEK") == "PEPTIDEK"

    def test_modification_bold(self):
        """Every character of a modification span is inside <b>..</b>."""
        assert annotate_sequence("PEP[+80]TIDE") == "PEP<b>[+80]</b>TIDE"

    def test_parentheses_modification(self):
        """Parentheses are treated like brackets."""
        assert annotate_sequence("AC(57)K") == "AC<b>(57)</b>K"

    def test_positions_ignored_without_highlighting(self):
        """Positions only matter when highlighting is active."""
        assert annotate_sequence("PEPTIDE", [3]) == "PEPTIDE"

    def test_position_highlighted(self):
        """Residue at a requested 1-based position is emphasized."""
        assert annotate_sequence("PEPTIDE", [3], highlight_positions=True) == "PE<b>P</b>TIDE"

    def test_modification_not_counted_as_residues(self):
        """Characters inside a modification do not advance the residue position."""
        result = annotate_sequence("PE[+1]PTIDE", [PositionInPeptide(3, "P")], highlight_positions=True)
        assert result == "PE<b>[+1]</b><b>P</b>TIDE"


class TestFormatNumber:
    """One-decimal label formatting."""

    @pytest.mark.parametrize("value,expected", [
        (1.0, "1"),
        (0.5, "0.5"),
        (-1.26, "-1.3"),
        (0.25, "0.2"),
        (0.35, "0.3"),
        (0.15, "0.1"),
        (-0.04, "0"),
    ])
    def test_rounding(self, value, expected):
        """Half-even rounding of the stored binary value, trailing zeros dropped."""
        assert format_number(value) == expected

    def test_special_values(self):
        """NaN and infinities are spelled out."""
        assert format_number(math.nan) == "N/A"
        assert format_number(math.inf) == "Infinity"
        assert format_number(-math.inf) == "-Infinity"
        assert format_number(None) is None

    def test_float_max_sentinels(self):
        """The largest floats render in full instead of overflowing the decimal context."""
        text = format_number(sys.float_info.max)
        assert text == str(int(sys.float_info.max))
        assert format_number(-sys.float_info.max) == "-" + text
        assert format_number(1e30) == str(int(1e30))


class TestFormatNumberMoreDecimals:
    """Three-decimal tooltip formatting."""

    def test_three_decimals(self):
        """Values are rounded to three decimals."""
        assert format_number_more_decimals(0.12345) == "0.123"
        assert format_number_more_decimals(2.0) == "2"

    def test_text_input(self):
        """Numeric text is parsed; garbage gives None."""
        assert format_number_more_decimals("0.0500") == "0.05"
        assert format_number_more_decimals("not a number") is None

    def test_special_values(self):
        """Infinities use INF/-INF, NaN gives N/A."""
        assert format_number_more_decimals(math.inf) == "INF"
        assert format_number_more_decimals(-math.inf) == "-INF"
        assert format_number_more_decimals(math.nan) == "N/A"

    def test_large_values(self):
        """Values beyond the default decimal precision are formatted."""
        assert format_number_more_decimals(sys.float_info.max) == str(int(sys.float_info.max))


def test_to_html_converts_newlines():
    """Tooltips are wrapped in <html> with <br> line breaks."""
    assert to_html("a\nb") == "<html>a<br>b</html>"
