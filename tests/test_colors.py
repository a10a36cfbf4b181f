"""
Tests for ratio color scaling and taxonomy fills.

Validates that:
1. Interpolation hits the configured endpoint colors and is monotone
2. Discovery ignores NaN, infinities and float-max sentinels
3. Filtered, ratio-less and non-significant nodes get the non-regulated color
4. Graphs without valid ratios keep their colors
"""

import math
import sys

import matplotlib.colors as mcolors
import pytest

from pcqnet.config import ColorConfig
from pcqnet.graph.colors import (
    FINAL_RATIO_ATTRIBUTE,
    IS_FILTERED_ATTRIBUTE,
    SIGNIFICANT_ATTRIBUTE,
    WHITE,
    ColorScaler,
    TaxonomyColors,
    interpolate_color,
)
from pcqnet.graph.elements import AttributeType, GraphDocument, GraphNode, NodeGraphics


def _node(key, ratio=None, significant=True, filtered=False, fill="#00FFFF"):
    node = GraphNode(id=key, label=key,
                     graphics=NodeGraphics(shape="ELLIPSE", height=30, width=30, fill=fill, outline="#000000"))
    if ratio is not None:
        node.set_attribute(FINAL_RATIO_ATTRIBUTE, ratio, AttributeType.REAL)
    node.set_attribute(SIGNIFICANT_ATTRIBUTE, int(significant))
    node.set_attribute(IS_FILTERED_ATTRIBUTE, int(filtered))
    return node


def _document(*nodes):
    document = GraphDocument(label="test")
    document.add_nodes(nodes)
    return document


def _red(color):
    return mcolors.to_rgb(color)[0]


class TestInterpolateColor:
    """Linear color interpolation."""

    def test_endpoints(self):
        """Range bounds map to the configured low and high colors."""
        assert interpolate_color(-2.0, -2.0, 2.0, "#0000FF", "#FFFF00") == "#0000FF"
        assert interpolate_color(2.0, -2.0, 2.0, "#0000FF", "#FFFF00") == "#FFFF00"

    def test_midpoint(self):
        """The middle of the range is the average color."""
        assert interpolate_color(0.0, -2.0, 2.0, "#000000", "#FFFFFF") == "#808080"

    def test_values_outside_range_clipped(self):
        """Values outside the range are clamped."""
        assert interpolate_color(10.0, -2.0, 2.0, "#0000FF", "#FFFF00") == "#FFFF00"
        assert interpolate_color(-10.0, -2.0, 2.0, "#0000FF", "#FFFF00") == "#0000FF"

    def test_degenerate_range_gives_high_color(self):
        """min == max yields the high color."""
        assert interpolate_color(1.0, 1.0, 1.0, "#0000FF", "#FFFF00") == "#FFFF00"


class TestDiscovery:
    """Pass 1: valid ratio range."""

    def test_ignores_invalid_values(self):
        """NaN, infinities and float-max sentinels do not count."""
        scaler = ColorScaler(ColorConfig())
        nodes = [
            _node("a", 0.5), _node("b", math.nan), _node("c", math.inf),
            _node("d", -sys.float_info.max), _node("e", -1.5), _node("f"),
        ]
        assert scaler.discover(nodes) == (-1.5, 0.5)

    def test_no_valid_ratio(self):
        """Only invalid ratios give no range."""
        scaler = ColorScaler(ColorConfig())
        assert scaler.discover([_node("a", math.nan), _node("b", math.inf)]) is None
        assert scaler.observed_range is None


class TestScale:
    """Pass 2: fill assignment."""

    def test_monotone_in_ratio(self):
        """Higher ratios move further towards the high color."""
        colors = ColorConfig(color_non_regulated=None)
        nodes = [_node(str(r), r) for r in (-1.5, -0.5, 0.5, 1.5)]
        ColorScaler(colors).scale(_document(*nodes))

        reds = [_red(n.graphics.fill) for n in nodes]
        assert reds == sorted(reds)
        assert len(set(reds)) == 4

    def test_infinite_ratio_gets_bound_color(self):
        """+Infinity takes the maximum-bound color, -Infinity the minimum one."""
        colors = ColorConfig()
        pos, neg = _node("pos", math.inf), _node("neg", -math.inf)
        ColorScaler(colors).scale(_document(_node("finite", 0.0), pos, neg))

        assert pos.graphics.fill == colors.color_ratio_max
        assert neg.graphics.fill == colors.color_ratio_min

    def test_non_significant_gets_non_regulated(self):
        """Non-significant nodes are painted with the non-regulated color."""
        colors = ColorConfig(color_non_regulated="lightgray")
        node = _node("a", 1.0, significant=False)
        ColorScaler(colors).scale(_document(node))
        assert node.graphics.fill == "#D3D3D3"

    def test_non_significant_interpolated_without_non_regulated(self):
        """Without a non-regulated color every ratio is interpolated."""
        colors = ColorConfig(color_non_regulated=None)
        node = _node("a", 2.0, significant=False)
        ColorScaler(colors).scale(_document(node))
        assert node.graphics.fill == colors.color_ratio_max

    def test_filtered_gets_non_regulated(self):
        """Filtered nodes are painted with the non-regulated color."""
        colors = ColorConfig()
        node = _node("a", 2.0, filtered=True)
        ColorScaler(colors).scale(_document(node))
        assert node.graphics.fill == colors.color_non_regulated

    def test_nodes_without_ratio_get_non_regulated(self):
        """Protein nodes and filtered peptides without a ratio take the non-regulated color."""
        colors = ColorConfig()
        protein = _node("P1", fill="#123456")
        discarded = _node("DIS", filtered=True, fill=colors.discarded_fill_color)
        ColorScaler(colors).scale(_document(_node("a", 1.0), protein, discarded))

        assert protein.graphics.fill == colors.color_non_regulated
        assert discarded.graphics.fill == colors.color_non_regulated

    def test_nodes_without_ratio_keep_fill_without_non_regulated(self):
        """Without a non-regulated color, nodes lacking a ratio keep their fill."""
        protein = _node("P1", fill="#123456")
        ColorScaler(ColorConfig(color_non_regulated=None)).scale(_document(_node("a", 1.0), protein))
        assert protein.graphics.fill == "#123456"

    def test_no_valid_ratio_keeps_defaults(self):
        """A graph without valid ratios is not recolored."""
        node = _node("a", math.nan)
        assert ColorScaler(ColorConfig()).scale(_document(node)) is False
        assert node.graphics.fill == "#00FFFF"

    def test_inverted_bounds_collapse(self):
        """A minimum above the maximum collapses onto the maximum."""
        scaler = ColorScaler(ColorConfig(minimum_ratio_for_color=3.0, maximum_ratio_for_color=1.0))
        assert scaler.color_range() == (1.0, 1.0)


class TestTaxonomyColors:
    """Protein fills by taxonomy."""

    def test_configured_color(self):
        """Configured taxonomy colors win."""
        colors = ColorConfig(taxonomy_colors={"Homo sapiens": "green"})
        assert TaxonomyColors(colors).fill_for({"Homo sapiens"}) == "#008000"

    def test_unknown_taxonomy_stable(self):
        """Unknown taxonomies get palette colors that do not change."""
        taxonomy_colors = TaxonomyColors(ColorConfig())
        first = taxonomy_colors.color_for("Mus musculus")
        second = taxonomy_colors.color_for("Rattus norvegicus")

        assert first != second
        assert taxonomy_colors.color_for("Mus musculus") == first

    def test_multiple_taxonomies(self):
        """Several taxonomies use the multi-taxonomy color, or white."""
        taxa = {"Homo sapiens", "Mus musculus"}
        assert TaxonomyColors(ColorConfig()).fill_for(taxa) == WHITE
        assert TaxonomyColors(ColorConfig(multi_taxonomy_color="#ABCDEF")).fill_for(taxa) == "#ABCDEF"

    def test_discarded_and_empty(self):
        """Discarded proteins use the discarded color; no taxonomy gives white."""
        colors = ColorConfig()
        assert TaxonomyColors(colors).fill_for({"Homo sapiens"}, discarded=True) == colors.discarded_fill_color
        assert TaxonomyColors(colors).fill_for(set()) == WHITE
