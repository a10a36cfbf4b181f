"""
Node coloring for exported networks.

Ratio color scaling runs in two passes over a finished graph:

1. Discovery: collect the ratio attribute of every node, ignoring NaN,
   infinities and the +/-float max sentinels. If no valid ratio is found the
   graph keeps its default colors.
2. Assignment: the color range is the configured ratio bounds. Filtered
   nodes, nodes without a ratio and non-significant nodes get the
   non-regulated color (when configured); every other node gets a color
   interpolated linearly between the low-ratio and high-ratio colors. NaN
   ratios keep their fill.

Protein fill colors come from taxonomy; unknown taxonomies are assigned
colors from matplotlib's ``tab20`` palette in order of first appearance.
"""

from __future__ import annotations

import logging
import math
import sys
from typing import Dict, Iterable, Optional, Tuple

import matplotlib as mpl
import matplotlib.colors as mcolors
import numpy as np

from pcqnet.config import ColorConfig
from pcqnet.graph.elements import GraphDocument, GraphNode
from pcqnet.model.ratio import parse_float

logger = logging.getLogger(__name__)

__all__ = [
    'RATIO_ATTRIBUTES',
    'SIGNIFICANT_ATTRIBUTE',
    'IS_FILTERED_ATTRIBUTE',
    'WHITE',
    'interpolate_color',
    'ColorScaler',
    'TaxonomyColors',
]

FINAL_RATIO_ATTRIBUTE = "finalRatio"
COUNT_RATIO_ATTRIBUTE = "countRatio"
RATIO_ATTRIBUTES = (FINAL_RATIO_ATTRIBUTE, COUNT_RATIO_ATTRIBUTE)
SIGNIFICANT_ATTRIBUTE = "significant"
IS_FILTERED_ATTRIBUTE = "isFiltered"

WHITE = "#FFFFFF"
BLACK = "#000000"

_SENTINELS = (sys.float_info.max, -sys.float_info.max)


def interpolate_color(value: float, minimum: float, maximum: float, low_color: str, high_color: str) -> str:
    """
    Linear interpolation between two colors.

    ``value`` is clipped into ``[minimum, maximum]``. When the range is
    degenerate the high color is returned.
    """
    if maximum > minimum:
        fraction = float(np.clip((value - minimum) / (maximum - minimum), 0.0, 1.0))
    else:
        fraction = 1.0
    low = np.array(mcolors.to_rgb(low_color))
    high = np.array(mcolors.to_rgb(high_color))
    rgb = low + (high - low) * fraction
    return mcolors.to_hex(np.clip(rgb, 0.0, 1.0)).upper()


def _flag(node: GraphNode, name: str) -> bool:
    value = node.attribute(name)
    if value is None:
        return False
    return str(int(value) if isinstance(value, bool) else value).strip() == "1"


def node_ratio(node: GraphNode) -> Optional[float]:
    """The first ratio attribute of ``node`` that parses as a number."""
    for name in RATIO_ATTRIBUTES:
        if name in node.attributes:
            ratio = parse_float(node.attribute(name))
            if ratio is not None:
                return ratio
    return None


class ColorScaler:
    """
    Two-pass ratio color scaling.

    The scaler keeps the discovered range of the last graph it scaled in
    ``observed_range``; call ``reset()`` (or use a new scaler) per pass.
    """

    def __init__(self, colors: ColorConfig):
        self.colors = colors
        self.observed_range: Optional[Tuple[float, float]] = None

    def reset(self) -> None:
        self.observed_range = None

    def discover(self, nodes: Iterable[GraphNode]) -> Optional[Tuple[float, float]]:
        """Pass 1: minimum and maximum of the valid ratios, or None."""
        values = [node_ratio(node) for node in nodes]
        values = np.array([v for v in values if v is not None and v not in _SENTINELS], dtype=float)
        values = values[np.isfinite(values)]
        if values.size == 0:
            self.observed_range = None
            return None
        self.observed_range = (float(values.min()), float(values.max()))
        return self.observed_range

    def color_range(self) -> Tuple[float, float]:
        """The configured bounds, with the minimum collapsed onto a smaller maximum."""
        minimum = self.colors.minimum_ratio_for_color
        maximum = self.colors.maximum_ratio_for_color
        if minimum > maximum:
            minimum = maximum
        return minimum, maximum

    def color_for(self, ratio: float) -> Optional[str]:
        """Interpolated fill for a ratio; None for NaN."""
        if math.isnan(ratio):
            return None
        minimum, maximum = self.color_range()
        if ratio == math.inf or ratio > maximum:
            ratio = maximum
        elif ratio == -math.inf or ratio < minimum:
            ratio = minimum
        return interpolate_color(ratio, minimum, maximum, self.colors.color_ratio_min, self.colors.color_ratio_max)

    def scale(self, document: GraphDocument) -> bool:
        """
        Recolor every node of ``document``.

        Filtered nodes and nodes without a ratio (protein nodes) take the
        non-regulated color when one is configured.

        Returns:
            False when no valid ratio was found and the graph was left as is
        """
        if self.discover(document.nodes) is None:
            logger.debug(f"No valid ratios in '{document.label}', color scaling skipped")
            return False

        non_regulated = self.colors.color_non_regulated
        for node in document.nodes:
            if node.graphics is None:
                continue
            ratio = node_ratio(node)
            if ratio is None or _flag(node, IS_FILTERED_ATTRIBUTE):
                if non_regulated is not None:
                    node.graphics.fill = non_regulated
                continue
            if not _flag(node, SIGNIFICANT_ATTRIBUTE) and non_regulated is not None:
                node.graphics.fill = non_regulated
                continue
            color = self.color_for(ratio)
            if color is not None:
                node.graphics.fill = color
        return True


class TaxonomyColors:
    """
    Fill colors by taxonomy.

    Configured taxonomy colors are used first; other taxonomies get the next
    ``tab20`` color and keep it for the lifetime of this object.
    """

    def __init__(self, colors: ColorConfig, colormap: str = "tab20"):
        self.colors = colors
        self._assigned: Dict[str, str] = dict(colors.taxonomy_colors)
        self._palette = [mcolors.to_hex(c).upper() for c in mpl.colormaps[colormap].colors]
        self._next = 0

    def color_for(self, taxonomy: str) -> str:
        color = self._assigned.get(taxonomy)
        if color is None:
            color = self._palette[self._next % len(self._palette)]
            self._next += 1
            self._assigned[taxonomy] = color
            logger.debug(f"Assigned color {color} to taxonomy {taxonomy}")
        return color

    def fill_for(self, taxonomies: Iterable[str], discarded: bool = False) -> str:
        """
        Protein node fill: discarded color, multi-taxonomy color, the single
        taxonomy's color, or white.
        """
        if discarded:
            return self.colors.discarded_fill_color
        taxonomies = sorted(set(taxonomies))
        if len(taxonomies) > 1:
            if self.colors.multi_taxonomy_color is not None:
                return self.colors.multi_taxonomy_color
            return WHITE
        if taxonomies:
            return self.color_for(taxonomies[0])
        return WHITE
