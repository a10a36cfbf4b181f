"""
Classification-case aggregation on shared edges.

A peptide shared by several protein pairs is drawn once, so its edges collect
the classification cases of every pair that reaches them. Each contribution
parses the case list already rendered on the edge, merges the new cases,
deduplicates and sorts by case id, and renders the label and tooltip again.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set

from pcqnet.graph.elements import AttributeType, GraphEdge
from pcqnet.graph.sequence import to_html
from pcqnet.model.cases import ClassificationCase

logger = logging.getLogger(__name__)

__all__ = [
    'CLASSIFICATION_CASE_ATTRIBUTE',
    'ClassificationAggregator',
    'parse_case_ids',
    'sort_cases',
    'render_case_ids',
    'render_case_explanations',
]

CLASSIFICATION_CASE_ATTRIBUTE = "ClassificationCase"
TOOLTIP_HEADER = "This protein pair has been classified as:\n"


def parse_case_ids(text: Optional[str]) -> Set[ClassificationCase]:
    """Parse a rendered case list (``"1,3"`` or one id per line) back into cases."""
    cases: Set[ClassificationCase] = set()
    if not text:
        return cases
    for token in text.replace("\n", ",").split(","):
        token = token.strip()
        if not token:
            continue
        try:
            case = ClassificationCase.by_case_id(int(token))
        except ValueError:
            logger.debug(f"Ignoring unparseable classification case id: {token!r}")
            continue
        if case is not None:
            cases.add(case)
    return cases


def sort_cases(cases: Iterable[ClassificationCase]) -> List[ClassificationCase]:
    return sorted(set(cases), key=lambda c: c.case_id)


def render_case_ids(cases: Iterable[ClassificationCase], only_inconsistent: bool = False) -> str:
    ordered = sort_cases(cases)
    if only_inconsistent:
        ordered = [c for c in ordered if c.is_inconsistent]
    return ",".join(str(c.case_id) for c in ordered)


def render_case_explanations(cases: Iterable[ClassificationCase]) -> str:
    """One ``id (explanation)`` line per case, inconsistent ones in bold."""
    lines = []
    for case in sort_cases(cases):
        line = f"{case.case_id} ({case.explanation}) "
        if case.is_inconsistent:
            line = f"<b>{line}</b>"
        lines.append(line)
    return "\n".join(lines)


class ClassificationAggregator:
    """
    Merges classification cases onto edges.

    Parameters:
        show_cases_in_edges: Render the inconsistent case ids as the visible
            edge label
    """

    def __init__(self, show_cases_in_edges: bool = False):
        self.show_cases_in_edges = show_cases_in_edges

    def merge(self, edge: GraphEdge, new_cases: Optional[Iterable[ClassificationCase]]) -> List[ClassificationCase]:
        """
        Add ``new_cases`` to ``edge`` and re-render it.

        Merging cases already present leaves the edge unchanged.

        Returns:
            The edge's cases sorted by id
        """
        cases = set(edge.cases)
        cases |= parse_case_ids(edge.attribute(CLASSIFICATION_CASE_ATTRIBUTE))
        if new_cases:
            cases |= set(new_cases)
        ordered = sort_cases(cases)
        edge.cases = set(ordered)
        if not ordered:
            return ordered

        edge.set_attribute(CLASSIFICATION_CASE_ATTRIBUTE, render_case_ids(ordered), AttributeType.STRING)
        if edge.graphics is not None:
            if self.show_cases_in_edges:
                label = render_case_ids(ordered, only_inconsistent=True)
                edge.graphics.atts["EDGE_LABEL"] = label or None
                edge.label = label or None
            edge.graphics.atts["EDGE_TOOLTIP"] = to_html(TOOLTIP_HEADER + render_case_explanations(ordered))
        return ordered
