"""
Per-pass identity registry for graph nodes and edges.

One registry belongs to one export pass. It guarantees a single GraphNode per
node key and a single GraphEdge per unordered endpoint pair, and owns the
label-shortening table for long protein labels. ``reset()`` is called at the
start of every pass so nothing leaks between the full, significant and
per-classification networks.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from pcqnet.graph.elements import GraphEdge, GraphNode

logger = logging.getLogger(__name__)

__all__ = ['IdentityRegistry', 'EDGE_KEY_SEPARATOR', 'MAX_PROTEIN_LABEL_LENGTH']

EDGE_KEY_SEPARATOR = "\t"
MAX_PROTEIN_LABEL_LENGTH = 100

NodeFactory = Callable[[], GraphNode]
EdgeFactory = Callable[[int], GraphEdge]


class IdentityRegistry:
    """
    Deduplication maps for one export pass.

    Example:
        >>> registry = IdentityRegistry()
        >>> edge, created = registry.get_or_create_edge("P1", "AAA")
        >>> registry.get_or_create_edge("AAA", "P1") == (edge, False)
        True
    """

    def __init__(self):
        self._nodes: Dict[str, GraphNode] = {}
        self._edges: Dict[str, GraphEdge] = {}
        self._edge_counter = 0
        self._protein_labels: Dict[str, str] = {}
        self._protein_label_counter = 0

    def reset(self) -> None:
        """Forget every node, edge and shortened label."""
        self._nodes.clear()
        self._edges.clear()
        self._edge_counter = 0
        self._protein_labels.clear()
        self._protein_label_counter = 0

    @property
    def nodes(self) -> List[GraphNode]:
        """Registered nodes in creation order."""
        return list(self._nodes.values())

    @property
    def edges(self) -> List[GraphEdge]:
        """Registered edges in creation order, each listed once."""
        unique: Dict[int, GraphEdge] = {}
        for edge in self._edges.values():
            unique.setdefault(edge.id, edge)
        return list(unique.values())

    def get_or_create_node(self, key: str, factory: Optional[NodeFactory] = None) -> Tuple[GraphNode, bool]:
        """
        Return the node registered under ``key``, creating it on first use.

        Parameters:
            key: Node identity key (protein or peptide node key)
            factory: Builds the node on a cache miss; a bare node labelled
                with ``key`` is created when omitted

        Returns:
            ``(node, was_new)``
        """
        node = self._nodes.get(key)
        if node is not None:
            return node, False
        node = factory() if factory is not None else GraphNode(id=key, label=key)
        self._nodes[key] = node
        return node, True

    @staticmethod
    def edge_keys(key_a: str, key_b: str) -> Tuple[str, str]:
        """Both orientations of the edge key for an endpoint pair."""
        return (
            f"{key_a}{EDGE_KEY_SEPARATOR}{key_b}",
            f"{key_b}{EDGE_KEY_SEPARATOR}{key_a}",
        )

    def find_edge(self, key_a: str, key_b: str) -> Optional[GraphEdge]:
        for edge_key in self.edge_keys(key_a, key_b):
            edge = self._edges.get(edge_key)
            if edge is not None:
                return edge
        return None

    def get_or_create_edge(
        self,
        key_a: str,
        key_b: str,
        factory: Optional[EdgeFactory] = None,
    ) -> Tuple[GraphEdge, bool]:
        """
        Return the edge between two node keys regardless of direction.

        A new edge gets the next sequential id of this pass and is registered
        under both orientations, so ``(A, B)`` and ``(B, A)`` resolve to it.

        Parameters:
            key_a: Source node key used when the edge is created
            key_b: Target node key used when the edge is created
            factory: Called with the new edge id on a cache miss

        Returns:
            ``(edge, was_new)``
        """
        edge = self.find_edge(key_a, key_b)
        if edge is not None:
            return edge, False

        self._edge_counter += 1
        if factory is not None:
            edge = factory(self._edge_counter)
        else:
            edge = GraphEdge(id=self._edge_counter, source=key_a, target=key_b)
        for edge_key in self.edge_keys(key_a, key_b):
            self._edges[edge_key] = edge
        return edge, True

    def shorten_protein_label(self, label: str) -> str:
        """
        Replace labels over ``MAX_PROTEIN_LABEL_LENGTH`` characters by ``Prot_<n>``.

        The same long label always maps to the same short one within a pass.
        """
        try:
            if label in self._protein_labels:
                return self._protein_labels[label]
            if len(label) > MAX_PROTEIN_LABEL_LENGTH:
                short = f"Prot_{self._protein_label_counter}"
                logger.debug(f"Protein label shortened to {short}: {label[:40]}...")
            else:
                short = label
            self._protein_labels[label] = short
            return short
        finally:
            self._protein_label_counter += 1
