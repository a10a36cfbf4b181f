"""
Plain value structures for an exported network.

Graph elements only carry data: identifier, label, typed attributes and a
graphics record. Serialization to XGMML lives in ``pcqnet.io.xgmml`` so the
builder never touches markup.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

import networkx as nx

from pcqnet.model.cases import ClassificationCase

__all__ = [
    'AttributeType',
    'BorderType',
    'Attribute',
    'NodeGraphics',
    'EdgeGraphics',
    'GraphNode',
    'GraphEdge',
    'GraphDocument',
    'format_attribute_value',
]


class AttributeType(Enum):
    """XGMML attribute types with their Cytoscape counterparts."""
    STRING = ("string", "String")
    BOOLEAN = ("boolean", "Boolean")
    REAL = ("real", "Double")
    INTEGER = ("integer", "Integer")

    def __init__(self, xgmml_name: str, cy_type: str):
        self.xgmml_name = xgmml_name
        self.cy_type = cy_type

    @classmethod
    def infer(cls, value: Any) -> "AttributeType":
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, int):
            return cls.INTEGER
        if isinstance(value, float):
            return cls.REAL
        return cls.STRING


class BorderType(Enum):
    SOLID = "SOLID"
    DASHED = "DASHED"


def format_attribute_value(value: Any, att_type: AttributeType) -> str:
    """Render a value the way Cytoscape reads it back."""
    if value is None:
        return ""
    if att_type is AttributeType.BOOLEAN:
        if isinstance(value, str):
            return value
        return "1" if value else "0"
    if att_type is AttributeType.REAL and isinstance(value, (int, float)):
        value = float(value)
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return repr(value)
    return str(value)


@dataclass
class Attribute:
    name: str
    value: Any
    type: AttributeType

    @property
    def text(self) -> str:
        return format_attribute_value(self.value, self.type)


@dataclass
class NodeGraphics:
    """Presentation of a node; ``atts`` keeps Cytoscape visual properties in order."""
    shape: str
    height: int
    width: int
    fill: str
    outline: str
    border_width: int = 4
    atts: Dict[str, str] = field(default_factory=dict)

    @property
    def tooltip(self) -> Optional[str]:
        return self.atts.get("NODE_TOOLTIP")

    @property
    def label(self) -> Optional[str]:
        return self.atts.get("NODE_LABEL")


@dataclass
class EdgeGraphics:
    fill: str
    width: int = 3
    atts: Dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def tooltip(self) -> Optional[str]:
        return self.atts.get("EDGE_TOOLTIP")

    @property
    def label(self) -> Optional[str]:
        return self.atts.get("EDGE_LABEL")


class _Attributed:
    attributes: Dict[str, Attribute]

    def set_attribute(self, name: str, value: Any, att_type: Optional[AttributeType] = None) -> None:
        if att_type is None:
            att_type = AttributeType.infer(value)
        self.attributes[name] = Attribute(name, value, att_type)

    def attribute(self, name: str) -> Optional[Any]:
        att = self.attributes.get(name)
        return att.value if att is not None else None


@dataclass(eq=False)
class GraphNode(_Attributed):
    """A network node; ``id`` is the protein or peptide node key."""
    id: str
    label: str = ""
    attributes: Dict[str, Attribute] = field(default_factory=dict)
    graphics: Optional[NodeGraphics] = None


@dataclass(eq=False)
class GraphEdge(_Attributed):
    """
    A network edge.

    Edges are undirected identities; ``source``/``target`` only record the
    orientation in which the edge was first discovered.
    """
    id: int
    source: str = ""
    target: str = ""
    label: Optional[str] = None
    attributes: Dict[str, Attribute] = field(default_factory=dict)
    graphics: Optional[EdgeGraphics] = None
    cases: Set[ClassificationCase] = field(default_factory=set)


@dataclass
class GraphDocument:
    """A complete network ready for serialization."""
    label: str
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    attributes: Dict[str, Attribute] = field(default_factory=dict)
    graphics_atts: Dict[str, str] = field(default_factory=dict)

    def set_attribute(self, name: str, value: Any, att_type: Optional[AttributeType] = None) -> None:
        if att_type is None:
            att_type = AttributeType.infer(value)
        self.attributes[name] = Attribute(name, value, att_type)

    def add_nodes(self, nodes: Iterable[GraphNode]) -> None:
        self.nodes.extend(nodes)

    def add_edges(self, edges: Iterable[GraphEdge]) -> None:
        self.edges.extend(edges)

    def node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_networkx(self) -> nx.Graph:
        """
        Undirected networkx view of the document.

        Node and edge attribute values are copied as plain Python values,
        together with ``fill``/``outline``/``label`` from the graphics.
        """
        G = nx.Graph(label=self.label)
        for node in self.nodes:
            data = {name: att.value for name, att in node.attributes.items()}
            data["label"] = node.label
            if node.graphics is not None:
                data["fill"] = node.graphics.fill
                data["outline"] = node.graphics.outline
            G.add_node(node.id, **data)
        for edge in self.edges:
            data = {name: att.value for name, att in edge.attributes.items()}
            data["edge_id"] = edge.id
            if edge.graphics is not None:
                data["fill"] = edge.graphics.fill
            G.add_edge(edge.source, edge.target, **data)
        return G
