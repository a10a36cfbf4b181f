"""
Graph construction engine.

Components (leaf first):

1. IdentityRegistry: per-pass node/edge deduplication
2. ColorScaler / TaxonomyColors: ratio and taxonomy fill colors
3. ClassificationAggregator: case sets merged onto shared edges
4. annotate_sequence: PTM/site-highlighted sequence rendering
5. GraphBuilder: walks clusters and emits a GraphDocument
"""

from pcqnet.graph.annotations import AnnotationLookup, ProteinAnnotation
from pcqnet.graph.builder import GraphBuilder, is_significant, new_document
from pcqnet.graph.cases import ClassificationAggregator
from pcqnet.graph.colors import ColorScaler, TaxonomyColors, interpolate_color
from pcqnet.graph.elements import (
    Attribute,
    AttributeType,
    BorderType,
    EdgeGraphics,
    GraphDocument,
    GraphEdge,
    GraphNode,
    NodeGraphics,
)
from pcqnet.graph.registry import IdentityRegistry
from pcqnet.graph.sequence import annotate_sequence, format_number, format_number_more_decimals, to_html

__all__ = [
    'AnnotationLookup',
    'ProteinAnnotation',
    'GraphBuilder',
    'is_significant',
    'new_document',
    'ClassificationAggregator',
    'ColorScaler',
    'TaxonomyColors',
    'interpolate_color',
    'Attribute',
    'AttributeType',
    'BorderType',
    'EdgeGraphics',
    'GraphDocument',
    'GraphEdge',
    'GraphNode',
    'NodeGraphics',
    'IdentityRegistry',
    'annotate_sequence',
    'format_number',
    'format_number_more_decimals',
    'to_html',
]
