"""
Cluster model consumed by the network exporter.

The model is produced upstream (clustering, ratio integration, alignment) and
is treated as read-only here:

1. ProteinCluster: connected protein/peptide nodes plus protein pairs
2. ProteinNode / PeptideNode: quantification units drawn as graph nodes
3. Ratio / IonCountRatio / Score: log2 ratios with confidence scores
4. ClassificationCase: consistency pattern of a protein pair
"""

from pcqnet.model.cases import ClassificationCase
from pcqnet.model.cluster import (
    AlignmentResult,
    ProteinCluster,
    ProteinPair,
    shared_peptide_nodes,
    unique_peptide_nodes,
)
from pcqnet.model.nodes import (
    GraphItem,
    PeptideNode,
    PositionInPeptide,
    ProteinNode,
    QuantifiedPeptide,
    QuantifiedProtein,
    QuantifiedPSM,
)
from pcqnet.model.ratio import FDR_SCORE_NAME, IonCountRatio, Ratio, Score

__all__ = [
    'ClassificationCase',
    'AlignmentResult',
    'ProteinCluster',
    'ProteinPair',
    'shared_peptide_nodes',
    'unique_peptide_nodes',
    'GraphItem',
    'PeptideNode',
    'PositionInPeptide',
    'ProteinNode',
    'QuantifiedPeptide',
    'QuantifiedProtein',
    'QuantifiedPSM',
    'FDR_SCORE_NAME',
    'IonCountRatio',
    'Ratio',
    'Score',
]
