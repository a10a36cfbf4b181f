"""
pcqnet - Protein cluster network export for PCQ quantification results

Turns protein/peptide clusters with integrated log2 ratios into Cytoscape
XGMML networks: protein nodes, peptide nodes, ratio coloring, and protein
pair classification cases on edges.
"""

__version__ = "0.1.0"

from pcqnet.config import ColorConfig, ExportParameters
from pcqnet.graph.builder import GraphBuilder
from pcqnet.io.exporter import ExportDriver, ExportResult
from pcqnet.model.cluster import ProteinCluster

__all__ = [
    "ColorConfig",
    "ExportParameters",
    "GraphBuilder",
    "ExportDriver",
    "ExportResult",
    "ProteinCluster",
]
