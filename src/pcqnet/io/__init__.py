"""
I/O for the network exporter.

Reads the cluster model and protein annotations, and writes XGMML networks
for Cytoscape.

Key Functions:
    - load_cluster_model: Load protein clusters from a JSON cluster model
    - load_protein_annotations: Load a CSV/TSV protein annotation table
    - write_xgmml: Serialize a graph document to an XGMML file
    - ExportDriver: Run every export pass and write one file per pass

Examples:
    >>> from pcqnet.io import load_cluster_model, ExportDriver
    >>> from pcqnet.config import ExportParameters
    >>> from pathlib import Path
    >>>
    >>> clusters = load_cluster_model(Path("clusters.json"))
    >>> result = ExportDriver(ExportParameters(output_folder=Path("networks"))).export(clusters)
    >>> print(f"Wrote {len(result.written)} networks")
"""

from pcqnet.io.exporter import ExportDriver, ExportResult, clusters_by_case, significant_clusters
from pcqnet.io.loaders import clusters_from_dict, load_cluster_model, load_protein_annotations
from pcqnet.io.xgmml import fix_header, serialize, write_xgmml

__all__ = [
    'ExportDriver',
    'ExportResult',
    'clusters_by_case',
    'significant_clusters',
    'clusters_from_dict',
    'load_cluster_model',
    'load_protein_annotations',
    'fix_header',
    'serialize',
    'write_xgmml',
]
