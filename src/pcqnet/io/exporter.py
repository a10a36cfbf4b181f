"""
Export driver: one XGMML network per export pass.

Passes, in order:

1. ALL: every cluster, ``{prefix}_cytoscape_ALL_{suffix}.xgmml``
2. Significants: clusters with at least one significant peptide node,
   ``{prefix}_cytoscape_Significants_{fdr}_{suffix}.xgmml`` (skipped when no
   cluster qualifies)
3. One pass per classification case, ``{prefix}_cytoscape_{id}-{NAME}_{suffix}.xgmml``,
   restricted to the clusters holding a protein pair with that case. These
   passes run only when classifications are applied by protein pair and both
   peptides and proteins were collapsed; the ``NO_EVIDENCE`` case never gets
   its own network.

Engineering Design:
    Every pass starts from a clean identity registry and color scaler, so the
    same cluster drawn in two passes yields identical nodes and edges.
    Taxonomy colors are shared by all passes of one driver. A pass that fails
    to write is logged and recorded in the ``ExportResult``; the remaining
    passes still run. ``PeptideNotInNodeError`` is a broken model and aborts
    the export.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import networkx as nx

from pcqnet.config import ExportParameters
from pcqnet.errors import GraphExportError
from pcqnet.graph.annotations import AnnotationLookup
from pcqnet.graph.builder import GraphBuilder, is_significant
from pcqnet.graph.colors import ColorScaler, TaxonomyColors
from pcqnet.graph.registry import IdentityRegistry
from pcqnet.io.xgmml import write_xgmml
from pcqnet.model.cases import ClassificationCase
from pcqnet.model.cluster import ProteinCluster

logger = logging.getLogger(__name__)

__all__ = [
    'ExportResult',
    'ExportDriver',
    'significant_clusters',
    'clusters_by_case',
    'fdr_text',
    'ALL_PASS',
    'SIGNIFICANT_PASS',
]

ALL_PASS = "ALL"
SIGNIFICANT_PASS = "Significants"


def fdr_text(threshold: Optional[float]) -> str:
    """FDR threshold as written in file names and labels."""
    return "NA" if threshold is None else repr(float(threshold))


def significant_clusters(clusters: Iterable[ProteinCluster], params: ExportParameters) -> List[ProteinCluster]:
    """
    Clusters with at least one peptide node whose representative ratio is
    significant (FDR within threshold, or infinite).
    """
    c1, c2 = params.condition1, params.condition2
    ret = []
    for cluster in clusters:
        for peptide_node in cluster.peptide_nodes:
            ratio = peptide_node.representative_ratio(c1, c2)
            if is_significant(ratio, c1, c2, params.significant_fdr_threshold):
                ret.append(cluster)
                break
    return ret


def clusters_by_case(clusters: Iterable[ProteinCluster]) -> Dict[ClassificationCase, List[ProteinCluster]]:
    """Clusters grouped by the classification cases of their protein pairs, in input order."""
    clusters = list(clusters)
    grouped: Dict[ClassificationCase, List[ProteinCluster]] = {}
    for case in ClassificationCase:
        members = [cluster for cluster in clusters if cluster.pairs_with_case(case)]
        if members:
            grouped[case] = members
    return grouped


@dataclass
class ExportResult:
    """
    Outcome of an export run.

    Attributes:
        written: Pass name -> written file
        failed: Pass name -> error message
        skipped: Pass name -> reason
    """
    written: Dict[str, Path] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    skipped: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            'written': {name: str(path) for name, path in self.written.items()},
            'failed': dict(self.failed),
            'skipped': dict(self.skipped),
        }


class ExportDriver:
    """
    Runs every export pass over a set of protein clusters.

    Parameters:
        params: Export configuration (output folder, prefix, suffix, gating)
        annotations: Optional protein annotations for labels and tooltips

    Example:
        >>> driver = ExportDriver(ExportParameters(output_folder=Path("out")))
        >>> result = driver.export(clusters)
        >>> result.written['ALL']
        PosixPath('out/pcq_cytoscape_ALL_.xgmml')
    """

    def __init__(self, params: ExportParameters, annotations: Optional[AnnotationLookup] = None):
        self.params = params
        self.annotations = annotations if annotations is not None else AnnotationLookup()
        self.taxonomy_colors = TaxonomyColors(params.colors)

    def output_path(self, stem: str) -> Path:
        """``{folder}/{prefix}_cytoscape_{stem}_{suffix}.xgmml``"""
        params = self.params
        return params.output_folder / f"{params.output_prefix}_cytoscape_{stem}_{params.output_suffix}.xgmml"

    def _run_pass(self, name: str, label: str, clusters: List[ProteinCluster], result: ExportResult,
                  stem: Optional[str] = None) -> None:
        path = self.output_path(stem or name)
        builder = GraphBuilder(self.params, self.annotations, self.taxonomy_colors, IdentityRegistry())
        document = builder.build(label, clusters)
        ColorScaler(self.params.colors).scale(document)

        graph = document.to_networkx()
        logger.info(
            f"Network '{label}': {graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges, "
            f"{nx.number_connected_components(graph)} connected components"
        )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            result.written[name] = write_xgmml(document, path)
        except (GraphExportError, OSError) as e:
            logger.exception(f"Export pass '{name}' failed, continuing with the next one")
            result.failed[name] = str(e)

    def export(self, clusters: Iterable[ProteinCluster]) -> ExportResult:
        """
        Run the full, significant-subset and per-classification passes.

        Raises:
            PeptideNotInNodeError: If the cluster model is inconsistent
        """
        clusters = list(clusters)
        params = self.params
        prefix, suffix = params.output_prefix, params.output_suffix
        result = ExportResult()

        logger.info(f"Creating XGMML files for {len(clusters)} protein clusters in {params.output_folder}")

        logger.info("Creating XGMML for the entire network...")
        self._run_pass(ALL_PASS, f"{prefix}_{suffix}", clusters, result)

        logger.info("Creating XGMML for the clusters containing a significantly changing peptide node...")
        significant = significant_clusters(clusters, params)
        threshold = params.significant_fdr_threshold
        if significant:
            stem = SIGNIFICANT_PASS
            if params.perform_ratio_integration and threshold is not None:
                stem = f"{SIGNIFICANT_PASS}_{fdr_text(threshold)}"
            self._run_pass(SIGNIFICANT_PASS, f"{prefix}_FDR{fdr_text(threshold)}_{suffix}", significant, result,
                           stem=stem)
        else:
            logger.info("No significantly changing peptide nodes, significant network skipped")
            result.skipped[SIGNIFICANT_PASS] = "no significant peptide nodes"

        self._export_cases(clusters, result)

        logger.info(
            f"Export finished: {len(result.written)} written, {len(result.failed)} failed, "
            f"{len(result.skipped)} skipped"
        )
        return result

    def _export_cases(self, clusters: List[ProteinCluster], result: ExportResult) -> None:
        params = self.params
        if not params.apply_classifications_by_protein_pair:
            logger.debug("Classifications by protein pair disabled, per-case networks skipped")
            return
        if not (params.collapse_indistinguishable_peptides and params.collapse_indistinguishable_proteins):
            logger.info("Per-case networks need collapsed peptides and proteins, skipped")
            return

        grouped = clusters_by_case(clusters)
        for case in ClassificationCase.exportable():
            name = f"{case.case_id}-{case.name}"
            members = grouped.get(case)
            if not members:
                result.skipped[name] = "no protein pair with this case"
                continue
            logger.info(f"Creating XGMML for case {case.case_id} ({case.explanation})...")
            self._run_pass(name, f"{params.output_prefix}_{name}_{params.output_suffix}", members, result)
