"""
Graph construction from protein clusters.

Engineering Design:
    For every protein pair the builder lays out five groups::

        U1 -- P1 -- S12 -- P2 -- U2

    U1/U2 are peptide nodes unique to protein node 1/2, S12 the peptide nodes
    shared by both. Every (protein, peptide) adjacency becomes one edge, and
    aligned peptide nodes are joined by an extra homology edge. Nodes and
    edges are created lazily through the pass's ``IdentityRegistry``: a
    peptide shared by several pairs is drawn once, and later encounters only
    add highlight outlines and classification cases.

    Highlighting is monotonic. An inconsistent pair paints its U/S edges and
    peptide outlines with the highlight color, and no later (consistent)
    encounter paints them back.

Biological Context:
    Peptide node labels show the log2 ratio between the two conditions,
    suffixed with ``*`` when the ratio is significant: its FDR passes the
    configured threshold, or the ratio is infinite (signal in a single
    condition) regardless of its score.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence

from pcqnet.config import ExportParameters, ProteinNodeLabel
from pcqnet.graph.annotations import AnnotationLookup
from pcqnet.graph.cases import CLASSIFICATION_CASE_ATTRIBUTE, ClassificationAggregator, sort_cases
from pcqnet.graph.colors import (
    BLACK,
    COUNT_RATIO_ATTRIBUTE,
    FINAL_RATIO_ATTRIBUTE,
    IS_FILTERED_ATTRIBUTE,
    SIGNIFICANT_ATTRIBUTE,
    TaxonomyColors,
)
from pcqnet.graph.elements import (
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
from pcqnet.model.cases import ClassificationCase
from pcqnet.model.cluster import (
    AlignmentResult,
    ProteinCluster,
    shared_peptide_nodes,
    unique_peptide_nodes,
)
from pcqnet.model.nodes import (
    PEPTIDE_SEQUENCE_SEPARATOR,
    PROTEIN_ACC_SEPARATOR,
    PROTEIN_DESCRIPTION_SEPARATOR,
    GraphItem,
    PeptideNode,
    ProteinNode,
    QuantifiedPeptide,
    species_string,
)
from pcqnet.model.ratio import FDR_SCORE_NAME, IonCountRatio, Ratio

logger = logging.getLogger(__name__)

__all__ = [
    'GraphBuilder',
    'new_document',
    'is_significant',
    'PCQ_ID',
    'LAYOUT_ALGORITHM',
]

PCQ_ID = "PCQ_ID"
WEIGHT = "Weight"
VARIANCE = "Variance"
LAYOUT_ALGORITHM = "Prefuse Force Directed Layout"
PEPTIDE_FILL = "#00FFFF"


def is_significant(ratio: Optional[Ratio], condition1: str, condition2: str,
                   fdr_threshold: Optional[float]) -> bool:
    """
    Whether a peptide node ratio is significant.

    An infinite ratio is always significant. Otherwise the ratio's score must
    be an FDR not above ``fdr_threshold``.
    """
    if ratio is None:
        return False
    if ratio.is_infinite:
        return True
    score = ratio.score
    if score is None or fdr_threshold is None or score.name != FDR_SCORE_NAME:
        return False
    value = score.numeric_value
    return value is not None and fdr_threshold >= value


def new_document(label: str) -> GraphDocument:
    """An empty network with the graph-level attributes Cytoscape expects."""
    document = GraphDocument(label=label)
    document.set_attribute(PCQ_ID, label, AttributeType.STRING)
    document.set_attribute("selected", "1", AttributeType.BOOLEAN)
    document.set_attribute("layoutAlgorithm", LAYOUT_ALGORITHM, AttributeType.STRING)
    document.graphics_atts = {
        "NETWORK_NODE_SELECTION": "true",
        "NETWORK_HEIGHT": "381.0",
        "NETWORK_TITLE": label,
        "NETWORK_EDGE_SELECTION": "true",
        "NETWORK_SCALE_FACTOR": "0.23",
        "NETWORK_WIDTH": "946.0",
        "NETWORK_DEPTH": "0.0",
        "NETWORK_BACKGROUND_PAINT": "#FFFFFF",
    }
    return document


def _node_graphics(label: str, tooltip: str, shape: str, height: int, width: int,
                   outline: str, fill: str, label_color: str, border: BorderType) -> NodeGraphics:
    return NodeGraphics(
        shape=shape,
        height=height,
        width=width,
        fill=fill,
        outline=outline,
        border_width=4,
        atts={
            "NODE_TOOLTIP": tooltip,
            "NODE_NESTED_NETWORK_IMAGE_VISIBLE": "true",
            "NODE_BORDER_STROKE": border.value,
            "NODE_SELECTED": "false",
            "NODE_TRANSPARENCY": "255",
            "NODE_LABEL_WIDTH": "200",
            "NODE_LABEL": label,
            "NODE_LABEL_FONT_SIZE": "12",
            "NODE_LABEL_TRANSPARENCY": "255",
            "NODE_LABEL_COLOR": label_color,
            "NODE_VISIBLE": "true",
            "NODE_DEPTH": "0.0",
            "NODE_BORDER_TRANSPARENCY": "255",
            "NODE_LABEL_FONT_FACE": "Dialog,plain,12",
        },
    )


def _item_attributes(node: GraphNode, item: GraphItem) -> None:
    """Attributes carried by protein and peptide nodes alike."""
    node.set_attribute("shared name", item.key, AttributeType.STRING)
    node.set_attribute(IS_FILTERED_ATTRIBUTE, int(item.is_discarded))


def _edge_graphics(label: Optional[str], tooltip: Optional[str], fill: str) -> EdgeGraphics:
    return EdgeGraphics(
        fill=fill,
        width=3,
        atts={
            "EDGE_SELECTED": "false",
            "EDGE_LABEL_COLOR": BLACK,
            "EDGE_TARGET_ARROW_SHAPE": "none",
            "EDGE_SOURCE_ARROW_UNSELECTED_PAINT": BLACK,
            "EDGE_TARGET_ARROW_SELECTED_PAINT": "#FFFF00",
            "EDGE_LABEL_TRANSPARENCY": "255",
            "EDGE_STROKE_SELECTED_PAINT": "#FF0000",
            "EDGE_LINE_TYPE": "SOLID",
            "EDGE_TOOLTIP": tooltip,
            "EDGE_CURVED": "true",
            "EDGE_TRANSPARENCY": "255",
            "EDGE_BEND": "",
            "EDGE_LABEL_FONT_FACE": "Dialog,plain,10",
            "EDGE_LABEL": label,
            "EDGE_SOURCE_ARROW_SHAPE": "none",
            "EDGE_TARGET_ARROW_UNSELECTED_PAINT": BLACK,
            "EDGE_SOURCE_ARROW_SELECTED_PAINT": "#FFFF00",
            "EDGE_VISIBLE": "true",
        },
    )


def _alignment_tooltip(result: Optional[AlignmentResult]) -> str:
    if result is None:
        return ""
    identity = format_number(result.identity * 100)
    return (
        f"<b>Alignment Score=</b>{result.score}"
        f"\n<b>peptide 1:</b>{result.seq1}"
        f"\n<b>peptide 2:</b>{result.seq2}"
        f"\n<b>Length of alignment=</b>{result.alignment_length}"
        f"\n<b>Identical segment length=</b>{result.identical_length}"
        f"\n<b>Identity=</b>{identity}%"
        f"\n<b>Max consecutive identity=</b>{result.max_consecutive_identical}"
        f"\n<b>Alignment string=</b>\n{result.alignment_string}"
    )


class GraphBuilder:
    """
    Builds one network per export pass.

    Parameters:
        params: Export configuration
        annotations: Protein annotations for labels and tooltips
        taxonomy_colors: Taxonomy fill colors, shared across passes so a
            taxonomy keeps its color in every file
        registry: Identity registry; reset at the start of every ``build``

    Example:
        >>> builder = GraphBuilder(ExportParameters())
        >>> document = builder.build("pcq_all", clusters)
    """

    def __init__(
        self,
        params: ExportParameters,
        annotations: Optional[AnnotationLookup] = None,
        taxonomy_colors: Optional[TaxonomyColors] = None,
        registry: Optional[IdentityRegistry] = None,
    ):
        self.params = params
        self.colors = params.colors
        self.annotations = annotations if annotations is not None else AnnotationLookup()
        self.taxonomy_colors = taxonomy_colors if taxonomy_colors is not None else TaxonomyColors(params.colors)
        self.registry = registry if registry is not None else IdentityRegistry()
        self.aggregator = ClassificationAggregator(params.show_cases_in_edges)

    @property
    def condition1(self) -> str:
        return self.params.condition1

    @property
    def condition2(self) -> str:
        return self.params.condition2

    def build(self, label: str, clusters: Iterable[ProteinCluster]) -> GraphDocument:
        """Reset the registry and draw every cluster into a new document."""
        self.registry.reset()
        document = new_document(label)
        for cluster in clusters:
            self.add_cluster(cluster)
        document.add_nodes(self.registry.nodes)
        document.add_edges(self.registry.edges)
        logger.debug(f"Built '{label}': {len(document.nodes)} nodes, {len(document.edges)} edges")
        return document

    def add_cluster(self, cluster: ProteinCluster) -> None:
        if cluster.protein_pairs:
            for pair in cluster.protein_pairs:
                self.add_protein_nodes(
                    pair.protein_node1,
                    pair.protein_node2,
                    shared_inconsistent=pair.shared_peptides_inconsistent,
                    unique1_inconsistent=pair.unique_peptides_prot1_inconsistent,
                    unique2_inconsistent=pair.unique_peptides_prot2_inconsistent,
                    cases=pair.classification_cases,
                )
            standalone = cluster.proteins_without_pair()
        else:
            standalone = list(cluster.protein_nodes)
        for protein_node in standalone:
            self.add_protein_nodes(protein_node, None)

        for peptide_node in cluster.peptide_nodes:
            for aligned in cluster.aligned_peptide_nodes(peptide_node):
                self._alignment_edge(cluster, peptide_node, aligned)

    def add_protein_nodes(
        self,
        protein_node1: ProteinNode,
        protein_node2: Optional[ProteinNode],
        shared_inconsistent: bool = False,
        unique1_inconsistent: bool = False,
        unique2_inconsistent: bool = False,
        cases: Optional[Sequence[ClassificationCase]] = None,
    ) -> None:
        """
        Draw a protein pair (or a single protein when ``protein_node2`` is None).
        """
        remove_filtered = self.params.remove_filtered_nodes

        # U1 -- P1
        unique1 = unique_peptide_nodes(protein_node1, protein_node2, remove_filtered)
        for peptide_node in unique1:
            self._peptide_graph_node(peptide_node, highlighted=unique1_inconsistent)
        self._protein_graph_node(protein_node1, cases)
        for peptide_node in unique1:
            self._protein_peptide_edge(protein_node1, peptide_node, unique1_inconsistent, cases,
                                       peptide_first=True)

        # P1 -- S12 -- P2
        for peptide_node in shared_peptide_nodes(protein_node1, protein_node2, remove_filtered):
            self._peptide_graph_node(peptide_node, highlighted=shared_inconsistent)
            self._protein_peptide_edge(protein_node1, peptide_node, shared_inconsistent, cases)
            if protein_node2 is not None:
                self._protein_peptide_edge(protein_node2, peptide_node, shared_inconsistent, cases)

        # P2 -- U2
        if protein_node2 is not None:
            self._protein_graph_node(protein_node2, cases)
            for peptide_node in unique_peptide_nodes(protein_node2, protein_node1, remove_filtered):
                self._peptide_graph_node(peptide_node, highlighted=unique2_inconsistent)
                self._protein_peptide_edge(protein_node2, peptide_node, unique2_inconsistent, cases)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def _protein_peptide_edge(
        self,
        protein_node: ProteinNode,
        peptide_node: PeptideNode,
        highlighted: bool,
        cases: Optional[Sequence[ClassificationCase]],
        peptide_first: bool = False,
    ) -> GraphEdge:
        if peptide_first:
            source, target = peptide_node.key, protein_node.key
        else:
            source, target = protein_node.key, peptide_node.key

        def create(edge_id: int) -> GraphEdge:
            edge = GraphEdge(id=edge_id, source=source, target=target,
                             graphics=_edge_graphics(None, None, BLACK))
            edge.set_attribute(PCQ_ID, f"{protein_node.key}-{peptide_node.key}", AttributeType.STRING)
            ratio = peptide_node.consensus_ratio(self.condition1, self.condition2)
            if not ratio.is_nan:
                edge.set_attribute(COUNT_RATIO_ATTRIBUTE, ratio.log2_ratio(self.condition1, self.condition2),
                                   AttributeType.REAL)
            return edge

        edge, _ = self.registry.get_or_create_edge(source, target, create)
        if highlighted:
            edge.graphics.fill = self.colors.highlight_color
        self.aggregator.merge(edge, cases)
        return edge

    def _alignment_edge(self, cluster: ProteinCluster, node1: PeptideNode, node2: PeptideNode) -> None:
        if node1.key == node2.key:
            return
        result = cluster.alignment_result(node1, node2)

        def create(edge_id: int) -> GraphEdge:
            tooltip = to_html(_alignment_tooltip(result))
            edge = GraphEdge(id=edge_id, source=node1.key, target=node2.key,
                             graphics=_edge_graphics(None, tooltip, self.colors.aligned_peptides_edge_color))
            name = PEPTIDE_SEQUENCE_SEPARATOR.join(sorted((node1.key, node2.key)))
            edge.set_attribute(PCQ_ID, name, AttributeType.STRING)
            if result is not None:
                edge.set_attribute("Alignment score", float(result.score), AttributeType.REAL)
                edge.set_attribute("Alignment length", int(result.alignment_length), AttributeType.INTEGER)
                edge.set_attribute("Alignment identity", float(result.identity), AttributeType.REAL)
                edge.set_attribute("Alignment identical length", int(result.identical_length),
                                   AttributeType.INTEGER)
                edge.set_attribute("Alignment segment maximum length", int(result.max_consecutive_identical),
                                   AttributeType.INTEGER)
                edge.set_attribute("Homology connection", "true", AttributeType.STRING)
            return edge

        self.registry.get_or_create_edge(node1.key, node2.key, create)

    # ------------------------------------------------------------------
    # Peptide nodes
    # ------------------------------------------------------------------

    def _peptide_graph_node(self, peptide_node: PeptideNode, highlighted: bool) -> GraphNode:
        outline = self.colors.highlight_color if highlighted else BLACK
        node, _ = self.registry.get_or_create_node(
            peptide_node.key, lambda: self._create_peptide_node(peptide_node, outline))
        if highlighted:
            node.graphics.outline = self.colors.highlight_color
        return node

    def _create_peptide_node(self, peptide_node: PeptideNode, outline: str) -> GraphNode:
        c1, c2 = self.condition1, self.condition2
        key = peptide_node.key
        ratio = peptide_node.representative_ratio(c1, c2)
        final_ratio = ratio.log2_ratio(c1, c2) if ratio is not None else None
        label = format_number(final_ratio) or "N/A"
        num_proteins = len(peptide_node.proteins)

        node = GraphNode(id=key, label=key)
        node.set_attribute("PeptideSequences", peptide_node.full_sequence, AttributeType.STRING)
        node.set_attribute(PCQ_ID, key, AttributeType.STRING)
        node.set_attribute("numProteins", num_proteins)
        node.set_attribute("numPsms", len(peptide_node.psms))
        node.set_attribute("numMSRuns", len(peptide_node.raw_files))
        node.set_attribute("numReplicates", len(peptide_node.replicates))
        node.set_attribute("numPeptideSequences", len(peptide_node.peptides))
        node.set_attribute("numConnectedProteinNodes", len(peptide_node.protein_nodes))
        if peptide_node.taxonomies:
            node.set_attribute("Species", species_string(peptide_node.taxonomies), AttributeType.STRING)
        node.set_attribute("ionCount", peptide_node.ion_count())
        _item_attributes(node, peptide_node)
        node.set_attribute("isProtein", 0)
        node.set_attribute("containsPTMs", int(peptide_node.contains_ptms))
        if final_ratio is not None:
            node.set_attribute(FINAL_RATIO_ATTRIBUTE, float(final_ratio), AttributeType.REAL)

        ion_count_ratio = peptide_node.normalized_ion_count_ratio(c1, c2)
        if ion_count_ratio is not None:
            node.set_attribute("Rc", float(ion_count_ratio.log2_ratio(c1, c2)), AttributeType.REAL)

        significant = False
        if ratio is not None:
            if isinstance(ratio, IonCountRatio) and not ratio.is_nan:
                node.set_attribute("normLightIons", float(ratio.ion_count(c1)), AttributeType.REAL)
                node.set_attribute("normHeavyIons", float(ratio.ion_count(c2)), AttributeType.REAL)
            node.set_attribute("lightIons", peptide_node.ion_count(c1))
            node.set_attribute("heavyIons", peptide_node.ion_count(c2))
            score = ratio.score
            if score is not None:
                numeric = score.numeric_value
                if numeric is not None:
                    node.set_attribute(score.name, numeric, AttributeType.REAL)
                else:
                    logger.debug(f"Score {score.name} of {key} is not numeric: {score.value!r}")
                    node.set_attribute(score.name, str(score.value), AttributeType.STRING)
            significant = is_significant(ratio, c1, c2, self.params.significant_fdr_threshold)
        node.set_attribute(SIGNIFICANT_ATTRIBUTE, int(significant))

        confidence = peptide_node.confidence_value
        if confidence is not None:
            node.set_attribute(WEIGHT, float(confidence), AttributeType.REAL)
            if confidence != 0:
                node.set_attribute(VARIANCE, 1.0 / confidence, AttributeType.REAL)
        node.set_attribute("uniquePeptide", 0 if num_proteins > 1 else 1)
        node.set_attribute("uniquePeptideNode", 0 if len(peptide_node.protein_nodes) > 1 else 1)

        fill = PEPTIDE_FILL
        label_color = BLACK
        if peptide_node.discarded:
            fill = self.colors.discarded_fill_color
            label_color = self.colors.discarded_label_color
        if significant:
            label += "*"

        tooltip = to_html(self._peptide_tooltip(peptide_node, ratio))
        node.graphics = _node_graphics(
            label, tooltip,
            self.params.peptide_node_shape.value,
            self.params.peptide_node_height,
            self.params.peptide_node_width,
            outline, fill, label_color, BorderType.SOLID,
        )
        return node

    def _annotated_node_sequence(self, peptide_node: PeptideNode) -> str:
        highlight = self.params.highlight_positions
        if self.params.collapse_by_sites:
            return "-".join(
                annotate_sequence(peptide.sequence, positions, highlight)
                for peptide, positions in peptide_node.peptides_with_positions()
            )
        return annotate_sequence(peptide_node.full_sequence)

    def _ion_count_tooltip(self, ratio: IonCountRatio, peptides: List[QuantifiedPeptide]) -> str:
        c1, c2 = self.condition1, self.condition2
        numerator = []
        denominator = []
        for peptide in peptides:
            if not peptide.ions_by_condition:
                continue
            psms = len(peptide.psms)
            numerator.append(f"{peptide.ions(c1)}/{psms}" if c1 in peptide.ions_by_condition else "0")
            denominator.append(f"{peptide.ions(c2)}/{psms}" if c2 in peptide.ions_by_condition else "0")
        value = format_number_more_decimals(ratio.log2_ratio(c1, c2))
        return (f"Ion count ratio Rc = {value} = log2( ({' + '.join(numerator)}) "
                f"/ ({' + '.join(denominator)}) )")

    def _peptide_tooltip(self, peptide_node: PeptideNode, ratio: Optional[Ratio]) -> str:
        c1, c2 = self.condition1, self.condition2
        highlight = self.params.highlight_positions
        peptides = peptide_node.sorted_peptides()
        lines: List[str] = []

        if peptide_node.discarded:
            lines.append("<b>Peptide node discarded by applied filters</b>")
        if peptide_node.key != peptide_node.full_sequence:
            lines.append(annotate_sequence(peptide_node.key))
        lines.append(self._annotated_node_sequence(peptide_node))
        lines.extend([
            f"{len(peptides)} Peptide sequences",
            f"{len(peptide_node.psms)} PSMs",
            f"Shared by {len(peptide_node.protein_nodes)} protein Nodes",
            f"Shared by {len(peptide_node.proteins)} proteins",
            f"Detected in {len(peptide_node.raw_files)} MS runs",
            f"Detected in {len(peptide_node.replicates)} Replicates",
        ])

        confidence = peptide_node.confidence_value
        if confidence is not None:
            lines.append(f"{WEIGHT} = {format_number_more_decimals(confidence)}")
            if confidence != 0:
                lines.append(f"{VARIANCE} = {format_number_more_decimals(1.0 / confidence)}")

        if ratio is None:
            lines.append("No ratio calculated")
        else:
            if isinstance(ratio, IonCountRatio):
                lines.append(self._ion_count_tooltip(ratio, peptides))
            else:
                description = ratio.description or "RATIO"
                lines.append(f"{description} = {format_number(ratio.log2_ratio(c1, c2))}")
                ion_count_ratio = peptide_node.normalized_ion_count_ratio(c1, c2)
                if ion_count_ratio is not None:
                    lines.append(self._ion_count_tooltip(ion_count_ratio, peptides))
            if ratio.score is not None:
                lines.append(f"{ratio.score.name} = {format_number_more_decimals(ratio.score.value)}")

        lines.append("Individual peptides in the node: ")
        for peptide in peptides:
            lines.append(self._peptide_detail(peptide_node, peptide, highlight))

        text = "\n".join(lines) + "\n"
        if peptide_node.taxonomies:
            text += f"\n<b>TAX:</b> {species_string(peptide_node.taxonomies)}"
        return text

    def _peptide_detail(self, peptide_node: PeptideNode, peptide: QuantifiedPeptide, highlight: bool) -> str:
        c1, c2 = self.condition1, self.condition2
        positions = peptide_node.position_in_peptide(peptide)
        ratio = peptide.consensus_ratio
        description = ratio.description if ratio is not None else "RATIO"
        value = ratio.log2_ratio(c1, c2) if ratio is not None else math.nan
        detail = (
            f"{annotate_sequence(peptide.sequence, positions, highlight)}, "
            f"{len(peptide.psms)} PSMs, "
            f"Shared by {len(peptide.protein_accessions)} proteins, "
            f"Detected in {len(peptide.raw_files)} MS Runs, "
            f"Detected in {len(peptide.replicates)} replicates, "
            f"{description} = {format_number_more_decimals(value)}"
        )
        if ratio is not None and ratio.score is not None:
            detail += f", {ratio.score.name} = {format_number_more_decimals(ratio.score.value)}"

        singletons = sum(1 for psm in peptide.psms if psm.singleton)
        non_singletons = len(peptide.psms) - singletons
        if singletons > 0:
            detail += f" ,<b>{singletons} singleton" + ("s" if singletons > 1 else "")
            if non_singletons > 0:
                detail += f" and {non_singletons} non singleton" + ("s" if non_singletons > 1 else "")
            detail += "</b>"
        return detail

    # ------------------------------------------------------------------
    # Protein nodes
    # ------------------------------------------------------------------

    def _protein_graph_node(self, protein_node: ProteinNode,
                            cases: Optional[Sequence[ClassificationCase]]) -> GraphNode:
        node, _ = self.registry.get_or_create_node(
            protein_node.key, lambda: self._create_protein_node(protein_node, cases))
        return node

    def protein_label(self, protein_node: ProteinNode) -> str:
        """Label text for the configured ``protein_label`` mode, before shortening."""
        mode = self.params.protein_label
        if mode is ProteinNodeLabel.ACC:
            return protein_node.key
        if mode is ProteinNodeLabel.ID:
            return self.annotations.protein_name_string(protein_node)
        gene = self.annotations.gene_string(protein_node)
        if not self.params.collapse_by_ptms:
            return gene
        # keep the PTM part of the key, with the accession swapped for the gene
        label = protein_node.key.replace(protein_node.accession_string, gene)
        if len(self.params.ptm_codes) == 1:
            label = label.replace(f"({self.params.ptm_codes[0]})", "")
        return label

    def _protein_description(self, protein_node: ProteinNode) -> str:
        description = protein_node.description
        if description:
            return description
        descriptions = []
        for accession in protein_node.accessions:
            annotation = self.annotations.get(accession)
            if annotation is not None and annotation.description:
                descriptions.append(annotation.description)
        return PROTEIN_DESCRIPTION_SEPARATOR.join(descriptions)

    def _create_protein_node(self, protein_node: ProteinNode,
                             cases: Optional[Sequence[ClassificationCase]]) -> GraphNode:
        key = protein_node.key
        description = self._protein_description(protein_node)
        taxonomies = self.annotations.taxonomies(protein_node)
        gene = self.annotations.gene_string(protein_node)

        node = GraphNode(id=key, label=self.registry.shorten_protein_label(self.protein_label(protein_node)))
        node.set_attribute("UniprotKB", key, AttributeType.STRING)
        _item_attributes(node, protein_node)
        node.set_attribute("numProteins", len(key.split(PROTEIN_ACC_SEPARATOR)))
        node.set_attribute("isProtein", 1)
        node.set_attribute("containsPTMs", int(protein_node.contains_ptms))
        node.set_attribute("numPeptideSequencesInProteins", len(protein_node.quantified_peptides))
        node.set_attribute("numPsmsInProtein", len(protein_node.psms))
        node.set_attribute("numConnectedPeptideNodes", len(protein_node.peptide_nodes))

        annotation_values = {}
        for column in self.params.annotation_columns:
            value = ", ".join(self.annotations.column_values(protein_node.accessions, column))
            node.set_attribute(column, value, AttributeType.STRING)
            annotation_values[column] = value

        case_lines = None
        if cases is not None:
            ordered = sort_cases(cases)
            node.set_attribute(CLASSIFICATION_CASE_ATTRIBUTE, ",".join(str(c.case_id) for c in ordered),
                               AttributeType.STRING)
            case_lines = "\n".join(f"<b>{c.case_id}</b>: {c.explanation}" for c in ordered)

        node.set_attribute(
            "ProteinDescription",
            description.replace(PROTEIN_DESCRIPTION_SEPARATOR, f" {PROTEIN_DESCRIPTION_SEPARATOR} "),
            AttributeType.STRING,
        )
        if taxonomies:
            node.set_attribute("Species", species_string(taxonomies), AttributeType.STRING)
        if gene:
            node.set_attribute("GeneName", gene, AttributeType.STRING)
        node.set_attribute("ID", self.annotations.protein_name_string(protein_node), AttributeType.STRING)
        node.set_attribute("ACC", key, AttributeType.STRING)
        node.set_attribute("conclusiveProteinNode",
                           "1" if protein_node.unique_peptide_nodes(skip_discarded=True) else "0",
                           AttributeType.STRING)
        node.set_attribute("conclusiveProtein",
                           "1" if len(protein_node.quantified_peptides) == 1 else "0",
                           AttributeType.STRING)

        tooltip = (
            "<b>Protein ACC(s):</b>\n" + key.replace(PROTEIN_ACC_SEPARATOR, "\n")
            + "\n<b>Protein name(s):</b>\n " + description.replace(PROTEIN_DESCRIPTION_SEPARATOR, "\n")
        )
        if case_lines is not None:
            tooltip += "\n<b>Classification case(s):</b>\n" + case_lines
        if taxonomies:
            tooltip += (f"\n<b>TAX:</b> {species_string(taxonomies)}"
                        f"\n<b>Gene name:</b> {gene}")
        for column, value in annotation_values.items():
            tooltip += f"\n<b>{column}:</b> {value}"

        fill = self.taxonomy_colors.fill_for(taxonomies, protein_node.discarded)
        node.graphics = _node_graphics(
            node.label, to_html(tooltip),
            self.params.protein_node_shape.value,
            self.params.protein_node_height,
            self.params.protein_node_width,
            BLACK, fill, BLACK, BorderType.SOLID,
        )
        return node
