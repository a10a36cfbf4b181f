"""
Protein clusters, protein pairs and peptide alignments.

A protein cluster is a connected group of protein nodes linked by shared
peptide nodes. Within a cluster, protein pairs are the units compared for
consistent or inconsistent peptide-ratio evidence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from pcqnet.model.cases import ClassificationCase
from pcqnet.model.nodes import PeptideNode, ProteinNode

__all__ = [
    'AlignmentResult',
    'ProteinPair',
    'ProteinCluster',
    'unique_peptide_nodes',
    'shared_peptide_nodes',
]


@dataclass(frozen=True)
class AlignmentResult:
    """Outcome of a pairwise (Needleman-Wunsch) alignment of two peptides."""
    seq1: str
    seq2: str
    score: float
    alignment_length: int
    identical_length: int
    identity: float
    max_consecutive_identical: int
    alignment_string: str = ""


@dataclass(eq=False)
class ProteinPair:
    """
    Two protein nodes compared directly.

    The inconsistency flags are set upstream when the unique peptides of one
    protein (or the shared peptides) disagree with the rest of the evidence.
    """
    protein_node1: ProteinNode
    protein_node2: ProteinNode
    shared_peptides_inconsistent: bool = False
    unique_peptides_prot1_inconsistent: bool = False
    unique_peptides_prot2_inconsistent: bool = False
    classification_cases: List[ClassificationCase] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"ProteinPair({self.protein_node1.key!r}, {self.protein_node2.key!r})"


@dataclass(eq=False)
class ProteinCluster:
    """A connected group of protein and peptide nodes."""
    protein_nodes: List[ProteinNode] = field(default_factory=list)
    peptide_nodes: List[PeptideNode] = field(default_factory=list)
    protein_pairs: List[ProteinPair] = field(default_factory=list)
    alignments: Dict[FrozenSet[str], AlignmentResult] = field(default_factory=dict)

    def link(self, protein_node: ProteinNode, peptide_node: PeptideNode) -> None:
        """Connect a protein node and a peptide node on both sides."""
        if not any(p is protein_node for p in self.protein_nodes):
            self.protein_nodes.append(protein_node)
        if not any(p is peptide_node for p in self.peptide_nodes):
            self.peptide_nodes.append(peptide_node)
        if not any(p is peptide_node for p in protein_node.peptide_nodes):
            protein_node.peptide_nodes.append(peptide_node)
        if not any(p is protein_node for p in peptide_node.protein_nodes):
            peptide_node.protein_nodes.append(protein_node)

    def add_alignment(self, node1: PeptideNode, node2: PeptideNode, result: AlignmentResult) -> None:
        self.alignments[frozenset((node1.key, node2.key))] = result

    def alignment_result(self, node1: PeptideNode, node2: PeptideNode) -> Optional[AlignmentResult]:
        return self.alignments.get(frozenset((node1.key, node2.key)))

    def aligned_peptide_nodes(self, node: PeptideNode) -> List[PeptideNode]:
        """Peptide nodes of this cluster aligned to ``node``, sorted by key."""
        aligned = []
        for other in self.peptide_nodes:
            if other is node or other.key == node.key:
                continue
            if frozenset((node.key, other.key)) in self.alignments:
                aligned.append(other)
        return sorted(aligned, key=lambda n: n.key)

    def proteins_without_pair(self) -> List[ProteinNode]:
        """Protein nodes that are not part of any protein pair."""
        paired = set()
        for pair in self.protein_pairs:
            paired.add(id(pair.protein_node1))
            paired.add(id(pair.protein_node2))
        return [node for node in self.protein_nodes if id(node) not in paired]

    def pairs_with_case(self, case: ClassificationCase) -> List[ProteinPair]:
        return [pair for pair in self.protein_pairs if case in pair.classification_cases]


def _filtered(nodes: List[PeptideNode], remove_filtered: bool) -> List[PeptideNode]:
    if remove_filtered:
        nodes = [n for n in nodes if not n.discarded]
    return sorted(nodes, key=lambda n: n.key)


def unique_peptide_nodes(
    protein_node: ProteinNode,
    other: Optional[ProteinNode],
    remove_filtered: bool = False,
) -> List[PeptideNode]:
    """
    Peptide nodes of ``protein_node`` not connected to ``other``.

    With no ``other`` protein every peptide node of ``protein_node`` is
    returned. The result is sorted by key.
    """
    if other is None:
        return _filtered(list(protein_node.peptide_nodes), remove_filtered)
    nodes = [
        node for node in protein_node.peptide_nodes
        if not any(p is other for p in node.protein_nodes)
    ]
    return _filtered(nodes, remove_filtered)


def shared_peptide_nodes(
    protein_node: Optional[ProteinNode],
    other: Optional[ProteinNode],
    remove_filtered: bool = False,
) -> List[PeptideNode]:
    """Peptide nodes connected to both protein nodes, sorted by key."""
    if protein_node is None or other is None:
        return []
    nodes = [
        node for node in protein_node.peptide_nodes
        if any(p is other for p in node.protein_nodes)
    ]
    return _filtered(nodes, remove_filtered)
