"""
Protein and peptide nodes of a protein cluster.

Biological Context:
    A peptide node groups one or more peptide sequences that cannot be told
    apart by their protein evidence (or that were collapsed by modification
    site). A protein node groups one or more protein accessions that share
    exactly the same peptide evidence. Both are the quantification units the
    network is drawn from.

Engineering Design:
    - Peptide and protein nodes are independent dataclasses exposing the same
      ``GraphItem`` surface (key, quantified_items, ratios, is_discarded)
      rather than sharing a base class
    - Nodes compare by identity; cross references (peptide <-> protein node)
      are wired by ``ProteinCluster.link``
    - Everything here is read-only from the exporter's point of view
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Set, Tuple, runtime_checkable

from pcqnet.errors import PeptideNotInNodeError
from pcqnet.model.ratio import INTEGRATED_PEPTIDE_NODE_RATIO, IonCountRatio, Ratio

__all__ = [
    'PROTEIN_ACC_SEPARATOR',
    'PROTEIN_DESCRIPTION_SEPARATOR',
    'PEPTIDE_SEQUENCE_SEPARATOR',
    'GraphItem',
    'QuantifiedPSM',
    'QuantifiedPeptide',
    'QuantifiedProtein',
    'PositionInPeptide',
    'PeptideNode',
    'ProteinNode',
    'species_string',
    'strip_modifications',
]

PROTEIN_ACC_SEPARATOR = " "
PROTEIN_DESCRIPTION_SEPARATOR = "###"
PEPTIDE_SEQUENCE_SEPARATOR = "_"

_OPENING = "(["
_CLOSING = ")]"


def strip_modifications(full_sequence: str) -> str:
    """Remove bracketed modification spans: ``PEP[+80]TIDE`` -> ``PEPTIDE``."""
    residues = []
    depth = 0
    for char in full_sequence:
        if char in _OPENING:
            depth += 1
        elif char in _CLOSING:
            depth = max(depth - 1, 0)
        elif depth == 0:
            residues.append(char)
    return "".join(residues)


def species_string(taxonomies: Iterable[str]) -> str:
    return ", ".join(sorted(set(taxonomies)))


@runtime_checkable
class GraphItem(Protocol):
    """Common surface of peptide and protein nodes used by the graph engine."""

    @property
    def key(self) -> str: ...

    @property
    def quantified_items(self) -> Sequence[object]: ...

    @property
    def ratios(self) -> Sequence[Ratio]: ...

    @property
    def is_discarded(self) -> bool: ...


@dataclass(frozen=True)
class QuantifiedPSM:
    """A peptide-spectrum match."""
    psm_id: str
    raw_file: str = ""
    replicate: str = ""
    singleton: bool = False


@dataclass(frozen=True)
class PositionInPeptide:
    """1-based residue position inside a peptide (site-collapsed nodes)."""
    position: int
    amino_acid: str = ""


@dataclass(eq=False)
class QuantifiedProtein:
    accession: str
    description: str = ""
    taxonomy: Optional[str] = None
    gene: Optional[str] = None


@dataclass(eq=False)
class QuantifiedPeptide:
    """
    A peptide sequence with its PSMs.

    ``sequence`` is the full sequence with modifications written in brackets
    or parentheses, e.g. ``ELVIS[+79.966]LIVES``.
    """
    sequence: str
    psms: List[QuantifiedPSM] = field(default_factory=list)
    protein_accessions: List[str] = field(default_factory=list)
    consensus_ratio: Optional[Ratio] = None
    ions_by_condition: Dict[str, int] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return self.sequence

    @property
    def bare_sequence(self) -> str:
        return strip_modifications(self.sequence)

    @property
    def contains_ptms(self) -> bool:
        return any(char in _OPENING for char in self.sequence)

    @property
    def raw_files(self) -> Set[str]:
        return {psm.raw_file for psm in self.psms if psm.raw_file}

    @property
    def replicates(self) -> Set[str]:
        return {psm.replicate for psm in self.psms if psm.replicate}

    def ions(self, condition: str) -> int:
        return self.ions_by_condition.get(condition, 0)


@dataclass(eq=False)
class PeptideNode:
    """
    One or more indistinguishable peptides quantified as a single unit.

    Attributes:
        peptides: Peptides merged into this node
        key: Identity key; defaults to the joined full sequences
        protein_nodes: Protein nodes this peptide node maps to
        confidence_value: Weight assigned by the ratio integration (1/variance)
        discarded: True when removed by upstream filters
        consensus_ratios: Integrated ratios, one per condition pair
        replicate_ratios: Integrated ratios per replicate name
        ion_count_ratio: Normalized ion-count ratio, when available
        positions_by_peptide: Site positions per peptide sequence (site collapsing)
    """
    peptides: List[QuantifiedPeptide]
    key_override: Optional[str] = None
    protein_nodes: List["ProteinNode"] = field(default_factory=list)
    confidence_value: Optional[float] = None
    discarded: bool = False
    consensus_ratios: List[Ratio] = field(default_factory=list)
    replicate_ratios: Dict[str, Ratio] = field(default_factory=dict)
    ion_count_ratio: Optional[IonCountRatio] = None
    positions_by_peptide: Dict[str, List[PositionInPeptide]] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return self.key_override or self.full_sequence

    @property
    def full_sequence(self) -> str:
        return PEPTIDE_SEQUENCE_SEPARATOR.join(sorted(p.sequence for p in self.peptides))

    @property
    def quantified_items(self) -> List[QuantifiedPeptide]:
        return self.peptides

    @property
    def ratios(self) -> List[Ratio]:
        return self.consensus_ratios

    @property
    def is_discarded(self) -> bool:
        return self.discarded

    @property
    def contains_ptms(self) -> bool:
        return any(p.contains_ptms for p in self.peptides)

    @property
    def psms(self) -> List[QuantifiedPSM]:
        seen: Dict[str, QuantifiedPSM] = {}
        for peptide in self.peptides:
            for psm in peptide.psms:
                seen.setdefault(psm.psm_id, psm)
        return list(seen.values())

    @property
    def raw_files(self) -> Set[str]:
        return set().union(*(p.raw_files for p in self.peptides)) if self.peptides else set()

    @property
    def replicates(self) -> Set[str]:
        return set().union(*(p.replicates for p in self.peptides)) if self.peptides else set()

    @property
    def proteins(self) -> Dict[str, QuantifiedProtein]:
        """Individual proteins behind all connected protein nodes, by accession."""
        ret: Dict[str, QuantifiedProtein] = {}
        for protein_node in self.protein_nodes:
            for protein in protein_node.proteins:
                ret.setdefault(protein.accession, protein)
        return ret

    @property
    def taxonomies(self) -> Set[str]:
        return {p.taxonomy for p in self.proteins.values() if p.taxonomy}

    def sorted_peptides(self) -> List[QuantifiedPeptide]:
        return sorted(self.peptides, key=lambda p: p.sequence)

    def consensus_ratio(self, condition1: str, condition2: str) -> Ratio:
        """
        Integrated ratio for a condition pair.

        A ratio stored in the opposite orientation is returned inverted. When
        none is stored a NaN ratio is returned, as the integration engine does
        for nodes it could not quantify.
        """
        found = self._find_consensus_ratio(condition1, condition2)
        if found is not None:
            return found
        return Ratio(math.nan, condition1, condition2, INTEGRATED_PEPTIDE_NODE_RATIO)

    def normalized_ion_count_ratio(self, condition1: str, condition2: str) -> Optional[IonCountRatio]:
        ratio = self.ion_count_ratio
        if ratio is None:
            return None
        if ratio.condition1 == condition2 and ratio.condition2 == condition1:
            return ratio.inverted()
        return ratio

    def representative_ratio(self, condition1: str, condition2: str) -> Optional[Ratio]:
        """
        Best available ratio: the integrated consensus ratio when one exists,
        otherwise the normalized ion-count ratio.
        """
        found = self._find_consensus_ratio(condition1, condition2)
        if found is not None:
            return found
        return self.normalized_ion_count_ratio(condition1, condition2)

    def ion_count(self, condition: Optional[str] = None) -> int:
        if condition is None:
            return sum(sum(p.ions_by_condition.values()) for p in self.peptides)
        return sum(p.ions(condition) for p in self.peptides)

    def position_in_peptide(self, peptide: QuantifiedPeptide) -> Optional[List[PositionInPeptide]]:
        """
        Site positions for which this node was created from ``peptide``.

        Raises:
            PeptideNotInNodeError: If ``peptide`` does not belong to this node
        """
        if not any(p is peptide for p in self.peptides):
            raise PeptideNotInNodeError(
                f"The peptide {peptide.bare_sequence} ({peptide.key}) is not in this peptide node"
            )
        return self.positions_by_peptide.get(peptide.key)

    def peptides_with_positions(self) -> List[Tuple[QuantifiedPeptide, Optional[List[PositionInPeptide]]]]:
        return [(p, self.position_in_peptide(p)) for p in self.sorted_peptides()]

    def _find_consensus_ratio(self, condition1: str, condition2: str) -> Optional[Ratio]:
        for ratio in self.consensus_ratios:
            if ratio.condition1 == condition1 and ratio.condition2 == condition2:
                return ratio
            if ratio.condition1 == condition2 and ratio.condition2 == condition1:
                return ratio.inverted()
        return None

    def __repr__(self) -> str:
        return f"PeptideNode({self.key!r})"


@dataclass(eq=False)
class ProteinNode:
    """One or more indistinguishable proteins."""
    proteins: List[QuantifiedProtein]
    key_override: Optional[str] = None
    peptide_nodes: List[PeptideNode] = field(default_factory=list)
    discarded: bool = False

    @property
    def accession_string(self) -> str:
        return PROTEIN_ACC_SEPARATOR.join(sorted(p.accession for p in self.proteins))

    @property
    def key(self) -> str:
        return self.key_override or self.accession_string

    @property
    def accessions(self) -> List[str]:
        return sorted(p.accession for p in self.proteins)

    @property
    def description(self) -> str:
        ordered = sorted(self.proteins, key=lambda p: p.accession)
        return PROTEIN_DESCRIPTION_SEPARATOR.join(p.description for p in ordered if p.description)

    @property
    def taxonomies(self) -> Set[str]:
        return {p.taxonomy for p in self.proteins if p.taxonomy}

    @property
    def quantified_items(self) -> List[QuantifiedProtein]:
        return self.proteins

    @property
    def ratios(self) -> List[Ratio]:
        return []

    @property
    def is_discarded(self) -> bool:
        return self.discarded

    @property
    def quantified_peptides(self) -> List[QuantifiedPeptide]:
        seen: Dict[str, QuantifiedPeptide] = {}
        for peptide_node in self.peptide_nodes:
            for peptide in peptide_node.peptides:
                seen.setdefault(peptide.key, peptide)
        return list(seen.values())

    @property
    def psms(self) -> List[QuantifiedPSM]:
        seen: Dict[str, QuantifiedPSM] = {}
        for peptide in self.quantified_peptides:
            for psm in peptide.psms:
                seen.setdefault(psm.psm_id, psm)
        return list(seen.values())

    @property
    def contains_ptms(self) -> bool:
        return any(node.contains_ptms for node in self.peptide_nodes)

    def unique_peptide_nodes(self, skip_discarded: bool = True) -> List[PeptideNode]:
        """Peptide nodes mapping to this protein node only."""
        return [
            node for node in self.peptide_nodes
            if len(node.protein_nodes) == 1
            and node.protein_nodes[0] is self
            and not (skip_discarded and node.discarded)
        ]

    def __repr__(self) -> str:
        return f"ProteinNode({self.key!r})"
