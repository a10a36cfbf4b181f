"""
Protein annotation lookup.

Annotations (entry name, gene, description, extra columns) enrich protein
labels and tooltips. They are optional: any accession without an entry falls
back to the data carried by the cluster model, and finally to the raw
accession itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set

from pcqnet.model.nodes import PROTEIN_ACC_SEPARATOR, ProteinNode

__all__ = ['ProteinAnnotation', 'AnnotationLookup', 'ANNOTATION_VALUE_SEPARATOR']

ANNOTATION_VALUE_SEPARATOR = ";"


@dataclass
class ProteinAnnotation:
    """Annotation record for one accession."""
    accession: str
    name: Optional[str] = None
    gene: Optional[str] = None
    description: Optional[str] = None
    taxonomy: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict)

    def values(self, column: str) -> List[str]:
        """Values of an extra column, split on ``;``."""
        raw = self.extra.get(column)
        if not raw:
            return []
        return [v.strip() for v in str(raw).split(ANNOTATION_VALUE_SEPARATOR) if v.strip()]


class AnnotationLookup:
    """Read-only view over annotations keyed by accession."""

    def __init__(self, annotations: Optional[Mapping[str, ProteinAnnotation]] = None):
        self._annotations: Dict[str, ProteinAnnotation] = dict(annotations or {})

    def __len__(self) -> int:
        return len(self._annotations)

    def __contains__(self, accession: str) -> bool:
        return accession in self._annotations

    def get(self, accession: str) -> Optional[ProteinAnnotation]:
        return self._annotations.get(accession)

    def protein_name(self, accession: str) -> Optional[str]:
        """Entry name (e.g. ``ALDOA_HUMAN``); obsolete entries give the accession."""
        annotation = self._annotations.get(accession)
        if annotation is None or not annotation.name:
            return None
        if "obsolete" in annotation.name:
            return accession
        return annotation.name

    def protein_name_string(self, protein_node: ProteinNode) -> str:
        """Entry names of all accessions of a node, accession where unknown."""
        names = [self.protein_name(acc) or acc for acc in protein_node.key.split(PROTEIN_ACC_SEPARATOR) if acc]
        return PROTEIN_ACC_SEPARATOR.join(names)

    def gene_string(self, protein_node: ProteinNode) -> str:
        """Distinct gene names of a node in accession order."""
        genes: List[str] = []
        for protein in sorted(protein_node.proteins, key=lambda p: p.accession):
            annotation = self._annotations.get(protein.accession)
            gene = annotation.gene if annotation is not None and annotation.gene else protein.gene
            gene = gene or protein.accession
            if gene not in genes:
                genes.append(gene)
        return PROTEIN_ACC_SEPARATOR.join(genes)

    def taxonomies(self, protein_node: ProteinNode) -> Set[str]:
        """Taxonomies of a node; proteins without one fall back to their annotation."""
        found = set(protein_node.taxonomies)
        for protein in protein_node.proteins:
            if protein.taxonomy:
                continue
            annotation = self._annotations.get(protein.accession)
            if annotation is not None and annotation.taxonomy:
                found.add(annotation.taxonomy)
        return found

    def column_values(self, accessions: Iterable[str], column: str) -> List[str]:
        """Sorted distinct values of an extra column over several accessions."""
        values = set()
        for accession in accessions:
            annotation = self._annotations.get(accession)
            if annotation is not None:
                values.update(annotation.values(column))
        return sorted(values)
