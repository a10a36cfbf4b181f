"""
Loaders for the exporter's inputs.

Cluster model (JSON):
    The clustering and ratio-integration steps run upstream. Their result is
    handed over as one JSON document::

        {
          "proteins": [{"accession": "P1", "description": "...",
                        "taxonomy": "Homo sapiens", "gene": "GENE1"}],
          "clusters": [{
            "protein_nodes": [{"accessions": ["P1"], "discarded": false}],
            "peptide_nodes": [{
              "peptides": [{"sequence": "AAA", "proteins": ["P1"],
                            "psms": [{"id": "s1", "raw_file": "r1",
                                      "replicate": "rep1", "singleton": false}],
                            "ratio": {...}, "ions": {"cond1": 3}}],
              "protein_nodes": ["P1"],
              "ratios": [{"log2": 1.0, "condition1": "cond1",
                          "condition2": "cond2",
                          "score": {"name": "FDR", "value": 0.01}}],
              "confidence": 2.0,
              "discarded": false
            }],
            "protein_pairs": [{"protein1": "P1", "protein2": "P2",
                               "shared_inconsistent": false,
                               "unique1_inconsistent": true,
                               "unique2_inconsistent": false,
                               "cases": [2]}],
            "alignments": [{"peptide1": "AAA", "peptide2": "AAB",
                            "score": 12.0, "length": 3, ...}]
          }]
        }

    Log2 values may be numbers or the strings ``"NaN"``, ``"Infinity"`` and
    ``"-Infinity"``.

Protein annotations (CSV/TSV):
    One row per accession; ``accession`` is required, ``name``, ``gene``,
    ``description`` and ``taxonomy`` are recognized and every other column
    becomes an extra annotation column.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from pcqnet.errors import ModelFormatError
from pcqnet.graph.annotations import ProteinAnnotation
from pcqnet.model.cases import ClassificationCase
from pcqnet.model.cluster import AlignmentResult, ProteinCluster, ProteinPair
from pcqnet.model.nodes import (
    PeptideNode,
    PositionInPeptide,
    ProteinNode,
    QuantifiedPeptide,
    QuantifiedProtein,
    QuantifiedPSM,
)
from pcqnet.model.ratio import IonCountRatio, Ratio, Score, parse_float

logger = logging.getLogger(__name__)

__all__ = [
    'load_cluster_model',
    'clusters_from_dict',
    'load_protein_annotations',
    'sniff_delimiter',
]

_ANNOTATION_COLUMNS = {
    "accession": ("accession", "acc", "entry", "uniprotkb"),
    "name": ("name", "entry name", "entry_name", "id"),
    "gene": ("gene", "gene name", "gene_name", "gene names", "genes"),
    "description": ("description", "protein name", "protein names", "protein_name"),
    "taxonomy": ("taxonomy", "organism", "species"),
}


def _require(data: Mapping[str, Any], key: str, context: str) -> Any:
    if not isinstance(data, Mapping):
        raise ModelFormatError(f"{context}: expected an object, got {type(data).__name__}")
    if key not in data:
        raise ModelFormatError(f"{context}: missing required key '{key}'")
    return data[key]


def _list(data: Mapping[str, Any], key: str, context: str) -> List[Any]:
    value = data.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list):
        raise ModelFormatError(f"{context}: '{key}' must be a list")
    return value


def _log2_value(value: Any, context: str) -> float:
    number = parse_float(value)
    if number is None:
        logger.debug(f"{context}: unparseable log2 ratio {value!r}, treated as NaN")
        return math.nan
    return number


def _parse_ratio(data: Optional[Mapping[str, Any]], context: str) -> Optional[Ratio]:
    if data is None:
        return None
    log2_value = _log2_value(_require(data, "log2", context), context)
    score = None
    if data.get("score") is not None:
        score_data = data["score"]
        score = Score(name=str(_require(score_data, "name", f"{context} score")), value=score_data.get("value"))
    kwargs = dict(
        log2_value=log2_value,
        condition1=str(data.get("condition1", "cond1")),
        condition2=str(data.get("condition2", "cond2")),
        score=score,
    )
    if "ion_counts" in data:
        ion_counts = {str(k): float(parse_float(v) or 0.0) for k, v in (data["ion_counts"] or {}).items()}
        if data.get("description"):
            kwargs["description"] = str(data["description"])
        return IonCountRatio(ion_counts=ion_counts, **kwargs)
    return Ratio(description=str(data.get("description") or "RATIO"), **kwargs)


def _parse_protein(data: Mapping[str, Any]) -> QuantifiedProtein:
    return QuantifiedProtein(
        accession=str(_require(data, "accession", "protein")),
        description=str(data.get("description") or ""),
        taxonomy=data.get("taxonomy"),
        gene=data.get("gene"),
    )


def _parse_peptide(data: Mapping[str, Any], context: str) -> QuantifiedPeptide:
    sequence = str(_require(data, "sequence", context))
    context = f"{context} {sequence}"
    psms = []
    for i, psm in enumerate(_list(data, "psms", context)):
        psms.append(QuantifiedPSM(
            psm_id=str(psm.get("id", f"{sequence}_{i}")),
            raw_file=str(psm.get("raw_file") or ""),
            replicate=str(psm.get("replicate") or ""),
            singleton=bool(psm.get("singleton", False)),
        ))
    ions = {str(k): int(v) for k, v in (data.get("ions") or {}).items()}
    return QuantifiedPeptide(
        sequence=sequence,
        psms=psms,
        protein_accessions=[str(a) for a in _list(data, "proteins", context)],
        consensus_ratio=_parse_ratio(data.get("ratio"), f"{context} ratio"),
        ions_by_condition=ions,
    )


def _parse_cluster(data: Mapping[str, Any], index: int,
                   proteins: Dict[str, QuantifiedProtein]) -> ProteinCluster:
    context = f"cluster {index}"
    cluster = ProteinCluster()

    protein_nodes: Dict[str, ProteinNode] = {}
    for node_data in _list(data, "protein_nodes", context):
        accessions = _require(node_data, "accessions", f"{context} protein node")
        members = []
        for accession in accessions:
            accession = str(accession)
            if accession not in proteins:
                proteins[accession] = QuantifiedProtein(accession=accession)
            members.append(proteins[accession])
        node = ProteinNode(
            proteins=members,
            key_override=node_data.get("key"),
            discarded=bool(node_data.get("discarded", False)),
        )
        protein_nodes[node.key] = node
        cluster.protein_nodes.append(node)

    peptide_nodes: Dict[str, PeptideNode] = {}
    for node_data in _list(data, "peptide_nodes", context):
        peptides = [_parse_peptide(p, f"{context} peptide") for p in _list(node_data, "peptides", context)]
        if not peptides:
            raise ModelFormatError(f"{context}: peptide node without peptides")
        positions = {
            str(seq): [PositionInPeptide(int(p["position"]), str(p.get("aa", ""))) for p in items]
            for seq, items in (node_data.get("positions") or {}).items()
        }
        node = PeptideNode(
            peptides=peptides,
            key_override=node_data.get("key"),
            confidence_value=parse_float(node_data.get("confidence")),
            discarded=bool(node_data.get("discarded", False)),
            consensus_ratios=[
                r for r in (_parse_ratio(r, f"{context} ratio") for r in _list(node_data, "ratios", context))
                if r is not None
            ],
            replicate_ratios={
                str(rep): _parse_ratio(r, f"{context} replicate {rep}")
                for rep, r in (node_data.get("replicate_ratios") or {}).items()
                if r is not None
            },
            ion_count_ratio=_parse_ratio(node_data.get("ion_count_ratio"), f"{context} ion count ratio"),
            positions_by_peptide=positions,
        )
        peptide_nodes[node.key] = node
        cluster.peptide_nodes.append(node)
        for protein_key in _list(node_data, "protein_nodes", context):
            protein_node = protein_nodes.get(str(protein_key))
            if protein_node is None:
                raise ModelFormatError(f"{context}: unknown protein node '{protein_key}' in peptide node {node.key}")
            cluster.link(protein_node, node)

    for pair_data in _list(data, "protein_pairs", context):
        keys = [str(_require(pair_data, k, f"{context} pair")) for k in ("protein1", "protein2")]
        missing = [k for k in keys if k not in protein_nodes]
        if missing:
            raise ModelFormatError(f"{context}: protein pair refers to unknown protein nodes {missing}")
        cases = []
        for case_id in _list(pair_data, "cases", f"{context} pair"):
            case = ClassificationCase.by_case_id(int(case_id))
            if case is None:
                raise ModelFormatError(f"{context}: unknown classification case {case_id}")
            cases.append(case)
        cluster.protein_pairs.append(ProteinPair(
            protein_node1=protein_nodes[keys[0]],
            protein_node2=protein_nodes[keys[1]],
            shared_peptides_inconsistent=bool(pair_data.get("shared_inconsistent", False)),
            unique_peptides_prot1_inconsistent=bool(pair_data.get("unique1_inconsistent", False)),
            unique_peptides_prot2_inconsistent=bool(pair_data.get("unique2_inconsistent", False)),
            classification_cases=cases,
        ))

    for alignment in _list(data, "alignments", context):
        keys = [str(_require(alignment, k, f"{context} alignment")) for k in ("peptide1", "peptide2")]
        missing = [k for k in keys if k not in peptide_nodes]
        if missing:
            raise ModelFormatError(f"{context}: alignment refers to unknown peptide nodes {missing}")
        result = AlignmentResult(
            seq1=str(alignment.get("seq1", keys[0])),
            seq2=str(alignment.get("seq2", keys[1])),
            score=float(parse_float(alignment.get("score")) or 0.0),
            alignment_length=int(alignment.get("length", 0)),
            identical_length=int(alignment.get("identical_length", 0)),
            identity=float(parse_float(alignment.get("identity")) or 0.0),
            max_consecutive_identical=int(alignment.get("max_consecutive_identical", 0)),
            alignment_string=str(alignment.get("alignment_string", "")),
        )
        cluster.add_alignment(peptide_nodes[keys[0]], peptide_nodes[keys[1]], result)

    return cluster


def clusters_from_dict(data: Mapping[str, Any]) -> List[ProteinCluster]:
    """
    Build protein clusters from a parsed cluster model document.

    Raises:
        ModelFormatError: If required keys are missing or references dangle
    """
    if not isinstance(data, Mapping):
        raise ModelFormatError("Cluster model must be a JSON object at top level")
    proteins: Dict[str, QuantifiedProtein] = {}
    for protein_data in _list(data, "proteins", "model"):
        protein = _parse_protein(protein_data)
        proteins[protein.accession] = protein
    clusters_data = _require(data, "clusters", "model")
    if not isinstance(clusters_data, list):
        raise ModelFormatError("model: 'clusters' must be a list")
    try:
        return [_parse_cluster(c, i, proteins) for i, c in enumerate(clusters_data)]
    except ModelFormatError:
        raise
    except (TypeError, ValueError, AttributeError, KeyError) as e:
        raise ModelFormatError(f"Malformed cluster model: {e}") from e


def load_cluster_model(path: Path) -> List[ProteinCluster]:
    """
    Load protein clusters from a JSON cluster model.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        ModelFormatError: If the file is not valid JSON or not a valid model
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Cluster model not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ModelFormatError(f"Invalid JSON in cluster model {path}: {e}") from e
    clusters = clusters_from_dict(data)
    logger.info(f"Loaded {len(clusters)} protein clusters from {path}")
    return clusters


def sniff_delimiter(path: Path, sample_size: int = 8192) -> str:
    """
    Detect the delimiter of a text table.

    ``.tsv``/``.tab`` files are tab separated; otherwise ``csv.Sniffer``
    decides, falling back to the most frequent candidate in the header line.
    """
    path = Path(path)
    if path.suffix.lower() in ('.tsv', '.tab'):
        return '\t'
    with open(path, 'r', encoding='utf-8', errors='ignore') as f:
        sample = f.read(sample_size)
    try:
        return csv.Sniffer().sniff(sample, delimiters='\t,;').delimiter
    except csv.Error:
        pass
    first_line = sample.split('\n')[0]
    counts = {d: first_line.count(d) for d in ('\t', ',', ';')}
    return max(counts, key=counts.get)


def _column_map(columns: List[str]) -> Dict[str, str]:
    lowered = {c.strip().lower(): c for c in columns}
    mapping = {}
    for field_name, aliases in _ANNOTATION_COLUMNS.items():
        for alias in aliases:
            if alias in lowered:
                mapping[field_name] = lowered[alias]
                break
    return mapping


def _row_value(row: Dict[str, str], mapping: Dict[str, str], field_name: str) -> Optional[str]:
    if field_name not in mapping:
        return None
    return row.get(mapping[field_name]) or None


def load_protein_annotations(path: Path) -> Dict[str, ProteinAnnotation]:
    """
    Load a protein annotation table into ``ProteinAnnotation`` records.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        ValueError: If the table is empty or has no accession column
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Annotation table not found: {path}")

    try:
        df = pd.read_csv(path, sep=sniff_delimiter(path), dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"Annotation table is empty: {path}") from e

    mapping = _column_map(list(df.columns))
    if "accession" not in mapping:
        raise ValueError(f"Annotation table {path} has no accession column; columns: {list(df.columns)}")

    known = set(mapping.values())
    extra_columns = [c for c in df.columns if c not in known]

    annotations: Dict[str, ProteinAnnotation] = {}
    for row in df.to_dict(orient="records"):
        accession = str(row[mapping["accession"]]).strip()
        if not accession:
            continue
        if accession in annotations:
            logger.debug(f"Duplicate annotation for {accession}, keeping the first one")
            continue
        annotations[accession] = ProteinAnnotation(
            accession=accession,
            name=_row_value(row, mapping, "name"),
            gene=_row_value(row, mapping, "gene"),
            description=_row_value(row, mapping, "description"),
            taxonomy=_row_value(row, mapping, "taxonomy"),
            extra={c: row[c] for c in extra_columns if row[c]},
        )
    logger.info(f"Loaded annotations for {len(annotations)} proteins from {path}")
    return annotations
