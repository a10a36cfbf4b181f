"""
Pytest configuration and shared fixtures.

This module provides small cluster models used across the test suites:

- scenario A: pair (P1, P2) with AAA unique to P1, BBB shared, CCC unique to P2
- scenario B: a cluster holding an infinite ratio next to a finite one
- scenario C: peptide SSS shared by P1, P2 and P3, reached by two pairs with
  different classification cases
"""

import math
from typing import Dict, List, Optional, Sequence

import pytest

from pcqnet.config import ColorConfig, ExportParameters
from pcqnet.model.cases import ClassificationCase
from pcqnet.model.cluster import ProteinCluster, ProteinPair
from pcqnet.model.nodes import (
    PeptideNode,
    ProteinNode,
    QuantifiedPeptide,
    QuantifiedProtein,
    QuantifiedPSM,
)
from pcqnet.model.ratio import FDR_SCORE_NAME, Ratio, Score


def make_protein(accession: str, taxonomy: Optional[str] = "Homo sapiens",
                 description: str = "", gene: Optional[str] = None) -> ProteinNode:
    """Protein node holding a single protein."""
    protein = QuantifiedProtein(
        accession=accession,
        description=description or f"{accession} protein",
        taxonomy=taxonomy,
        gene=gene,
    )
    return ProteinNode(proteins=[protein])


def make_peptide(
    sequence: str,
    log2_ratio: Optional[float] = None,
    fdr: Optional[float] = None,
    confidence: Optional[float] = None,
    discarded: bool = False,
    n_psms: int = 2,
    accessions: Sequence[str] = (),
) -> PeptideNode:
    """
    Peptide node with one peptide and an optional integrated ratio.

    The FDR becomes the ratio's score when given.
    """
    psms = [
        QuantifiedPSM(psm_id=f"{sequence}_{i}", raw_file=f"run{i % 2}", replicate="rep1")
        for i in range(n_psms)
    ]
    peptide = QuantifiedPeptide(sequence=sequence, psms=psms, protein_accessions=list(accessions))
    ratios = []
    if log2_ratio is not None:
        score = Score(FDR_SCORE_NAME, fdr) if fdr is not None else None
        ratios.append(Ratio(log2_ratio, "cond1", "cond2", "RATIO", score))
    return PeptideNode(
        peptides=[peptide],
        consensus_ratios=ratios,
        confidence_value=confidence,
        discarded=discarded,
    )


def build_cluster(
    proteins: Dict[str, ProteinNode],
    peptides: Dict[str, PeptideNode],
    links: Dict[str, List[str]],
    pairs: Sequence[ProteinPair] = (),
) -> ProteinCluster:
    """Cluster with ``links`` mapping peptide keys to the protein keys they belong to."""
    cluster = ProteinCluster()
    for protein_node in proteins.values():
        cluster.protein_nodes.append(protein_node)
    for peptide_key, protein_keys in links.items():
        for protein_key in protein_keys:
            cluster.link(proteins[protein_key], peptides[peptide_key])
    cluster.protein_pairs.extend(pairs)
    return cluster


@pytest.fixture
def params(tmp_path):
    """Export parameters writing into a temporary folder."""
    return ExportParameters(output_folder=tmp_path / "networks")


@pytest.fixture
def scenario_a():
    """
    P1 -- AAA (1.0), P1 -- BBB (0.5) -- P2, P2 -- CCC (2.0).

    Every ratio has FDR 0.01, so all peptide nodes are significant.
    """
    proteins = {"P1": make_protein("P1"), "P2": make_protein("P2")}
    peptides = {
        "AAA": make_peptide("AAA", 1.0, fdr=0.01, accessions=["P1"]),
        "BBB": make_peptide("BBB", 0.5, fdr=0.01, accessions=["P1", "P2"]),
        "CCC": make_peptide("CCC", 2.0, fdr=0.01, accessions=["P2"]),
    }
    pair = ProteinPair(proteins["P1"], proteins["P2"], classification_cases=[ClassificationCase.CONSISTENT])
    cluster = build_cluster(
        proteins, peptides,
        {"AAA": ["P1"], "BBB": ["P1", "P2"], "CCC": ["P2"]},
        pairs=[pair],
    )
    return cluster


@pytest.fixture
def scenario_b():
    """P1 -- INF (+Infinity, no score), P1 -- FIN (0.5, FDR 0.5)."""
    proteins = {"P1": make_protein("P1")}
    peptides = {
        "INF": make_peptide("INF", math.inf, accessions=["P1"]),
        "FIN": make_peptide("FIN", 0.5, fdr=0.5, accessions=["P1"]),
    }
    return build_cluster(proteins, peptides, {"INF": ["P1"], "FIN": ["P1"]})


@pytest.fixture
def scenario_c():
    """SSS shared by P1, P2, P3; pairs (P1, P2) -> {2} and (P1, P3) -> {2, 4}."""
    proteins = {key: make_protein(key) for key in ("P1", "P2", "P3")}
    peptides = {"SSS": make_peptide("SSS", 0.3, fdr=0.2, accessions=["P1", "P2", "P3"])}
    pairs = [
        ProteinPair(proteins["P1"], proteins["P2"], unique_peptides_prot1_inconsistent=True,
                    classification_cases=[ClassificationCase.UNIQUE_1_INCONSISTENT]),
        ProteinPair(proteins["P1"], proteins["P3"], unique_peptides_prot1_inconsistent=True,
                    classification_cases=[ClassificationCase.UNIQUE_1_INCONSISTENT,
                                          ClassificationCase.BOTH_UNIQUE_INCONSISTENT]),
    ]
    return build_cluster(proteins, peptides, {"SSS": ["P1", "P2", "P3"]}, pairs=pairs)


@pytest.fixture
def scenario_c_params(tmp_path):
    """Parameters rendering inconsistent case ids as edge labels."""
    return ExportParameters(output_folder=tmp_path / "networks", show_cases_in_edges=True)


@pytest.fixture
def no_non_regulated_params(tmp_path):
    """Parameters without a non-regulated color: every ratio is interpolated."""
    return ExportParameters(
        output_folder=tmp_path / "networks",
        colors=ColorConfig(color_non_regulated=None),
    )


@pytest.fixture
def cluster_model_dict():
    """Serialized form of scenario A plus an alignment, as read by the JSON loader."""
    def ratio(value, fdr):
        return {"log2": value, "condition1": "cond1", "condition2": "cond2",
                "score": {"name": "FDR", "value": fdr}}

    def peptide_node(sequence, value, proteins):
        return {
            "peptides": [{
                "sequence": sequence,
                "proteins": proteins,
                "psms": [{"id": f"{sequence}_1", "raw_file": "run1", "replicate": "rep1"}],
            }],
            "protein_nodes": proteins,
            "ratios": [ratio(value, 0.01)],
            "confidence": 2.0,
        }

    return {
        "proteins": [
            {"accession": "P1", "description": "Protein one", "taxonomy": "Homo sapiens", "gene": "G1"},
            {"accession": "P2", "description": "Protein two", "taxonomy": "Homo sapiens", "gene": "G2"},
        ],
        "clusters": [{
            "protein_nodes": [{"accessions": ["P1"]}, {"accessions": ["P2"]}],
            "peptide_nodes": [
                peptide_node("AAA", 1.0, ["P1"]),
                peptide_node("BBB", 0.5, ["P1", "P2"]),
                peptide_node("CCC", "Infinity", ["P2"]),
            ],
            "protein_pairs": [{
                "protein1": "P1", "protein2": "P2",
                "unique2_inconsistent": True,
                "cases": [3],
            }],
            "alignments": [{
                "peptide1": "AAA", "peptide2": "CCC",
                "score": 5.0, "length": 3, "identical_length": 2,
                "identity": 0.66, "max_consecutive_identical": 2,
            }],
        }],
    }
