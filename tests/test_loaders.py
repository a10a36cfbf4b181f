"""
Tests for the cluster model and annotation loaders.

Validates that:
1. JSON cluster models produce linked protein and peptide nodes
2. Special ratio spellings, pairs and alignments are understood
3. Malformed models raise ModelFormatError
4. Annotation tables are read with delimiter detection
"""

import json
import math

import pytest

from pcqnet.errors import ModelFormatError
from pcqnet.io.loaders import (
    clusters_from_dict,
    load_cluster_model,
    load_protein_annotations,
    sniff_delimiter,
)
from pcqnet.model.cases import ClassificationCase


@pytest.fixture
def model_path(tmp_path, cluster_model_dict):
    path = tmp_path / "clusters.json"
    path.write_text(json.dumps(cluster_model_dict))
    return path


class TestLoadClusterModel:
    """JSON cluster models."""

    def test_structure(self, model_path):
        """Protein and peptide nodes are created and linked both ways."""
        clusters = load_cluster_model(model_path)
        assert len(clusters) == 1
        cluster = clusters[0]

        assert [n.key for n in cluster.protein_nodes] == ["P1", "P2"]
        assert [n.key for n in cluster.peptide_nodes] == ["AAA", "BBB", "CCC"]
        p1 = cluster.protein_nodes[0]
        assert sorted(n.key for n in p1.peptide_nodes) == ["AAA", "BBB"]
        bbb = cluster.peptide_nodes[1]
        assert [p.key for p in bbb.protein_nodes] == ["P1", "P2"]

    def test_protein_details(self, model_path):
        """Protein records carry description, taxonomy and gene."""
        protein = load_cluster_model(model_path)[0].protein_nodes[0].proteins[0]
        assert protein.description == "Protein one"
        assert protein.taxonomy == "Homo sapiens"
        assert protein.gene == "G1"

    def test_ratios(self, model_path):
        """Numeric and textual log2 values are parsed with their scores."""
        cluster = load_cluster_model(model_path)[0]
        aaa, _, ccc = cluster.peptide_nodes

        ratio = aaa.consensus_ratio("cond1", "cond2")
        assert ratio.log2_value == 1.0
        assert ratio.score.name == "FDR"
        assert ratio.score.numeric_value == 0.01
        assert ccc.consensus_ratio("cond1", "cond2").log2_value == math.inf
        assert aaa.confidence_value == 2.0

    def test_pairs_and_alignments(self, model_path):
        """Protein pairs and alignments refer to the loaded nodes."""
        cluster = load_cluster_model(model_path)[0]
        pair = cluster.protein_pairs[0]

        assert pair.protein_node1 is cluster.protein_nodes[0]
        assert pair.unique_peptides_prot2_inconsistent is True
        assert pair.classification_cases == [ClassificationCase.UNIQUE_2_INCONSISTENT]
        aaa, _, ccc = cluster.peptide_nodes
        assert cluster.alignment_result(aaa, ccc).score == 5.0
        assert cluster.aligned_peptide_nodes(aaa) == [ccc]

    def test_psms(self, model_path):
        """PSMs keep their run and replicate."""
        peptide = load_cluster_model(model_path)[0].peptide_nodes[0].peptides[0]
        assert peptide.psms[0].raw_file == "run1"
        assert peptide.replicates == {"rep1"}

    def test_missing_file(self, tmp_path):
        """A missing model raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_cluster_model(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Unparseable JSON raises ModelFormatError."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ModelFormatError, match="Invalid JSON"):
            load_cluster_model(path)


class TestMalformedModels:
    """Structural errors in the model."""

    def test_missing_clusters(self):
        """The clusters key is required."""
        with pytest.raises(ModelFormatError, match="clusters"):
            clusters_from_dict({"proteins": []})

    def test_unknown_protein_reference(self, cluster_model_dict):
        """Peptide nodes must refer to declared protein nodes."""
        cluster_model_dict["clusters"][0]["peptide_nodes"][0]["protein_nodes"] = ["P9"]
        with pytest.raises(ModelFormatError, match="unknown protein node"):
            clusters_from_dict(cluster_model_dict)

    def test_unknown_case(self, cluster_model_dict):
        """Classification case ids must exist."""
        cluster_model_dict["clusters"][0]["protein_pairs"][0]["cases"] = [42]
        with pytest.raises(ModelFormatError, match="unknown classification case"):
            clusters_from_dict(cluster_model_dict)

    def test_unknown_alignment_peptide(self, cluster_model_dict):
        """Alignments must refer to declared peptide nodes."""
        cluster_model_dict["clusters"][0]["alignments"][0]["peptide2"] = "ZZZ"
        with pytest.raises(ModelFormatError, match="alignment"):
            clusters_from_dict(cluster_model_dict)

    def test_peptide_node_without_peptides(self, cluster_model_dict):
        """Peptide nodes need at least one peptide."""
        cluster_model_dict["clusters"][0]["peptide_nodes"][0]["peptides"] = []
        with pytest.raises(ModelFormatError, match="without peptides"):
            clusters_from_dict(cluster_model_dict)

    def test_wrong_types(self, cluster_model_dict):
        """Values of the wrong type become ModelFormatError."""
        cluster_model_dict["clusters"][0]["protein_pairs"][0]["cases"] = ["two"]
        with pytest.raises(ModelFormatError):
            clusters_from_dict(cluster_model_dict)


class TestLoadProteinAnnotations:
    """Annotation tables."""

    def test_tsv(self, tmp_path):
        """Known columns are mapped, the rest go to extra."""
        path = tmp_path / "uniprot.tsv"
        path.write_text(
            "Entry\tEntry Name\tGene Names\tProtein names\tOrganism\tKeywords\n"
            "P1\tALDOA_HUMAN\tALDOA\tAldolase A\tHomo sapiens\tGlycolysis;Acetylation\n"
            "P2\tENO1_HUMAN\t\tEnolase\tHomo sapiens\t\n"
        )
        annotations = load_protein_annotations(path)

        assert sorted(annotations) == ["P1", "P2"]
        p1 = annotations["P1"]
        assert p1.name == "ALDOA_HUMAN"
        assert p1.gene == "ALDOA"
        assert p1.description == "Aldolase A"
        assert p1.taxonomy == "Homo sapiens"
        assert p1.values("Keywords") == ["Glycolysis", "Acetylation"]
        assert annotations["P2"].gene is None
        assert annotations["P2"].extra == {}

    def test_csv_sniffed(self, tmp_path):
        """Comma-separated text files are detected."""
        path = tmp_path / "annotations.txt"
        path.write_text("accession,gene\nP1,GENE1\nP1,DUPLICATE\n")

        assert sniff_delimiter(path) == ","
        annotations = load_protein_annotations(path)
        assert annotations["P1"].gene == "GENE1"

    def test_no_accession_column(self, tmp_path):
        """Tables without an accession column are rejected."""
        path = tmp_path / "bad.csv"
        path.write_text("gene,description\nA,B\n")
        with pytest.raises(ValueError, match="no accession column"):
            load_protein_annotations(path)

    def test_empty_table(self, tmp_path):
        """Empty files raise ValueError."""
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(ValueError, match="empty"):
            load_protein_annotations(path)

    def test_missing_file(self, tmp_path):
        """A missing table raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_protein_annotations(tmp_path / "missing.tsv")
