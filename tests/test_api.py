"""
Tests for high-level API (compute_distance_matrix and DistanceResult).
"""

import json

import numpy as np
import pytest

from phylodist import (
    DistanceResult,
    available_models,
    bootstrap_distance_matrices,
    build_model,
    compute_distance_matrix,
    read_dist_matrix,
)
from phylodist.distance.dna import K2PModel, MLDistModel, PDistModel
from phylodist.distance.protein import ProtDistModel
from phylodist.io import Alignment


class TestComputeDistanceMatrix:
    """Test compute_distance_matrix() function."""

    def test_with_file_path(self, dna_fasta_file):
        result = compute_distance_matrix(dna_fasta_file, model="k2p")

        assert isinstance(result, DistanceResult)
        assert result.model_name == "k2p"
        assert result.names == ["ref", "a_1", "a_2", "b_1"]
        assert result.matrix.shape == (4, 4)
        assert result.n_sites == 40.0
        np.testing.assert_allclose(result.matrix, result.matrix.T)

    def test_with_alignment_object(self, small_dna):
        result = compute_distance_matrix(small_dna, model="pdist")
        assert result.distance("s1", "s2") == pytest.approx(0.05)

    def test_model_name_case_insensitive(self, small_dna):
        r1 = compute_distance_matrix(small_dna, model="TN93")
        r2 = compute_distance_matrix(small_dna, model="tn93")
        np.testing.assert_array_equal(r1.matrix, r2.matrix)

    def test_protein_model(self, protein_fasta_file):
        result = compute_distance_matrix(protein_fasta_file, model="lg")
        assert result.model_name == "LG"
        assert not result.saturated
        assert result.matrix[0, 1] > 0

    def test_gamma_and_threads(self, small_dna):
        r1 = compute_distance_matrix(small_dna, model="jc", gamma=True, alpha=0.5, cpus=1)
        r4 = compute_distance_matrix(small_dna, model="jc", gamma=True, alpha=0.5, cpus=4)
        np.testing.assert_array_equal(r1.matrix, r4.matrix)
        assert r1.params["gamma"] is True

    def test_ml_parameters(self, small_dna):
        result = compute_distance_matrix(small_dna, model="ml-k2p", kappa=2.0)
        assert result.model_name == "ml-k2p"
        assert result.matrix[0, 1] > 0

    def test_weight_kind(self, small_dna):
        r1 = compute_distance_matrix(small_dna, model="pdist", weights="dirichlet", seed=3)
        r2 = compute_distance_matrix(small_dna, model="pdist", weights="dirichlet", seed=3)
        plain = compute_distance_matrix(small_dna, model="pdist")
        np.testing.assert_array_equal(r1.matrix, r2.matrix)
        assert not np.array_equal(r1.matrix, plain.matrix)
        assert r1.params["weighted"]

    def test_gap_mode(self):
        aln = Alignment.from_sequences(["a", "b"], ["ACGT-CGTNNR", "ACCTACGTNNR"])
        result = compute_distance_matrix(aln, model="pdist", gap_mode=2)
        assert result.matrix[0, 1] == pytest.approx(2 / 11)

    def test_remove_ambiguous(self):
        aln = Alignment.from_sequences(["a", "b"], ["ACGTNR", "ACGTAY"])
        plain = compute_distance_matrix(aln, model="pdist")
        result = compute_distance_matrix(aln, model="pdist", remove_ambiguous=True)
        assert plain.matrix[0, 1] == pytest.approx(1.75 / 6)
        assert result.matrix[0, 1] == pytest.approx(1 / 5)
        assert result.params["remove_ambiguous"] is True

    def test_invalid_model_name(self, small_dna):
        with pytest.raises(ValueError, match="Unknown model"):
            compute_distance_matrix(small_dna, model="logdet")

    def test_wrong_alphabet(self, small_protein):
        with pytest.raises(ValueError, match="nucleotidic"):
            compute_distance_matrix(small_protein, model="k2p")

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            compute_distance_matrix(tmp_path / "missing.fasta")

    def test_unparsable_file(self, tmp_path):
        path = tmp_path / "bad.phy"
        path.write_text("2 10\na ACGT\nb ACGT\n")
        with pytest.raises(ValueError, match="Failed to load alignment"):
            compute_distance_matrix(path)


class TestBuildModel:
    """Test build_model() dispatch."""

    def test_nucleotide(self):
        assert isinstance(build_model("k2p"), K2PModel)
        assert isinstance(build_model("ml-gtr", rates={"AG": 3.0}), MLDistModel)

    def test_protein(self):
        m = build_model("wag", remove_gaps=True, gamma=True, alpha=0.7)
        assert isinstance(m, ProtDistModel)
        assert m.use_gamma
        assert m.default_alpha == 0.7
        assert m.remove_gaps

    def test_gap_mode(self):
        m = build_model("rawdist", gap_mode=1)
        assert isinstance(m, PDistModel)
        assert m.gap_mode == 1

    @pytest.mark.parametrize("name", ["k2p", "lg"])
    def test_gap_mode_rejected(self, name):
        with pytest.raises(ValueError, match="only apply to pdist and rawdist"):
            build_model(name, gap_mode=2)

    @pytest.mark.parametrize("name", ["tn93", "wag"])
    def test_remove_ambiguous_rejected(self, name):
        with pytest.raises(ValueError, match="Ambiguity removal only applies"):
            build_model(name, remove_ambiguous=True)

    def test_remove_ambiguous(self):
        assert build_model("pdist", remove_ambiguous=True).remove_ambiguous
        assert not build_model("pdist").remove_ambiguous

    def test_protein_parameters_rejected(self):
        with pytest.raises(ValueError, match="take no parameters"):
            build_model("lg", kappa=2.0)

    def test_available_models(self):
        models = available_models()
        assert "k2p" in models
        assert "ml-gtr" in models
        assert "lg" in models


class TestDistanceResult:
    """Test DistanceResult class methods."""

    @pytest.fixture
    def result(self, small_dna):
        return compute_distance_matrix(small_dna, model="k2p")

    def test_summary(self, result):
        summary = result.summary()
        assert "DISTANCE MODEL: k2p" in summary
        assert "Sequences:      4" in summary
        assert "max  =" in summary
        assert str(result) == summary

    def test_repr(self, result):
        assert repr(result) == "DistanceResult(model='k2p', n=4)"

    def test_to_dict(self, result):
        d = result.to_dict()
        assert d["model_name"] == "k2p"
        assert d["names"] == ["s1", "s2", "s3", "s4"]
        assert len(d["matrix"]) == 4

    def test_to_json(self, result, tmp_path):
        path = tmp_path / "result.json"
        json_str = result.to_json(str(path))
        data = json.loads(json_str)
        assert data["model_name"] == "k2p"
        assert json.loads(path.read_text()) == data

    def test_write_and_read(self, result, tmp_path):
        path = tmp_path / "dist.txt"
        result.write(path)
        names, matrix = read_dist_matrix(path)
        assert names == result.names
        np.testing.assert_allclose(matrix, result.matrix, atol=1e-12)
        assert result.to_text() == path.read_text()

    def test_unknown_name(self, result):
        with pytest.raises(ValueError, match="Unknown sequence name"):
            result.distance("s1", "zz")


class TestBootstrap:
    """Test bootstrap_distance_matrices()."""

    def test_replicates(self, small_dna):
        results = bootstrap_distance_matrices(small_dna, "pdist", n_replicates=5, seed=1)
        assert len(results) == 5
        assert all(r.params["weighted"] for r in results)
        assert not np.array_equal(results[0].matrix, results[1].matrix)

    def test_reproducible(self, small_dna):
        a = bootstrap_distance_matrices(small_dna, "jc", 3, kind="gamma", seed=7)
        b = bootstrap_distance_matrices(small_dna, "jc", 3, kind="gamma", seed=7)
        for ra, rb in zip(a, b):
            np.testing.assert_array_equal(ra.matrix, rb.matrix)

    def test_invalid_replicates(self, small_dna):
        with pytest.raises(ValueError, match="positive"):
            bootstrap_distance_matrices(small_dna, n_replicates=0)
