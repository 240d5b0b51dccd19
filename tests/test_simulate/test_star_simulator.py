"""Tests for the star tree sequence simulator."""

import numpy as np
import pytest

from phylodist.distance.dna import JCModel
from phylodist.distance.matrix import dist_matrix
from phylodist.models.dna import f81_model, jc69_model, k2p_model
from phylodist.models.protein import protein_model
from phylodist.simulate import StarSimulator


class TestStarSimulator:
    """Test suite for StarSimulator."""

    @pytest.fixture
    def branches(self):
        return {"A": 0.05, "B": 0.1, "C": 0.3}

    def test_alignment_shape(self, branches):
        aln = StarSimulator(jc69_model(), branches, 200, seed=42).simulate()
        assert aln.names == ["A", "B", "C"]
        assert aln.sequences.shape == (3, 200)
        assert aln.sequences.dtype == np.int8
        assert aln.seqtype == "dna"
        assert np.all((aln.sequences >= 0) & (aln.sequences < 4))

    def test_reproducible(self, branches):
        a1 = StarSimulator(k2p_model(2.0), branches, 300, seed=1).simulate()
        a2 = StarSimulator(k2p_model(2.0), branches, 300, seed=1).simulate()
        a3 = StarSimulator(k2p_model(2.0), branches, 300, seed=2).simulate()
        np.testing.assert_array_equal(a1.sequences, a2.sequences)
        assert not np.array_equal(a1.sequences, a3.sequences)

    def test_zero_branches_identical(self):
        aln = StarSimulator(jc69_model(), {"x": 0.0, "y": 0.0}, 100, seed=5).simulate()
        np.testing.assert_array_equal(aln.sequences[0], aln.sequences[1])

    def test_distances_match_branch_sums(self, branches):
        aln = StarSimulator(jc69_model(), branches, 5000, seed=11).simulate()
        d = dist_matrix(aln, None, JCModel())
        assert d[0, 1] == pytest.approx(0.15, abs=0.03)
        assert d[0, 2] == pytest.approx(0.35, abs=0.05)
        assert d[1, 2] == pytest.approx(0.4, abs=0.05)

    def test_root_composition(self):
        pi = np.array([0.7, 0.1, 0.1, 0.1])
        aln = StarSimulator(f81_model(pi), {"x": 0.01}, 5000, seed=3).simulate()
        counts = np.bincount(aln.sequences[0], minlength=4) / 5000
        np.testing.assert_allclose(counts, pi, atol=0.03)

    def test_protein(self):
        aln = StarSimulator(protein_model("LG"), {"p": 0.2, "q": 0.2}, 150, seed=8).simulate()
        assert aln.seqtype == "aa"
        assert np.all((aln.sequences >= 0) & (aln.sequences < 20))

    def test_gamma_rates(self, branches):
        sim = StarSimulator(jc69_model(), branches, 400, alpha=0.5, seed=4)
        sim.simulate()
        assert len(np.unique(sim.site_rates)) <= 4
        assert sim.site_rates.mean() == pytest.approx(1.0, abs=0.2)

    def test_continuous_gamma(self, branches):
        sim = StarSimulator(jc69_model(), branches, 400, alpha=0.5, ncat=None, seed=4)
        sim.simulate()
        assert len(np.unique(sim.site_rates)) > 100

    def test_parameters(self, branches):
        sim = StarSimulator(k2p_model(3.0), branches, 100, alpha=1.0, seed=0)
        params = sim.get_parameters()
        assert params["model"] == "K2P"
        assert params["params"] == {"kappa": 3.0}
        assert params["branch_lengths"] == branches
        assert params["alpha"] == 1.0

    @pytest.mark.parametrize("branch_lengths,length,match", [
        ({}, 10, "At least one tip"),
        ({"a": -0.1}, 10, "invalid branch length"),
        ({"a": np.nan}, 10, "invalid branch length"),
        ({"a": 0.1}, 0, "must be positive"),
    ])
    def test_invalid(self, branch_lengths, length, match):
        with pytest.raises(ValueError, match=match):
            StarSimulator(jc69_model(), branch_lengths, length)

    def test_invalid_alpha(self, branches):
        with pytest.raises(ValueError, match="Gamma shape"):
            StarSimulator(jc69_model(), branches, 10, alpha=0.0)
