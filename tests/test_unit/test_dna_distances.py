"""
Unit tests for nucleotide distance models.
"""

import numpy as np
import pytest

from phylodist.distance.base import clamp_distance, safe_log
from phylodist.distance.dna import (
    F81Model,
    F84Model,
    JCModel,
    K2PModel,
    MLDistModel,
    NT_MODEL_NAMES,
    PDistModel,
    RawDistModel,
    TN93Model,
    is_nucleotide_model,
    jc69_correction,
    model,
)
from phylodist.distance.matrix import dist_matrix
from phylodist.io.sequences import Alignment
from phylodist.models.dna import UNIFORM_PI, f81_model, gtr_model, jc69_model
from phylodist.simulate import StarSimulator

# Balanced composition, 4 transitions (2 A<->G, 2 C<->T) and 2 transversions
BALANCED = ("ACGTACGTACGTACGT", "GTACACGTACGTCAGT")


def _pair_distance(dist_model, seq1, seq2, **init):
    aln = Alignment.from_sequences(["a", "b"], [seq1, seq2], seqtype="dna")
    dist_model.init_model(aln, **init)
    return dist_model.distance(aln.sequences[0], aln.sequences[1])


def _k2p(S, V):
    return -0.5 * np.log(1 - 2 * S - V) - 0.25 * np.log(1 - 2 * V)


@pytest.fixture(scope="module")
def simulated():
    """Three sequences simulated under JC69 on a star tree."""
    sim = StarSimulator(jc69_model(), {"a": 0.05, "b": 0.1, "c": 0.2}, 3000, seed=7)
    return sim.simulate()


class TestJukesCantor:
    """JC69 correction."""

    def test_formula(self):
        d = _pair_distance(JCModel(), "ACGTACGTAC", "ACGTACGTAA")
        assert d == pytest.approx(-0.75 * np.log(1 - 4 * 0.1 / 3))

    def test_identical(self):
        assert _pair_distance(JCModel(), "ACGTACGT", "ACGTACGT") == 0.0

    def test_monotonic(self):
        ps = np.linspace(0.0, 0.7, 15)
        ds = [jc69_correction(p) for p in ps]
        assert np.all(np.diff(ds) > 0)

    def test_gamma(self):
        """3/4 α ((1 - 4p/3)^(-1/α) - 1) with p = 1/4 and α = 1/2."""
        d = _pair_distance(JCModel(), "ACGTACGT", "CAGTACGT", gamma=True, alpha=0.5)
        assert d == pytest.approx(0.46875)

    def test_saturation(self):
        assert jc69_correction(0.75) == np.inf
        assert jc69_correction(0.8) == 0.0

    def test_helpers(self):
        assert safe_log(0.0) == -np.inf
        assert np.isnan(safe_log(-1.0))
        assert clamp_distance(np.nan) == 0.0
        assert clamp_distance(-0.5) == 0.0
        assert clamp_distance(np.inf) == np.inf


class TestKimura:
    """K2P distance."""

    def test_single_transition(self):
        d = _pair_distance(K2PModel(), "ACGT", "ATGT")
        assert d == pytest.approx(0.34657359, rel=1e-7)

    def test_transitions_and_transversions(self):
        d = _pair_distance(K2PModel(), *BALANCED)
        assert d == pytest.approx(_k2p(1 / 4, 1 / 8))

    def test_gamma(self):
        S, V, a = 1 / 4, 1 / 8, 2.0
        expected = a * (0.5 * (1 - 2 * S - V) ** (-1 / a) + 0.25 * (1 - 2 * V) ** (-1 / a) - 0.75)
        d = _pair_distance(K2PModel(), *BALANCED, gamma=True, alpha=a)
        assert d == pytest.approx(expected)

    def test_saturated_clamped(self):
        """A log of a negative number reports no divergence."""
        assert _pair_distance(K2PModel(), "ACGT", "GTAC") == 0.0


class TestFrequencyModels:
    """F81, F84 and TN93 reduce to JC69/K2P on balanced composition."""

    def test_f81_balanced_is_jc(self):
        d81 = _pair_distance(F81Model(), "ACGTACGT", "CAGTACGT")
        djc = _pair_distance(JCModel(), "ACGTACGT", "CAGTACGT")
        assert d81 == pytest.approx(djc)

    def test_f81_frequencies(self):
        m = F81Model()
        _pair_distance(m, "AAAC", "AAGT")
        np.testing.assert_allclose(m.pi, [5 / 8, 1 / 8, 1 / 8, 1 / 8])
        assert m.b1 == pytest.approx(1 - (25 + 1 + 1 + 1) / 64)

    def test_f84_balanced_is_k2p(self):
        assert _pair_distance(F84Model(), *BALANCED) == pytest.approx(_k2p(1 / 4, 1 / 8))

    def test_tn93_balanced_is_k2p(self):
        assert _pair_distance(TN93Model(), *BALANCED) == pytest.approx(_k2p(1 / 4, 1 / 8))

    def test_tn93_gamma_balanced_is_k2p_gamma(self):
        S, V, a = 1 / 4, 1 / 8, 1.5
        expected = a * (0.5 * (1 - 2 * S - V) ** (-1 / a) + 0.25 * (1 - 2 * V) ** (-1 / a) - 0.75)
        d = _pair_distance(TN93Model(), *BALANCED, gamma=True, alpha=a)
        assert d == pytest.approx(expected)

    def test_f84_needs_purines_and_pyrimidines(self):
        with pytest.raises(ValueError, match="purines and pyrimidines"):
            _pair_distance(F84Model(), "CCTT", "CTCT")

    def test_tn93_needs_all_bases(self):
        with pytest.raises(ValueError, match="all four nucleotides"):
            _pair_distance(TN93Model(), "ACAC", "ACCA")


class TestProportions:
    """p-distance and raw counts."""

    def test_pdist(self):
        assert _pair_distance(PDistModel(), "ACGT", "ATGT") == 0.25

    def test_gap_modes(self):
        seqs = ("ACGT-CGTNNR", "ACCTACGTNNR")
        expected = {0: 1 / 10, 1: 2 / 11, 2: 2 / 11}
        for mode, value in expected.items():
            m = PDistModel()
            m.set_count_gap_mutations(mode)
            assert _pair_distance(m, *seqs) == pytest.approx(value)

    def test_rawdist(self):
        m = RawDistModel()
        m.set_count_gap_mutations(2)
        assert _pair_distance(m, "ACGT-CGTNNR", "ACCTACGTNNR") == pytest.approx(2.0)

    def test_rawdist_weighted(self):
        w = np.array([1.0, 3.0, 1.0, 1.0])
        aln = Alignment.from_sequences(["a", "b"], ["ACGT", "ATGA"])
        m = RawDistModel()
        m.init_model(aln, w)
        assert m.distance(aln.sequences[0], aln.sequences[1], w) == pytest.approx(4.0)

    def test_invalid_gap_mode(self):
        with pytest.raises(ValueError, match="0, 1 or 2"):
            PDistModel().set_count_gap_mutations(3)

    def test_remove_gaps(self):
        m = PDistModel(remove_gaps=True)
        d = _pair_distance(m, "AC-TN", "ATGTA")
        assert m.num_sites == 3.0
        assert d == pytest.approx(1 / 3)

    def test_nothing_to_compare(self):
        with pytest.raises(ValueError, match="No site left"):
            _pair_distance(PDistModel(), "----", "ACGT")

    def test_remove_ambiguous(self):
        """N against A is a fractional difference unless ambiguous comparisons are removed."""
        seqs = ("ACGTNR", "ACGTAY")
        assert _pair_distance(PDistModel(), *seqs) == pytest.approx(1.75 / 6)
        assert _pair_distance(PDistModel(remove_ambiguous=True), *seqs) == pytest.approx(1 / 5)
        assert _pair_distance(model("rawdist", remove_ambiguous=True), *seqs) == pytest.approx(1.0)


class TestMaximumLikelihood:
    """ML distances under nucleotide substitution models."""

    def test_ml_jc_matches_analytical(self, simulated):
        ml = dist_matrix(simulated, None, MLDistModel("jc"))
        jc = dist_matrix(simulated, None, JCModel())
        np.testing.assert_allclose(ml, jc, atol=1e-5)

    def test_ml_jc_gamma_matches_analytical(self, simulated):
        ml = dist_matrix(simulated, None, MLDistModel("jc"), gamma=True, alpha=0.8)
        jc = dist_matrix(simulated, None, JCModel(), gamma=True, alpha=0.8)
        np.testing.assert_allclose(ml, jc, atol=1e-5)

    @pytest.mark.parametrize("substitution", [
        f81_model(UNIFORM_PI),
        gtr_model(None, UNIFORM_PI),
    ])
    def test_uniform_models_match_jc(self, simulated, substitution):
        ml = dist_matrix(simulated, None, MLDistModel(substitution))
        jc = dist_matrix(simulated, None, JCModel())
        np.testing.assert_allclose(ml, jc, atol=1e-5)

    def test_recovers_branch_lengths(self, simulated):
        """Star tree tips are separated by the sum of their branches."""
        d = dist_matrix(simulated, None, model("ml-f81"))
        assert d[0, 1] == pytest.approx(0.15, abs=0.03)
        assert d[1, 2] == pytest.approx(0.3, abs=0.05)

    def test_identical_sequences(self):
        assert _pair_distance(MLDistModel("k2p", kappa=2.0), "ACGTACGT", "ACGTACGT") == 0.0

    def test_names(self):
        assert MLDistModel("TN93").name == "ml-tn93"
        assert MLDistModel(f81_model(UNIFORM_PI)).name == "ml-F81"

    def test_invalid_parameters(self):
        with pytest.raises(ValueError, match="Invalid parameters"):
            _pair_distance(MLDistModel("k2p", omega=2.0), "ACGT", "ATGT")

    def test_unknown_model(self):
        with pytest.raises(ValueError, match="Unknown ML nucleotide model"):
            MLDistModel("hky")


class TestFactory:
    """Model construction by name."""

    @pytest.mark.parametrize("name", NT_MODEL_NAMES)
    def test_all_names(self, name):
        assert model(name).name == name
        assert is_nucleotide_model(name.upper())

    def test_case_insensitive(self):
        assert isinstance(model("K2P"), K2PModel)
        assert isinstance(model("ML-GTR", rates={"AG": 2.0}), MLDistModel)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown nucleotide distance model"):
            model("logdet")
        assert not is_nucleotide_model("lg")

    def test_parameters_rejected(self):
        with pytest.raises(ValueError, match="takes no parameters"):
            model("jc", kappa=2.0)

    @pytest.mark.parametrize("name", ["k2p", "ml-jc"])
    def test_remove_ambiguous_rejected(self, name):
        with pytest.raises(ValueError, match="only applies to pdist and rawdist"):
            model(name, remove_ambiguous=True)

    def test_alphabet_checked(self):
        prot = Alignment.from_sequences(["a", "b"], ["MKLV", "MKIV"])
        with pytest.raises(ValueError, match="nucleotidic"):
            JCModel().init_model(prot)

    def test_not_initialized(self):
        seq = np.zeros(4, dtype=np.int8)
        with pytest.raises(ValueError, match="not initialized"):
            K2PModel().distance(seq, seq)
