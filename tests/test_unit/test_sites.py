"""
Unit tests for site selection and pairwise site statistics.
"""

import numpy as np
import pytest

from phylodist.core.sites import (
    GapMode,
    amino_acid_frequencies,
    count_differences,
    count_diffs,
    count_diffs_with_gaps,
    count_diffs_with_internal_gaps,
    count_mutations,
    iupac_difference,
    nucleotide_frequencies,
    resolve_weights,
    select_sites,
)
from phylodist.io.sequences import AMINO_ACIDS, NT_TO_INDEX, Alignment


def _encode(seq1, seq2, seqtype="dna"):
    aln = Alignment.from_sequences(["a", "b"], [seq1, seq2], seqtype=seqtype)
    return aln.sequences[0], aln.sequences[1]


ALL_SITES = np.ones(11, dtype=bool)

# (seq1, seq2, diffs ignoring gaps, total, diffs with gaps, total, internal gaps, total)
GAP_CASES = [
    ("ACGTACGTNNR", "ACGTACGTNNR", 0.0, 11, 0.0, 11, 0.0, 11),
    ("ACGTACGTNNR", "ACCTACGTNNR", 1.0, 11, 1.0, 11, 1.0, 11),
    ("ACGT-CGTNNR", "ACCTACGTNNR", 1.0, 10, 2.0, 11, 2.0, 11),
    ("ACGTACGTNNR", "ACGTACGTNNS", 2 / 3, 11, 2 / 3, 11, 2 / 3, 11),
    ("ACGTACGTNNR", "ACGTACGTNGR", 3 / 4, 11, 3 / 4, 11, 3 / 4, 11),
]


class TestDifferenceCounts:
    """Difference counts under the three gap policies."""

    @pytest.mark.parametrize("seq1,seq2,diffs,total,_d,_t,_i,_it", GAP_CASES)
    def test_ignore_gaps(self, seq1, seq2, diffs, total, _d, _t, _i, _it):
        s1, s2 = _encode(seq1, seq2)
        d, t = count_diffs(s1, s2, ALL_SITES)
        assert d == pytest.approx(diffs)
        assert t == pytest.approx(total)

    @pytest.mark.parametrize("seq1,seq2,_d0,_t0,diffs,total,_i,_it", GAP_CASES)
    def test_count_all_gaps(self, seq1, seq2, _d0, _t0, diffs, total, _i, _it):
        s1, s2 = _encode(seq1, seq2)
        d, t = count_diffs_with_gaps(s1, s2, ALL_SITES)
        assert d == pytest.approx(diffs)
        assert t == pytest.approx(total)

    @pytest.mark.parametrize("seq1,seq2,_d0,_t0,_d,_t,diffs,total", GAP_CASES)
    def test_count_internal_gaps(self, seq1, seq2, _d0, _t0, _d, _t, diffs, total):
        s1, s2 = _encode(seq1, seq2)
        d, t = count_diffs_with_internal_gaps(s1, s2, ALL_SITES)
        assert d == pytest.approx(diffs)
        assert t == pytest.approx(total)

    def test_terminal_gaps(self):
        """Leading and trailing gap runs only count in GapMode.ALL."""
        s1, s2 = _encode("ACGTACGTNN-", "ACGTACGTNNR")
        assert count_diffs(s1, s2, ALL_SITES) == (0.0, 10.0)
        assert count_diffs_with_gaps(s1, s2, ALL_SITES) == (1.0, 11.0)
        assert count_diffs_with_internal_gaps(s1, s2, ALL_SITES) == (0.0, 10.0)

        s1, s2 = _encode("-CGTACGTNN-", "ACGTACGTNNR")
        assert count_diffs_with_internal_gaps(s1, s2, ALL_SITES) == (0.0, 9.0)

    def test_dispatch(self):
        s1, s2 = _encode("ACGT-CGTNNR", "ACCTACGTNNR")
        assert count_differences(s1, s2, ALL_SITES, gap_mode=GapMode.NONE) == (1.0, 10.0)
        assert count_differences(s1, s2, ALL_SITES, gap_mode=GapMode.ALL) == (2.0, 11.0)
        assert count_differences(s1, s2, ALL_SITES, gap_mode=1) == (2.0, 11.0)

    def test_selected_sites_and_weights(self):
        s1, s2 = _encode("ACGT", "ACCA")
        selected = np.array([True, True, True, False])
        weights = np.array([1.0, 1.0, 2.5, 10.0])
        d, t = count_diffs(s1, s2, selected, weights)
        assert d == pytest.approx(2.5)
        assert t == pytest.approx(4.5)

    def test_remove_ambiguous(self):
        """Compatible ambiguous comparisons are dropped, incompatible ones count fully."""
        s1, s2 = _encode("ACGTNR", "ACGTAY")
        selected = np.ones(6, dtype=bool)
        d, t = count_diffs(s1, s2, selected, remove_ambiguous=True)
        assert d == pytest.approx(1.0)
        assert t == pytest.approx(5.0)

    def test_inputs_unchanged(self):
        s1, s2 = _encode("ACGT-CGTNNR", "ACCTACGTNNR")
        before = (s1.copy(), s2.copy())
        count_diffs_with_internal_gaps(s1, s2, ALL_SITES)
        np.testing.assert_array_equal(s1, before[0])
        np.testing.assert_array_equal(s2, before[1])


class TestIupacDifference:
    """Fractional credit between ambiguity codes."""

    def test_plain_bases(self):
        a, c = NT_TO_INDEX['A'], NT_TO_INDEX['C']
        np.testing.assert_allclose(iupac_difference(np.array([a, a]), np.array([a, c])), [0.0, 1.0])

    def test_ambiguity_codes(self):
        codes1 = np.array([NT_TO_INDEX[c] for c in "RNRN"])
        codes2 = np.array([NT_TO_INDEX[c] for c in "SGYN"])
        np.testing.assert_allclose(iupac_difference(codes1, codes2), [2 / 3, 3 / 4, 1.0, 0.0])


class TestMutations:
    """Transition and transversion counts."""

    def test_counts(self):
        s1, s2 = _encode("ACGT", "GTGA")
        trs, trv, ag, ct, total = count_mutations(s1, s2, np.ones(4, dtype=bool))
        assert (trs, trv, ag, ct, total) == (2.0, 1.0, 1.0, 1.0, 4.0)

    def test_ambiguous_sites_skipped(self):
        s1, s2 = _encode("ACGTN-", "ATGTAA")
        trs, trv, _, _, total = count_mutations(s1, s2, np.ones(6, dtype=bool))
        assert trs == 1.0
        assert trv == 0.0
        assert total == 4.0


class TestFrequencies:
    """Weighted state composition."""

    def test_nucleotide_frequencies(self):
        aln = Alignment.from_sequences(["a", "b"], ["AACC-", "GGTR-"])
        pi = nucleotide_frequencies(aln.sequences, np.ones(5, dtype=bool))
        np.testing.assert_allclose(pi, np.array([2.5, 2.0, 2.5, 1.0]) / 8)
        assert pi.sum() == pytest.approx(1.0)

    def test_nucleotide_frequencies_weighted(self):
        aln = Alignment.from_sequences(["a"], ["ACGT"])
        pi = nucleotide_frequencies(aln.sequences, np.ones(4, dtype=bool), np.array([3.0, 1.0, 0.0, 0.0]))
        np.testing.assert_allclose(pi, [0.75, 0.25, 0.0, 0.0])

    def test_nucleotide_frequencies_empty(self):
        aln = Alignment.from_sequences(["a"], ["----"], seqtype="dna")
        pi = nucleotide_frequencies(aln.sequences, np.ones(4, dtype=bool))
        np.testing.assert_allclose(pi, 0.25)

    def test_amino_acid_frequencies_all_states(self):
        aln = Alignment.from_sequences(["a"], [AMINO_ACIDS + "X-"])
        pi = amino_acid_frequencies(aln.sequences, np.ones(22, dtype=bool))
        np.testing.assert_allclose(pi, 1 / 20)

    def test_amino_acid_pseudocounts(self):
        """Missing states trigger a pseudo-count of one on every state."""
        aln = Alignment.from_sequences(["a"], ["AAR"], seqtype="aa")
        pi = amino_acid_frequencies(aln.sequences, np.ones(3, dtype=bool))
        assert pi[0] == pytest.approx(3 / 23)
        assert pi[1] == pytest.approx(2 / 23)
        assert pi[2] == pytest.approx(1 / 23)
        assert pi.sum() == pytest.approx(1.0)


class TestSiteSelection:
    """Selected-sites masks and weight validation."""

    def test_all_sites(self):
        aln = Alignment.from_sequences(["a", "b"], ["AC-T", "ACGN"])
        num, selected = select_sites(aln)
        assert num == 4.0
        assert selected.all()

    def test_remove_gaps(self):
        aln = Alignment.from_sequences(["a", "b"], ["AC-T", "ACGN"])
        num, selected = select_sites(aln, np.array([1.0, 2.0, 3.0, 4.0]), remove_gaps=True)
        np.testing.assert_array_equal(selected, [True, True, False, False])
        assert num == 3.0

    def test_resolve_weights(self):
        np.testing.assert_array_equal(resolve_weights(None, 3), np.ones(3))
        with pytest.raises(ValueError, match="shape"):
            resolve_weights(np.ones(2), 3)
        with pytest.raises(ValueError, match="non-negative"):
            resolve_weights(np.array([1.0, -1.0, 1.0]), 3)
        with pytest.raises(ValueError, match="non-negative"):
            resolve_weights(np.array([1.0, np.nan, 1.0]), 3)
