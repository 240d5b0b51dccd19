"""
Unit tests for sliding-window SimPlot distances.
"""

import pytest

from phylodist.distance.simplot import SimPlotWindow, simplot_distances
from phylodist.io.sequences import Alignment


@pytest.fixture
def grouped():
    return Alignment.from_sequences(
        ["a_1", "ref", "a_2", "b_1"],
        ["ACGTACGTAA", "ACGTACGTAC", "TCGTACGTAC", "ACGAACGTAC"],
    )


class TestSimPlot:
    """Distances to a reference along windows."""

    def test_per_sequence(self, grouped):
        windows = simplot_distances(grouped, "ref", "pdist", 5, 5)
        assert [(w.start, w.end, w.name) for w in windows] == [
            (0, 5, "a_1"), (0, 5, "a_2"), (0, 5, "b_1"),
            (5, 10, "a_1"), (5, 10, "a_2"), (5, 10, "b_1"),
        ]
        assert [w.distance for w in windows] == pytest.approx([0.0, 0.2, 0.2, 0.2, 0.0, 0.0])

    def test_groups(self, grouped):
        windows = simplot_distances(grouped, "ref", "pdist", 5, 5, group=True)
        assert windows == [
            SimPlotWindow(0, 5, "a", pytest.approx(0.1)),
            SimPlotWindow(0, 5, "b", pytest.approx(0.2)),
            SimPlotWindow(5, 10, "a", pytest.approx(0.1)),
            SimPlotWindow(5, 10, "b", pytest.approx(0.0)),
        ]

    def test_group_field(self):
        aln = Alignment.from_sequences(
            ["ref", "x.A", "y.A", "z.B"], ["ACGT", "ACGA", "ACGT", "TCGT"]
        )
        windows = simplot_distances(aln, "ref", "pdist", 4, 1, group=True, split_sep=".", split_field=1)
        assert [(w.name, w.distance) for w in windows] == [("A", 0.125), ("B", 0.25)]

    def test_window_count(self, grouped):
        windows = simplot_distances(grouped, "ref", "jc", 4, 2)
        assert sorted({w.start for w in windows}) == [0, 2, 4, 6]

    def test_window_larger_than_alignment(self, grouped):
        assert simplot_distances(grouped, "ref", "k2p", 20, 5) == []

    def test_missing_reference(self, grouped):
        with pytest.raises(ValueError, match="does not exist"):
            simplot_distances(grouped, "nope", "pdist", 5, 5)

    def test_protein_rejected(self, small_protein):
        with pytest.raises(ValueError, match="nucleotidic"):
            simplot_distances(small_protein, "p1", "pdist", 5, 5)

    @pytest.mark.parametrize("size,step", [(0, 5), (5, 0)])
    def test_invalid_windows(self, grouped, size, step):
        with pytest.raises(ValueError, match="positive"):
            simplot_distances(grouped, "ref", "pdist", size, step)

    def test_missing_group_field(self, grouped):
        with pytest.raises(ValueError, match="has no field 2"):
            simplot_distances(grouped, "ref", "pdist", 5, 5, group=True, split_field=2)

    def test_unknown_model(self, grouped):
        with pytest.raises(ValueError, match="Unknown nucleotide distance model"):
            simplot_distances(grouped, "ref", "lg", 5, 5)
