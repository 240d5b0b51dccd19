"""
Sliding-window distances to a reference sequence (SimPlot).
"""

from dataclasses import dataclass

import numpy as np

from .dna import model as dna_model
from .matrix import dist_matrix
from ..io.sequences import NUCLEOTIDE, Alignment


@dataclass
class SimPlotWindow:
    """
    Distance between the reference and one sequence (or group) in a window.

    Attributes
    ----------
    start : int
        First column of the window
    end : int
        Column after the last one of the window
    name : str
        Compared sequence or group name
    distance : float
        Distance to the reference (group mean when grouping)
    """

    start: int
    end: int
    name: str
    distance: float


def _groups(alignment: Alignment, refseq: str, split_sep: str, split_field: int) -> dict[str, list[int]]:
    if split_field < 0:
        raise ValueError(f"Group field index must be non-negative, got {split_field}")
    groups = {}
    for i, name in enumerate(alignment.names):
        if name == refseq:
            continue
        cols = name.split(split_sep)
        if len(cols) <= split_field:
            raise ValueError(
                f"Sequence name '{name}' has no field {split_field} when split on '{split_sep}'"
            )
        groups.setdefault(cols[split_field], []).append(i)
    return groups


def simplot_distances(
    alignment: Alignment,
    refseq: str,
    model_name: str,
    window_size: int,
    window_step: int,
    group: bool = False,
    split_sep: str = "_",
    split_field: int = 0,
) -> list[SimPlotWindow]:
    """
    Distances between a reference sequence and every other sequence along
    sliding windows.

    Windows start at 0 and advance by ``window_step`` while they fit entirely
    in the alignment. Each window is scored with a fresh nucleotide model and
    only the reference row of the matrix is computed.

    Parameters
    ----------
    alignment : Alignment
        Nucleotide alignment
    refseq : str
        Name of the reference sequence
    model_name : str
        Nucleotide distance model (see :func:`phylodist.distance.dna.model`)
    window_size, window_step : int
        Window length and shift, in columns
    group : bool
        Average distances over groups of sequences instead of reporting one
        value per sequence. The group of a sequence is field ``split_field``
        of its name split on ``split_sep``; the reference belongs to no group.
    split_sep : str
        Name field separator
    split_field : int
        Index of the group field

    Returns
    -------
    list of SimPlotWindow
        Window by window, sequences (or groups, in order of first
        appearance) in alignment order

    Raises
    ------
    ValueError
        If the alignment is not nucleotidic, the reference is missing, the
        window parameters are not positive or a name has no group field

    Examples
    --------
    >>> aln = Alignment.from_sequences(["ref", "s1"], ["ACGTACGT", "ACGTTCGT"])
    >>> [w.distance for w in simplot_distances(aln, "ref", "pdist", 4, 4)]
    [0.0, 0.25]
    """
    if alignment.seqtype != NUCLEOTIDE:
        raise ValueError("SimPlot needs a nucleotidic alignment")
    refid = alignment.get_sequence_id_by_name(refseq)
    if refid < 0:
        raise ValueError(f"Reference sequence '{refseq}' does not exist in the alignment")
    if window_size <= 0 or window_step <= 0:
        raise ValueError("Window size and step must be positive")

    groups = _groups(alignment, refseq, split_sep, split_field) if group else None
    model = dna_model(model_name)

    windows = []
    for start in range(0, alignment.n_sites - window_size + 1, window_step):
        end = start + window_size
        sub = alignment.sub_alignment(start, window_size)
        row = dist_matrix(sub, None, model, range1=(refid, refid), cpus=1)[refid]

        if groups is not None:
            for name, ids in groups.items():
                windows.append(SimPlotWindow(start, end, name, float(np.mean(row[ids]))))
        else:
            for i, name in enumerate(alignment.names):
                if i != refid:
                    windows.append(SimPlotWindow(start, end, name, float(row[i])))
    return windows
