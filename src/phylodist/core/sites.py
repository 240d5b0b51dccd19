"""
Site selection and weighted pairwise site statistics.

All functions work on encoded sequences (see :mod:`phylodist.io.sequences`)
and never modify their inputs. Weights default to 1.0 per site; a weight of
0 removes a site from every count while keeping site indices intact.
"""

from enum import IntEnum

import numpy as np

from ..io.sequences import (
    AA_ANY,
    N_AA_STATES,
    N_NT_STATES,
    NT_BASE_COUNTS,
    NT_BASE_MASKS,
    Alignment,
    n_states,
)

_POPCOUNT = np.array([bin(i).count('1') for i in range(16)], dtype=np.int64)

# Share of each nucleotide code attributed to A, C, G, T
NT_CODE_FREQ = np.array(
    [[(int(mask) >> b) & 1 for b in range(N_NT_STATES)] for mask in NT_BASE_MASKS],
    dtype=float,
) / NT_BASE_COUNTS[:, np.newaxis]

_PURINES = (0, 2)  # A, G


class GapMode(IntEnum):
    """How gap-versus-nucleotide comparisons enter difference counts."""

    NONE = 0  # gapped positions are ignored
    INTERNAL = 1  # count gap vs nt, except in leading/trailing gap runs
    ALL = 2  # count every gap vs nt


def resolve_weights(weights: np.ndarray | None, length: int) -> np.ndarray:
    """
    Return a float weight vector of the given length.

    Raises
    ------
    ValueError
        If the vector has the wrong length or holds negative or non-finite values.
    """
    if weights is None:
        return np.ones(length)
    w = np.asarray(weights, dtype=float)
    if w.shape != (length,):
        raise ValueError(
            f"Weight vector has shape {w.shape}, expected ({length},)"
        )
    if not np.all(np.isfinite(w)) or np.any(w < 0):
        raise ValueError("Site weights must be finite and non-negative")
    return w


def select_sites(
    alignment: Alignment,
    weights: np.ndarray | None = None,
    remove_gaps: bool = False,
) -> tuple[float, np.ndarray]:
    """
    Compute the selected-sites mask of an alignment.

    Parameters
    ----------
    alignment : Alignment
        Encoded alignment
    weights : ndarray, optional
        Per-site weights
    remove_gaps : bool
        If True, drop every site where at least one sequence holds something
        other than a plain state (gap, stop, unknown or ambiguity code)

    Returns
    -------
    num_sites : float
        Weighted number of selected sites
    selected : ndarray of bool, shape (n_sites,)
        True for selected sites
    """
    w = resolve_weights(weights, alignment.n_sites)

    if remove_gaps:
        n = n_states(alignment.seqtype)
        seqs = alignment.sequences
        selected = np.all((seqs >= 0) & (seqs < n), axis=0)
    else:
        selected = np.ones(alignment.n_sites, dtype=bool)

    return float(w[selected].sum()), selected


def _iupac_overlap(c1: np.ndarray, c2: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Intersection and union sizes of the base sets of two nucleotide code arrays."""
    m1 = NT_BASE_MASKS[c1]
    m2 = NT_BASE_MASKS[c2]
    return _POPCOUNT[m1 & m2], _POPCOUNT[m1 | m2]


def iupac_difference(c1: np.ndarray, c2: np.ndarray) -> np.ndarray:
    """
    Cost of the difference between (possibly ambiguous) nucleotide codes.

    Identical codes cost 0. Otherwise the cost is ``1 - |I|/|U|`` where I and
    U are the intersection and union of the compatible base sets, so two
    distinct plain bases cost 1, R vs S costs 2/3 and N vs A costs 3/4.

    Examples
    --------
    >>> iupac_difference(np.array([4]), np.array([6]))  # R vs S
    array([0.66666667])
    """
    c1 = np.asarray(c1, dtype=np.int64)
    c2 = np.asarray(c2, dtype=np.int64)
    inter, union = _iupac_overlap(c1, c2)
    diff = 1.0 - inter / union
    return np.where(c1 == c2, 0.0, diff)


def _pair_differences(
    seq1: np.ndarray, seq2: np.ndarray, remove_ambiguous: bool
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Per-site difference costs of two nucleotide sequences.

    Returns the costs (gap vs nucleotide costs 1), a mask of sites where at
    least one sequence carries a nucleotide code, and a mask of undecided
    ambiguous comparisons (only populated with ``remove_ambiguous``).
    """
    s1 = np.asarray(seq1, dtype=np.int64)
    s2 = np.asarray(seq2, dtype=np.int64)
    nuc1 = s1 >= 0
    nuc2 = s2 >= 0
    both = nuc1 & nuc2

    diff = np.where(nuc1 != nuc2, 1.0, 0.0)
    undecided = np.zeros(len(s1), dtype=bool)
    if np.any(both):
        c1, c2 = s1[both], s2[both]
        diff[both] = iupac_difference(c1, c2)
        if remove_ambiguous:
            inter, _ = _iupac_overlap(c1, c2)
            ambiguous = (c1 >= N_NT_STATES) | (c2 >= N_NT_STATES)
            undecided[both] = ambiguous & (inter > 0)

    return diff, nuc1 | nuc2, undecided


def count_diffs(
    seq1: np.ndarray,
    seq2: np.ndarray,
    selected: np.ndarray,
    weights: np.ndarray | None = None,
    remove_ambiguous: bool = False,
) -> tuple[float, float]:
    """
    Weighted number of differences between two nucleotide sequences.

    Only selected sites where both sequences carry a nucleotide (plain base
    or IUPAC code) are compared. Ambiguous comparisons get fractional credit
    (see :func:`iupac_difference`).

    Parameters
    ----------
    seq1, seq2 : ndarray
        Encoded sequences
    selected : ndarray of bool
        Selected-sites mask
    weights : ndarray, optional
        Per-site weights
    remove_ambiguous : bool
        If True, comparisons involving an ambiguity code compatible with the
        other character (N vs A) are undecided and excluded from both counts.
        Incompatible ones (R vs Y) still count as a full difference.

    Returns
    -------
    diffs : float
        Weighted differences
    total : float
        Weighted number of compared sites
    """
    w = resolve_weights(weights, len(seq1))
    diff, _, undecided = _pair_differences(seq1, seq2, remove_ambiguous)
    compared = selected & (np.asarray(seq1) >= 0) & (np.asarray(seq2) >= 0) & ~undecided
    return float(np.dot(w[compared], diff[compared])), float(w[compared].sum())


def count_diffs_with_gaps(
    seq1: np.ndarray,
    seq2: np.ndarray,
    selected: np.ndarray,
    weights: np.ndarray | None = None,
    remove_ambiguous: bool = False,
) -> tuple[float, float]:
    """
    Like :func:`count_diffs`, but a gap facing a nucleotide is one difference.

    Sites where neither sequence carries a nucleotide are ignored.
    """
    w = resolve_weights(weights, len(seq1))
    diff, any_nuc, undecided = _pair_differences(seq1, seq2, remove_ambiguous)
    compared = selected & any_nuc & ~undecided
    return float(np.dot(w[compared], diff[compared])), float(w[compared].sum())


def count_diffs_with_internal_gaps(
    seq1: np.ndarray,
    seq2: np.ndarray,
    selected: np.ndarray,
    weights: np.ndarray | None = None,
    remove_ambiguous: bool = False,
) -> tuple[float, float]:
    """
    Like :func:`count_diffs_with_gaps`, ignoring terminal gap runs.

    Positions before the first nucleotide of either sequence are skipped.
    Gap-versus-nucleotide differences after the last compared nucleotide of
    a sequence form its trailing run; the longer of the two trailing runs is
    removed from both the differences and the total.

    Examples
    --------
    ``-CGTACGTNN-`` vs ``ACGTACGTNNR`` gives 0 differences over 9 sites.
    """
    s1 = np.asarray(seq1)
    s2 = np.asarray(seq2)
    w = resolve_weights(weights, len(s1))
    diff, any_nuc, undecided = _pair_differences(s1, s2, remove_ambiguous)

    nuc1 = s1 >= 0
    nuc2 = s2 >= 0
    if not nuc1.any() or not nuc2.any():
        return 0.0, 0.0
    start = max(np.argmax(nuc1), np.argmax(nuc2))
    positions = np.arange(len(s1))

    compared = selected & any_nuc & ~undecided & (positions >= start)
    wd = w * diff
    diffs = float(wd[compared].sum())
    total = float(w[compared].sum())

    trailing = []
    for nuc in (nuc1, nuc2):
        anchors = np.flatnonzero(compared & nuc)
        last = anchors[-1] if len(anchors) else -1
        trailing.append(float(wd[compared & (positions > last)].sum()))
    tail = max(trailing)

    return diffs - tail, total - tail


def count_differences(
    seq1: np.ndarray,
    seq2: np.ndarray,
    selected: np.ndarray,
    weights: np.ndarray | None = None,
    gap_mode: GapMode = GapMode.NONE,
    remove_ambiguous: bool = False,
) -> tuple[float, float]:
    """Dispatch to the difference counter of a gap policy."""
    gap_mode = GapMode(gap_mode)
    if gap_mode == GapMode.ALL:
        counter = count_diffs_with_gaps
    elif gap_mode == GapMode.INTERNAL:
        counter = count_diffs_with_internal_gaps
    else:
        counter = count_diffs
    return counter(seq1, seq2, selected, weights, remove_ambiguous)


def count_mutations(
    seq1: np.ndarray,
    seq2: np.ndarray,
    selected: np.ndarray,
    weights: np.ndarray | None = None,
) -> tuple[float, float, float, float, float]:
    """
    Weighted transition/transversion counts between two nucleotide sequences.

    Only selected sites where both sequences carry a plain base are used.

    Returns
    -------
    transitions, transversions, ag, ct, total : float
        ``ag`` and ``ct`` split the transitions into A<->G and C<->T
    """
    s1 = np.asarray(seq1)
    s2 = np.asarray(seq2)
    w = resolve_weights(weights, len(s1))

    compared = (
        selected
        & (s1 >= 0) & (s1 < N_NT_STATES)
        & (s2 >= 0) & (s2 < N_NT_STATES)
    )
    differ = compared & (s1 != s2)
    purine1 = np.isin(s1, _PURINES)
    purine2 = np.isin(s2, _PURINES)

    transitions = differ & (purine1 == purine2)
    transversions = differ & (purine1 != purine2)
    ag = transitions & purine1
    ct = transitions & ~purine1

    return (
        float(w[transitions].sum()),
        float(w[transversions].sum()),
        float(w[ag].sum()),
        float(w[ct].sum()),
        float(w[compared].sum()),
    )


def nucleotide_frequencies(
    sequences: np.ndarray,
    selected: np.ndarray,
    weights: np.ndarray | None = None,
) -> np.ndarray:
    """
    Weighted base composition (A, C, G, T) over the selected sites.

    Ambiguity codes share their weight equally among their compatible bases;
    gaps and unknown characters are skipped. Returns uniform frequencies when
    nothing can be counted.
    """
    seqs = np.atleast_2d(np.asarray(sequences))
    w = resolve_weights(weights, seqs.shape[1])

    codes = seqs[:, selected]
    site_w = np.broadcast_to(w[selected], codes.shape)
    valid = codes >= 0
    per_code = np.bincount(
        codes[valid].astype(np.int64),
        weights=site_w[valid],
        minlength=len(NT_BASE_MASKS),
    )

    pi = per_code @ NT_CODE_FREQ
    total = pi.sum()
    if total <= 0:
        return np.full(N_NT_STATES, 1.0 / N_NT_STATES)
    return pi / total


def amino_acid_frequencies(
    sequences: np.ndarray,
    selected: np.ndarray,
    weights: np.ndarray | None = None,
) -> np.ndarray:
    """
    Weighted amino acid composition over the selected sites.

    Ambiguous residues (X, stop, unknown) spread their weight uniformly over
    the 20 states. When any state count falls below 1/20, a pseudo-count of
    one is added to every state before normalizing.
    """
    seqs = np.atleast_2d(np.asarray(sequences))
    w = resolve_weights(weights, seqs.shape[1])

    codes = seqs[:, selected]
    site_w = np.broadcast_to(w[selected], codes.shape)
    plain = (codes >= 0) & (codes < N_AA_STATES)
    ambiguous = (codes == AA_ANY) | (codes < -1)

    num = np.bincount(
        codes[plain].astype(np.int64), weights=site_w[plain], minlength=N_AA_STATES
    )
    num = num + site_w[ambiguous].sum() / N_AA_STATES

    if np.any(num < 1.0 / N_AA_STATES):
        num = num + 1.0

    return num / num.sum()
