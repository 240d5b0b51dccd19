"""
Maximum likelihood distances between protein sequences.

Each pair is scored under an empirical amino acid model (optionally with
frequencies re-estimated from the alignment) and its branch length is
optimized with Brent's method, starting from the Jukes-Cantor distance.
"""

import threading
import warnings

import numpy as np

from ..core.sites import amino_acid_frequencies, resolve_weights, select_sites
from .base import DistModel
from .matrix import dist_matrix
from ..io.sequences import AMINO_ACID, N_AA_STATES, Alignment
from ..models.protein import protein_model, protein_model_name
from ..optimize.branch_length import BranchLengthEstimator

PROT_DIST_MAX = 20.0


def _comparable(seq1: np.ndarray, seq2: np.ndarray) -> np.ndarray:
    """Sites where both sequences carry one of the 20 plain amino acids."""
    return (seq1 >= 0) & (seq1 < N_AA_STATES) & (seq2 >= 0) & (seq2 < N_AA_STATES)


def jc69_protein_distance(p: float) -> float:
    """
    Jukes-Cantor correction for 20 states, ``-(19/20) ln(1 - 20p/19)``.

    Saturated proportions give :data:`PROT_DIST_MAX`.
    """
    b = 1.0 - 20.0 / 19.0 * p
    if b <= 0:
        return PROT_DIST_MAX
    return min(-19.0 / 20.0 * np.log(b), PROT_DIST_MAX)


def _jc69_pair(s1, s2, w, selected):
    compared = selected & _comparable(s1, s2)
    length = float(w[compared].sum())
    diff = float(w[compared & (s1 != s2)].sum())
    p = diff / length if length > 0 else 1.0
    return p, length, jc69_protein_distance(p)


class ProtDistModel(DistModel):
    """
    Protein ML distance model.

    Parameters
    ----------
    model : int or str
        Empirical model id or name (DAYHOFF, JTT, MTREV, LG, WAG, HIVB, AB)
    global_freq : bool
        Use the model's own equilibrium frequencies instead of frequencies
        estimated from the alignment
    use_gamma : bool
        Apply gamma rate heterogeneity
    alpha : float
        Gamma shape parameter
    remove_gaps : bool
        Drop every site where a sequence holds a gap or ambiguous residue

    Examples
    --------
    >>> ProtDistModel("LG").name
    'LG'
    """

    alphabet = AMINO_ACID
    ceiling = PROT_DIST_MAX

    def __init__(
        self,
        model: int | str,
        global_freq: bool = False,
        use_gamma: bool = False,
        alpha: float = 1.0,
        remove_gaps: bool = False,
    ):
        super().__init__(remove_gaps)
        self.name = protein_model_name(model)
        self.model_id = model
        self.global_freq = global_freq
        self.use_gamma = use_gamma
        self.default_alpha = alpha
        self.pi = None
        self.substitution = None
        self.estimator = None
        self._saturated = threading.Event()

    def init_model(self, alignment, weights=None, gamma=False, alpha=0.0):
        """
        Prepare the model for an alignment.

        Gamma settings given here take precedence over the constructor ones.
        """
        if not gamma and self.use_gamma:
            gamma, alpha = True, self.default_alpha
        super().init_model(alignment, weights, gamma, alpha)

    def _init_parameters(self, alignment, weights):
        pi = None
        if not self.global_freq:
            pi = amino_acid_frequencies(alignment.sequences, self.selected_sites, weights)
        self.substitution = protein_model(self.name, pi)
        self.pi = self.substitution.pi
        self.estimator = BranchLengthEstimator(
            self.substitution,
            use_gamma=self.gamma,
            alpha=self.alpha if self.gamma else np.inf,
            ceiling=PROT_DIST_MAX,
        )
        self._saturated.clear()

    @property
    def saturated(self) -> bool:
        """True if any distance hit :data:`PROT_DIST_MAX` since initialization."""
        return self._saturated.is_set()

    def jc69_pair(
        self, seq1: np.ndarray, seq2: np.ndarray, weights: np.ndarray | None = None
    ) -> tuple[float, float, float]:
        """
        Proportion of differences, compared length and JC69 distance of a pair.

        Gaps and ambiguous residues are skipped. With nothing to compare the
        proportion is 1.
        """
        self._check_initialized()
        w = resolve_weights(weights, len(seq1))
        return _jc69_pair(np.asarray(seq1), np.asarray(seq2), w, self.selected_sites)

    def distance(self, seq1, seq2, weights=None):
        _, _, init = self.jc69_pair(seq1, seq2, weights)
        result = self.estimator.estimate(
            seq1, seq2, init, selected=self.selected_sites, weights=weights
        )
        if result.saturated:
            self._saturated.set()
        return result.length

    def jc69_dist(
        self, alignment: Alignment, weights: np.ndarray | None = None
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Pairwise JC69 matrices of an initialized model.

        Returns
        -------
        p : ndarray
            Proportions of differences
        q : ndarray
            Weighted number of compared sites
        dist : ndarray
            JC69 distances
        """
        self._check_initialized()
        return jc69_dist(alignment, weights, self.selected_sites)

    def ml_dist(
        self, alignment: Alignment, weights: np.ndarray | None = None, cpus: int = 1
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        ML distance matrix of a protein alignment.

        Initializes the model on ``alignment``, then runs the pairwise
        estimation through :func:`phylodist.distance.matrix.dist_matrix`.
        Pairs with nothing to compare are repaired there. A warning is
        emitted when some distance reached :data:`PROT_DIST_MAX`.

        Returns
        -------
        p, q : ndarray
            JC69 proportions and compared lengths (see :meth:`jc69_dist`)
        dist : ndarray
            ML distances
        """
        dist = dist_matrix(alignment, weights, self, cpus=cpus)
        p, q, _ = self.jc69_dist(alignment, weights)

        if self.saturated:
            warnings.warn(
                f"At least one distance exceeds {PROT_DIST_MAX:.2f} and was "
                f"set to {PROT_DIST_MAX:.2f}",
                UserWarning,
            )
        return p, q, dist


def new_prot_dist_model(
    model: int | str,
    global_freq: bool = False,
    use_gamma: bool = False,
    alpha: float = 1.0,
    remove_gaps: bool = False,
) -> ProtDistModel:
    """Build a :class:`ProtDistModel`."""
    return ProtDistModel(model, global_freq, use_gamma, alpha, remove_gaps)


def jc69_dist(
    alignment: Alignment,
    weights: np.ndarray | None = None,
    selected: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Pairwise JC69 protein distances without building a substitution model.

    Parameters
    ----------
    alignment : Alignment
        Protein alignment
    weights : ndarray, optional
        Per-site weights
    selected : ndarray of bool, optional
        Selected-sites mask; every site by default

    Returns
    -------
    p, q, dist : ndarray
        Proportions of differences, compared lengths and distances
    """
    if selected is None:
        _, selected = select_sites(alignment, weights)
    n = alignment.n_species
    w = resolve_weights(weights, alignment.n_sites)
    seqs = alignment.sequences

    p = np.zeros((n, n))
    q = np.zeros((n, n))
    dist = np.zeros((n, n))
    for i in range(n):
        for j in range(i + 1, n):
            pij, qij, dij = _jc69_pair(seqs[i], seqs[j], w, selected)
            p[i, j] = p[j, i] = pij
            q[i, j] = q[j, i] = qij
            dist[i, j] = dist[j, i] = dij
    return p, q, dist
