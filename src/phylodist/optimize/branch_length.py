"""
Maximum likelihood branch length between two sequences.

For a pair of sequences, the likelihood of a branch length l is

    lnL(l) = Σ_ij F[i, j] · ln(π_i · P_ij(l))

where F is the normalized matrix of co-occurring states. It is maximized
with Brent's method on [BL_MIN, BL_MAX].
"""

from dataclasses import dataclass

import numpy as np
from scipy.optimize import minimize_scalar

from ..core.pij import BL_MAX, BL_MIN, DBL_MIN, PijMatrix
from ..core.sites import resolve_weights
from ..models.base import SubstitutionModel

# sum(F) below this means nothing could be compared
F_SUM_MIN = 1e-3
# Brent tolerances on the branch length: the bracketed method takes a
# relative one, the bounded fallback an absolute one
BRENT_RTOL = 1e-10
BRENT_ATOL = 1e-6
BRENT_MAXITER = 1000


@dataclass
class BranchLengthResult:
    """
    Outcome of a pairwise branch length estimation.

    Attributes
    ----------
    length : float
        Estimated branch length; -1 when the pair is unestimable
    lnL : float
        Log-likelihood at ``length`` (nan when not optimized)
    n_iter : int
        Optimizer iterations
    converged : bool
        Whether the optimizer reported convergence
    saturated : bool
        True when the estimate hit the distance ceiling and was clamped
    """

    length: float
    lnL: float = np.nan
    n_iter: int = 0
    converged: bool = True
    saturated: bool = False

    @property
    def estimable(self) -> bool:
        return self.length >= 0


def pair_count_matrix(
    seq1: np.ndarray,
    seq2: np.ndarray,
    n_states: int,
    selected: np.ndarray | None = None,
    weights: np.ndarray | None = None,
) -> tuple[np.ndarray, float]:
    """
    Normalized matrix of co-occurring states of two sequences.

    Sites where either sequence is not a plain state (gap, ambiguity code,
    unknown) get weight 0.

    Returns
    -------
    F : ndarray, shape (n_states, n_states)
        F[i, j] is the weighted share of sites with state i in ``seq1`` and
        j in ``seq2``; sums to 1 unless nothing was compared
    length : float
        Total weight of compared sites
    """
    s1 = np.asarray(seq1, dtype=np.int64)
    s2 = np.asarray(seq2, dtype=np.int64)
    w = resolve_weights(weights, len(s1))

    usable = (s1 >= 0) & (s1 < n_states) & (s2 >= 0) & (s2 < n_states)
    if selected is not None:
        usable &= selected

    F = np.zeros((n_states, n_states))
    np.add.at(F, (s1[usable], s2[usable]), w[usable])
    length = float(w[usable].sum())
    if length > 0:
        F /= length
    return F, length


def log_likelihood(F: np.ndarray, pi: np.ndarray, P: np.ndarray) -> float:
    """Σ F[i, j] · ln(π_i · P[i, j]) over the observed state pairs."""
    observed = F > 0
    joint = np.maximum(pi[:, np.newaxis] * P, DBL_MIN)
    return float(np.sum(F[observed] * np.log(joint[observed])))


class BranchLengthEstimator:
    """
    Brent-based maximum likelihood estimator of pairwise branch lengths.

    The estimator holds no per-pair state and can be shared by threads.

    Parameters
    ----------
    model : SubstitutionModel
        Initialized substitution model
    use_gamma : bool
        Apply gamma rate heterogeneity to P(l)
    alpha : float
        Gamma shape parameter
    ceiling : float
        Estimates at or above this value are clamped and flagged saturated

    Examples
    --------
    >>> from phylodist.models.dna import jc69_model
    >>> est = BranchLengthEstimator(jc69_model())
    >>> F = np.full((4, 4), 0.1 / 12)
    >>> np.fill_diagonal(F, 0.9 / 4)
    >>> round(est.optimize(F, 0.1).length, 4)  # -3/4 ln(1 - 4/3 * 0.1)
    0.1073
    """

    def __init__(
        self,
        model: SubstitutionModel,
        use_gamma: bool = False,
        alpha: float = np.inf,
        ceiling: float = BL_MAX,
    ):
        self.model = model
        self.use_gamma = use_gamma
        self.alpha = alpha
        self.ceiling = ceiling

    def _pij(self) -> PijMatrix:
        return PijMatrix(self.model, BL_MIN, use_gamma=self.use_gamma, alpha=self.alpha)

    def log_likelihood(self, F: np.ndarray, length: float, pij: PijMatrix | None = None) -> float:
        """Pair log-likelihood at ``length``, clamped to [BL_MIN, BL_MAX]."""
        pij = pij or self._pij()
        pij.set_length(min(max(length, BL_MIN), BL_MAX))
        return log_likelihood(F, self.model.pi, pij.matrix)

    def optimize(self, F: np.ndarray, init: float) -> BranchLengthResult:
        """
        Maximize the pair likelihood over the branch length.

        Parameters
        ----------
        F : ndarray, shape (n_states, n_states)
            Normalized pair count matrix
        init : float
            Starting length, used as the middle point of the Brent bracket

        Returns
        -------
        BranchLengthResult
        """
        pij = self._pij()

        def neg_lnl(length):
            return -self.log_likelihood(F, length, pij)

        init = min(max(init, 10 * BL_MIN), BL_MAX / 2)
        try:
            result = minimize_scalar(
                neg_lnl,
                bracket=(BL_MIN, init, BL_MAX),
                method='brent',
                options={'xtol': BRENT_RTOL, 'maxiter': BRENT_MAXITER},
            )
        except ValueError:
            # The three points do not bracket a maximum: the optimum sits on
            # a bound, so search the whole interval instead
            result = minimize_scalar(
                neg_lnl,
                bounds=(BL_MIN, BL_MAX),
                method='bounded',
                options={'xatol': BRENT_ATOL, 'maxiter': BRENT_MAXITER},
            )

        length = float(min(max(result.x, BL_MIN), BL_MAX))
        saturated = length >= self.ceiling
        if saturated:
            length = self.ceiling

        return BranchLengthResult(
            length=length,
            lnL=-float(result.fun),
            n_iter=int(getattr(result, 'nit', 0)),
            converged=bool(getattr(result, 'success', True)),
            saturated=saturated,
        )

    def estimate(
        self,
        seq1: np.ndarray,
        seq2: np.ndarray,
        init: float,
        selected: np.ndarray | None = None,
        weights: np.ndarray | None = None,
    ) -> BranchLengthResult:
        """
        Estimate the branch length separating two encoded sequences.

        Sequences identical at every site where both carry a plain state get
        length 0. Pairs with nothing to compare (``sum(F) < 0.001``) are
        unestimable and get length -1.

        Raises
        ------
        ValueError
            If the pair count matrix sums to neither ~0 nor ~1
        """
        n = self.model.n_states
        s1 = np.asarray(seq1)
        s2 = np.asarray(seq2)
        plain = (s1 >= 0) & (s1 < n) & (s2 >= 0) & (s2 < n)
        if selected is not None:
            plain &= selected
        if not np.any(s1[plain] != s2[plain]):
            return BranchLengthResult(length=0.0)

        F, _ = pair_count_matrix(s1, s2, n, selected, weights)
        total = F.sum()
        if total < F_SUM_MIN:
            return BranchLengthResult(length=-1.0, converged=False)
        if abs(total - 1.0) >= F_SUM_MIN:
            raise ValueError(f"Invalid pair count matrix: sum = {total:f}")

        if init >= self.ceiling or init < 0 or not np.isfinite(init):
            init = 0.1
        return self.optimize(F, init)
