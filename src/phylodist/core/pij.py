"""
Transition probability matrices for a given branch length.
"""

import numpy as np

from ..models.base import SubstitutionModel
from ..models.gamma import discrete_gamma

BL_MIN = 1e-8
BL_MAX = 100.0
DBL_MIN = np.finfo(float).tiny
DBL_EPSILON = np.finfo(float).eps


class PijMatrix:
    """
    Transition probability matrix P(l) of a model, memoized on l.

    Spectral models recompute P only when the requested length changes;
    analytical models evaluate their closed form. With gamma rate
    heterogeneity, ``exp(λ l)`` is replaced by the Gamma-integrated
    ``(α / (α - λ l))^α`` (continuous) or by the mean over ``ncat`` discrete
    Gamma categories.

    Parameters
    ----------
    model : SubstitutionModel
        Substitution model
    length : float
        Initial branch length
    use_gamma : bool
        Apply gamma rate heterogeneity
    alpha : float
        Gamma shape parameter; ignored when ``use_gamma`` is False or alpha
        is not finite
    ncat : int, optional
        Number of discrete Gamma categories. None means the continuous
        Gamma integral.

    Examples
    --------
    >>> from phylodist.models.dna import jc69_model
    >>> pij = PijMatrix(jc69_model(), 0.1)
    >>> round(float(pij.matrix.sum(axis=1)[0]), 12)
    1.0
    """

    def __init__(
        self,
        model: SubstitutionModel,
        length: float = BL_MIN,
        use_gamma: bool = False,
        alpha: float = np.inf,
        ncat: int | None = None,
    ):
        self.model = model
        self.n_states = model.n_states
        self.use_gamma = bool(use_gamma) and np.isfinite(alpha) and abs(alpha) > DBL_EPSILON
        if self.use_gamma and alpha <= 0:
            raise ValueError(f"Gamma shape alpha must be positive, got {alpha}")
        self.alpha = float(alpha)
        self.ncat = ncat
        self._category_rates = (
            discrete_gamma(self.alpha, ncat) if self.use_gamma and ncat else None
        )
        self.length = None
        self._P = np.eye(self.n_states)
        self.set_length(length)

    def _spectral(self, length: float) -> np.ndarray:
        eigen = self.model.eigens()
        lam = eigen.values

        if not self.use_gamma:
            expt = np.exp(lam * length)
        elif self._category_rates is not None:
            expt = np.mean(
                np.exp(np.outer(self._category_rates, lam) * length), axis=0
            )
        else:
            expt = np.power(self.alpha / (self.alpha - lam * length), self.alpha)

        P = (eigen.right * expt[np.newaxis, :]) @ eigen.left
        return np.maximum(P, DBL_MIN)

    def set_length(self, length: float) -> None:
        """Make the matrix valid for branch length ``length``."""
        if length == self.length:
            return
        self.length = length

        if length < BL_MIN:
            self._P = np.eye(self.n_states)
        elif self.model.analytical and not self.use_gamma:
            self._P = self.model.closed_form(length)
        else:
            self._P = self._spectral(length)

    def pij(self, i: int, j: int) -> float:
        return float(self._P[i, j])

    @property
    def matrix(self) -> np.ndarray:
        return self._P
