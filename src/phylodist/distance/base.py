"""
Base class for pairwise distance models.
"""

from abc import ABC, abstractmethod

import numpy as np

from ..core.sites import select_sites
from ..io.sequences import NUCLEOTIDE, Alignment

# Distances above this are treated as uncomputable by the matrix driver
NT_DIST_OVER = 1e10


def safe_log(x: float) -> float:
    """Natural log returning -inf for 0 and nan for negative input, without warnings."""
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.log(x))


def safe_pow(x: float, exponent: float) -> float:
    """``x ** exponent`` returning inf/nan instead of raising or warning."""
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        return float(np.power(np.float64(x), exponent))


def clamp_distance(dist: float) -> float:
    """Non-positive and nan distances mean no detectable divergence: 0."""
    return dist if dist > 0 else 0.0


class DistModel(ABC):
    """
    Abstract base class for pairwise distance models.

    A model is configured once with :meth:`init_model` (site selection,
    frequency estimation) and is then read-only, so :meth:`distance` can be
    called from several threads at once.

    Parameters
    ----------
    remove_gaps : bool
        Drop every site where at least one sequence has a gap, an ambiguity
        code or an unknown character

    Attributes
    ----------
    name : str
        Model name used by the factory
    alphabet : str
        Alphabet the model accepts ('dna' or 'aa')
    ceiling : float
        Largest meaningful distance; larger values are repaired by the
        matrix driver
    num_sites : float
        Weighted number of selected sites
    selected_sites : ndarray of bool
        Selected-sites mask
    """

    name = "base"
    alphabet = NUCLEOTIDE
    ceiling = NT_DIST_OVER

    def __init__(self, remove_gaps: bool = False):
        self.remove_gaps = remove_gaps
        self.num_sites = 0.0
        self.selected_sites = None
        self.gamma = False
        self.alpha = 0.0

    def init_model(
        self,
        alignment: Alignment,
        weights: np.ndarray | None = None,
        gamma: bool = False,
        alpha: float = 0.0,
    ) -> None:
        """
        Prepare the model for an alignment.

        Raises
        ------
        ValueError
            If the alignment alphabet does not match the model or the gamma
            shape is not positive
        """
        if alignment.seqtype != self.alphabet:
            kind = "nucleotidic" if self.alphabet == NUCLEOTIDE else "proteic"
            raise ValueError(
                f"Model {self.name} needs a {kind} alignment, got '{alignment.seqtype}'"
            )
        if gamma and not (np.isfinite(alpha) and alpha > 0):
            raise ValueError(f"Gamma correction needs a positive alpha, got {alpha}")

        self.gamma = gamma
        self.alpha = alpha
        self.num_sites, self.selected_sites = select_sites(
            alignment, weights, self.remove_gaps
        )
        self._init_parameters(alignment, weights)

    def _init_parameters(self, alignment: Alignment, weights: np.ndarray | None) -> None:
        """Hook for models that estimate parameters from the alignment."""

    def _check_initialized(self) -> None:
        if self.selected_sites is None:
            raise ValueError(f"Model {self.name} is not initialized; call init_model first")

    @staticmethod
    def _proportion(count: float, total: float) -> float:
        if total <= 0:
            raise ValueError("No site left to compare between the two sequences")
        return count / total

    @abstractmethod
    def distance(
        self, seq1: np.ndarray, seq2: np.ndarray, weights: np.ndarray | None = None
    ) -> float:
        """
        Distance between two encoded sequences.

        Parameters
        ----------
        seq1, seq2 : ndarray
            Encoded sequences of the alignment given to :meth:`init_model`
        weights : ndarray, optional
            Per-site weights

        Returns
        -------
        float
            Distance. Negative or infinite values mean "could not be
            estimated" and are repaired by the matrix driver.
        """
