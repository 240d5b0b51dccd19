"""
Substitution model representation.

A model is a tagged variant: analytical models carry a closed-form
transition matrix function, spectral models rely on the eigendecomposition
of their normalized rate matrix. Both kinds keep Q, π and the cached
eigensystem so they can be cross-checked against each other.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

import numpy as np

from ..core.matrix import EigenSystem, create_reversible_Q, eigen_decompose


class ModelKind(Enum):
    """How transition probabilities of a model are obtained."""

    ANALYTICAL = "analytical"
    SPECTRAL = "spectral"


@dataclass
class SubstitutionModel:
    """
    Continuous-time Markov substitution model.

    Attributes
    ----------
    name : str
        Model name (e.g. 'JC69', 'GTR', 'LG')
    kind : ModelKind
        ANALYTICAL models evaluate ``closed_form``; SPECTRAL ones
        exponentiate ``eigen``
    n_states : int
        4 for nucleotides, 20 for amino acids
    pi : ndarray, shape (n_states,)
        Stationary frequencies, summing to 1
    Q : ndarray, shape (n_states, n_states)
        Rate matrix normalized to a mean rate of 1
    eigen : EigenSystem
        Eigendecomposition of Q, computed once at construction
    closed_form : callable, optional
        ``closed_form(length) -> P`` for analytical models
    params : dict
        Model parameters (kappa, exchangeabilities, ...)
    """

    name: str
    kind: ModelKind
    n_states: int
    pi: np.ndarray
    Q: np.ndarray
    eigen: EigenSystem
    closed_form: Callable[[float], np.ndarray] | None = None
    params: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.kind is ModelKind.ANALYTICAL and self.closed_form is None:
            raise ValueError(f"Analytical model {self.name} needs a closed form")

    @property
    def analytical(self) -> bool:
        return self.kind is ModelKind.ANALYTICAL

    def eigens(self) -> EigenSystem:
        return self.eigen

    def transition_matrix(self, length: float) -> np.ndarray:
        """P(length) from the closed form or the spectral decomposition."""
        if self.analytical:
            return self.closed_form(length)
        return self.eigen.exponentiate(length)

    @classmethod
    def from_exchangeabilities(
        cls,
        name: str,
        exchange: np.ndarray,
        pi: np.ndarray,
        closed_form: Callable[[float], np.ndarray] | None = None,
        params: dict | None = None,
        backend: str | None = None,
    ) -> "SubstitutionModel":
        """
        Build a model from a symmetric exchangeability matrix and π.

        Parameters
        ----------
        name : str
            Model name
        exchange : ndarray, shape (n, n)
            Symmetric exchangeabilities (diagonal ignored)
        pi : ndarray, shape (n,)
            Stationary frequencies; rescaled to sum to 1
        closed_form : callable, optional
            If given, the model is ANALYTICAL
        params : dict, optional
            Parameters recorded on the model
        backend : str, optional
            Eigendecomposition backend (see :func:`phylodist.core.matrix.eigen_decompose`)
        """
        pi = np.asarray(pi, dtype=float)
        if pi.ndim != 1 or len(pi) != exchange.shape[0]:
            raise ValueError(
                f"Frequency vector of length {len(pi)} does not match "
                f"{exchange.shape[0]} states"
            )
        if np.any(pi < 0) or pi.sum() <= 0:
            raise ValueError("Stationary frequencies must be non-negative with a positive sum")
        pi = pi / pi.sum()

        Q = create_reversible_Q(exchange, pi)
        eigen = eigen_decompose(Q, pi, backend=backend)
        kind = ModelKind.ANALYTICAL if closed_form is not None else ModelKind.SPECTRAL

        return cls(
            name=name,
            kind=kind,
            n_states=len(pi),
            pi=pi,
            Q=Q,
            eigen=eigen,
            closed_form=closed_form,
            params=dict(params or {}),
        )
