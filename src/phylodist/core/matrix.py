"""
Matrix operations for substitution rate matrices.

This module provides the linear algebra behind transition probabilities:
rate matrix construction, matrix exponential and eigendecomposition. The
eigendecomposition goes through a small backend registry so the numeric
routine can be swapped without touching model code.
"""

from dataclasses import dataclass
from typing import Callable

import numpy as np
from scipy.linalg import eig, expm, inv


@dataclass(frozen=True)
class EigenSystem:
    """
    Spectral decomposition Q = right @ diag(values) @ left.

    Attributes
    ----------
    values : ndarray, shape (n,)
        Real eigenvalues
    right : ndarray, shape (n, n)
        Right eigenvectors (columns)
    left : ndarray, shape (n, n)
        Left eigenvectors (rows), the inverse of ``right``
    """

    values: np.ndarray
    right: np.ndarray
    left: np.ndarray

    def exponentiate(self, t: float) -> np.ndarray:
        """P(t) = right @ diag(exp(values * t)) @ left."""
        return (self.right * np.exp(self.values * t)[np.newaxis, :]) @ self.left

    def reconstruct(self) -> np.ndarray:
        return (self.right * self.values[np.newaxis, :]) @ self.left


def matrix_exponential(Q: np.ndarray, t: float) -> np.ndarray:
    """
    Compute transition probability matrix P(t) = exp(Q*t).

    Uses scipy's matrix exponential (Padé approximation with scaling and
    squaring). Useful as a reference for the spectral path.

    Parameters
    ----------
    Q : ndarray, shape (n, n)
        Rate matrix (instantaneous substitution rate matrix)
    t : float
        Branch length (time)

    Returns
    -------
    P : ndarray, shape (n, n)
        Transition probability matrix where P[i,j] is the probability
        of state i transitioning to state j over time t

    Notes
    -----
    The transition probability matrix satisfies:
    - Row sums equal 1 (stochastic matrix)
    - All entries are non-negative
    - P(0) = I (identity matrix)
    - P(t1 + t2) = P(t1) @ P(t2) (semigroup property)
    """
    return expm(Q * t)


def eigen_decompose_rev(Q: np.ndarray, pi: np.ndarray) -> EigenSystem:
    """
    Eigendecompose a reversible rate matrix.

    Uses the symmetrization trick for time-reversible rate matrices:
    Q' = √D @ Q @ √D^(-1), with D = diag(pi), is symmetric, so it can be
    decomposed with ``numpy.linalg.eigh`` and transformed back.

    Parameters
    ----------
    Q : ndarray, shape (n, n)
        Reversible rate matrix satisfying detailed balance: π_i * Q[i,j] = π_j * Q[j,i]
    pi : ndarray, shape (n,)
        Stationary distribution (equilibrium frequencies)

    Returns
    -------
    EigenSystem
        Eigenvalues in ascending order; the largest is 0

    Examples
    --------
    >>> pi = np.array([0.25, 0.25, 0.25, 0.25])
    >>> Q = create_reversible_Q(np.ones((4, 4)), pi)
    >>> es = eigen_decompose_rev(Q, pi)
    >>> np.allclose(Q, es.reconstruct())
    True
    """
    sqrt_pi = np.sqrt(pi)

    Q_sym = Q * sqrt_pi[:, np.newaxis] / sqrt_pi[np.newaxis, :]
    # Remove rounding asymmetry before eigh
    Q_sym = 0.5 * (Q_sym + Q_sym.T)

    eigenvalues, eigenvectors = np.linalg.eigh(Q_sym)

    right = eigenvectors / sqrt_pi[:, np.newaxis]
    left = eigenvectors.T * sqrt_pi[np.newaxis, :]

    return EigenSystem(values=eigenvalues, right=right, left=left)


def eigen_decompose_general(Q: np.ndarray, pi: np.ndarray | None = None) -> EigenSystem:
    """
    Eigendecompose a general real matrix with a real spectrum.

    Uses LAPACK through ``scipy.linalg.eig``; the left eigenvectors are the
    inverse of the right eigenvector matrix. Imaginary parts, which only
    come from rounding for rate matrices, are dropped.
    """
    values, vectors = eig(Q)
    order = np.argsort(values.real)
    values = values[order]
    vectors = vectors[:, order]
    left = inv(vectors)
    return EigenSystem(
        values=np.real(values), right=np.real(vectors), left=np.real(left)
    )


EIGEN_BACKENDS: dict[str, Callable[..., EigenSystem]] = {
    "reversible": eigen_decompose_rev,
    "general": eigen_decompose_general,
}


def register_eigen_backend(name: str, func: Callable[..., EigenSystem]) -> None:
    """Register an eigendecomposition routine ``func(Q, pi) -> EigenSystem``."""
    EIGEN_BACKENDS[name] = func


def eigen_decompose(
    Q: np.ndarray, pi: np.ndarray | None = None, backend: str | None = None
) -> EigenSystem:
    """
    Eigendecompose a rate matrix with the selected backend.

    Parameters
    ----------
    Q : ndarray, shape (n, n)
        Rate matrix
    pi : ndarray, optional
        Stationary distribution. Required by the ``reversible`` backend.
    backend : str, optional
        Name in :data:`EIGEN_BACKENDS`. By default the reversible backend is
        used when ``pi`` is given and Q satisfies detailed balance with it,
        and the general one otherwise.

    Returns
    -------
    EigenSystem
    """
    if backend is None:
        if pi is not None and np.all(pi > 0) and check_detailed_balance(Q, pi, rtol=1e-8):
            backend = "reversible"
        else:
            backend = "general"

    if backend not in EIGEN_BACKENDS:
        raise ValueError(
            f"Unknown eigendecomposition backend '{backend}'. "
            f"Available: {', '.join(sorted(EIGEN_BACKENDS))}"
        )
    if backend == "reversible" and pi is None:
        raise ValueError("The reversible backend needs the stationary distribution")

    return EIGEN_BACKENDS[backend](Q, pi)


def create_reversible_Q(
    rates: np.ndarray, pi: np.ndarray, normalize: bool = True
) -> np.ndarray:
    """
    Create a reversible rate matrix from exchangeability rates and stationary distribution.

    Parameters
    ----------
    rates : ndarray, shape (n, n)
        Symmetric exchangeability matrix (r[i,j] = r[j,i])
    pi : ndarray, shape (n,)
        Stationary distribution (equilibrium frequencies)
    normalize : bool, default=True
        If True, scale Q so that expected rate is 1 substitution per time unit

    Returns
    -------
    Q : ndarray, shape (n, n)
        Reversible rate matrix satisfying detailed balance

    Notes
    -----
    The rate matrix is constructed as Q[i,j] = r[i,j] * pi[j] for i ≠ j,
    and Q[i,i] = -sum(Q[i,j] for j ≠ i). After normalization,
    Σ_i π_i (-Q[i,i]) = 1 so branch lengths are expected substitutions per site.

    Examples
    --------
    >>> # JC69 model
    >>> rates = np.ones((4, 4)) - np.eye(4)  # All rates equal
    >>> pi = np.ones(4) / 4
    >>> Q = create_reversible_Q(rates, pi)
    """
    Q = np.asarray(rates, dtype=float) * pi[np.newaxis, :]

    np.fill_diagonal(Q, 0.0)
    row_sums = np.sum(Q, axis=1)
    np.fill_diagonal(Q, -row_sums)

    if normalize:
        expected_rate = -np.dot(pi, Q.diagonal())
        if expected_rate <= 0:
            raise ValueError("Rate matrix has no substitutions (mean rate is 0)")
        Q /= expected_rate

    return Q


def check_detailed_balance(Q: np.ndarray, pi: np.ndarray, rtol: float = 1e-10) -> bool:
    """
    Test if rate matrix Q satisfies detailed balance with stationary distribution pi.

    Detailed balance: π_i * Q[i,j] = π_j * Q[j,i] for all i, j
    """
    flux = pi[:, np.newaxis] * Q
    return bool(np.allclose(flux, flux.T, rtol=rtol, atol=1e-14))
