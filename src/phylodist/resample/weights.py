"""
Per-site weight vectors for resampling.

Weights multiply the contribution of each alignment site to every
difference count. Drawing them from a Gamma or Dirichlet distribution gives
a "continuous" bootstrap that never duplicates or drops whole columns.

Every function takes an explicit random generator (or a seed) so that
results are reproducible.
"""

import numpy as np


def _generator(rng: np.random.Generator | int | None) -> np.random.Generator:
    return np.random.default_rng(rng)


def dirichlet(
    factor: float, alpha: np.ndarray, rng: np.random.Generator | int | None = None
) -> np.ndarray:
    """
    Draw one Dirichlet(alpha) vector scaled to sum to ``factor``.

    Parameters
    ----------
    factor : float
        Target sum
    alpha : array_like
        Concentration parameters, at least 3, all positive
    rng : Generator or int, optional
        Random generator or seed
    """
    alpha = np.asarray(alpha, dtype=float)
    if alpha.ndim != 1 or len(alpha) <= 2:
        raise ValueError("Dirichlet parameter vector needs at least 3 values")
    if np.any(alpha <= 0):
        raise ValueError("Dirichlet parameters must be positive")

    sample = _generator(rng).gamma(shape=alpha, scale=1.0)
    return factor * sample / sample.sum()


def build_weights_dirichlet(
    length: int, rng: np.random.Generator | int | None = None
) -> np.ndarray:
    """
    Weights from a single Dirichlet(1, ..., 1) draw, summing to ``length``.

    Examples
    --------
    >>> w = build_weights_dirichlet(100, rng=42)
    >>> round(float(w.sum()), 6)
    100.0
    """
    return dirichlet(float(length), np.ones(length), rng)


def build_weights_gamma(
    length: int, rng: np.random.Generator | int | None = None
) -> np.ndarray:
    """
    Gamma-distributed weights approximating Binomial(length, 1/length) counts.

    The Gamma shape ``n p / (1 - p)`` and scale ``1 - p`` (n = length,
    p = 1/length) match the mean and variance of the number of times a site
    is drawn in a classical bootstrap. The vector is normalized to sum to
    ``length``.
    """
    if length < 2:
        raise ValueError(f"Gamma weights need at least 2 sites, got {length}")

    n = float(length)
    p = 1.0 / n
    shape = n * p / (1.0 - p)
    scale = 1.0 - p

    weights = _generator(rng).gamma(shape=shape, scale=scale, size=length)
    return weights * n / weights.sum()


def bootstrap_weights(
    length: int, rng: np.random.Generator | int | None = None
) -> np.ndarray:
    """
    Classical bootstrap as weights: how many times each site is resampled.

    Using these weights is equivalent to building a resampled alignment.
    """
    if length < 1:
        raise ValueError(f"Alignment length must be positive, got {length}")
    draws = _generator(rng).integers(0, length, size=length)
    return np.bincount(draws, minlength=length).astype(float)


WEIGHT_BUILDERS = {
    "dirichlet": build_weights_dirichlet,
    "gamma": build_weights_gamma,
    "bootstrap": bootstrap_weights,
}


def build_weights(
    kind: str, length: int, rng: np.random.Generator | int | None = None
) -> np.ndarray:
    """Dispatch to a weight builder by name ('dirichlet', 'gamma', 'bootstrap')."""
    if kind not in WEIGHT_BUILDERS:
        raise ValueError(
            f"Unknown weight kind '{kind}'. Available: {', '.join(WEIGHT_BUILDERS)}"
        )
    return WEIGHT_BUILDERS[kind](length, rng)
