"""
Nucleotide substitution models.

State order is A=0, C=1, G=2, T=3. All rate matrices are normalized to one
expected substitution per unit branch length.

JC69 and K2P have closed-form transition probabilities and are ANALYTICAL.
F81, F84, TN93 and GTR go through the eigendecomposition of Q.
"""

from functools import partial

import numpy as np

from .base import SubstitutionModel

# Order of the six exchangeabilities of the GTR model
NT_EXCHANGE_ORDER = ("AC", "AG", "AT", "CG", "CT", "GT")
_NT_INDEX = {"A": 0, "C": 1, "G": 2, "T": 3}

UNIFORM_PI = np.full(4, 0.25)

_TRANSITION = np.array(
    [[False, False, True, False],
     [False, False, False, True],
     [True, False, False, False],
     [False, True, False, False]]
)


def exchangeability_matrix(rates: dict[str, float] | None = None) -> np.ndarray:
    """
    Symmetric 4x4 exchangeability matrix from named pair rates.

    Missing pairs default to 1.

    Examples
    --------
    >>> exchangeability_matrix({"AG": 4.0, "CT": 4.0})[0, 2]
    4.0
    """
    rates = dict(rates or {})
    unknown = set(rates) - set(NT_EXCHANGE_ORDER)
    if unknown:
        raise ValueError(
            f"Unknown nucleotide pairs {sorted(unknown)}; expected {NT_EXCHANGE_ORDER}"
        )

    R = np.ones((4, 4))
    for pair, value in rates.items():
        if value < 0:
            raise ValueError(f"Exchangeability {pair} must be non-negative, got {value}")
        i, j = _NT_INDEX[pair[0]], _NT_INDEX[pair[1]]
        R[i, j] = R[j, i] = value
    np.fill_diagonal(R, 0.0)
    return R


def _jc69_pmatrix(length: float) -> np.ndarray:
    e = np.exp(-4.0 * length / 3.0)
    P = np.full((4, 4), 0.25 - 0.25 * e)
    np.fill_diagonal(P, 0.25 + 0.75 * e)
    return P


def _k2p_pmatrix(length: float, kappa: float) -> np.ndarray:
    beta = 1.0 / (kappa + 2.0)
    e_all = np.exp(-4.0 * beta * length)
    e_ts = np.exp(-2.0 * (kappa + 1.0) * beta * length)

    P = np.full((4, 4), 0.25 - 0.25 * e_all)
    P[_TRANSITION] = 0.25 + 0.25 * e_all - 0.5 * e_ts
    np.fill_diagonal(P, 0.25 + 0.25 * e_all + 0.5 * e_ts)
    return P


def jc69_model() -> SubstitutionModel:
    """Jukes-Cantor (1969): equal rates and equal frequencies."""
    return SubstitutionModel.from_exchangeabilities(
        "JC69", exchangeability_matrix(), UNIFORM_PI, closed_form=_jc69_pmatrix
    )


def k2p_model(kappa: float = 1.0) -> SubstitutionModel:
    """
    Kimura two-parameter model.

    Parameters
    ----------
    kappa : float
        Transition/transversion rate ratio. kappa=1 gives JC69.
    """
    if kappa <= 0:
        raise ValueError(f"kappa must be positive, got {kappa}")
    R = exchangeability_matrix({"AG": kappa, "CT": kappa})
    return SubstitutionModel.from_exchangeabilities(
        "K2P",
        R,
        UNIFORM_PI,
        closed_form=partial(_k2p_pmatrix, kappa=kappa),
        params={"kappa": kappa},
    )


def f81_model(pi: np.ndarray) -> SubstitutionModel:
    """Felsenstein (1981): equal exchangeabilities, unequal frequencies."""
    return SubstitutionModel.from_exchangeabilities("F81", exchangeability_matrix(), pi)


def f84_model(kappa: float, pi: np.ndarray) -> SubstitutionModel:
    """
    Felsenstein (1984) model.

    Transitions get the extra rate ``kappa / pi_R`` (purines) or
    ``kappa / pi_Y`` (pyrimidines). kappa=0 gives F81.
    """
    if kappa < 0:
        raise ValueError(f"kappa must be non-negative, got {kappa}")
    pi = np.asarray(pi, dtype=float) / np.sum(pi)
    pi_r = pi[0] + pi[2]
    pi_y = pi[1] + pi[3]
    R = exchangeability_matrix(
        {"AG": 1.0 + kappa / pi_r, "CT": 1.0 + kappa / pi_y}
    )
    return SubstitutionModel.from_exchangeabilities(
        "F84", R, pi, params={"kappa": kappa}
    )


def tn93_model(kappa1: float, kappa2: float, pi: np.ndarray) -> SubstitutionModel:
    """
    Tamura-Nei (1993) model.

    Parameters
    ----------
    kappa1 : float
        A<->G (purine transition) rate ratio
    kappa2 : float
        C<->T (pyrimidine transition) rate ratio
    pi : ndarray, shape (4,)
        Base frequencies
    """
    if kappa1 <= 0 or kappa2 <= 0:
        raise ValueError("TN93 rate ratios must be positive")
    R = exchangeability_matrix({"AG": kappa1, "CT": kappa2})
    return SubstitutionModel.from_exchangeabilities(
        "TN93", R, pi, params={"kappa1": kappa1, "kappa2": kappa2}
    )


def gtr_model(rates: dict[str, float] | None, pi: np.ndarray) -> SubstitutionModel:
    """
    General time-reversible model.

    Parameters
    ----------
    rates : dict
        Exchangeabilities keyed by pair name (see :data:`NT_EXCHANGE_ORDER`);
        missing pairs default to 1
    pi : ndarray, shape (4,)
        Base frequencies
    """
    R = exchangeability_matrix(rates)
    params = {pair: R[_NT_INDEX[pair[0]], _NT_INDEX[pair[1]]] for pair in NT_EXCHANGE_ORDER}
    return SubstitutionModel.from_exchangeabilities("GTR", R, pi, params=params)
