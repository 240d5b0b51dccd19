"""
Empirical amino acid substitution models.

Models are identified either by name or by the integer constants below.
"""

import numpy as np

from .base import SubstitutionModel
from .matrices import EMPIRICAL_MODELS, empirical_matrix

MODEL_DAYHOFF = 0
MODEL_JTT = 1
MODEL_MTREV = 2
MODEL_LG = 3
MODEL_WAG = 4
MODEL_HIVB = 5
MODEL_AB = 6

# EMPIRICAL_MODELS is ordered like the integer ids
_MODEL_NAMES = dict(enumerate(EMPIRICAL_MODELS))


def protein_model_name(model: int | str) -> str:
    """
    Canonical upper-case name of a protein model.

    Accepts the integer ids (``MODEL_LG``...) or a name, case-insensitive.
    """
    if isinstance(model, (int, np.integer)) and not isinstance(model, bool):
        if int(model) not in _MODEL_NAMES:
            raise ValueError(
                f"Unknown protein model id {model}; expected 0-{len(_MODEL_NAMES) - 1}"
            )
        return _MODEL_NAMES[int(model)]

    name = str(model).upper()
    if name not in EMPIRICAL_MODELS:
        raise ValueError(
            f"Unknown protein model '{model}'. Available: {', '.join(EMPIRICAL_MODELS)}"
        )
    return name


def protein_model_id(model: int | str) -> int:
    """Integer id of a protein model."""
    return EMPIRICAL_MODELS.index(protein_model_name(model))


def protein_model(
    model: int | str, pi: np.ndarray | None = None, backend: str | None = None
) -> SubstitutionModel:
    """
    Build an empirical amino acid model.

    Parameters
    ----------
    model : int or str
        Model id or name (DAYHOFF, JTT, MTREV, LG, WAG, HIVB, AB)
    pi : ndarray, shape (20,), optional
        Equilibrium frequencies. The model's own frequencies are used when
        omitted.
    backend : str, optional
        Eigendecomposition backend

    Returns
    -------
    SubstitutionModel
        A SPECTRAL model over 20 states

    Examples
    --------
    >>> lg = protein_model("LG")
    >>> lg.n_states
    20
    """
    name = protein_model_name(model)
    exchange, model_pi = empirical_matrix(name)
    if pi is None:
        pi = model_pi
    return SubstitutionModel.from_exchangeabilities(
        name,
        exchange,
        pi,
        params={"global_freq": pi is model_pi},
        backend=backend,
    )
