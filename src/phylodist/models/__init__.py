"""
Substitution models for distance estimation.

- **Nucleotide models**: JC69 and K2P (closed form), F81, F84, TN93 and GTR
  (spectral)
- **Protein models**: Dayhoff, JTT, MtREV, LG, WAG, HIVb and AB empirical
  matrices
- **Rate heterogeneity**: discrete Gamma categories
"""

from .base import ModelKind, SubstitutionModel
from .dna import (
    f81_model,
    f84_model,
    gtr_model,
    jc69_model,
    k2p_model,
    tn93_model,
)
from .gamma import discrete_gamma, generate_rates
from .protein import protein_model, protein_model_id

__all__ = [
    "ModelKind",
    "SubstitutionModel",
    "jc69_model",
    "k2p_model",
    "f81_model",
    "f84_model",
    "tn93_model",
    "gtr_model",
    "protein_model",
    "protein_model_id",
    "discrete_gamma",
    "generate_rates",
]
