"""
Core numerical routines for distance estimation.

This module provides low-level computational routines:

- **Matrix operations**: rate matrices, eigendecomposition backends and
  matrix exponential (:mod:`phylodist.core.matrix`)
- **Transition probabilities**: memoized P(l) matrices (:mod:`phylodist.core.pij`)
- **Site statistics**: site selection and weighted difference counts
  (:mod:`phylodist.core.sites`)

These are expert-level functions typically not needed by end users.
The high-level API (:mod:`phylodist.api`) provides easier access.
"""

from .matrix import (
    EigenSystem,
    check_detailed_balance,
    create_reversible_Q,
    eigen_decompose,
    matrix_exponential,
)

__all__ = [
    "EigenSystem",
    "check_detailed_balance",
    "create_reversible_Q",
    "eigen_decompose",
    "matrix_exponential",
]
