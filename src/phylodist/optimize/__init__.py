"""
Optimization routines for maximum likelihood distance estimation.

Pairwise branch lengths are estimated with Brent's method through
scipy.optimize.
"""

from .branch_length import (
    BranchLengthEstimator,
    BranchLengthResult,
    log_likelihood,
    pair_count_matrix,
)

__all__ = [
    "BranchLengthEstimator",
    "BranchLengthResult",
    "log_likelihood",
    "pair_count_matrix",
]
