"""
Site weight generators for continuous and classical bootstrap.
"""

from .weights import (
    bootstrap_weights,
    build_weights,
    build_weights_dirichlet,
    build_weights_gamma,
    dirichlet,
)

__all__ = [
    "bootstrap_weights",
    "build_weights",
    "build_weights_dirichlet",
    "build_weights_gamma",
    "dirichlet",
]
