"""
Sequence simulation for phylodist.

Simulated alignments with known branch lengths are used to check distance
estimators and to generate test datasets.

Available simulators:
- StarSimulator: any substitution model on a star tree, with optional
  Gamma rate heterogeneity
"""

from .base import SequenceSimulator
from .substitution import StarSimulator

__all__ = [
    'SequenceSimulator',
    'StarSimulator',
]
