"""
Input/Output modules for sequence alignments and distance matrices.

This module provides:

- **Sequence alignments**: FASTA and PHYLIP readers with alphabet detection
- **Distance matrices**: the tab-separated matrix text format
"""

from .sequences import Alignment
from .matrix import format_dist_matrix, read_dist_matrix, write_dist_matrix

__all__ = ["Alignment", "format_dist_matrix", "read_dist_matrix", "write_dist_matrix"]
