"""
Distance matrix text format.

The layout is the one read by PHYLIP-style tree builders::

    3
    seq1	0.000000000000	0.100000000000	0.200000000000
    seq2	0.100000000000	0.000000000000	0.150000000000
    seq3	0.200000000000	0.150000000000	0.000000000000

The first line is the number of sequences; each following line holds the
sequence name and its row, every value written as ``\\t%.12f``.
"""

from pathlib import Path
from typing import TextIO

import numpy as np


def format_dist_matrix(matrix: np.ndarray, names: list[str]) -> str:
    """Render a distance matrix in the tab-separated text format."""
    matrix = np.asarray(matrix, dtype=float)
    n = len(names)
    if matrix.shape != (n, n):
        raise ValueError(
            f"Matrix shape {matrix.shape} does not match {n} sequence names"
        )

    lines = [f"{n}"]
    for name, row in zip(names, matrix):
        lines.append(name + ''.join("\t%.12f" % value for value in row))
    return '\n'.join(lines) + '\n'


def write_dist_matrix(
    matrix: np.ndarray, names: list[str], output: Path | str | TextIO
) -> None:
    """
    Write a distance matrix to a file path or an open text handle.

    Parameters
    ----------
    matrix : ndarray, shape (n, n)
        Distance matrix
    names : list[str]
        Sequence names, in matrix order
    output : Path, str or file-like
        Destination
    """
    text = format_dist_matrix(matrix, names)
    if hasattr(output, 'write'):
        output.write(text)
    else:
        with open(Path(output), 'w') as f:
            f.write(text)


def read_dist_matrix(filepath: Path | str) -> tuple[list[str], np.ndarray]:
    """Parse a distance matrix file written by :func:`write_dist_matrix`."""
    with open(Path(filepath), 'r') as f:
        lines = [line.rstrip('\n') for line in f if line.strip()]

    if not lines:
        raise ValueError("Empty distance matrix file")

    n = int(lines[0].strip())
    if len(lines) - 1 != n:
        raise ValueError(f"Expected {n} matrix rows, found {len(lines) - 1}")

    names = []
    matrix = np.zeros((n, n))
    for i, line in enumerate(lines[1:]):
        fields = line.split('\t')
        if len(fields) != n + 1:
            raise ValueError(
                f"Row {i + 1} has {len(fields) - 1} values, expected {n}"
            )
        names.append(fields[0])
        matrix[i] = [float(v) for v in fields[1:]]

    return names, matrix
