"""
High-level API for phylodist distance estimation.

This module provides a simplified interface for computing distance
matrices, with unified result objects and automatic file format detection.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

import numpy as np

from .core.sites import GapMode
from .distance.base import DistModel
from .distance.dna import NT_MODEL_NAMES, PDistModel
from .distance.dna import model as dna_model
from .distance.matrix import dist_matrix
from .distance.protein import PROT_DIST_MAX, ProtDistModel
from .io.matrix import format_dist_matrix, write_dist_matrix
from .io.sequences import Alignment
from .models.matrices import EMPIRICAL_MODELS
from .resample.weights import build_weights


@dataclass
class DistanceResult:
    """
    Distance matrix with the settings used to compute it.

    Attributes
    ----------
    names : list[str]
        Sequence names, in matrix order
    matrix : ndarray, shape (n, n)
        Symmetric distance matrix with a zero diagonal
    model_name : str
        Distance model name
    n_sites : float
        Weighted number of sites the model selected
    saturated : bool
        True when some protein distance reached the maximum distance
    params : dict
        Settings of the run (gamma, alpha, remove_gaps, ...)

    Examples
    --------
    >>> from phylodist import compute_distance_matrix
    >>> result = compute_distance_matrix("alignment.fasta", model="k2p")
    >>> print(result.summary())
    >>> result.write("distances.txt")
    """

    names: list[str]
    matrix: np.ndarray
    model_name: str
    n_sites: float
    saturated: bool = False
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def n_sequences(self) -> int:
        return len(self.names)

    def distance(self, name1: str, name2: str) -> float:
        """Distance between two sequences, by name."""
        try:
            i = self.names.index(name1)
            j = self.names.index(name2)
        except ValueError:
            raise ValueError(f"Unknown sequence name: {name1!r} or {name2!r}") from None
        return float(self.matrix[i, j])

    def summary(self) -> str:
        """
        Generate a human-readable summary of the matrix.

        Returns
        -------
        str
            Formatted multi-line summary
        """
        n = self.n_sequences
        upper = self.matrix[np.triu_indices(n, k=1)]

        lines = []
        lines.append("=" * 70)
        lines.append(f"DISTANCE MODEL: {self.model_name}")
        lines.append("=" * 70)
        lines.append("")
        lines.append(f"Sequences:      {n}")
        lines.append(f"Selected sites: {self.n_sites:g}")
        for key, value in self.params.items():
            lines.append(f"{key + ':':<16}{value}")
        if len(upper):
            lines.append("")
            lines.append("DISTANCES:")
            lines.append(f"  min  = {upper.min():.6f}")
            lines.append(f"  mean = {upper.mean():.6f}")
            lines.append(f"  max  = {upper.max():.6f}")
        if self.saturated:
            lines.append("")
            lines.append(f"WARNING: some distances were capped at {PROT_DIST_MAX:.2f}")
        lines.append("")
        lines.append("=" * 70)
        return "\n".join(lines)

    def to_text(self) -> str:
        """Matrix in the tab-separated distance matrix format."""
        return format_dist_matrix(self.matrix, self.names)

    def write(self, output: str | Path | TextIO) -> None:
        """Write the matrix file to a path or an open text handle."""
        write_dist_matrix(self.matrix, self.names, output)

    def to_dict(self) -> dict[str, Any]:
        return {
            'model_name': self.model_name,
            'names': list(self.names),
            'matrix': self.matrix.tolist(),
            'n_sites': float(self.n_sites),
            'saturated': bool(self.saturated),
            'params': self.params,
        }

    def to_json(self, filepath: str | None = None, indent: int = 2) -> str:
        """
        Export results as JSON.

        Parameters
        ----------
        filepath : str, optional
            If provided, write JSON to this file
        indent : int, default=2
            Indentation level for pretty printing

        Returns
        -------
        str
            JSON string representation
        """
        json_str = json.dumps(self.to_dict(), indent=indent)
        if filepath:
            with open(filepath, 'w') as f:
                f.write(json_str)
        return json_str

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"DistanceResult(model='{self.model_name}', n={self.n_sequences})"


def _load_alignment(alignment: str | Path | Alignment) -> Alignment:
    """
    Load an alignment, detecting FASTA or PHYLIP from the file content.

    Raises
    ------
    FileNotFoundError
        If the alignment file doesn't exist
    ValueError
        If parsing fails
    """
    if isinstance(alignment, Alignment):
        return alignment

    path = Path(alignment)
    if not path.exists():
        raise FileNotFoundError(f"Alignment file not found: {path}")
    try:
        return Alignment.from_file(path)
    except (ValueError, IndexError) as e:
        raise ValueError(f"Failed to load alignment from {path}: {e}") from e


def available_models() -> list[str]:
    """Names accepted by :func:`build_model`."""
    return list(NT_MODEL_NAMES) + [name.lower() for name in EMPIRICAL_MODELS]


def build_model(
    model: str,
    remove_gaps: bool = False,
    global_freq: bool = False,
    gap_mode: GapMode | int | None = None,
    gamma: bool = False,
    alpha: float = 0.0,
    remove_ambiguous: bool = False,
    **params,
) -> DistModel:
    """
    Build a nucleotide or protein distance model by name.

    Parameters
    ----------
    model : str
        Nucleotide model (jc, k2p, pdist, rawdist, f81, f84, tn93, ml-*)
        or protein model (dayhoff, jtt, mtrev, lg, wag, hivb, ab)
    remove_gaps : bool
        Drop sites with a gap or ambiguity in any sequence
    global_freq : bool
        Protein models only: keep the model's own frequencies
    gap_mode : GapMode or int, optional
        pdist/rawdist only: gap counting policy
    gamma, alpha : bool, float
        Protein models only: gamma rate heterogeneity (nucleotide models
        get it through :func:`phylodist.distance.matrix.dist_matrix`)
    remove_ambiguous : bool
        pdist/rawdist only: leave out ambiguous comparisons compatible with
        the other character
    **params
        Parameters of ML nucleotide models (kappa, kappa1, kappa2, rates)

    Raises
    ------
    ValueError
        If the model name is unknown or an option does not apply to it
    """
    key = model.lower()
    if key.upper() in EMPIRICAL_MODELS:
        if gap_mode is not None:
            raise ValueError("Gap counting modes only apply to pdist and rawdist")
        if remove_ambiguous:
            raise ValueError("Ambiguity removal only applies to pdist and rawdist")
        if params:
            raise ValueError(f"Protein models take no parameters, got {', '.join(params)}")
        return ProtDistModel(key, global_freq, gamma, alpha if gamma else 1.0, remove_gaps)

    if key not in NT_MODEL_NAMES:
        raise ValueError(
            f"Unknown model: '{model}'. Valid models are: {', '.join(available_models())}"
        )
    dist_model = dna_model(
        key, remove_gaps=remove_gaps, remove_ambiguous=remove_ambiguous, **params
    )
    if gap_mode is not None:
        if not isinstance(dist_model, PDistModel):
            raise ValueError("Gap counting modes only apply to pdist and rawdist")
        dist_model.set_count_gap_mutations(gap_mode)
    return dist_model


def compute_distance_matrix(
    alignment: str | Path | Alignment,
    model: str = "k2p",
    *,
    weights: np.ndarray | str | None = None,
    remove_gaps: bool = False,
    gamma: bool = False,
    alpha: float = 0.0,
    cpus: int = 1,
    global_freq: bool = False,
    gap_mode: GapMode | int | None = None,
    remove_ambiguous: bool = False,
    seed: int | np.random.Generator | None = None,
    **params,
) -> DistanceResult:
    """
    Compute the pairwise distance matrix of an alignment.

    This is the main entry point of phylodist. Nucleotide and protein
    models are chosen by name.

    Parameters
    ----------
    alignment : str, Path, or Alignment
        Alignment or path to a FASTA/PHYLIP file
    model : str, default="k2p"
        Distance model name (see :func:`build_model`)
    weights : ndarray or str, optional
        Per-site weights, or a weight kind ('dirichlet', 'gamma',
        'bootstrap') drawn with ``seed``
    remove_gaps : bool
        Drop sites with a gap or ambiguity in any sequence
    gamma : bool
        Gamma rate heterogeneity correction
    alpha : float
        Gamma shape parameter (> 0 when ``gamma``)
    cpus : int
        Number of worker threads
    global_freq : bool
        Protein models only: keep the model's own frequencies
    gap_mode : GapMode or int, optional
        pdist/rawdist only: 0 ignores gaps, 1 counts internal gaps, 2 all
    remove_ambiguous : bool
        pdist/rawdist only: leave out ambiguous comparisons compatible with
        the other character
    seed : int or Generator, optional
        Random seed for drawn weights
    **params
        Parameters of ML nucleotide models (kappa, kappa1, kappa2, rates)

    Returns
    -------
    DistanceResult

    Raises
    ------
    ValueError
        On unknown models, mismatched alphabets or invalid options
    FileNotFoundError
        If the alignment file doesn't exist

    Examples
    --------
    >>> result = compute_distance_matrix("data.fasta", model="tn93", cpus=4)
    >>> result.matrix.shape
    """
    align = _load_alignment(alignment)
    dist_model = build_model(
        model, remove_gaps, global_freq, gap_mode, gamma, alpha,
        remove_ambiguous=remove_ambiguous, **params
    )

    if isinstance(weights, str):
        weights = build_weights(weights, align.n_sites, seed)

    saturated = False
    if isinstance(dist_model, ProtDistModel):
        _, _, matrix = dist_model.ml_dist(align, weights, cpus=cpus)
        saturated = dist_model.saturated
    else:
        matrix = dist_matrix(align, weights, dist_model, gamma=gamma, alpha=alpha, cpus=cpus)

    return DistanceResult(
        names=list(align.names),
        matrix=matrix,
        model_name=dist_model.name,
        n_sites=dist_model.num_sites,
        saturated=saturated,
        params={
            'gamma': gamma,
            'alpha': alpha,
            'remove_gaps': remove_gaps,
            'remove_ambiguous': remove_ambiguous,
            'weighted': weights is not None,
        },
    )


def bootstrap_distance_matrices(
    alignment: str | Path | Alignment,
    model: str = "k2p",
    n_replicates: int = 100,
    kind: str = "bootstrap",
    seed: int | np.random.Generator | None = None,
    **kwargs,
) -> list[DistanceResult]:
    """
    Distance matrices of resampled alignments.

    Each replicate reweights the sites with a fresh weight vector
    (classical bootstrap counts, or continuous 'gamma'/'dirichlet' weights).

    Parameters
    ----------
    alignment : str, Path, or Alignment
        Alignment or path to a FASTA/PHYLIP file
    model : str
        Distance model name
    n_replicates : int
        Number of matrices to build
    kind : str
        Weight kind: 'bootstrap', 'gamma' or 'dirichlet'
    seed : int or Generator, optional
        Random seed; the same seed gives the same replicates
    **kwargs
        Passed to :func:`compute_distance_matrix`

    Returns
    -------
    list of DistanceResult
    """
    if n_replicates < 1:
        raise ValueError(f"Number of replicates must be positive, got {n_replicates}")
    align = _load_alignment(alignment)
    rng = np.random.default_rng(seed)

    return [
        compute_distance_matrix(
            align, model, weights=build_weights(kind, align.n_sites, rng), **kwargs
        )
        for _ in range(n_replicates)
    ]
