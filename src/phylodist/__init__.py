"""
phylodist: evolutionary distance estimation for sequence alignments.

Pairwise genetic distances between aligned nucleotide or protein
sequences, from closed-form corrections (JC69, K2P, F81, F84, TN93) to
maximum likelihood estimates under nucleotide and empirical amino acid
substitution models, computed concurrently over all pairs.

Quick Start
-----------
Compute a distance matrix:

>>> from phylodist import compute_distance_matrix
>>> result = compute_distance_matrix("alignment.fasta", model="k2p", cpus=4)
>>> print(result.summary())
>>> result.write("distances.txt")

Protein ML distances with Gamma rate heterogeneity:

>>> result = compute_distance_matrix("proteins.fasta", model="lg", gamma=True, alpha=0.5)

Examples
--------
>>> # Continuous bootstrap: 100 matrices from Gamma-distributed site weights
>>> from phylodist import bootstrap_distance_matrices
>>> replicates = bootstrap_distance_matrices("data.fasta", "tn93", 100, kind="gamma", seed=42)

>>> # Lower-level access: a model and the matrix driver
>>> from phylodist import Alignment, dist_matrix, model
>>> aln = Alignment.from_fasta("data.fasta")
>>> matrix = dist_matrix(aln, None, model("f84"), cpus=4)
"""

__version__ = "0.1.0"

# High-level API (simple interface)
from .api import (
    DistanceResult,
    available_models,
    bootstrap_distance_matrices,
    build_model,
    compute_distance_matrix,
)

# Distance models and the matrix driver
from .distance import (
    DistModel,
    ProtDistModel,
    dist_matrix,
    model,
    new_prot_dist_model,
    simplot_distances,
)

# I/O classes (for advanced users)
from .io.sequences import Alignment
from .io.matrix import read_dist_matrix, write_dist_matrix

__all__ = [
    # Simple API - Start here!
    "compute_distance_matrix",
    "bootstrap_distance_matrices",
    "build_model",
    "available_models",

    # Result objects
    "DistanceResult",

    # Distance models
    "DistModel",
    "ProtDistModel",
    "model",
    "new_prot_dist_model",
    "dist_matrix",
    "simplot_distances",

    # I/O (advanced)
    "Alignment",
    "read_dist_matrix",
    "write_dist_matrix",

    # Version
    "__version__",
]
