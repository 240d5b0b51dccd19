"""
Pairwise evolutionary distances.

- **Nucleotide models**: closed-form JC69, K2P, F81, F84, TN93 corrections,
  p-distance and raw counts, ML distances under any nucleotide model
  (:mod:`phylodist.distance.dna`)
- **Protein models**: ML distances under empirical amino acid matrices
  (:mod:`phylodist.distance.protein`)
- **Distance matrices**: the concurrent all-pairs driver
  (:mod:`phylodist.distance.matrix`) and sliding-window SimPlot
  distances (:mod:`phylodist.distance.simplot`)
"""

from .base import NT_DIST_OVER, DistModel
from .dna import (
    F81Model,
    F84Model,
    JCModel,
    K2PModel,
    MLDistModel,
    PDistModel,
    RawDistModel,
    TN93Model,
    model,
)
from .matrix import dist_matrix
from .protein import (
    PROT_DIST_MAX,
    ProtDistModel,
    jc69_dist,
    new_prot_dist_model,
)
from .simplot import SimPlotWindow, simplot_distances

__all__ = [
    "DistModel",
    "NT_DIST_OVER",
    "PROT_DIST_MAX",
    "JCModel",
    "K2PModel",
    "PDistModel",
    "RawDistModel",
    "F81Model",
    "F84Model",
    "TN93Model",
    "MLDistModel",
    "ProtDistModel",
    "model",
    "new_prot_dist_model",
    "jc69_dist",
    "dist_matrix",
    "SimPlotWindow",
    "simplot_distances",
]
