"""
Simulators for nucleotide and amino acid substitution models.
"""

import numpy as np

from ..io.sequences import AMINO_ACID, N_NT_STATES, NUCLEOTIDE
from ..models.base import SubstitutionModel
from ..models.gamma import generate_rates
from .base import SequenceSimulator


class StarSimulator(SequenceSimulator):
    """
    Simulate sequences under a substitution model on a star tree.

    Sites share one rate across all branches. Without ``alpha`` every site
    evolves at rate 1; otherwise rates are drawn from ``ncat`` discrete
    Gamma categories (or a continuous Gamma when ``ncat`` is None).

    Parameters
    ----------
    model : SubstitutionModel
        Nucleotide (4 states) or amino acid (20 states) model
    branch_lengths : dict
        Mapping from tip name to branch length
    sequence_length : int
        Number of sites
    alpha : float, optional
        Gamma shape parameter of rate heterogeneity
    ncat : int or None
        Number of discrete Gamma categories
    seed : int, optional
        Random seed for reproducibility

    Examples
    --------
    >>> from phylodist.models.dna import jc69_model
    >>> sim = StarSimulator(jc69_model(), {"a": 0.1, "b": 0.2}, 500, seed=42)
    >>> aln = sim.simulate()
    >>> aln.n_species, aln.n_sites
    (2, 500)
    """

    def __init__(
        self,
        model: SubstitutionModel,
        branch_lengths: dict[str, float],
        sequence_length: int,
        alpha: float | None = None,
        ncat: int | None = 4,
        seed: int | None = None,
    ):
        super().__init__(branch_lengths, sequence_length, seed)
        if alpha is not None and alpha <= 0:
            raise ValueError(f"Gamma shape must be positive, got {alpha}")
        self.model = model
        self.alpha = alpha
        self.ncat = ncat
        self.site_rates = np.ones(sequence_length)

    @property
    def seqtype(self) -> str:
        return NUCLEOTIDE if self.model.n_states == N_NT_STATES else AMINO_ACID

    def _prepare(self):
        if self.alpha is None:
            self.site_rates = np.ones(self.sequence_length)
        else:
            self.site_rates, _ = generate_rates(
                self.sequence_length,
                self.alpha,
                ncat=self.ncat or 1,
                discrete=self.ncat is not None,
                rng=self.rng,
            )

    def _generate_ancestral_sequence(self) -> np.ndarray:
        return self.rng.choice(self.model.n_states, size=self.sequence_length, p=self.model.pi)

    def _sample(self, P: np.ndarray, parents: np.ndarray) -> np.ndarray:
        # Inverse CDF sampling of one child state per parent state
        cdf = np.cumsum(P[parents], axis=1)
        cdf /= cdf[:, -1:]
        u = self.rng.random(len(parents))
        return (cdf < u[:, np.newaxis]).sum(axis=1)

    def _evolve_sequence(self, parent_seq, branch_length):
        child_seq = np.empty(self.sequence_length, dtype=np.int64)

        # Sites sharing a rate share a transition matrix
        for rate in np.unique(self.site_rates):
            sites = self.site_rates == rate
            P = self.model.transition_matrix(rate * branch_length)
            child_seq[sites] = self._sample(np.clip(P, 0.0, None), parent_seq[sites])
        return child_seq

    def get_parameters(self) -> dict:
        return {
            'model': self.model.name,
            'params': dict(self.model.params),
            'sequence_length': int(self.sequence_length),
            'alpha': None if self.alpha is None else float(self.alpha),
            'ncat': self.ncat,
            'branch_lengths': {k: float(v) for k, v in self.branch_lengths.items()},
        }
