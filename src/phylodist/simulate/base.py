"""
Base class for sequence simulators.
"""

from abc import ABC, abstractmethod

import numpy as np

from ..io.sequences import AMINO_ACID, NUCLEOTIDE, Alignment


class SequenceSimulator(ABC):
    """
    Abstract base class for sequence simulators over a star topology.

    Every tip sequence evolves independently from a common root sequence
    along its own branch, so the expected distance between tips ``a`` and
    ``b`` is ``branch_lengths[a] + branch_lengths[b]``.

    Parameters
    ----------
    branch_lengths : dict
        Mapping from tip name to branch length (expected substitutions per
        site)
    sequence_length : int
        Number of sites to simulate
    seed : int, optional
        Random seed for reproducibility

    Attributes
    ----------
    rng : numpy.random.Generator
        Random number generator (seeded for reproducibility)
    """

    def __init__(
        self,
        branch_lengths: dict[str, float],
        sequence_length: int,
        seed: int | None = None,
    ):
        self.branch_lengths = dict(branch_lengths)
        self.sequence_length = sequence_length
        self.rng = np.random.default_rng(seed)
        self._validate()

    def _validate(self):
        if not self.branch_lengths:
            raise ValueError("At least one tip is needed for simulation")
        if self.sequence_length < 1:
            raise ValueError(f"Sequence length must be positive, got {self.sequence_length}")
        for name, length in self.branch_lengths.items():
            if length is None or not np.isfinite(length) or length < 0:
                raise ValueError(f"Tip {name} has an invalid branch length: {length}")

    @abstractmethod
    def _generate_ancestral_sequence(self) -> np.ndarray:
        """Root sequence as an array of state indices."""

    @abstractmethod
    def _evolve_sequence(self, parent_seq: np.ndarray, branch_length: float) -> np.ndarray:
        """Evolve a sequence of state indices along a branch."""

    @property
    @abstractmethod
    def seqtype(self) -> str:
        """Alphabet of the simulated sequences ('dna' or 'aa')."""

    def simulate(self) -> Alignment:
        """
        Simulate one sequence per tip.

        Returns
        -------
        Alignment
            Tip sequences, in the order of ``branch_lengths``
        """
        if self.seqtype not in (NUCLEOTIDE, AMINO_ACID):
            raise ValueError(f"Cannot simulate sequences of type '{self.seqtype}'")
        self._prepare()
        root_seq = self._generate_ancestral_sequence()

        names = list(self.branch_lengths)
        sequences = np.vstack([
            self._evolve_sequence(root_seq, self.branch_lengths[name]) for name in names
        ]).astype(np.int8)

        return Alignment(
            names=names,
            sequences=sequences,
            n_species=len(names),
            n_sites=self.sequence_length,
            seqtype=self.seqtype,
        )

    def _prepare(self) -> None:
        """Hook run once before each simulation (e.g. to draw site rates)."""

    @abstractmethod
    def get_parameters(self) -> dict:
        """Simulation parameters for output metadata."""
