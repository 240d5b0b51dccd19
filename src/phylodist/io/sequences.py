"""
Sequence file parsing and alignment handling.

Sequences are encoded once into small integer state indices that every
distance model shares read-only.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import numpy as np


# Sentinel codes shared by both alphabets
GAP_CODE = -1  # '-' or '.'
UNKNOWN_CODE = -2  # '*', '?' or any unrecognised character

# Nucleotide encoding: A=0, C=1, G=2, T=3, then IUPAC ambiguity codes
NUCLEOTIDES = 'ACGT'
NT_AMBIGUITY = 'RYSWKMBDHVN'
NT_CHARACTERS = NUCLEOTIDES + NT_AMBIGUITY
NT_TO_INDEX = {nt: i for i, nt in enumerate(NT_CHARACTERS)}
NT_TO_INDEX['U'] = NT_TO_INDEX['T']
INDEX_TO_NT = {i: nt for i, nt in enumerate(NT_CHARACTERS)}
N_NT_STATES = 4
NT_ANY = NT_TO_INDEX['N']

# Bit set of compatible bases for every nucleotide code (A=1, C=2, G=4, T=8)
NT_BASE_MASKS = np.array(
    [1, 2, 4, 8,  # A C G T
     5, 10, 6, 9, 12, 3,  # R Y S W K M
     14, 13, 11, 7, 15],  # B D H V N
    dtype=np.int64,
)
NT_BASE_COUNTS = np.array([bin(m).count('1') for m in NT_BASE_MASKS], dtype=np.int64)

# Amino acid encoding (PAML order), X is "any amino acid"
AMINO_ACIDS = 'ARNDCQEGHILKMFPSTWYV'
AA_TO_INDEX = {aa: i for i, aa in enumerate(AMINO_ACIDS)}
N_AA_STATES = 20
AA_ANY = 20
AA_TO_INDEX['X'] = AA_ANY
for _code in 'BZJ':
    AA_TO_INDEX[_code] = AA_ANY
INDEX_TO_AA = {i: aa for i, aa in enumerate(AMINO_ACIDS)}
INDEX_TO_AA[AA_ANY] = 'X'

GAP_CHARACTERS = '-.'

# Alphabet kinds
NUCLEOTIDE = 'dna'
AMINO_ACID = 'aa'
UNKNOWN = 'unknown'

_NT_ALLOWED = set(NT_CHARACTERS) | {'U', '-', '.', '*', '?'}
_AA_ALLOWED = set(AMINO_ACIDS) | set('XBZJ') | {'-', '.', '*', '?'}


def detect_alphabet(sequences: list[str]) -> str:
    """
    Guess the alphabet of raw sequences.

    Nucleotides win when every character is a nucleotide, IUPAC code or gap,
    so ``ACGT`` is never read as protein.
    """
    chars = set(''.join(sequences).upper())
    if chars <= _NT_ALLOWED:
        return NUCLEOTIDE
    if chars <= _AA_ALLOWED:
        return AMINO_ACID
    return UNKNOWN


def n_states(seqtype: str) -> int:
    """Number of plain (unambiguous) states of an alphabet."""
    if seqtype == NUCLEOTIDE:
        return N_NT_STATES
    if seqtype == AMINO_ACID:
        return N_AA_STATES
    raise ValueError(f"Unknown seqtype: {seqtype}")


@dataclass
class Alignment:
    """
    Multiple sequence alignment.

    Attributes
    ----------
    names : list[str]
        Sequence names/labels
    sequences : ndarray, shape (n_species, n_sites)
        Encoded sequences as integer arrays
    n_species : int
        Number of sequences
    n_sites : int
        Number of sites (alignment length)
    seqtype : str
        Sequence type ('dna', 'aa' or 'unknown')
    """

    names: list[str]
    sequences: np.ndarray
    n_species: int
    n_sites: int
    seqtype: str

    @classmethod
    def from_sequences(
        cls, names: list[str], sequences: list[str], seqtype: str | None = None
    ) -> "Alignment":
        """
        Build an alignment from raw sequence strings.

        Parameters
        ----------
        names : list[str]
            Sequence names
        sequences : list[str]
            Aligned sequences, all of the same length
        seqtype : str, optional
            'dna' or 'aa'. Detected from the characters when omitted.

        Returns
        -------
        Alignment

        Examples
        --------
        >>> aln = Alignment.from_sequences(["s1", "s2"], ["ACGT", "ATGT"])
        >>> aln.seqtype
        'dna'
        """
        if len(names) != len(sequences):
            raise ValueError(
                f"Got {len(names)} names for {len(sequences)} sequences"
            )
        if not sequences:
            raise ValueError("Alignment has no sequences")

        clean = [re.sub(r'\s', '', seq).upper() for seq in sequences]
        lengths = {len(seq) for seq in clean}
        if len(lengths) > 1:
            raise ValueError(f"Sequences have different lengths: {lengths}")

        if seqtype is None:
            seqtype = detect_alphabet(clean)

        if seqtype == NUCLEOTIDE:
            encoded = cls._encode_nucleotides(clean)
        elif seqtype == AMINO_ACID:
            encoded = cls._encode_amino_acids(clean)
        elif seqtype == UNKNOWN:
            encoded = np.full((len(clean), len(clean[0])), UNKNOWN_CODE, dtype=np.int8)
        else:
            raise ValueError(f"Unknown seqtype: {seqtype}")

        return cls(
            names=list(names),
            sequences=encoded,
            n_species=len(clean),
            n_sites=len(clean[0]),
            seqtype=seqtype,
        )

    @classmethod
    def from_phylip(cls, filepath: Path | str, seqtype: str | None = None) -> "Alignment":
        """
        Parse a PHYLIP alignment (sequential or interleaved).

        The first line holds the number of sequences and the alignment length.
        Names are separated from the sequence data by whitespace.
        """
        filepath = Path(filepath)

        with open(filepath, 'r') as f:
            lines = [line.rstrip() for line in f if line.strip()]

        if not lines:
            raise ValueError("Empty PHYLIP file")

        header = lines[0].split()
        n_species = int(header[0])
        n_chars = int(header[1])

        names = []
        chunks: list[list[str]] = []
        for k, line in enumerate(lines[1:]):
            if k < n_species:
                parts = line.split(None, 1)
                names.append(parts[0])
                chunks.append([parts[1] if len(parts) > 1 else ''])
            else:
                # Interleaved blocks cycle over the sequences in order
                chunks[k % n_species].append(line)

        if len(names) != n_species:
            raise ValueError(f"Expected {n_species} sequences, found {len(names)}")

        sequences = [re.sub(r'\s', '', ''.join(parts)) for parts in chunks]
        for name, seq in zip(names, sequences):
            if len(seq) != n_chars:
                raise ValueError(
                    f"Sequence {name} has length {len(seq)}, expected {n_chars}"
                )

        return cls.from_sequences(names, sequences, seqtype=seqtype)

    @classmethod
    def from_fasta(cls, filepath: Path | str, seqtype: str | None = None) -> "Alignment":
        """
        Parse a FASTA alignment file.

        Examples
        --------
        >>> aln = Alignment.from_fasta("alignment.fasta")
        """
        filepath = Path(filepath)

        names = []
        sequences_raw = []

        with open(filepath, 'r') as f:
            current_name = None
            current_seq = []

            for line in f:
                line = line.strip()

                if not line:
                    continue

                if line.startswith('>'):
                    if current_name is not None:
                        names.append(current_name)
                        sequences_raw.append(''.join(current_seq))

                    current_name = line[1:].strip()
                    current_seq = []
                else:
                    current_seq.append(line)

            if current_name is not None:
                names.append(current_name)
                sequences_raw.append(''.join(current_seq))

        if not names:
            raise ValueError("No sequences found in FASTA file")

        return cls.from_sequences(names, sequences_raw, seqtype=seqtype)

    @classmethod
    def from_file(cls, filepath: Path | str, seqtype: str | None = None) -> "Alignment":
        """Read a FASTA or PHYLIP file, choosing the parser from the first character."""
        with open(filepath, 'r') as f:
            first = f.read(1)
        if first == '>':
            return cls.from_fasta(filepath, seqtype=seqtype)
        return cls.from_phylip(filepath, seqtype=seqtype)

    @staticmethod
    def _encode_nucleotides(sequences: list[str]) -> np.ndarray:
        """Encode DNA sequences (A=0, C=1, G=2, T=3, IUPAC codes 4-14)."""
        encoded = np.full((len(sequences), len(sequences[0])), UNKNOWN_CODE, dtype=np.int8)

        for i, seq in enumerate(sequences):
            for j, nucleotide in enumerate(seq):
                if nucleotide in NT_TO_INDEX:
                    encoded[i, j] = NT_TO_INDEX[nucleotide]
                elif nucleotide in GAP_CHARACTERS:
                    encoded[i, j] = GAP_CODE

        return encoded

    @staticmethod
    def _encode_amino_acids(sequences: list[str]) -> np.ndarray:
        """Encode amino acid sequences (PAML order, X=20)."""
        encoded = np.full((len(sequences), len(sequences[0])), UNKNOWN_CODE, dtype=np.int8)

        for i, seq in enumerate(sequences):
            for j, aa in enumerate(seq):
                if aa in AA_TO_INDEX:
                    encoded[i, j] = AA_TO_INDEX[aa]
                elif aa in GAP_CHARACTERS:
                    encoded[i, j] = GAP_CODE

        return encoded

    def nb_sequences(self) -> int:
        return self.n_species

    def length(self) -> int:
        return self.n_sites

    def alphabet(self) -> str:
        return self.seqtype

    def alphabet_characters(self) -> str:
        """Plain and ambiguity characters of the alignment alphabet."""
        if self.seqtype == NUCLEOTIDE:
            return NT_CHARACTERS
        if self.seqtype == AMINO_ACID:
            return AMINO_ACIDS + 'X'
        return ''

    def decode(self, i: int) -> str:
        """Return sequence ``i`` as a string."""
        table = INDEX_TO_NT if self.seqtype == NUCLEOTIDE else INDEX_TO_AA
        chars = []
        for code in self.sequences[i]:
            if code == GAP_CODE:
                chars.append('-')
            elif code == UNKNOWN_CODE:
                chars.append('?')
            else:
                chars.append(table[int(code)])
        return ''.join(chars)

    def get_sequence_char_by_id(self, i: int) -> str:
        if not 0 <= i < self.n_species:
            raise IndexError(f"No sequence with index {i}")
        return self.decode(i)

    def get_sequence_id_by_name(self, name: str) -> int:
        """Index of the sequence called ``name``, or -1."""
        try:
            return self.names.index(name)
        except ValueError:
            return -1

    def iterate_char(self, fn: Callable[[str, str], None]) -> None:
        """Call ``fn(name, sequence)`` for every sequence in order."""
        for i, name in enumerate(self.names):
            fn(name, self.decode(i))

    def sub_alignment(self, start: int, length: int) -> "Alignment":
        """Columns ``start`` to ``start + length`` (exclusive) as a new alignment."""
        if start < 0 or length <= 0 or start + length > self.n_sites:
            raise ValueError(
                f"Window [{start}, {start + length}) is outside the alignment "
                f"(length {self.n_sites})"
            )
        return Alignment(
            names=list(self.names),
            sequences=self.sequences[:, start:start + length].copy(),
            n_species=self.n_species,
            n_sites=length,
            seqtype=self.seqtype,
        )

    def to_fasta(self, filepath: Path | str) -> None:
        """Write alignment to FASTA format file."""
        filepath = Path(filepath)

        with open(filepath, 'w') as f:
            for i, name in enumerate(self.names):
                f.write(f">{name}\n")
                seq = self.decode(i)
                for k in range(0, len(seq), 60):
                    f.write(seq[k:k + 60] + '\n')
