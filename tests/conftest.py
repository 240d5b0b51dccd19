"""
Pytest configuration and shared fixtures.
"""

import numpy as np
import pytest
from typer.testing import CliRunner

from phylodist.io.sequences import NUCLEOTIDES, Alignment


@pytest.fixture
def cli_runner():
    """CLI test runner for Typer apps."""
    return CliRunner()


@pytest.fixture
def small_dna():
    """Four short nucleotide sequences with a few substitutions."""
    return Alignment.from_sequences(
        ["s1", "s2", "s3", "s4"],
        [
            "ACGTACGTACGTACGTACGT",
            "ACGTACGTACGTACGTACGA",
            "ACTTACGAACGTACCTACGT",
            "GCGTTCGTACGAACGTACTT",
        ],
    )


@pytest.fixture
def small_protein():
    """Three short amino acid sequences."""
    return Alignment.from_sequences(
        ["p1", "p2", "p3"],
        [
            "MKTAYIAKQRQISFVKSHFSRQ",
            "MKTAYIAKQRQISFVKAHFSRQ",
            "MRTAYLAKQRNISFVKSHWSRE",
        ],
    )


@pytest.fixture
def random_dna():
    """50 random nucleotide sequences of 1000 sites."""
    rng = np.random.default_rng(12345)
    names = [f"seq{i}" for i in range(50)]
    seqs = [''.join(rng.choice(list(NUCLEOTIDES), size=1000)) for _ in names]
    return Alignment.from_sequences(names, seqs)


@pytest.fixture
def dna_fasta_file(tmp_path):
    """Temporary FASTA file of a small nucleotide alignment."""
    content = (
        ">ref\nACGTACGTACGTACGTACGTACGTACGTACGTACGTACGT\n"
        ">a_1\nACGTACGTACGTACGTACGTACGTACGTACGTACGTACGA\n"
        ">a_2\nACGTTCGTACGTACGTACGTACCTACGTACGTACGTACGT\n"
        ">b_1\nTCGTACGAACGTACTTACGTACGTACGAACGTACGTTCGT\n"
    )
    path = tmp_path / "dna.fasta"
    path.write_text(content)
    return path


@pytest.fixture
def protein_fasta_file(tmp_path):
    """Temporary FASTA file of a small protein alignment."""
    content = (
        ">p1\nMKTAYIAKQRQISFVKSHFSRQ\n"
        ">p2\nMKTAYIAKQRQISFVKAHFSRQ\n"
        ">p3\nMRTAYLAKQRNISFVKSHWSRE\n"
    )
    path = tmp_path / "prot.fasta"
    path.write_text(content)
    return path
