"""Distance command implementation."""

import sys
from pathlib import Path
from typing import Optional

from phylodist import compute_distance_matrix
from phylodist.io.sequences import Alignment


def _load(alignment: Path) -> Alignment:
    try:
        return Alignment.from_file(alignment)
    except Exception as e:
        print(f"Error: Could not load alignment from {alignment}", file=sys.stderr)
        print(f"Details: {e}", file=sys.stderr)
        sys.exit(1)


def run_distance(
    alignment: Path,
    model: str,
    output: Optional[Path],
    remove_gaps: bool,
    gamma: bool,
    alpha: float,
    threads: int,
    seed: Optional[int],
    weights: Optional[str],
    gap_mode: Optional[int],
    remove_ambiguous: bool,
    global_freq: bool,
    format: str,
    quiet: bool,
):
    """Compute one distance matrix."""
    aln = _load(alignment)

    if not quiet:
        print(f"Distance model: {model}", file=sys.stderr)
        print("=" * 80, file=sys.stderr)
        print(f"Alignment: {alignment} ({aln.n_species} sequences, {aln.n_sites} sites, {aln.seqtype})", file=sys.stderr)
        if weights:
            print(f"Weights:   {weights} (seed {seed})", file=sys.stderr)
        print(file=sys.stderr)

    try:
        result = compute_distance_matrix(
            aln,
            model,
            weights=weights,
            remove_gaps=remove_gaps,
            gamma=gamma,
            alpha=alpha,
            cpus=threads,
            global_freq=global_freq,
            gap_mode=gap_mode,
            remove_ambiguous=remove_ambiguous,
            seed=seed,
        )
    except Exception as e:
        print("Error: Distance computation failed", file=sys.stderr)
        print(f"Details: {e}", file=sys.stderr)
        sys.exit(1)

    if format == "json":
        output_text = result.to_json()
    else:
        output_text = result.to_text()

    if output:
        with open(output, 'w') as f:
            f.write(output_text)
        if not quiet:
            print(f"Distance matrix written to {output}", file=sys.stderr)
    else:
        sys.stdout.write(output_text)
