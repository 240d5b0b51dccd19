"""Distboot command implementation."""

import sys
from pathlib import Path
from typing import Optional

from phylodist import bootstrap_distance_matrices
from phylodist.cli.commands.distance import _load


def run_distboot(
    alignment: Path,
    model: str,
    output: Optional[Path],
    replicates: int,
    kind: str,
    seed: Optional[int],
    threads: int,
    remove_gaps: bool,
    quiet: bool,
):
    """Build bootstrap distance matrices, written one after the other."""
    aln = _load(alignment)

    if not quiet:
        print(f"Bootstrap distance matrices: {model}", file=sys.stderr)
        print("=" * 80, file=sys.stderr)
        print(f"Alignment:  {alignment}", file=sys.stderr)
        print(f"Replicates: {replicates} ({kind} weights)", file=sys.stderr)
        print(file=sys.stderr)

    try:
        results = bootstrap_distance_matrices(
            aln,
            model,
            n_replicates=replicates,
            kind=kind,
            seed=seed,
            cpus=threads,
            remove_gaps=remove_gaps,
        )
    except Exception as e:
        print("Error: Bootstrap distance computation failed", file=sys.stderr)
        print(f"Details: {e}", file=sys.stderr)
        sys.exit(1)

    output_text = ''.join(result.to_text() for result in results)
    if output:
        with open(output, 'w') as f:
            f.write(output_text)
        if not quiet:
            print(f"{len(results)} matrices written to {output}", file=sys.stderr)
    else:
        sys.stdout.write(output_text)
