"""SimPlot command implementation."""

import sys
from pathlib import Path
from typing import Optional

from phylodist.cli.commands.distance import _load
from phylodist.distance.simplot import simplot_distances


def run_simplot(
    alignment: Path,
    refseq: str,
    model: str,
    window_size: int,
    window_step: int,
    group: bool,
    split_sep: str,
    split_field: int,
    output: Optional[Path],
):
    """Write sliding-window distances to the reference as a TSV table."""
    aln = _load(alignment)

    try:
        windows = simplot_distances(
            aln, refseq, model, window_size, window_step,
            group=group, split_sep=split_sep, split_field=split_field,
        )
    except Exception as e:
        print("Error: SimPlot computation failed", file=sys.stderr)
        print(f"Details: {e}", file=sys.stderr)
        sys.exit(1)

    lines = ["start\tend\tref\tcompseq\tdist"]
    for w in windows:
        lines.append(f"{w.start}\t{w.end}\t{refseq}\t{w.name}\t{w.distance}")
    output_text = '\n'.join(lines) + '\n'

    if output:
        with open(output, 'w') as f:
            f.write(output_text)
    else:
        sys.stdout.write(output_text)
