"""Main CLI application for phylodist."""

import typer
from pathlib import Path
from typing import Optional
from enum import Enum

from .commands import simulate as simulate_cmd

app = typer.Typer(
    name="phylodist",
    help="Evolutionary distance matrices from sequence alignments",
    no_args_is_help=True,
)

# Add simulate subcommand
app.add_typer(simulate_cmd.app, name="simulate")


class WeightKind(str, Enum):
    """Site weight distribution."""
    DIRICHLET = "dirichlet"
    GAMMA = "gamma"
    BOOTSTRAP = "bootstrap"


class GapMode(str, Enum):
    """How gaps facing nucleotides are counted by pdist/rawdist."""
    NONE = "none"
    INTERNAL = "internal"
    ALL = "all"


GAP_MODE_VALUES = {GapMode.NONE: 0, GapMode.INTERNAL: 1, GapMode.ALL: 2}


class OutputFormat(str, Enum):
    """Output format."""
    MATRIX = "matrix"
    JSON = "json"


@app.command()
def distance(
    alignment: Path = typer.Option(
        ...,
        "--input", "-i",
        help="Alignment file (FASTA or PHYLIP)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    model: str = typer.Option(
        "k2p",
        "--model", "-m",
        help="Distance model: jc, k2p, pdist, rawdist, f81, f84, tn93, ml-* "
             "or a protein model (dayhoff, jtt, mtrev, lg, wag, hivb, ab)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output file (default: stdout)",
    ),
    remove_gaps: bool = typer.Option(
        False,
        "--remove-gaps",
        help="Remove sites with a gap or ambiguity in any sequence",
    ),
    gamma: bool = typer.Option(
        False,
        "--gamma",
        help="Gamma rate heterogeneity correction",
    ),
    alpha: float = typer.Option(
        1.0,
        "--alpha", "-a",
        help="Gamma shape parameter (with --gamma)",
    ),
    threads: int = typer.Option(
        1,
        "--threads", "-t",
        help="Number of worker threads",
        min=1,
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for weights",
    ),
    weights: Optional[WeightKind] = typer.Option(
        None,
        "--weights",
        help="Reweight sites with random weights",
    ),
    gap_mode: Optional[GapMode] = typer.Option(
        None,
        "--gap-mode",
        help="Gap counting for pdist/rawdist",
    ),
    remove_ambiguous: bool = typer.Option(
        False,
        "--remove-ambiguous",
        help="pdist/rawdist: skip ambiguity codes compatible with the other base",
    ),
    global_freq: bool = typer.Option(
        False,
        "--global-freq",
        help="Protein models: use the model's own amino acid frequencies",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.MATRIX,
        "--format",
        help="Output format",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Minimal output",
    ),
):
    """
    Compute a pairwise distance matrix.

    Example:
        phylodist distance -i alignment.fasta -m k2p -o dist.txt
        phylodist distance -i proteins.fasta -m lg --gamma --alpha 0.5 -t 4
    """
    from .commands.distance import run_distance

    run_distance(
        alignment=alignment,
        model=model,
        output=output,
        remove_gaps=remove_gaps,
        gamma=gamma,
        alpha=alpha,
        threads=threads,
        seed=seed,
        weights=weights.value if weights else None,
        gap_mode=GAP_MODE_VALUES[gap_mode] if gap_mode else None,
        remove_ambiguous=remove_ambiguous,
        global_freq=global_freq,
        format=format.value,
        quiet=quiet,
    )


@app.command()
def distboot(
    alignment: Path = typer.Option(
        ...,
        "--input", "-i",
        help="Alignment file (FASTA or PHYLIP)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    model: str = typer.Option(
        "k2p",
        "--model", "-m",
        help="Distance model",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output file (default: stdout)",
    ),
    replicates: int = typer.Option(
        1,
        "--nboot", "-n",
        help="Number of bootstrap replicates",
        min=1,
    ),
    kind: WeightKind = typer.Option(
        WeightKind.BOOTSTRAP,
        "--kind",
        help="Resampling: classical bootstrap or continuous gamma/dirichlet weights",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed", "-s",
        help="Random seed for reproducibility",
    ),
    threads: int = typer.Option(
        1,
        "--threads", "-t",
        help="Number of worker threads",
        min=1,
    ),
    remove_gaps: bool = typer.Option(
        False,
        "--remove-gaps",
        help="Remove sites with a gap or ambiguity in any sequence",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Minimal output",
    ),
):
    """
    Build bootstrap distance matrices.

    Example:
        phylodist distboot -i alignment.fasta -m k2p -n 100 --kind gamma -o mats.txt
    """
    from .commands.distboot import run_distboot

    run_distboot(
        alignment=alignment,
        model=model,
        output=output,
        replicates=replicates,
        kind=kind.value,
        seed=seed,
        threads=threads,
        remove_gaps=remove_gaps,
        quiet=quiet,
    )


@app.command()
def simplot(
    alignment: Path = typer.Option(
        ...,
        "--input", "-i",
        help="Nucleotide alignment file (FASTA or PHYLIP)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    refseq: str = typer.Option(
        ...,
        "--ref-seq", "-r",
        help="Name of the reference sequence",
    ),
    model: str = typer.Option(
        "k2p",
        "--model", "-m",
        help="Nucleotide distance model",
    ),
    window_size: int = typer.Option(
        100,
        "--window-size",
        help="Window size in sites",
        min=1,
    ),
    window_step: int = typer.Option(
        10,
        "--window-step",
        help="Window step in sites",
        min=1,
    ),
    group: bool = typer.Option(
        False,
        "--group",
        help="Average distances over groups taken from sequence names",
    ),
    split_sep: str = typer.Option(
        "_",
        "--sep",
        help="Field separator in sequence names (with --group)",
    ),
    split_field: int = typer.Option(
        0,
        "--field",
        help="Index of the group field in sequence names (with --group)",
        min=0,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output file (default: stdout)",
    ),
):
    """
    Sliding-window distances between a reference and all other sequences.

    Example:
        phylodist simplot -i alignment.fasta -r ref --window-size 200 --window-step 20
    """
    from .commands.simplot import run_simplot

    run_simplot(
        alignment=alignment,
        refseq=refseq,
        model=model,
        window_size=window_size,
        window_step=window_step,
        group=group,
        split_sep=split_sep,
        split_field=split_field,
        output=output,
    )


@app.command()
def weights(
    length: int = typer.Option(
        ...,
        "--length", "-l",
        help="Number of sites",
        min=1,
    ),
    kind: WeightKind = typer.Option(
        WeightKind.DIRICHLET,
        "--kind",
        help="Weight distribution",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for reproducibility",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output file (default: stdout)",
    ),
):
    """
    Generate random site weights, one per line.

    Example:
        phylodist weights -l 1000 --kind gamma --seed 42
    """
    from .commands.weights import run_weights

    run_weights(length=length, kind=kind.value, seed=seed, output=output)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
