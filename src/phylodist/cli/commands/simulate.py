"""Simulate command for phylodist CLI."""

import json
from pathlib import Path
from typing import Optional

import typer

from phylodist.models.dna import jc69_model, k2p_model
from phylodist.models.matrices import EMPIRICAL_MODELS
from phylodist.models.protein import protein_model
from phylodist.simulate.substitution import StarSimulator

app = typer.Typer(help="Simulate alignments with known pairwise distances")


def _substitution_model(name: str, kappa: float):
    key = name.lower()
    if key == "jc":
        return jc69_model()
    if key == "k2p":
        return k2p_model(kappa)
    if key.upper() in EMPIRICAL_MODELS:
        return protein_model(key)
    raise ValueError(
        f"Unknown model '{name}'. Valid models are: jc, k2p, "
        f"{', '.join(m.lower() for m in EMPIRICAL_MODELS)}"
    )


@app.command(name="star")
def simulate_star(
    output: Path = typer.Option(
        ...,
        "--output", "-o",
        help="Output FASTA file",
    ),
    length: int = typer.Option(
        ...,
        "--length", "-l",
        help="Number of sites",
        min=1,
    ),
    nseq: int = typer.Option(
        4,
        "--nseq", "-n",
        help="Number of sequences (tips of the star tree)",
        min=2,
    ),
    branch_length: float = typer.Option(
        0.1,
        "--branch-length", "-b",
        help="Length of every branch; two tips are 2x apart",
        min=0.0,
    ),
    model: str = typer.Option(
        "jc",
        "--model", "-m",
        help="Substitution model (jc, k2p or a protein model such as lg)",
    ),
    kappa: float = typer.Option(
        2.0,
        "--kappa",
        help="Transition/transversion ratio (k2p)",
    ),
    alpha: Optional[float] = typer.Option(
        None,
        "--alpha",
        help="Gamma shape of rate heterogeneity (default: equal rates)",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for reproducibility",
    ),
    output_params: bool = typer.Option(
        True,
        "--output-params/--no-output-params",
        help="Write parameters to JSON file",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Suppress progress messages",
    ),
):
    """
    Simulate sequences on a star tree.

    Examples:

        \b
        # 10 DNA sequences, 1000 sites, pairwise distance 0.2
        phylodist simulate star -o sim.fasta -l 1000 -n 10 -b 0.1

        \b
        # Protein sequences under LG with Gamma rates
        phylodist simulate star -o sim.fasta -l 300 -m lg --alpha 0.5 --seed 42
    """
    try:
        substitution = _substitution_model(model, kappa)
        branches = {f"seq{i + 1}": branch_length for i in range(nseq)}
        simulator = StarSimulator(substitution, branches, length, alpha=alpha, seed=seed)
    except ValueError as e:
        typer.echo(f"Error creating simulator: {e}", err=True)
        raise typer.Exit(code=1)

    if not quiet:
        typer.echo("phylodist Sequence Simulator - star tree")
        typer.echo("=" * 50)
        typer.echo(f"  Model: {substitution.name}")
        typer.echo(f"  Sequences: {nseq}")
        typer.echo(f"  Sites: {length}")
        typer.echo(f"  Branch length: {branch_length:.4f}")
        if seed is not None:
            typer.echo(f"  Seed: {seed}")

    alignment = simulator.simulate()
    alignment.to_fasta(output)
    if not quiet:
        typer.echo(f"\nAlignment -> {output}")

    if output_params:
        params_path = output.parent / f"{output.stem}.params.json"
        params = simulator.get_parameters()
        params['seed'] = seed
        with open(params_path, 'w') as f:
            json.dump(params, f, indent=2)
        if not quiet:
            typer.echo(f"Parameters -> {params_path}")
