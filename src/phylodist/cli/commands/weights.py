"""Weights command implementation."""

import sys
from pathlib import Path
from typing import Optional

from phylodist.resample.weights import build_weights


def run_weights(length: int, kind: str, seed: Optional[int], output: Optional[Path]):
    """Print one site weight per line."""
    try:
        weights = build_weights(kind, length, seed)
    except Exception as e:
        print("Error: Could not build weights", file=sys.stderr)
        print(f"Details: {e}", file=sys.stderr)
        sys.exit(1)

    output_text = ''.join(f"{w}\n" for w in weights)
    if output:
        with open(output, 'w') as f:
            f.write(output_text)
    else:
        sys.stdout.write(output_text)
