"""
Concurrent all-pairs distance matrix computation.

A single producer thread enumerates sequence pairs onto a bounded queue;
a pool of worker threads computes one distance per job and writes it into
the two symmetric cells of the matrix. Distances the model could not
estimate (negative, nan, infinite or above the model ceiling) are repaired
once every worker is done: they become twice the largest valid distance.
"""

import queue
import threading
import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import numpy as np

from ..core.sites import resolve_weights
from .base import DistModel
from ..io.sequences import Alignment

JOB_QUEUE_SIZE = 100


@dataclass(frozen=True)
class PairJob:
    """One pair of sequences to compare."""

    i: int
    j: int


@dataclass
class RepairLedger:
    """
    Lock-guarded record of uncomputable cells and of the largest valid distance.

    Attributes
    ----------
    ceiling : float
        Distances above this value are uncomputable
    max_distance : float
        Largest valid distance recorded so far
    uncomputable : list of (int, int)
        Cells to repair
    """

    ceiling: float
    max_distance: float = 0.0
    uncomputable: list = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, i: int, j: int, dist: float) -> None:
        valid = np.isfinite(dist) and 0 <= dist <= self.ceiling
        with self._lock:
            if valid:
                if dist > self.max_distance:
                    self.max_distance = dist
            else:
                self.uncomputable.append((i, j))

    def repair(self, matrix: np.ndarray) -> int:
        """Set every uncomputable cell to ``2 * max_distance``; return how many."""
        with self._lock:
            value = 2.0 * self.max_distance
            for i, j in self.uncomputable:
                matrix[i, j] = matrix[j, i] = value
            return len(self.uncomputable)


class _FirstError:
    """Keeps the first exception raised by any worker."""

    def __init__(self):
        self._lock = threading.Lock()
        self.error = None
        self.stop = threading.Event()

    def set(self, error: BaseException) -> None:
        with self._lock:
            if self.error is None:
                self.error = error
        self.stop.set()


def _check_range(rng: tuple[int, int] | None, n: int, label: str) -> tuple[int, int]:
    if rng is None:
        return 0, n - 1
    lo, hi = rng
    if not (0 <= lo <= hi < n):
        raise ValueError(
            f"Invalid {label} ({lo}, {hi}) for an alignment of {n} sequences"
        )
    return lo, hi


def iter_pairs(
    n: int,
    range1: tuple[int, int] | None = None,
    range2: tuple[int, int] | None = None,
):
    """
    Yield the jobs of every pair ``i < j`` to compute.

    With ranges (inclusive ``(first, last)`` sequence indices), only pairs
    with one sequence in each range are yielded.
    """
    lo1, hi1 = _check_range(range1, n, "range1")
    lo2, hi2 = _check_range(range2, n, "range2")
    restricted = range1 is not None or range2 is not None

    for i in range(n):
        for j in range(i + 1, n):
            if restricted:
                cross = (lo1 <= i <= hi1 and lo2 <= j <= hi2) or (
                    lo1 <= j <= hi1 and lo2 <= i <= hi2
                )
                if not cross:
                    continue
            yield PairJob(i, j)


def dist_matrix(
    alignment: Alignment,
    weights: np.ndarray | None,
    model: DistModel,
    range1: tuple[int, int] | None = None,
    range2: tuple[int, int] | None = None,
    gamma: bool = False,
    alpha: float = 0.0,
    cpus: int = 1,
) -> np.ndarray:
    """
    Pairwise distance matrix of an alignment.

    Parameters
    ----------
    alignment : Alignment
        Encoded alignment
    weights : ndarray or None
        Per-site weights (None means 1.0 everywhere)
    model : DistModel
        Distance model; initialized here on ``alignment``
    range1, range2 : tuple of int, optional
        Inclusive ``(first, last)`` sequence index ranges. When given, only
        cells between the two ranges are computed; the others stay 0.
    gamma : bool
        Gamma correction of analytic distances
    alpha : float
        Gamma shape parameter (> 0 when ``gamma``)
    cpus : int
        Number of worker threads

    Returns
    -------
    ndarray, shape (n, n)
        Symmetric matrix with a zero diagonal. The result does not depend on
        ``cpus``.

    Raises
    ------
    ValueError
        On configuration errors (alphabet, weights, alpha, ranges, cpus),
        before any distance is computed, or when a pair cannot be compared
        at all

    Examples
    --------
    >>> from phylodist.distance.dna import model
    >>> aln = Alignment.from_sequences(["a", "b"], ["ACGT", "ATGT"])
    >>> d = dist_matrix(aln, None, model("pdist"))
    >>> float(d[0, 1])
    0.25
    """
    if cpus < 1:
        raise ValueError(f"Number of threads must be at least 1, got {cpus}")
    n = alignment.n_species
    if weights is not None:
        weights = resolve_weights(weights, alignment.n_sites)
    _check_range(range1, n, "range1")
    _check_range(range2, n, "range2")
    model.init_model(alignment, weights, gamma, alpha)

    matrix = np.zeros((n, n))
    ledger = RepairLedger(ceiling=model.ceiling)
    failure = _FirstError()
    jobs = queue.Queue(maxsize=JOB_QUEUE_SIZE)
    sequences = alignment.sequences

    def produce():
        for job in iter_pairs(n, range1, range2):
            if failure.stop.is_set():
                break
            jobs.put(job)
        for _ in range(cpus):
            jobs.put(None)

    def work():
        while True:
            job = jobs.get()
            if job is None:
                return
            if failure.stop.is_set():
                continue
            try:
                dist = model.distance(sequences[job.i], sequences[job.j], weights)
            except Exception as e:
                failure.set(e)
                continue
            matrix[job.i, job.j] = matrix[job.j, job.i] = dist
            ledger.record(job.i, job.j, dist)

    producer = threading.Thread(target=produce, name="phylodist-pairs", daemon=True)
    producer.start()
    with ThreadPoolExecutor(max_workers=cpus, thread_name_prefix="phylodist") as pool:
        futures = [pool.submit(work) for _ in range(cpus)]
        for future in futures:
            future.result()
    producer.join()

    if failure.error is not None:
        raise failure.error

    repaired = ledger.repair(matrix)
    if repaired:
        warnings.warn(
            f"{repaired} distance(s) could not be estimated and were set to "
            f"{2.0 * ledger.max_distance:.6f} (twice the largest distance)",
            UserWarning,
        )
    return matrix
