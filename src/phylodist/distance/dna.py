"""
Nucleotide distance models.

Closed-form corrections (JC69, K2P, F81, F84, TN93), uncorrected
proportions (p-distance, raw counts) and maximum likelihood distances under
any nucleotide substitution model.

All closed-form distances guard against saturation the same way: a
logarithm of a non-positive argument yields nan or a negative value, which
is reported as 0. A logarithm of exactly 0 yields +inf, left for the matrix
driver to repair.
"""

import numpy as np

from ..core.sites import (
    GapMode,
    count_differences,
    count_diffs,
    count_mutations,
    nucleotide_frequencies,
)
from .base import DistModel, clamp_distance, safe_log, safe_pow
from ..io.sequences import N_NT_STATES
from ..models.base import SubstitutionModel
from ..models.dna import (
    f81_model,
    f84_model,
    gtr_model,
    jc69_model,
    k2p_model,
    tn93_model,
)
from ..optimize.branch_length import BranchLengthEstimator


def jc69_correction(p: float, gamma: bool = False, alpha: float = 0.0) -> float:
    """
    Jukes-Cantor correction of a proportion of differences.

    ``d = -3/4 ln(1 - 4p/3)``, or ``3/4 α ((1 - 4p/3)^(-1/α) - 1)`` with gamma.
    """
    b = 1.0 - 4.0 * p / 3.0
    if gamma:
        dist = 0.75 * alpha * (safe_pow(b, -1.0 / alpha) - 1.0)
    else:
        dist = -0.75 * safe_log(b)
    return clamp_distance(dist)


class JCModel(DistModel):
    """Jukes-Cantor (1969) distance."""

    name = "jc"

    def distance(self, seq1, seq2, weights=None):
        self._check_initialized()
        diff, total = count_diffs(seq1, seq2, self.selected_sites, weights)
        p = self._proportion(diff, total)
        return jc69_correction(p, self.gamma, self.alpha)


class K2PModel(DistModel):
    """
    Kimura (1980) two-parameter distance.

    Transitions (S) and transversions (V) are counted on sites where both
    sequences carry a plain base.
    """

    name = "k2p"

    def distance(self, seq1, seq2, weights=None):
        self._check_initialized()
        trs, trv, _, _, total = count_mutations(seq1, seq2, self.selected_sites, weights)
        S = self._proportion(trs, total)
        V = trv / total

        e1 = 1.0 - 2.0 * S - V
        e2 = 1.0 - 2.0 * V
        if self.gamma:
            a = self.alpha
            dist = a * (
                0.5 * safe_pow(e1, -1.0 / a) + 0.25 * safe_pow(e2, -1.0 / a) - 0.75
            )
        else:
            dist = -0.5 * safe_log(e1) - 0.25 * safe_log(e2)
        return clamp_distance(dist)


class PDistModel(DistModel):
    """
    Proportion of differing sites.

    Attributes
    ----------
    gap_mode : GapMode
        How gap-versus-nucleotide comparisons are counted
    remove_ambiguous : bool
        Exclude ambiguous comparisons compatible with the other character
    """

    name = "pdist"

    def __init__(self, remove_gaps: bool = False, remove_ambiguous: bool = False):
        super().__init__(remove_gaps)
        self.gap_mode = GapMode.NONE
        self.remove_ambiguous = remove_ambiguous

    def set_count_gap_mutations(self, mode: int) -> None:
        """
        Set the gap policy: 0 ignores gaps, 1 counts internal gaps, 2 counts all.

        Raises
        ------
        ValueError
            If ``mode`` is not 0, 1 or 2
        """
        try:
            self.gap_mode = GapMode(mode)
        except ValueError:
            raise ValueError(
                f"Gap counting mode must be 0, 1 or 2, got {mode}"
            ) from None

    def _count(self, seq1, seq2, weights):
        self._check_initialized()
        return count_differences(
            seq1,
            seq2,
            self.selected_sites,
            weights,
            gap_mode=self.gap_mode,
            remove_ambiguous=self.remove_ambiguous,
        )

    def distance(self, seq1, seq2, weights=None):
        diff, total = self._count(seq1, seq2, weights)
        return self._proportion(diff, total)


class RawDistModel(PDistModel):
    """Weighted number of differing sites, not divided by the compared length."""

    name = "rawdist"

    def distance(self, seq1, seq2, weights=None):
        diff, _ = self._count(seq1, seq2, weights)
        return diff


class F81Model(DistModel):
    """
    Felsenstein (1981) distance.

    ``d = -b ln(1 - p/b)`` with ``b = 1 - Σ π_i²`` estimated on the
    selected sites.
    """

    name = "f81"

    def __init__(self, remove_gaps: bool = False):
        super().__init__(remove_gaps)
        self.pi = None
        self.b1 = 0.0

    def _init_parameters(self, alignment, weights):
        self.pi = nucleotide_frequencies(alignment.sequences, self.selected_sites, weights)
        self.b1 = 1.0 - float(np.sum(self.pi ** 2))

    def distance(self, seq1, seq2, weights=None):
        self._check_initialized()
        diff, total = count_diffs(seq1, seq2, self.selected_sites, weights)
        p = self._proportion(diff, total)

        with np.errstate(divide='ignore', invalid='ignore'):
            ratio = 1.0 - np.float64(p) / self.b1
        if self.gamma:
            dist = self.b1 * self.alpha * (safe_pow(ratio, -1.0 / self.alpha) - 1.0)
        else:
            dist = -self.b1 * safe_log(ratio)
        return clamp_distance(dist)


class F84Model(DistModel):
    """
    Felsenstein (1984) distance.

    Uses the frequency constants

    - ``a = πA πG / πR + πC πT / πY``
    - ``b = πA πG + πC πT``
    - ``c = πR πY``
    """

    name = "f84"

    def __init__(self, remove_gaps: bool = False):
        super().__init__(remove_gaps)
        self.pi = None
        self.a = self.b = self.c = 0.0

    def _init_parameters(self, alignment, weights):
        pi = nucleotide_frequencies(alignment.sequences, self.selected_sites, weights)
        pa, pc, pg, pt = pi
        pi_r = pa + pg
        pi_y = pc + pt
        if pi_r <= 0 or pi_y <= 0:
            raise ValueError("F84 distance needs both purines and pyrimidines in the alignment")
        self.pi = pi
        self.a = pa * pg / pi_r + pc * pt / pi_y
        self.b = pa * pg + pc * pt
        self.c = pi_r * pi_y

    def distance(self, seq1, seq2, weights=None):
        self._check_initialized()
        trs, trv, _, _, total = count_mutations(seq1, seq2, self.selected_sites, weights)
        S = self._proportion(trs, total)
        V = trv / total
        a, b, c = self.a, self.b, self.c

        e1 = 1.0 - S / (2.0 * a) - (a - b) * V / (2.0 * a * c)
        e2 = 1.0 - V / (2.0 * c)
        if self.gamma:
            k = -1.0 / self.alpha
            dist = 2.0 * self.alpha * (
                a * safe_pow(e1, k) + (b + c - a) * safe_pow(e2, k) - b - c
            )
        else:
            dist = -2.0 * a * safe_log(e1) + 2.0 * (a - b - c) * safe_log(e2)
        return clamp_distance(dist)


class TN93Model(DistModel):
    """
    Tamura and Nei (1993) distance.

    Purine (A<->G) and pyrimidine (C<->T) transitions are corrected
    separately from transversions.
    """

    name = "tn93"

    def __init__(self, remove_gaps: bool = False):
        super().__init__(remove_gaps)
        self.pi = None

    def _init_parameters(self, alignment, weights):
        pi = nucleotide_frequencies(alignment.sequences, self.selected_sites, weights)
        if np.any(pi <= 0):
            raise ValueError("TN93 distance needs all four nucleotides in the alignment")
        self.pi = pi

    def _correction(self, e: float) -> float:
        # -ln(e), or its gamma-integrated counterpart
        if self.gamma:
            return self.alpha * (safe_pow(e, -1.0 / self.alpha) - 1.0)
        return -safe_log(e)

    def distance(self, seq1, seq2, weights=None):
        self._check_initialized()
        _, trv, ag, ct, total = count_mutations(seq1, seq2, self.selected_sites, weights)
        V = self._proportion(trv, total)
        P1 = ag / total
        P2 = ct / total

        pa, pc, pg, pt = self.pi
        pi_r = pa + pg
        pi_y = pc + pt
        y = pa * pg / (pa * pg + pc * pt)

        e1 = 1.0 - V / (2.0 * pi_y * pi_r)
        e2 = 1.0 - V / (2.0 * pi_r) - pi_r * P1 / (2.0 * pa * pg)
        e3 = 1.0 - V / (2.0 * pi_y) - pi_y * P2 / (2.0 * pc * pt)

        c1 = self._correction(e1)
        b1 = -pi_y / pi_r * c1 + self._correction(e2) / pi_r
        b2 = -pi_r / pi_y * c1 + self._correction(e3) / pi_y
        b3 = c1

        dist = 2.0 * (pa * pg + pc * pt) * (y * b1 + (1.0 - y) * b2) + 2.0 * pi_r * pi_y * b3
        return clamp_distance(float(dist))


# Substitution model builders for ML distances; frequencies come from the data
_ML_BUILDERS = {
    "jc": lambda pi: jc69_model(),
    "k2p": lambda pi, kappa=1.0: k2p_model(kappa),
    "f81": lambda pi: f81_model(pi),
    "f84": lambda pi, kappa=1.0: f84_model(kappa, pi),
    "tn93": lambda pi, kappa1=1.0, kappa2=1.0: tn93_model(kappa1, kappa2, pi),
    "gtr": lambda pi, rates=None: gtr_model(rates, pi),
}


class MLDistModel(DistModel):
    """
    Maximum likelihood distance under a nucleotide substitution model.

    Parameters
    ----------
    substitution : str or SubstitutionModel
        Either a model name ('jc', 'k2p', 'f81', 'f84', 'tn93', 'gtr'),
        whose base frequencies are then estimated from the alignment, or a
        ready substitution model used as is
    remove_gaps : bool
        Drop sites with a gap or ambiguity in any sequence
    **params
        Model parameters: ``kappa`` (k2p, f84), ``kappa1``/``kappa2`` (tn93),
        ``rates`` (gtr)

    Examples
    --------
    >>> from phylodist.models.dna import UNIFORM_PI, f81_model
    >>> fixed = MLDistModel(f81_model(UNIFORM_PI))
    >>> fixed.name
    'ml-F81'
    """

    def __init__(self, substitution, remove_gaps: bool = False, **params):
        super().__init__(remove_gaps)
        if isinstance(substitution, SubstitutionModel):
            if substitution.n_states != N_NT_STATES:
                raise ValueError(
                    f"Model {substitution.name} has {substitution.n_states} states, "
                    f"expected {N_NT_STATES}"
                )
            self.name = f"ml-{substitution.name}"
            self._builder = None
            self.substitution = substitution
        else:
            key = str(substitution).lower()
            if key not in _ML_BUILDERS:
                raise ValueError(
                    f"Unknown ML nucleotide model '{substitution}'. "
                    f"Available: {', '.join(_ML_BUILDERS)}"
                )
            self.name = f"ml-{key}"
            self._builder = _ML_BUILDERS[key]
            self.substitution = None
        self.params = params
        self.estimator = None

    def _init_parameters(self, alignment, weights):
        if self._builder is not None:
            pi = nucleotide_frequencies(alignment.sequences, self.selected_sites, weights)
            try:
                self.substitution = self._builder(pi, **self.params)
            except TypeError as e:
                raise ValueError(f"Invalid parameters for {self.name}: {e}") from e
        self.estimator = BranchLengthEstimator(
            self.substitution,
            use_gamma=self.gamma,
            alpha=self.alpha if self.gamma else np.inf,
        )

    def distance(self, seq1, seq2, weights=None):
        self._check_initialized()
        diff, total = count_diffs(seq1, seq2, self.selected_sites, weights)
        init = jc69_correction(diff / total) if total > 0 else 0.1
        result = self.estimator.estimate(
            seq1, seq2, init, selected=self.selected_sites, weights=weights
        )
        return result.length


_MODELS = {
    "jc": JCModel,
    "k2p": K2PModel,
    "pdist": PDistModel,
    "rawdist": RawDistModel,
    "f81": F81Model,
    "f84": F84Model,
    "tn93": TN93Model,
}

NT_MODEL_NAMES = tuple(_MODELS) + tuple(f"ml-{name}" for name in _ML_BUILDERS)


def model(
    name: str, remove_gaps: bool = False, remove_ambiguous: bool = False, **params
) -> DistModel:
    """
    Build a nucleotide distance model by name.

    Parameters
    ----------
    name : str
        One of 'jc', 'k2p', 'pdist', 'rawdist', 'f81', 'f84', 'tn93', or an
        ML model 'ml-jc', 'ml-k2p', 'ml-f81', 'ml-f84', 'ml-tn93', 'ml-gtr'
    remove_gaps : bool
        Drop sites with a gap or ambiguity in any sequence
    remove_ambiguous : bool
        pdist/rawdist only: leave out comparisons of an ambiguity code with
        a compatible character instead of counting a fractional difference
    **params
        Parameters of ML models (see :class:`MLDistModel`)

    Raises
    ------
    ValueError
        If the name is unknown, or ``remove_ambiguous`` is set for a model
        other than pdist and rawdist

    Examples
    --------
    >>> model("k2p").name
    'k2p'
    """
    key = name.lower()
    if remove_ambiguous and key not in ("pdist", "rawdist"):
        raise ValueError("Ambiguity removal only applies to pdist and rawdist")
    if key.startswith("ml-"):
        return MLDistModel(key[3:], remove_gaps=remove_gaps, **params)
    if key not in _MODELS:
        raise ValueError(
            f"Unknown nucleotide distance model '{name}'. "
            f"Available: {', '.join(NT_MODEL_NAMES)}"
        )
    if params:
        raise ValueError(f"Model {key} takes no parameters, got {', '.join(params)}")
    if remove_ambiguous:
        return _MODELS[key](remove_gaps, remove_ambiguous)
    return _MODELS[key](remove_gaps)


def is_nucleotide_model(name: str) -> bool:
    return name.lower() in NT_MODEL_NAMES

