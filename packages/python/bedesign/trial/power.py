"""
bedesign Planning Power

Simulation-based power and sample size approximation for average
bioequivalence (ABE):
- Power = P(90% CI of the GMR lies fully within [0.80, 1.25])
  under an assumed CV and true GMR
- Linear search for the smallest even sample size reaching a target power

This is a didactic planning approximation, not a validated regulatory
planning tool.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np
from scipy import stats

from ..errors import InvalidParameterError
from .designs import BE_LIMITS, Design, coerce_design

logger = logging.getLogger(__name__)

RandomSource = Union[None, int, np.random.Generator]

# Draws are generated in fixed-size chunks so memory stays bounded for
# large nsim while the result depends only on (seed, nsim).
_CHUNK_SIZE = 100_000


# ============================================================================
# Parameter and Result Types
# ============================================================================


@dataclass
class SimulationParameters:
    """
    Inputs of one Monte-Carlo power estimate.

    Attributes:
        n: Total sample size (subjects)
        cv_pct: Assumed coefficient of variation (%)
        gmr: True geometric mean ratio (test/reference)
        design: Study design (parallel or crossover)
        alpha: Significance level of each one-sided test (90% CI for 0.05)
        nsim: Number of Monte-Carlo draws

    Example:
        >>> params = SimulationParameters(n=24, cv_pct=25.0, design="crossover")
    """
    n: int
    cv_pct: float
    gmr: float = 1.0
    design: Design = Design.CROSSOVER
    alpha: float = 0.05
    nsim: int = 12000

    def __post_init__(self):
        self.design = coerce_design(self.design)
        _check_positive_int("n", self.n)
        _check_positive_int("nsim", self.nsim)
        if not _is_finite_real(self.cv_pct) or self.cv_pct < 0:
            raise InvalidParameterError(
                f"cv_pct must be a non-negative number, got {self.cv_pct!r}"
            )
        if not _is_finite_real(self.gmr) or self.gmr <= 0:
            raise InvalidParameterError(
                f"gmr must be positive, got {self.gmr!r}"
            )
        if not _is_finite_real(self.alpha) or not 0 < self.alpha < 1:
            raise InvalidParameterError(
                f"alpha must be in (0, 1), got {self.alpha!r}"
            )

    @property
    def degrees_of_freedom(self) -> int:
        # Floor of 1 keeps the t quantile defined for n <= 2
        return max(self.n - 2, 1)


@dataclass
class PowerResult:
    """
    Simulation-based power estimate.

    Attributes:
        power: Fraction of draws whose CI lies within the BE limits
        params: Parameters the estimate was computed from
        se: Planning standard error on the log scale
        df: Degrees of freedom of the t critical value
        t_crit: (1 - alpha) Student-t quantile
        mc_se: Monte-Carlo standard error of the power estimate
        method: Always 'simulation'
    """
    power: float
    params: SimulationParameters
    se: float
    df: int
    t_crit: float
    mc_se: float
    method: str = "simulation"


@dataclass
class SampleSizeResult:
    """
    Sample size search result.

    A search that exhausts its range is a valid outcome: ``n`` and ``power``
    are then None and ``found`` is False.

    Attributes:
        n: Smallest scanned sample size reaching the target (None if not found)
        power: Estimated power at ``n`` (None if not found)
        target_power: Target power
        cv_pct: Assumed CV (%)
        design: Study design
        gmr: True geometric mean ratio
        n_min: First scanned sample size (rounded up to even)
        n_max: Upper bound of the scan
        step: Scan increment
        nsim: Monte-Carlo draws per scanned n
        trace: (n, power) for every scanned sample size, in scan order
    """
    n: Optional[int]
    power: Optional[float]
    target_power: float
    cv_pct: float
    design: Design
    gmr: float
    n_min: int
    n_max: int
    step: int
    nsim: int
    trace: List[Tuple[int, float]] = field(default_factory=list, repr=False)

    @property
    def found(self) -> bool:
        return self.n is not None

    def describe(self) -> str:
        """One-line summary for reports."""
        if self.found:
            return (f"n = {self.n} ({self.design.value}) reaches "
                    f"{self.power:.1%} power (target {self.target_power:.0%})")
        return (f"n not found below max ({self.n_max}) for target "
                f"{self.target_power:.0%} power ({self.design.value}, "
                f"CV {self.cv_pct:.1f}%)")


# ============================================================================
# Validation Helpers
# ============================================================================


def _is_finite_real(x) -> bool:
    return (isinstance(x, numbers.Real) and not isinstance(x, bool)
            and math.isfinite(x))


def _check_positive_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidParameterError(f"{name} must be positive, got {value}")


def make_rng(rng: RandomSource = None) -> np.random.Generator:
    """
    Normalize a random source to a numpy Generator.

    Args:
        rng: None (fresh entropy), an integer seed, or a Generator (used as is)

    Returns:
        numpy.random.Generator
    """
    if isinstance(rng, np.random.Generator):
        return rng
    if rng is None or (isinstance(rng, numbers.Integral) and not isinstance(rng, bool)):
        return np.random.default_rng(rng)
    raise TypeError(f"rng must be None, an int seed or a numpy Generator, got {type(rng).__name__}")


# ============================================================================
# Planning Quantities
# ============================================================================


def logvar_from_cv(cv_pct: float) -> float:
    """
    Log-scale variance of a log-normal variable with the given CV.

    logvar = ln((CV/100)^2 + 1)

    Example:
        >>> round(logvar_from_cv(30.0), 6)
        0.086178
    """
    return math.log((cv_pct / 100.0) ** 2 + 1.0)


def planning_se(n: int, cv_pct: float, design: Union[Design, str] = Design.CROSSOVER) -> float:
    """
    Planning standard error of the log GMR estimate.

    - crossover (within-subject comparison): sqrt(2 * logvar / n)
    - parallel (between-subject comparison): sqrt(4 * logvar / n)
    """
    design = coerce_design(design)
    return math.sqrt(design.variance_multiplier * logvar_from_cv(cv_pct) / n)


def critical_value(n: int, alpha: float = 0.05) -> float:
    """(1 - alpha) quantile of Student-t with max(n - 2, 1) df."""
    return float(stats.t.ppf(1.0 - alpha, max(n - 2, 1)))


def _count_successes(
    rng: np.random.Generator,
    mu: float,
    se: float,
    t_crit: float,
    nsim: int,
) -> int:
    lo = math.log(BE_LIMITS[0])
    hi = math.log(BE_LIMITS[1])
    half_width = t_crit * se

    ok = 0
    remaining = nsim
    while remaining > 0:
        size = min(remaining, _CHUNK_SIZE)
        est = rng.normal(mu, se, size)
        ok += int(np.count_nonzero((est - half_width >= lo) & (est + half_width <= hi)))
        remaining -= size
    return ok


# ============================================================================
# Power Estimation
# ============================================================================


def simulate_power(params: SimulationParameters, rng: RandomSource = None) -> PowerResult:
    """
    Estimate ABE power by Monte-Carlo simulation.

    Each draw samples a log-GMR estimate from Normal(ln(gmr), se) and forms
    the symmetric interval estimate +/- t_crit * se; the draw succeeds when
    the interval lies within [ln(0.80), ln(1.25)].

    Args:
        params: Validated simulation parameters
        rng: Random source (None, int seed or numpy Generator)

    Returns:
        PowerResult

    Example:
        >>> params = SimulationParameters(n=24, cv_pct=20.0)
        >>> result = simulate_power(params, rng=42)
        >>> print(f"Power: {result.power:.1%} (+/- {result.mc_se:.1%})")
    """
    gen = make_rng(rng)

    se = planning_se(params.n, params.cv_pct, params.design)
    df = params.degrees_of_freedom
    t_crit = float(stats.t.ppf(1.0 - params.alpha, df))

    ok = _count_successes(gen, math.log(params.gmr), se, t_crit, params.nsim)
    power = ok / params.nsim
    mc_se = math.sqrt(power * (1.0 - power) / params.nsim)

    logger.debug(
        "power n=%d cv=%.2f gmr=%.3f design=%s nsim=%d -> %.4f",
        params.n, params.cv_pct, params.gmr, params.design.value, params.nsim, power,
    )

    return PowerResult(
        power=power,
        params=params,
        se=se,
        df=df,
        t_crit=t_crit,
        mc_se=mc_se,
    )


def estimate_power(
    n: int,
    cv_pct: float,
    gmr: float = 1.0,
    design: Union[Design, str] = Design.CROSSOVER,
    alpha: float = 0.05,
    nsim: int = 12000,
    rng: RandomSource = None,
) -> float:
    """
    Probability that the 90% CI of the GMR falls within [0.80, 1.25].

    Args:
        n: Total sample size
        cv_pct: Assumed CV (%); within-subject for crossover, total for parallel
        gmr: True geometric mean ratio (default: 1.0)
        design: 'crossover' or 'parallel'
        alpha: Significance level (default: 0.05, i.e. a 90% CI)
        nsim: Number of Monte-Carlo draws
        rng: Random source for reproducibility

    Returns:
        Estimated power in [0, 1]

    Raises:
        InvalidParameterError: n <= 0, cv_pct < 0, gmr <= 0, alpha outside
            (0, 1) or nsim <= 0

    Example:
        >>> p = estimate_power(n=24, cv_pct=25.0, design="crossover", rng=1)
        >>> print(f"Power: {p:.1%}")
    """
    params = SimulationParameters(
        n=n, cv_pct=cv_pct, gmr=gmr, design=design, alpha=alpha, nsim=nsim,
    )
    return simulate_power(params, rng=rng).power


# ============================================================================
# Sample Size Search
# ============================================================================


def find_sample_size(
    target_power: float,
    cv_pct: float,
    design: Union[Design, str] = Design.CROSSOVER,
    gmr: float = 1.0,
    n_min: int = 8,
    n_max: int = 220,
    step: int = 2,
    nsim: int = 8000,
    alpha: float = 0.05,
    rng: RandomSource = None,
) -> SampleSizeResult:
    """
    Smallest even sample size whose estimated power reaches target_power.

    Scans n from n_min (rounded up to even) to n_max in increments of step.
    Exhausting the range is not an error: the result then has ``found``
    False and carries no sample size.

    Args:
        target_power: Target power in (0, 1]
        cv_pct: Assumed CV (%)
        design: 'crossover' or 'parallel'
        gmr: True geometric mean ratio
        n_min: Smallest sample size to try
        n_max: Largest sample size to try
        step: Positive even increment
        nsim: Monte-Carlo draws per scanned n
        alpha: Significance level
        rng: Random source; one generator is consumed across the whole scan

    Returns:
        SampleSizeResult

    Example:
        >>> res = find_sample_size(0.80, cv_pct=30.0, design="crossover", rng=7)
        >>> print(res.describe())
    """
    design = coerce_design(design)
    if not _is_finite_real(target_power) or not 0 < target_power <= 1:
        raise InvalidParameterError(
            f"target_power must be in (0, 1], got {target_power!r}"
        )
    _check_positive_int("n_min", n_min)
    _check_positive_int("n_max", n_max)
    _check_positive_int("step", step)
    if n_max < n_min:
        raise InvalidParameterError(f"n_max ({n_max}) must be >= n_min ({n_min})")
    if step % 2:
        raise InvalidParameterError(f"step must be even to keep n even, got {step}")

    # Validates cv_pct, gmr, alpha and nsim before any simulation
    SimulationParameters(n=n_max, cv_pct=cv_pct, gmr=gmr, design=design,
                         alpha=alpha, nsim=nsim)

    gen = make_rng(rng)
    n0 = n_min if n_min % 2 == 0 else n_min + 1
    if n0 > n_max:
        raise InvalidParameterError(
            f"no even sample size in [{n_min}, {n_max}] to scan"
        )

    trace: List[Tuple[int, float]] = []
    for n in range(n0, n_max + 1, step):
        params = SimulationParameters(
            n=n, cv_pct=cv_pct, gmr=gmr, design=design, alpha=alpha, nsim=nsim,
        )
        p = simulate_power(params, rng=gen).power
        trace.append((n, p))
        if p >= target_power:
            logger.info("Sample size found: n=%d (power %.3f, %s)", n, p, design.value)
            return SampleSizeResult(
                n=n, power=p, target_power=target_power, cv_pct=cv_pct,
                design=design, gmr=gmr, n_min=n0, n_max=n_max, step=step,
                nsim=nsim, trace=trace,
            )

    logger.info("No sample size in [%d, %d] reaches power %.2f (%s, CV %.1f%%)",
                n0, n_max, target_power, design.value, cv_pct)
    return SampleSizeResult(
        n=None, power=None, target_power=target_power, cv_pct=cv_pct,
        design=design, gmr=gmr, n_min=n0, n_max=n_max, step=step,
        nsim=nsim, trace=trace,
    )
