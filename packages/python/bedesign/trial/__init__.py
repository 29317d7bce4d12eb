"""
bedesign Trial Module

Study designs and planning power for bioequivalence studies:
- Design types (parallel, 2x2 crossover)
- Simulation-based ABE power
- Sample size search for a target power

Example:
    >>> from bedesign import trial
    >>>
    >>> p = trial.estimate_power(n=24, cv_pct=25.0, design="crossover", rng=42)
    >>> res = trial.find_sample_size(0.80, cv_pct=25.0, design="crossover", rng=42)
    >>> print(res.describe())
"""

from .designs import (
    BE_LIMITS,
    Design,
    coerce_design,
    get_design_description,
)

from .power import (
    SimulationParameters,
    PowerResult,
    SampleSizeResult,
    logvar_from_cv,
    planning_se,
    critical_value,
    make_rng,
    simulate_power,
    estimate_power,
    find_sample_size,
)

__all__ = [
    # Designs
    "BE_LIMITS",
    "Design",
    "coerce_design",
    "get_design_description",
    # Power
    "SimulationParameters",
    "PowerResult",
    "SampleSizeResult",
    "logvar_from_cv",
    "planning_se",
    "critical_value",
    "make_rng",
    "simulate_power",
    "estimate_power",
    "find_sample_size",
]
