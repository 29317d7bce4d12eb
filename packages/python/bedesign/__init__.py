"""
bedesign - Parallel vs Crossover Bioequivalence Design Comparison

Tools for comparing a parallel and a 2x2 crossover bioequivalence study and
for planning the sample size of either design.

Features:
- Planning power:
  - Monte-Carlo probability that the 90% CI of the GMR lies in [0.80, 1.25]
  - Smallest even sample size reaching a target power
- Study data:
  - Packaged parallel (FSL2015_5) and crossover (SLF2014_5) studies
  - CSV loading, formulation labels from formulation/treatment/sequence columns
- Analysis:
  - Descriptive statistics by formulation (mean, median, SD, CV%)
  - Average bioequivalence: GMR, 90% CI, TOST p-values
- Figures (matplotlib PNG or plotly HTML):
  - Endpoint histograms and boxplots, paired crossover plots, power curves
- Project run writing console-style outputs, a questions mapping and a report

Quick Start:
    >>> import bedesign

    >>> # Power of a 24-subject crossover at 25% within-subject CV
    >>> p = bedesign.estimate_power(n=24, cv_pct=25.0, design="crossover", rng=42)

    >>> # Sample size for 80% power in a parallel study
    >>> res = bedesign.find_sample_size(0.80, cv_pct=25.0, design="parallel", rng=42)
    >>> print(res.describe())

    >>> # Full project run into ./outputs, ./docs and ./figures_project1
    >>> result = bedesign.run_project(bedesign.ProjectConfig(root="."))

For more information, see the docstrings for individual functions.
"""

__version__ = "0.1.0"

# Errors
from .errors import (
    BEDesignError,
    InvalidParameterError,
    FormulationError,
    EndpointNotFoundError,
    DatasetNotFoundError,
)

# Planning power
from .trial import (
    BE_LIMITS,
    Design,
    SimulationParameters,
    PowerResult,
    SampleSizeResult,
    simulate_power,
    estimate_power,
    find_sample_size,
)

# Data
from .data import (
    available_datasets,
    find_dataset,
    load_dataset,
    load_csv,
    ensure_formulation,
)

# Analysis
from .nca import (
    summarize_endpoint,
    reference_cv,
    BioequivalenceResult,
    run_bioequivalence,
)

# Configuration, logging and project run
from .config import PowerConfig, ProjectConfig
from .logging_config import setup_logging
from .pipeline import PlanningPower, StudyAnalysis, ProjectResult, run_project


def version() -> str:
    """Package version."""
    return __version__


__all__ = [
    "__version__",
    "version",
    # Errors
    "BEDesignError",
    "InvalidParameterError",
    "FormulationError",
    "EndpointNotFoundError",
    "DatasetNotFoundError",
    # Planning power
    "BE_LIMITS",
    "Design",
    "SimulationParameters",
    "PowerResult",
    "SampleSizeResult",
    "simulate_power",
    "estimate_power",
    "find_sample_size",
    # Data
    "available_datasets",
    "find_dataset",
    "load_dataset",
    "load_csv",
    "ensure_formulation",
    # Analysis
    "summarize_endpoint",
    "reference_cv",
    "BioequivalenceResult",
    "run_bioequivalence",
    # Configuration and project run
    "PowerConfig",
    "ProjectConfig",
    "setup_logging",
    "PlanningPower",
    "StudyAnalysis",
    "ProjectResult",
    "run_project",
]
