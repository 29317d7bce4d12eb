"""
bedesign NCA Module

Analysis of NCA exposure endpoints (AUC, Cmax):
- Descriptive statistics by formulation (mean, median, SD, CV%)
- Average bioequivalence: GMR, 90% CI, TOST, within-subject CV

Example:
    >>> from bedesign import nca
    >>> summary = nca.summarize_endpoint(df, "AUC")
    >>> result = nca.run_bioequivalence(df, "AUC", design="crossover")
    >>> print(f"GMR: {result.gmr:.4f} [{result.ci_lower:.4f}, {result.ci_upper:.4f}]")
"""

from .descriptives import (
    SUMMARY_COLUMNS,
    cv_percent,
    summarize_endpoint,
    reference_cv,
)

from .bioequivalence import (
    LogRatioEstimate,
    BioequivalenceResult,
    geometric_mean,
    geometric_mean_ratio,
    within_subject_cv,
    estimate_log_ratio,
    bioequivalence_90ci,
    tost_analysis,
    be_conclusion,
    run_bioequivalence,
)

__all__ = [
    # Descriptives
    "SUMMARY_COLUMNS",
    "cv_percent",
    "summarize_endpoint",
    "reference_cv",
    # Bioequivalence
    "LogRatioEstimate",
    "BioequivalenceResult",
    "geometric_mean",
    "geometric_mean_ratio",
    "within_subject_cv",
    "estimate_log_ratio",
    "bioequivalence_90ci",
    "tost_analysis",
    "be_conclusion",
    "run_bioequivalence",
]
