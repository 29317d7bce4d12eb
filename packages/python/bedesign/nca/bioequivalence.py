"""
bedesign NCA Bioequivalence - average bioequivalence (ABE) analysis.

This module provides bioequivalence assessment tools including:
- Geometric mean ratio calculation
- 90% confidence interval for parallel and 2x2 crossover designs
- TOST (Two One-Sided Tests) analysis
- Within-subject CV estimation

All computations are on the log scale; the interval is back-transformed
to the ratio scale and compared with the [0.80, 1.25] acceptance limits.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy import stats

from ..errors import EndpointNotFoundError, FormulationError, InvalidParameterError
from ..trial.designs import BE_LIMITS, Design, coerce_design

logger = logging.getLogger(__name__)

_SEQUENCES = ("RT", "TR")


# ============================================================================
# Geometric Mean and Ratio
# ============================================================================


def _log_values(values: Sequence[float], name: str = "values") -> np.ndarray:
    x = np.asarray(values, dtype=float)
    if x.size == 0:
        raise InvalidParameterError(f"{name} must not be empty")
    if not np.all(np.isfinite(x)) or np.any(x <= 0):
        raise InvalidParameterError(f"{name} must be positive and finite for log transformation")
    return np.log(x)


def geometric_mean(values: Sequence[float]) -> float:
    """
    Calculate geometric mean.

    GM = exp(mean(log(values)))

    Example:
        >>> round(geometric_mean([10, 20, 40]), 6)
        20.0
    """
    return float(np.exp(np.mean(_log_values(values))))


def geometric_mean_ratio(
    test_values: Sequence[float],
    reference_values: Sequence[float],
) -> float:
    """
    Calculate geometric mean ratio (GMR) of test to reference.

    GMR = exp(mean(log(test)) - mean(log(reference)))
    """
    t = _log_values(test_values, "test_values")
    r = _log_values(reference_values, "reference_values")
    return float(np.exp(np.mean(t) - np.mean(r)))


def within_subject_cv(
    test_values: Sequence[float],
    reference_values: Sequence[float],
) -> float:
    """
    Estimate within-subject CV (%) from paired crossover data.

    CV_intra = sqrt(exp(MSE) - 1) * 100, MSE = var(log T - log R) / 2
    """
    t = _log_values(test_values, "test_values")
    r = _log_values(reference_values, "reference_values")
    if len(t) != len(r):
        raise InvalidParameterError("test_values and reference_values must be paired")
    if len(t) < 2:
        raise InvalidParameterError("Need at least 2 paired subjects")
    mse = float(np.var(t - r, ddof=1)) / 2.0
    return float(np.sqrt(np.exp(mse) - 1.0) * 100.0)


# ============================================================================
# Log-scale Estimate
# ============================================================================


@dataclass
class LogRatioEstimate:
    """
    Point estimate of log(GMR) with its standard error.

    Attributes:
        pe: log(GMR) point estimate
        se: Standard error of pe
        df: Degrees of freedom
        mse: Residual variance on the log scale
        n_test: Observations contributing for test
        n_reference: Observations contributing for reference
        method: 'crossover_2x2', 'paired' or 'welch'
    """
    pe: float
    se: float
    df: float
    mse: float
    n_test: int
    n_reference: int
    method: str

    @property
    def cv_pct(self) -> float:
        return float(math.sqrt(math.exp(self.mse) - 1.0) * 100.0)


def _crossover_2x2(t: np.ndarray, r: np.ndarray, sequences: Sequence[str]) -> LogRatioEstimate:
    seqs = np.array([str(s) for s in sequences])
    if len(seqs) != len(t):
        raise InvalidParameterError("One sequence per subject is required")
    unknown = sorted(set(seqs) - set(_SEQUENCES))
    if unknown:
        raise InvalidParameterError(f"Unsupported sequences {unknown}; expected RT/TR")

    rt = seqs == "RT"
    # Half period differences (period 2 - period 1); RT gives (T-R)/2, TR gives (R-T)/2
    d = np.where(rt, (t - r) / 2.0, (r - t) / 2.0)
    d_rt, d_tr = d[rt], d[~rt]
    n1, n2 = len(d_rt), len(d_tr)
    df = n1 + n2 - 2
    if n1 == 0 or n2 == 0 or df < 1:
        raise InvalidParameterError(
            f"2x2 analysis needs both sequences and at least 3 subjects (RT={n1}, TR={n2})"
        )

    ss = float(np.sum((d_rt - d_rt.mean()) ** 2) + np.sum((d_tr - d_tr.mean()) ** 2))
    s2 = ss / df
    pe = float(d_rt.mean() - d_tr.mean())
    se = math.sqrt(s2 * (1.0 / n1 + 1.0 / n2))
    return LogRatioEstimate(pe=pe, se=se, df=float(df), mse=2.0 * s2,
                            n_test=n1 + n2, n_reference=n1 + n2, method="crossover_2x2")


def _paired(t: np.ndarray, r: np.ndarray) -> LogRatioEstimate:
    if len(t) != len(r):
        raise InvalidParameterError("Crossover test and reference values must be paired")
    n = len(t)
    if n < 2:
        raise InvalidParameterError("Need at least 2 paired subjects")
    diff = t - r
    var = float(np.var(diff, ddof=1))
    return LogRatioEstimate(pe=float(diff.mean()), se=math.sqrt(var / n), df=float(n - 1),
                            mse=var / 2.0, n_test=n, n_reference=n, method="paired")


def _welch(t: np.ndarray, r: np.ndarray) -> LogRatioEstimate:
    n1, n2 = len(t), len(r)
    if n1 < 2 or n2 < 2:
        raise InvalidParameterError(
            f"Parallel analysis needs at least 2 subjects per formulation (T={n1}, R={n2})"
        )
    var1 = float(np.var(t, ddof=1))
    var2 = float(np.var(r, ddof=1))
    v1, v2 = var1 / n1, var2 / n2
    if v1 + v2 > 0:
        # Satterthwaite
        df = (v1 + v2) ** 2 / (v1 ** 2 / (n1 - 1) + v2 ** 2 / (n2 - 1))
    else:
        df = float(n1 + n2 - 2)
    pooled = ((n1 - 1) * var1 + (n2 - 1) * var2) / (n1 + n2 - 2)
    return LogRatioEstimate(pe=float(t.mean() - r.mean()), se=math.sqrt(v1 + v2), df=float(df),
                            mse=pooled, n_test=n1, n_reference=n2, method="welch")


def estimate_log_ratio(
    test_values: Sequence[float],
    reference_values: Sequence[float],
    design: Union[Design, str] = Design.CROSSOVER,
    sequences: Optional[Sequence[str]] = None,
) -> LogRatioEstimate:
    """
    Estimate log(GMR) and its standard error.

    - crossover with sequences: classical 2x2 analysis; period effects
      cancel by comparing half period differences between sequences
    - crossover without sequences: paired log differences
    - parallel: Welch two-sample comparison of logs

    Args:
        test_values: Test values (paired with reference for crossover)
        reference_values: Reference values
        design: 'crossover' or 'parallel'
        sequences: Per-subject sequence ('RT' or 'TR'), crossover only

    Returns:
        LogRatioEstimate
    """
    design = coerce_design(design)
    t = _log_values(test_values, "test_values")
    r = _log_values(reference_values, "reference_values")
    if design is Design.PARALLEL:
        return _welch(t, r)
    if sequences is not None:
        return _crossover_2x2(t, r, sequences)
    return _paired(t, r)


# ============================================================================
# 90% Confidence Interval
# ============================================================================


def _check_alpha(alpha: float) -> None:
    if not 0 < alpha < 1:
        raise InvalidParameterError(f"alpha must be in (0, 1), got {alpha!r}")


def bioequivalence_90ci(
    test_values: Sequence[float],
    reference_values: Sequence[float],
    design: Union[Design, str] = Design.CROSSOVER,
    sequences: Optional[Sequence[str]] = None,
    alpha: float = 0.05,
) -> Dict[str, float]:
    """
    Calculate the (1 - 2*alpha) confidence interval of the GMR.

    Args:
        test_values: Test formulation values
        reference_values: Reference formulation values
        design: 'crossover' or 'parallel'
        sequences: Per-subject sequences for the 2x2 crossover analysis
        alpha: One-sided significance level (0.05 gives the 90% CI)

    Returns:
        Dict with keys:
        - gmr: Geometric mean ratio
        - ci_lower: Lower bound of the CI
        - ci_upper: Upper bound of the CI
        - cv_pct: Within-subject CV (%) for crossover, total CV (%) for parallel
        - n: Number of subjects
        - df: Degrees of freedom

    Example:
        >>> result = bioequivalence_90ci(test_auc, ref_auc, design="parallel")
        >>> print(f"GMR: {result['gmr']:.4f}")
        >>> print(f"90% CI: ({result['ci_lower']:.4f}, {result['ci_upper']:.4f})")
    """
    _check_alpha(alpha)
    est = estimate_log_ratio(test_values, reference_values, design, sequences)
    t_crit = float(stats.t.ppf(1.0 - alpha, est.df))

    n = est.n_test if est.method != "welch" else est.n_test + est.n_reference
    return {
        "gmr": float(math.exp(est.pe)),
        "ci_lower": float(math.exp(est.pe - t_crit * est.se)),
        "ci_upper": float(math.exp(est.pe + t_crit * est.se)),
        "cv_pct": est.cv_pct,
        "n": int(n),
        "df": float(est.df),
    }


# ============================================================================
# TOST Analysis
# ============================================================================


def _one_sided_p(t_stat: float, df: float, upper_tail: bool) -> float:
    if math.isnan(t_stat):
        return 1.0
    return float(stats.t.sf(t_stat, df) if upper_tail else stats.t.cdf(t_stat, df))


def tost_analysis(
    test_values: Sequence[float],
    reference_values: Sequence[float],
    design: Union[Design, str] = Design.CROSSOVER,
    sequences: Optional[Sequence[str]] = None,
    theta_lower: float = BE_LIMITS[0],
    theta_upper: float = BE_LIMITS[1],
    alpha: float = 0.05,
) -> Dict[str, Any]:
    """
    Perform Two One-Sided Tests (TOST) procedure for bioequivalence.

    Tests:
    - H01: muT/muR <= theta_lower (lower bound)
    - H02: muT/muR >= theta_upper (upper bound)

    BE is concluded if both null hypotheses are rejected.

    Returns:
        Dict with keys t_lower, t_upper, p_lower, p_upper, reject_lower,
        reject_upper and conclusion ("bioequivalent" or "not_bioequivalent")
    """
    _check_alpha(alpha)
    if not 0 < theta_lower < theta_upper:
        raise InvalidParameterError("Require 0 < theta_lower < theta_upper")

    est = estimate_log_ratio(test_values, reference_values, design, sequences)
    with np.errstate(divide="ignore", invalid="ignore"):
        t_lower = float(np.float64(est.pe - math.log(theta_lower)) / est.se)
        t_upper = float(np.float64(est.pe - math.log(theta_upper)) / est.se)

    p_lower = _one_sided_p(t_lower, est.df, upper_tail=True)
    p_upper = _one_sided_p(t_upper, est.df, upper_tail=False)
    reject_lower = p_lower < alpha
    reject_upper = p_upper < alpha

    return {
        "t_lower": t_lower,
        "t_upper": t_upper,
        "p_lower": p_lower,
        "p_upper": p_upper,
        "reject_lower": bool(reject_lower),
        "reject_upper": bool(reject_upper),
        "conclusion": "bioequivalent" if reject_lower and reject_upper else "not_bioequivalent",
    }


def be_conclusion(
    ci_lower: float,
    ci_upper: float,
    theta_lower: float = BE_LIMITS[0],
    theta_upper: float = BE_LIMITS[1],
) -> str:
    """
    Bioequivalence conclusion from a confidence interval.

    Returns:
        "bioequivalent" if the interval lies within the limits,
        "not_bioequivalent" otherwise
    """
    if theta_lower <= ci_lower and ci_upper <= theta_upper:
        return "bioequivalent"
    return "not_bioequivalent"


# ============================================================================
# Complete BE Analysis
# ============================================================================


@dataclass
class BioequivalenceResult:
    """
    Complete bioequivalence analysis result.

    Attributes:
        parameter: Endpoint analyzed (e.g., "AUC", "Cmax")
        design: Study design
        method: Estimation method ('crossover_2x2', 'paired' or 'welch')
        n_test: Number of test observations
        n_reference: Number of reference observations
        gmr: Geometric mean ratio
        ci_lower: Lower bound of 90% CI
        ci_upper: Upper bound of 90% CI
        cv_pct: Within-subject CV (%) for crossover, total CV (%) for parallel
        df: Degrees of freedom
        p_lower: TOST p-value against the lower limit
        p_upper: TOST p-value against the upper limit
        conclusion: BE conclusion
        be_limits: BE acceptance limits used
        alpha: One-sided significance level
    """
    parameter: str
    design: Design
    method: str
    n_test: int
    n_reference: int
    gmr: float
    ci_lower: float
    ci_upper: float
    cv_pct: float
    df: float
    p_lower: float
    p_upper: float
    conclusion: str
    be_limits: Tuple[float, float]
    alpha: float = 0.05

    @property
    def bioequivalent(self) -> bool:
        return self.conclusion == "bioequivalent"

    @property
    def ci_width(self) -> float:
        return self.ci_upper - self.ci_lower


def _paired_by_subject(
    df: pd.DataFrame,
    endpoint: str,
    test_label: str,
    reference_label: str,
) -> Tuple[List[float], List[float], Optional[List[str]]]:
    if "id" not in df.columns:
        raise InvalidParameterError("Crossover analysis requires an 'id' column")

    data = df[["id", "formulation", endpoint]].dropna(subset=[endpoint])
    wide = data.pivot_table(index="id", columns="formulation", values=endpoint, aggfunc="mean")
    if test_label not in wide.columns or reference_label not in wide.columns:
        raise FormulationError(
            f"Could not form {reference_label}/{test_label} pairs. "
            f"Formulations: {sorted(map(str, wide.columns))}"
        )
    wide = wide[[test_label, reference_label]].dropna()

    sequences = None
    if "sequence" in df.columns:
        seq_by_id = df.groupby("id")["sequence"].first().astype(str)
        seqs = seq_by_id.reindex(wide.index).tolist()
        if set(seqs) <= set(_SEQUENCES):
            sequences = seqs
        else:
            logger.warning("Sequences %s are not RT/TR; using paired analysis",
                           sorted(set(seqs)))

    return wide[test_label].tolist(), wide[reference_label].tolist(), sequences


def run_bioequivalence(
    df: pd.DataFrame,
    endpoint: str,
    design: Union[Design, str],
    alpha: float = 0.05,
    be_limits: Tuple[float, float] = BE_LIMITS,
    test_label: str = "T",
    reference_label: str = "R",
) -> BioequivalenceResult:
    """
    Run the standard ABE analysis of one endpoint of a study.

    Args:
        df: Study data with ``formulation`` (and ``id``/``sequence`` for crossover)
        endpoint: Endpoint column (e.g. "AUC")
        design: 'crossover' or 'parallel'
        alpha: One-sided significance level (0.05 gives the 90% CI)
        be_limits: BE acceptance limits
        test_label: Formulation label of the test product
        reference_label: Formulation label of the reference product

    Returns:
        BioequivalenceResult

    Example:
        >>> result = run_bioequivalence(df, "AUC", design="crossover")
        >>> print(f"GMR: {result.gmr:.4f} ({result.ci_lower:.4f}, {result.ci_upper:.4f})")
        >>> print(f"Conclusion: {result.conclusion}")
    """
    design = coerce_design(design)
    if endpoint not in df.columns:
        raise EndpointNotFoundError(f"Endpoint {endpoint} not found.")
    if "formulation" not in df.columns:
        raise FormulationError(f"Column 'formulation' missing. Columns: {list(df.columns)}")

    sequences = None
    if design is Design.CROSSOVER:
        test, ref, sequences = _paired_by_subject(df, endpoint, test_label, reference_label)
    else:
        labels = df["formulation"].astype(str)
        test = df.loc[labels == test_label, endpoint].dropna().tolist()
        ref = df.loc[labels == reference_label, endpoint].dropna().tolist()

    est = estimate_log_ratio(test, ref, design, sequences)
    ci = bioequivalence_90ci(test, ref, design, sequences, alpha=alpha)
    tost = tost_analysis(test, ref, design, sequences,
                         theta_lower=be_limits[0], theta_upper=be_limits[1], alpha=alpha)

    result = BioequivalenceResult(
        parameter=endpoint,
        design=design,
        method=est.method,
        n_test=est.n_test,
        n_reference=est.n_reference,
        gmr=ci["gmr"],
        ci_lower=ci["ci_lower"],
        ci_upper=ci["ci_upper"],
        cv_pct=ci["cv_pct"],
        df=ci["df"],
        p_lower=tost["p_lower"],
        p_upper=tost["p_upper"],
        conclusion=be_conclusion(ci["ci_lower"], ci["ci_upper"], *be_limits),
        be_limits=tuple(be_limits),
        alpha=alpha,
    )
    logger.info("%s %s: GMR %.4f [%.4f, %.4f] -> %s", design.value, endpoint,
                result.gmr, result.ci_lower, result.ci_upper, result.conclusion)
    return result
