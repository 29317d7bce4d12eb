"""
Descriptive statistics of exposure endpoints by formulation.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..errors import EndpointNotFoundError, FormulationError

SUMMARY_COLUMNS = ["formulation", "n", "mean", "median", "sd", "cv_pct"]


def _clean(values: Union[Sequence[float], np.ndarray, pd.Series]) -> np.ndarray:
    x = pd.to_numeric(pd.Series(values), errors="coerce").to_numpy(dtype=float)
    return x[~np.isnan(x)]


def cv_percent(values: Union[Sequence[float], np.ndarray, pd.Series]) -> float:
    """
    Coefficient of variation in percent: 100 * sd / mean.

    Missing values are skipped. Returns NaN when the mean is zero or fewer
    than two values remain.

    Example:
        >>> round(cv_percent([90, 100, 110]), 2)
        10.0
    """
    x = _clean(values)
    if len(x) < 2:
        return math.nan
    mean = float(np.mean(x))
    if mean == 0:
        return math.nan
    return 100.0 * float(np.std(x, ddof=1)) / mean


def summarize_endpoint(df: pd.DataFrame, endpoint: str) -> pd.DataFrame:
    """
    n, mean, median, SD and CV% of an endpoint per formulation.

    Args:
        df: Study data with a ``formulation`` column
        endpoint: Endpoint column (e.g. "AUC", "Cmax")

    Returns:
        DataFrame with columns formulation, n, mean, median, sd, cv_pct,
        sorted by formulation

    Raises:
        EndpointNotFoundError: ``endpoint`` is not a column of ``df``
        FormulationError: ``df`` has no ``formulation`` column
    """
    if endpoint not in df.columns:
        raise EndpointNotFoundError(f"Endpoint {endpoint} not found.")
    if "formulation" not in df.columns:
        raise FormulationError(f"Column 'formulation' missing. Columns: {list(df.columns)}")

    rows = []
    for label, values in df.groupby("formulation", sort=True)[endpoint]:
        x = _clean(values)
        rows.append({
            "formulation": str(label),
            "n": int(len(x)),
            "mean": float(np.mean(x)) if len(x) else math.nan,
            "median": float(np.median(x)) if len(x) else math.nan,
            "sd": float(np.std(x, ddof=1)) if len(x) > 1 else math.nan,
            "cv_pct": cv_percent(x),
        })
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def reference_cv(summary: pd.DataFrame, reference: str = "R") -> Optional[float]:
    """
    CV% of the reference row of a summary table.

    Returns None unless exactly one row matches and its CV is finite.
    """
    if "formulation" not in summary.columns or "cv_pct" not in summary.columns:
        return None
    rows = summary[summary["formulation"] == reference]
    if len(rows) != 1:
        return None
    cv = float(rows["cv_pct"].iloc[0])
    return cv if math.isfinite(cv) else None
