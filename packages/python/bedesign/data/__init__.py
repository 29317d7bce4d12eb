"""
bedesign Data Module

Dataset access for the design comparison:
- Registry of packaged bioequivalence studies (parallel and crossover)
- CSV loading for user-supplied studies
- Formulation label derivation from whatever columns a dataset carries
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

import pandas as pd

from ..errors import DatasetNotFoundError, FormulationError
from .studies import (
    CROSSOVER_STUDY,
    PARALLEL_STUDY,
    StudySpec,
    simulate_crossover_study,
    simulate_parallel_study,
    simulate_study,
)

logger = logging.getLogger(__name__)

_REGISTRY: Dict[str, StudySpec] = {}


def register_dataset(spec: StudySpec) -> None:
    """
    Register a study recipe under ``spec.name``.

    Example:
        >>> register_dataset(StudySpec(name="my/pilot", ...))
        >>> df = load_dataset("my/pilot")
    """
    _REGISTRY[spec.name] = spec


for _spec in (PARALLEL_STUDY, CROSSOVER_STUDY):
    register_dataset(_spec)


def available_datasets() -> List[str]:
    """Names of all registered datasets, in registration order."""
    return list(_REGISTRY)


def find_dataset(substr: str) -> Optional[str]:
    """
    First registered dataset name containing ``substr``.

    Args:
        substr: Substring to look for (e.g. "FSL2015_5")

    Returns:
        Full dataset name, or None when nothing matches

    Example:
        >>> find_dataset("SLF2014_5")
        'bioequivalence/2x2/SLF2014_5'
    """
    for name in _REGISTRY:
        if substr in name:
            return name
    return None


def get_dataset_spec(name: str) -> StudySpec:
    """Recipe of a registered dataset."""
    try:
        return _REGISTRY[name]
    except KeyError:
        raise DatasetNotFoundError(
            f"Dataset not found: {name!r}. Available: {', '.join(_REGISTRY)}"
        ) from None


def load_dataset(name: str, seed: Optional[int] = None) -> pd.DataFrame:
    """
    Load a registered dataset as a DataFrame.

    Args:
        name: Full registered name (see find_dataset)
        seed: Optional seed overriding the packaged one

    Returns:
        DataFrame with subject identifier, design columns and endpoints

    Raises:
        DatasetNotFoundError: No dataset is registered under ``name``
    """
    spec = get_dataset_spec(name)
    df = simulate_study(spec, seed=seed)
    logger.info("Loaded dataset %s (%d rows)", name, len(df))
    return df


def load_csv(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load a study from CSV.

    The file should carry an ``id`` column, a formulation source (see
    ensure_formulation) and numeric endpoint columns such as AUC and Cmax.
    """
    path = Path(path)
    df = pd.read_csv(path)
    logger.info("Loaded %s (%d rows, columns: %s)", path, len(df), list(df.columns))
    return df


def has_col(df: pd.DataFrame, col: str) -> bool:
    return col in df.columns


def n_subjects(df: pd.DataFrame) -> Optional[int]:
    """Number of unique subjects, or None without an ``id`` column."""
    if not has_col(df, "id"):
        return None
    return int(df["id"].nunique())


# ============================================================================
# Formulation Derivation
# ============================================================================


def _from_column(column: str) -> Callable[[pd.DataFrame], Optional[pd.Series]]:
    def strategy(df: pd.DataFrame) -> Optional[pd.Series]:
        if not has_col(df, column):
            return None
        return df[column].astype(str)
    strategy.__name__ = f"column:{column}"
    return strategy


def _from_sequence_period(df: pd.DataFrame) -> Optional[pd.Series]:
    if not (has_col(df, "sequence") and has_col(df, "period")):
        return None

    def letter(seq, period) -> str:
        s = str(seq)
        p = int(period)
        return s[p - 1] if 1 <= p <= len(s) else "?"

    labels = [letter(s, p) for s, p in zip(df["sequence"], df["period"])]
    return pd.Series(labels, index=df.index, dtype=object)


_from_sequence_period.__name__ = "sequence[period]"

# Tried in order; the first strategy that applies wins
FORMULATION_STRATEGIES: Tuple[Callable[[pd.DataFrame], Optional[pd.Series]], ...] = (
    _from_column("formulation"),
    _from_column("treatment"),
    _from_column("trt"),
    _from_sequence_period,
)


def ensure_formulation(df: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy of ``df`` with a string ``formulation`` column.

    Sources, in priority order:
    - existing ``formulation`` column
    - ``treatment`` column
    - ``trt`` column
    - crossover ``sequence`` + ``period``: the period-th letter of the
      sequence ("?" when the period is outside the sequence)

    Args:
        df: Study data

    Returns:
        New DataFrame with ``formulation``

    Raises:
        FormulationError: None of the sources is present

    Example:
        >>> df = pd.DataFrame({"id": [1, 1], "sequence": ["RT", "RT"], "period": [1, 2]})
        >>> ensure_formulation(df)["formulation"].tolist()
        ['R', 'T']
    """
    for strategy in FORMULATION_STRATEGIES:
        labels = strategy(df)
        if labels is not None:
            out = df.copy()
            out["formulation"] = labels
            logger.debug("Formulation derived from %s", strategy.__name__)
            return out
    raise FormulationError(f"Could not infer formulation. Columns: {list(df.columns)}")


__all__ = [
    "StudySpec",
    "PARALLEL_STUDY",
    "CROSSOVER_STUDY",
    "simulate_parallel_study",
    "simulate_crossover_study",
    "simulate_study",
    "register_dataset",
    "available_datasets",
    "find_dataset",
    "get_dataset_spec",
    "load_dataset",
    "load_csv",
    "has_col",
    "n_subjects",
    "FORMULATION_STRATEGIES",
    "ensure_formulation",
]
