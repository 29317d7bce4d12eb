"""
Packaged bioequivalence studies.

The two course datasets are regenerated from fixed seeds so that every run
sees identical data without a network download:

- FSL2015_5: parallel design, one formulation per subject
- SLF2014_5: 2x2 crossover (sequences RT/TR), formulation implied by
  sequence and period

Exposure (AUC, Cmax) is log-normal. Crossover data carry a subject random
effect shared by both periods, so within-subject variability is what drives
the T/R comparison.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from ..trial.designs import Design


@dataclass(frozen=True)
class StudySpec:
    """
    Generation recipe of a packaged study.

    Attributes:
        name: Registry name
        design: Study design
        n_subjects: Number of subjects (split evenly between arms/sequences)
        gmr_auc: True test/reference ratio for AUC
        gmr_cmax: True test/reference ratio for Cmax
        cv_auc: Residual CV (%) of AUC; within-subject for crossover
        cv_cmax: Residual CV (%) of Cmax
        between_cv: Between-subject CV (%), crossover only
        ref_auc: Reference geometric mean AUC
        ref_cmax: Reference geometric mean Cmax
        period_effect: Multiplicative period 2 effect, crossover only
        seed: Random seed
        description: Short description for reports
    """
    name: str
    design: Design
    n_subjects: int
    gmr_auc: float
    gmr_cmax: float
    cv_auc: float
    cv_cmax: float
    ref_auc: float
    ref_cmax: float
    seed: int
    between_cv: float = 0.0
    period_effect: float = 1.0
    description: str = ""


def _sd_from_cv(cv_pct: float) -> float:
    return math.sqrt(math.log((cv_pct / 100.0) ** 2 + 1.0))


def simulate_parallel_study(spec: StudySpec, seed: Optional[int] = None) -> pd.DataFrame:
    """
    Simulate a parallel study with columns id, formulation, AUC, Cmax.

    Args:
        spec: Study recipe
        seed: Overrides ``spec.seed`` when given

    Returns:
        One row per subject.
    """
    rng = np.random.default_rng(spec.seed if seed is None else seed)
    n = spec.n_subjects

    n_test = n // 2
    formulation = np.array(["T"] * n_test + ["R"] * (n - n_test))
    rng.shuffle(formulation)
    is_test = formulation == "T"

    log_auc = (math.log(spec.ref_auc) + is_test * math.log(spec.gmr_auc)
               + rng.normal(0.0, _sd_from_cv(spec.cv_auc), n))
    log_cmax = (math.log(spec.ref_cmax) + is_test * math.log(spec.gmr_cmax)
                + rng.normal(0.0, _sd_from_cv(spec.cv_cmax), n))

    return pd.DataFrame({
        "id": np.arange(1, n + 1),
        "formulation": formulation,
        "AUC": np.round(np.exp(log_auc), 3),
        "Cmax": np.round(np.exp(log_cmax), 3),
    })


def simulate_crossover_study(spec: StudySpec, seed: Optional[int] = None) -> pd.DataFrame:
    """
    Simulate a 2x2 crossover with columns id, sequence, period, AUC, Cmax.

    There is no formulation column: it is implied by the
    period-th letter of the sequence.

    Args:
        spec: Study recipe
        seed: Overrides ``spec.seed`` when given

    Returns:
        Two rows per subject (periods 1 and 2), sorted by id and period.
    """
    rng = np.random.default_rng(spec.seed if seed is None else seed)
    n = spec.n_subjects

    n_rt = n // 2
    sequences = np.array(["RT"] * n_rt + ["TR"] * (n - n_rt))
    rng.shuffle(sequences)

    sd_between = _sd_from_cv(spec.between_cv)
    subject_auc = rng.normal(0.0, sd_between, n)
    subject_cmax = rng.normal(0.0, sd_between, n)

    rows = []
    for i in range(n):
        for period in (1, 2):
            is_test = sequences[i][period - 1] == "T"
            shift = math.log(spec.period_effect) if period == 2 else 0.0
            log_auc = (math.log(spec.ref_auc) + subject_auc[i] + shift
                       + is_test * math.log(spec.gmr_auc)
                       + rng.normal(0.0, _sd_from_cv(spec.cv_auc)))
            log_cmax = (math.log(spec.ref_cmax) + subject_cmax[i] + shift
                        + is_test * math.log(spec.gmr_cmax)
                        + rng.normal(0.0, _sd_from_cv(spec.cv_cmax)))
            rows.append({
                "id": i + 1,
                "sequence": sequences[i],
                "period": period,
                "AUC": round(math.exp(log_auc), 3),
                "Cmax": round(math.exp(log_cmax), 3),
            })

    return pd.DataFrame(rows)


PARALLEL_STUDY = StudySpec(
    name="bioequivalence/parallel/FSL2015_5",
    design=Design.PARALLEL,
    n_subjects=60,
    gmr_auc=1.09,
    gmr_cmax=1.05,
    cv_auc=6.0,
    cv_cmax=9.0,
    ref_auc=1250.0,
    ref_cmax=88.0,
    seed=2015,
    description="Parallel design, 60 subjects, one formulation each",
)

CROSSOVER_STUDY = StudySpec(
    name="bioequivalence/2x2/SLF2014_5",
    design=Design.CROSSOVER,
    n_subjects=18,
    gmr_auc=0.92,
    gmr_cmax=0.88,
    cv_auc=51.0,
    cv_cmax=58.0,
    between_cv=35.0,
    period_effect=1.03,
    ref_auc=940.0,
    ref_cmax=71.0,
    seed=2014,
    description="2x2 crossover (RT/TR), 18 subjects, highly variable",
)


def simulate_study(spec: StudySpec, seed: Optional[int] = None) -> pd.DataFrame:
    """Dispatch to the simulator matching the study design."""
    if spec.design is Design.CROSSOVER:
        return simulate_crossover_study(spec, seed=seed)
    return simulate_parallel_study(spec, seed=seed)
