"""
bedesign Project Pipeline

Runs the full parallel vs crossover comparison:

1. Load the parallel and crossover studies and derive formulation labels
2. Task 1: descriptive statistics per formulation and endpoint
3. Task 2: standard ABE (GMR, 90% CI, TOST) per endpoint present
4. Task 3: planning power at the observed n and the n reaching the target
   power, from the reference CV of the planning endpoint
5. Figures, the console-style outputs file, the questions mapping and the
   markdown report

Failures of single analyses are written into the outputs and do not stop
the run.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional, TextIO

import numpy as np
import pandas as pd

from .config import ProjectConfig
from .data import ensure_formulation, find_dataset, has_col, load_dataset, n_subjects
from .nca.bioequivalence import BioequivalenceResult, run_bioequivalence
from .nca.descriptives import reference_cv, summarize_endpoint
from .report.blocks import save_block, try_run
from .report.documents import build_questions_md, build_report_md
from .report.sinks import FileSink, OutputSink
from .trial.designs import Design
from .trial.power import SampleSizeResult, SimulationParameters, find_sample_size, simulate_power
from .viz import plot_endpoint_distributions, plot_paired_crossover, plot_power_curve, set_backend

logger = logging.getLogger(__name__)

_LABELS = {Design.PARALLEL: "Parallel", Design.CROSSOVER: "Crossover"}


# ============================================================================
# Result Types
# ============================================================================

@dataclass
class PlanningPower:
    """
    Planning power of one design from its pilot CV.

    Attributes:
        endpoint: Endpoint whose reference CV was used
        design: Study design
        cv_pct: Reference CV (%) from the descriptives
        n: Sample size the power was evaluated at (observed or default)
        approx_power: Simulated power at n
        mc_se: Monte-Carlo standard error of approx_power
        target_power: Target power of the sample size search
        n_for_target: Smallest n reaching target_power, None if not found
        power_at_n_for_target: Simulated power at n_for_target
        search: Full sample size search with its power trace
    """
    endpoint: str
    design: Design
    cv_pct: float
    n: int
    approx_power: float
    mc_se: float
    target_power: float
    n_for_target: Optional[int]
    power_at_n_for_target: Optional[float]
    search: SampleSizeResult = field(repr=False)


@dataclass
class StudyAnalysis:
    """Everything computed for one study."""
    label: str
    design: Design
    dataset_name: Optional[str]
    n_rows: int = 0
    n_subjects: Optional[int] = None
    data: Optional[pd.DataFrame] = field(default=None, repr=False)
    summaries: Dict[str, pd.DataFrame] = field(default_factory=dict, repr=False)
    bioequivalence: Dict[str, BioequivalenceResult] = field(default_factory=dict)
    planning: Optional[PlanningPower] = None
    figures: List[Path] = field(default_factory=list)

    @property
    def loaded(self) -> bool:
        return self.data is not None


@dataclass
class ProjectResult:
    """
    Result of a project run.

    Attributes:
        config: Configuration the run used
        generated: Time the run started
        studies: Analyses keyed by design value ('parallel', 'crossover')
        outputs_path: Location of the console-style outputs
        questions_path: Location of the questions mapping
        report_path: Location of the markdown report
        figures: All figure files written
    """
    config: ProjectConfig
    generated: datetime
    studies: Dict[str, StudyAnalysis]
    outputs_path: Optional[Path] = None
    questions_path: Optional[Path] = None
    report_path: Optional[Path] = None
    figures: List[Path] = field(default_factory=list)

    @property
    def written(self) -> List[Path]:
        """Documents and figures written by the run, in write order."""
        docs = [self.outputs_path, self.questions_path, self.report_path]
        return [p for p in docs if p is not None] + list(self.figures)


# ============================================================================
# Steps
# ============================================================================

def _load_study(
    design: Design,
    substr: str,
    config: ProjectConfig,
    supplied: Optional[pd.DataFrame],
) -> StudyAnalysis:
    label = _LABELS[design]
    if supplied is not None:
        df = ensure_formulation(supplied)
        return StudyAnalysis(label=label, design=design, dataset_name=f"{substr} (user data)",
                             n_rows=len(df), n_subjects=n_subjects(df), data=df)

    name = find_dataset(substr)
    if name is None:
        logger.warning("Could not locate %s among the registered datasets", substr)
        return StudyAnalysis(label=label, design=design, dataset_name=None)

    df = ensure_formulation(load_dataset(name, seed=config.data_seed))
    return StudyAnalysis(label=label, design=design, dataset_name=name,
                         n_rows=len(df), n_subjects=n_subjects(df), data=df)


def _write_inventory(out: TextIO, studies: Mapping[str, StudyAnalysis], config: ProjectConfig) -> None:
    save_block(out, "Detected dataset names",
               {key: study.dataset_name for key, study in studies.items()})

    wanted = {Design.PARALLEL: config.parallel_dataset, Design.CROSSOVER: config.crossover_dataset}
    for study in studies.values():
        if not study.loaded:
            save_block(out, f"{study.label} dataset missing",
                       f"Could not locate {wanted[study.design]} among the registered datasets.")
            continue
        save_block(out, f"{study.label} dataset columns", list(study.data.columns))
        save_block(out, f"{study.label} N rows / N subjects",
                   {"rows": study.n_rows, "subjects": study.n_subjects})


def _descriptives(out: TextIO, study: StudyAnalysis, config: ProjectConfig) -> None:
    for endpoint in config.endpoints:
        title = f"Task 1 - {study.label} descriptives: {endpoint}"
        if not has_col(study.data, endpoint):
            save_block(out, title, f"Endpoint {endpoint} not found.")
            continue
        ok, summary = try_run(out, title, lambda: summarize_endpoint(study.data, endpoint))
        if ok:
            study.summaries[endpoint] = summary


def _bioequivalence(out: TextIO, study: StudyAnalysis, config: ProjectConfig) -> None:
    for endpoint in config.endpoints:
        if not has_col(study.data, endpoint):
            continue
        ok, res = try_run(
            out, f"Task 2 - {study.label} BE: {endpoint}",
            lambda: run_bioequivalence(
                study.data, endpoint, study.design,
                alpha=config.power.alpha,
                test_label=config.test_label,
                reference_label=config.reference_label,
            ),
        )
        if ok:
            study.bioequivalence[endpoint] = res


def _planning_power(
    out: TextIO,
    study: StudyAnalysis,
    config: ProjectConfig,
    rng: np.random.Generator,
) -> None:
    endpoint = config.planning_endpoint
    title = f"Task 3 - {study.label} planning power ({endpoint}, from pilot CV)"
    if not has_col(study.data, endpoint):
        return

    summary = study.summaries.get(endpoint)
    cv = reference_cv(summary, config.reference_label) if summary is not None else None
    if cv is None:
        save_block(out, title, f"Skipped: no reference CV available for {endpoint}.")
        return

    pc = config.power
    if study.n_subjects is not None:
        n = study.n_subjects
    elif study.design is Design.CROSSOVER:
        n = pc.default_n_crossover
    else:
        n = pc.default_n_parallel

    def compute() -> PlanningPower:
        at_n = simulate_power(
            SimulationParameters(n=n, cv_pct=cv, design=study.design,
                                 alpha=pc.alpha, nsim=pc.nsim),
            rng=rng,
        )
        search = find_sample_size(
            pc.target_power, cv, design=study.design, n_min=pc.n_min, n_max=pc.n_max,
            step=pc.step, nsim=pc.search_nsim, alpha=pc.alpha, rng=rng,
        )
        return PlanningPower(
            endpoint=endpoint, design=study.design, cv_pct=cv, n=n,
            approx_power=at_n.power, mc_se=at_n.mc_se, target_power=pc.target_power,
            n_for_target=search.n, power_at_n_for_target=search.power, search=search,
        )

    ok, plan = try_run(out, title, compute)
    if ok:
        study.planning = plan


def _figures(study: StudyAnalysis, outdir: Path, config: ProjectConfig) -> None:
    tag = study.design.value
    for endpoint in config.endpoints:
        if not has_col(study.data, endpoint):
            continue
        try:
            paths = plot_endpoint_distributions(study.data, endpoint, tag, outdir)
            if paths:
                study.figures += [paths["hist"], paths["box"]]
            if study.design is Design.CROSSOVER:
                paired = plot_paired_crossover(
                    study.data, endpoint, tag, outdir,
                    reference_label=config.reference_label, test_label=config.test_label,
                )
                if paired is not None:
                    study.figures.append(paired)
        except Exception:
            logger.exception("Figures failed for %s %s", tag, endpoint)


# ============================================================================
# Entry Point
# ============================================================================

def run_project(
    config: Optional[ProjectConfig] = None,
    sink: Optional[OutputSink] = None,
    datasets: Optional[Mapping[str, pd.DataFrame]] = None,
) -> ProjectResult:
    """
    Run the design comparison and write all its documents.

    Args:
        config: Run configuration (default: ProjectConfig())
        sink: Destination of documents and figures (default: FileSink(config.root))
        datasets: Optional study data keyed by 'parallel' / 'crossover',
            replacing the registered datasets for those designs

    Returns:
        ProjectResult with every computed value and the written locations

    Example:
        >>> result = run_project(ProjectConfig(root="out"))
        >>> print(result.studies["crossover"].bioequivalence["AUC"].conclusion)
    """
    config = config or ProjectConfig()
    sink = sink or FileSink(config.root)
    datasets = dict(datasets or {})
    unknown = sorted(set(datasets) - {d.value for d in Design})
    if unknown:
        raise ValueError(f"Unknown dataset keys: {unknown}")

    set_backend(config.backend)
    rng = np.random.default_rng(config.power.seed)
    generated = datetime.now()
    logger.info("Running design comparison (backend=%s, seed=%s)",
                config.backend, config.power.seed)

    studies: Dict[str, StudyAnalysis] = {
        Design.PARALLEL.value: _load_study(Design.PARALLEL, config.parallel_dataset,
                                           config, datasets.get(Design.PARALLEL.value)),
        Design.CROSSOVER.value: _load_study(Design.CROSSOVER, config.crossover_dataset,
                                            config, datasets.get(Design.CROSSOVER.value)),
    }
    loaded = [s for s in studies.values() if s.loaded]

    out = io.StringIO()
    out.write("Student Project 1 - Parallel vs Crossover Design Comparison\n")
    out.write(f"Generated: {generated.isoformat(timespec='seconds')}\n\n")
    _write_inventory(out, studies, config)

    for study in loaded:
        _descriptives(out, study, config)
    for study in loaded:
        _bioequivalence(out, study, config)
    # Crossover first, as in the project handout
    for key in (Design.CROSSOVER.value, Design.PARALLEL.value):
        if studies[key].loaded:
            _planning_power(out, studies[key], config, rng)

    out.write("\nDONE.\n\n")

    result = ProjectResult(config=config, generated=generated, studies=studies)

    figdir = sink.directory(config.figures_dir)
    if figdir is not None:
        for study in loaded:
            _figures(study, figdir, config)
            result.figures += study.figures
        searches = [(study.label, study.planning.search)
                    for study in studies.values() if study.planning is not None]
        try:
            curve = plot_power_curve(searches, figdir)
        except Exception:
            logger.exception("Power curve failed")
            curve = None
        if curve is not None:
            result.figures.append(curve)
    else:
        logger.info("Sink holds no files; figures skipped")

    result.outputs_path = sink.write_text(config.outputs_path, out.getvalue())
    result.questions_path = sink.write_text(config.questions_path, build_questions_md(config))
    result.report_path = sink.write_text(config.report_path, build_report_md(result, config))
    logger.info("Wrote %s, %s and %s", result.outputs_path, result.questions_path,
                result.report_path)
    return result
