"""
Markdown documents of the project: the questions mapping and the report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from ..config import ProjectConfig
    from ..pipeline import ProjectResult


def md_table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> str:
    """GitHub-flavoured markdown table."""
    lines = ["| " + " | ".join(headers) + " |",
             "|" + "|".join("---" for _ in headers) + "|"]
    for row in rows:
        lines.append("| " + " | ".join(str(c) for c in row) + " |")
    return "\n".join(lines)


def build_questions_md(config: "ProjectConfig") -> str:
    """Project questions and where the repository answers them."""
    out = config.outputs_path.as_posix()
    figs = config.figures_dir

    lines: List[str] = [
        "# Student Project 1 - Questions & What This Repo Answers\n",
        "This file summarizes the **project questions** and points to where results appear in the repo.\n",
        "## Task 1 - Data exploration\n",
        f"- **How many subjects are in each study?**  \n  See `{out}` (\"N rows / N subjects\").",
        f"- **What are the key variables?**  \n  See `{out}` (\"dataset columns\").",
        "- **How do designs differ in organization?**  \n"
        "  Parallel has one treatment per subject; crossover has multiple periods "
        "and uses within-subject comparisons.\n",
        "## Task 2 - Bioequivalence analysis\n",
        "- **Compare GMR and 90% CI between designs** (AUC/Cmax when available).  \n"
        f"  See `{out}` (\"Parallel BE\" and \"Crossover BE\").",
        "- **Which design gives tighter CI and why?**  \n"
        "  Crossover typically yields tighter CIs because it controls between-subject variability.\n",
        "## Task 3 - Power and sample size\n",
        "- **What sample size is needed for ~80% power?**  \n"
        f"  See the \"planning power\" blocks in `{out}` (didactic simulation-based approximation).",
        "- **Why crossover is more efficient**: within-subject comparisons reduce "
        "unexplained variance, so fewer subjects are needed.\n",
        "## Task 4 - Practical considerations\n",
        "- Parallel design avoids carryover/washout but usually needs more participants.",
        "- Crossover reduces sample size but requires washout and more complex conduct/analysis.\n",
        "## Visualizations\n",
        f"- Distribution plots (hist/box) and paired plots (crossover) are stored in `{figs}/`.\n",
    ]
    return "\n".join(lines) + "\n"


def _fmt(value, spec: str = ".4f") -> str:
    return "n/a" if value is None else format(value, spec)


def _results_section(result: "ProjectResult") -> List[str]:
    lines: List[str] = []

    be_rows = []
    for study in result.studies.values():
        for endpoint, be in study.bioequivalence.items():
            be_rows.append([
                study.label, endpoint, _fmt(be.gmr),
                f"[{be.ci_lower:.4f}, {be.ci_upper:.4f}]",
                _fmt(be.cv_pct, ".1f"), be.conclusion,
            ])
    if be_rows:
        lines += ["## Bioequivalence results\n",
                  md_table(["Design", "Endpoint", "GMR", "90% CI", "CV%", "Conclusion"], be_rows),
                  ""]

    plan_rows = []
    for study in result.studies.values():
        plan = study.planning
        if plan is None:
            continue
        plan_rows.append([
            study.label, plan.endpoint, _fmt(plan.cv_pct, ".1f"), plan.n,
            _fmt(plan.approx_power, ".1%"),
            plan.n_for_target if plan.n_for_target is not None else "not found",
        ])
    if plan_rows:
        target = next(s.planning for s in result.studies.values() if s.planning).target_power
        lines += ["## Planning power\n",
                  md_table(["Design", "Endpoint", "Pilot CV%", "n", "Approx. power",
                            f"n for {target:.0%} power"], plan_rows),
                  ""]
    return lines


def build_report_md(result: "ProjectResult", config: "ProjectConfig") -> str:
    """Project report: outputs, method, results and interpretation."""
    out = config.outputs_path.as_posix()
    qmd = config.questions_path.as_posix()
    figs = config.figures_dir

    parallel = result.studies.get("parallel")
    crossover = result.studies.get("crossover")
    parallel_name = parallel.dataset_name if parallel and parallel.dataset_name else config.parallel_dataset
    crossover_name = crossover.dataset_name if crossover and crossover.dataset_name else config.crossover_dataset

    lines: List[str] = [
        "# Student Project 1 - Parallel vs Crossover Design Comparison\n",
        f"- Generated: **{result.generated.isoformat(timespec='seconds')}**\n",
        "## Repository outputs\n",
        f"- **Outputs (console-like):** `{out}`",
        f"- **Questions mapping:** `{qmd}`",
        f"- **Figures:** `{figs}/`\n",
        "## What we did\n",
        f"1. Loaded a **parallel** dataset (`{parallel_name}`) and a **crossover** "
        f"dataset (`{crossover_name}`).",
        "2. Computed **descriptive statistics** (mean, median, SD, CV%) by formulation "
        "for AUC/Cmax when available.",
        "3. Ran **Standard ABE** (90% CI of the GMR within 80-125%) for endpoints present.",
        "4. Produced **visual comparisons** (histograms, boxplots; and paired plots for crossover).",
        "5. Included a **didactic planning-power approximation** to contrast design efficiency.\n",
    ]

    lines += _results_section(result)

    lines += [
        "## Key interpretation (student-level, regulator-aware)\n",
        "- **Crossover designs** are generally more statistically efficient because each "
        "subject serves as their own control.",
        "- **Parallel designs** are simpler to run (no washout / carryover concerns) but "
        "usually require larger sample sizes.",
        "- For BE, the operational target is often **>=80% power**, meaning a true-BE "
        "situation will pass about 8 out of 10 times under planning assumptions.\n",
        "## Figures produced\n",
    ]

    if result.figures:
        lines += [f"- `{p.name}`" for p in result.figures]
        lines.append("")
    else:
        lines.append(f"See `{figs}/` for endpoint distributions and paired crossover comparisons.\n")

    lines += [
        "## How to run\n",
        "```bash",
        "python -m bedesign --root .",
        "```\n",
    ]
    return "\n".join(lines) + "\n"
