"""
bedesign Study Visualization

Figures comparing formulations and designs:
- Endpoint histograms and boxplots by formulation
- Paired subject plot (reference vs test) for crossover studies
- Planning power curves from sample size searches
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..errors import FormulationError
from ..trial.power import SampleSizeResult
from .backends import _get_plotter
from .themes import formulation_color, get_color, get_theme_config

logger = logging.getLogger(__name__)


def _groups(df: pd.DataFrame, endpoint: str) -> Dict[str, np.ndarray]:
    data = df[["formulation", endpoint]].dropna()
    return {
        str(label): pd.to_numeric(values, errors="coerce").dropna().to_numpy(dtype=float)
        for label, values in data.groupby("formulation", sort=True)[endpoint]
    }


def plot_endpoint_distributions(
    df: pd.DataFrame,
    endpoint: str,
    tag: str,
    outdir: Union[str, Path] = "figures",
    bins: Union[int, str] = "auto",
) -> Optional[Dict[str, Path]]:
    """
    Histogram and boxplot of an endpoint by formulation.

    Args:
        df: Study data with ``formulation``
        endpoint: Endpoint column (e.g. "AUC")
        tag: File name prefix and title prefix (e.g. "parallel")
        outdir: Output directory
        bins: Histogram bins (matplotlib backend)

    Returns:
        Dict with 'hist' and 'box' paths, or None when the endpoint is absent

    Raises:
        FormulationError: ``df`` has no ``formulation`` column

    Example:
        >>> paths = plot_endpoint_distributions(df, "AUC", "parallel", "figures")
        >>> print(paths["hist"])
    """
    if endpoint not in df.columns:
        logger.warning("Endpoint %s not found; skipping %s distribution plots", endpoint, tag)
        return None
    if "formulation" not in df.columns:
        raise FormulationError(f"Column 'formulation' missing. Columns: {list(df.columns)}")

    plotter = _get_plotter()
    theme = get_theme_config()
    outdir = Path(outdir)
    groups = _groups(df, endpoint)
    labels = list(groups)

    hist_title = f"{tag}: {endpoint} distribution by formulation"
    box_title = f"{tag}: {endpoint} boxplot (T vs R)"
    backend = plotter.__class__.__name__

    if "Matplotlib" in backend:
        fig_h = plotter.create_figure(figsize=theme["figsize"], title=hist_title)
        ax = fig_h.axes[0]
        all_values = np.concatenate(list(groups.values())) if groups else np.array([])
        edges = np.histogram_bin_edges(all_values, bins=bins) if all_values.size else 10
        for label in labels:
            ax.hist(groups[label], bins=edges, alpha=theme["alpha_fill"],
                    color=formulation_color(label), label=label, edgecolor="white")
        plotter.set_labels(fig_h, xlabel=endpoint, ylabel="Frequency")
        plotter.add_legend(fig_h, loc="upper right")

        fig_b = plotter.create_figure(figsize=theme["figsize"], title=box_title)
        ax = fig_b.axes[0]
        bp = ax.boxplot([groups[label] for label in labels], patch_artist=True)
        for patch, label in zip(bp["boxes"], labels):
            patch.set_facecolor(formulation_color(label))
            patch.set_alpha(theme["alpha_fill"])
        ax.set_xticks(range(1, len(labels) + 1))
        ax.set_xticklabels(labels)
        plotter.set_labels(fig_b, xlabel="Formulation", ylabel=endpoint)

    else:  # Plotly
        import plotly.graph_objects as go

        fig_h = plotter.create_figure(figsize=theme["figsize"], title=hist_title)
        for label in labels:
            fig_h.add_trace(go.Histogram(x=groups[label], name=label, opacity=theme["alpha_fill"],
                                         marker_color=formulation_color(label)))
        fig_h.update_layout(barmode="overlay")
        plotter.set_labels(fig_h, xlabel=endpoint, ylabel="Frequency")

        fig_b = plotter.create_figure(figsize=theme["figsize"], title=box_title)
        for label in labels:
            fig_b.add_trace(go.Box(y=groups[label], name=label,
                                   marker_color=formulation_color(label)))
        plotter.set_labels(fig_b, xlabel="Formulation", ylabel=endpoint)

    hist = plotter.save(plotter.finalize(fig_h), outdir / f"{tag}_{endpoint}_hist")
    box = plotter.save(plotter.finalize(fig_b), outdir / f"{tag}_{endpoint}_boxplot")
    logger.info("Saved %s and %s", hist.name, box.name)
    return {"hist": hist, "box": box}


def plot_paired_crossover(
    df: pd.DataFrame,
    endpoint: str,
    tag: str,
    outdir: Union[str, Path] = "figures",
    reference_label: str = "R",
    test_label: str = "T",
) -> Optional[Path]:
    """
    Scatter of per-subject mean reference vs test values with identity line.

    Only meaningful for crossover studies, where every subject has both
    formulations.

    Returns:
        Path of the saved figure, or None when columns are missing or no
        subject has both formulations
    """
    if not all(c in df.columns for c in ("id", endpoint, "formulation")):
        logger.warning("Missing columns for paired plot (%s, %s)", tag, endpoint)
        return None

    data = df[["id", "formulation", endpoint]].dropna()
    wide = data.pivot_table(index="id", columns="formulation", values=endpoint, aggfunc="mean")
    if reference_label not in wide.columns or test_label not in wide.columns:
        logger.warning("Could not form %s/%s pairs for paired plot (%s, %s)",
                       reference_label, test_label, tag, endpoint)
        return None
    keep = wide[[reference_label, test_label]].dropna()
    if keep.empty:
        logger.warning("No subject has both %s and %s (%s, %s)",
                       reference_label, test_label, tag, endpoint)
        return None

    rr = keep[reference_label].to_numpy(dtype=float)
    tt = keep[test_label].to_numpy(dtype=float)

    plotter = _get_plotter()
    theme = get_theme_config()
    title = f"{tag}: Paired subjects (mean per subject) - {endpoint}"
    fig = plotter.create_figure(figsize=theme["figsize"], title=title)
    plotter.scatter_plot(fig, rr, tt, color=get_color(0), size=theme["marker_size"] * 8)

    mn = float(min(rr.min(), tt.min()))
    mx = float(max(rr.max(), tt.max()))
    plotter.line_plot(fig, [mn, mx], [mn, mx], color=get_color(3),
                      linewidth=theme["line_width"] * 1.5, linestyle="--")
    plotter.set_labels(fig, xlabel="Reference", ylabel="Test")

    path = plotter.save(plotter.finalize(fig), Path(outdir) / f"{tag}_paired_{endpoint}")
    logger.info("Saved %s", path.name)
    return path


def plot_power_curve(
    searches: Iterable[Tuple[str, SampleSizeResult]],
    outdir: Union[str, Path] = "figures",
    tag: str = "planning",
    title: Optional[str] = "Planning power vs sample size",
) -> Optional[Path]:
    """
    Power against n for each scanned sample size search.

    Args:
        searches: (label, SampleSizeResult) pairs, e.g. one per design
        outdir: Output directory
        tag: File name prefix
        title: Plot title

    Returns:
        Path of the saved figure, or None when no search has a trace
    """
    searches = [(label, res) for label, res in searches if res.trace]
    if not searches:
        return None

    plotter = _get_plotter()
    theme = get_theme_config()
    fig = plotter.create_figure(figsize=theme["figsize"], title=title)

    for i, (label, res) in enumerate(searches):
        ns = [n for n, _ in res.trace]
        ps = [p for _, p in res.trace]
        plotter.line_plot(fig, ns, ps, label=label, color=get_color(i),
                          linewidth=theme["line_width"])
        if res.found:
            plotter.scatter_plot(fig, [res.n], [res.power], color=get_color(i),
                                 size=theme["marker_size"] * 10)

    target = searches[0][1].target_power
    plotter.hline(fig, target, color=get_color(5), label=f"Target {target:.0%}")
    plotter.set_labels(fig, xlabel="Total sample size (n)", ylabel="Estimated power")
    plotter.add_legend(fig, loc="lower right")

    path = plotter.save(plotter.finalize(fig), Path(outdir) / f"{tag}_power_curve")
    logger.info("Saved %s", path.name)
    return path
