"""
bedesign Visualization Module

Figures for the design comparison, rendered through a matplotlib (PNG) or
plotly (HTML) backend.

Example:
    >>> from bedesign import viz
    >>> viz.set_backend("matplotlib")
    >>> paths = viz.plot_endpoint_distributions(df, "AUC", "crossover", "figures")
"""

from .backends import (
    MatplotlibBackend,
    PlotlyBackend,
    available_backends,
    get_backend,
    set_backend,
)

from .themes import (
    THEMES,
    set_theme,
    get_theme_config,
    get_color,
    get_colors,
    formulation_color,
)

from .distributions import (
    plot_endpoint_distributions,
    plot_paired_crossover,
    plot_power_curve,
)

__all__ = [
    "MatplotlibBackend",
    "PlotlyBackend",
    "available_backends",
    "get_backend",
    "set_backend",
    "THEMES",
    "set_theme",
    "get_theme_config",
    "get_color",
    "get_colors",
    "formulation_color",
    "plot_endpoint_distributions",
    "plot_paired_crossover",
    "plot_power_curve",
]
