"""
bedesign Plotting Backends

Thin wrappers over matplotlib (static PNG, default) and plotly
(interactive HTML). Plot functions build figures through the active
backend and branch on its class name for chart types the common
interface does not cover.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union

from .themes import get_theme_config


class MatplotlibBackend:
    """Static figures saved as PNG."""

    extension = ".png"

    def create_figure(self, figsize: Tuple[float, float] = (8, 5), title: Optional[str] = None) -> Any:
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots(figsize=figsize)
        if title:
            ax.set_title(title)
        return fig

    def line_plot(self, fig: Any, x: Sequence[float], y: Sequence[float],
                  label: Optional[str] = None, color: Optional[str] = None,
                  linewidth: float = 1.5, linestyle: str = "-") -> None:
        fig.axes[0].plot(x, y, label=label, color=color, linewidth=linewidth,
                         linestyle=linestyle)

    def scatter_plot(self, fig: Any, x: Sequence[float], y: Sequence[float],
                     color: Optional[str] = None, size: float = 20,
                     label: Optional[str] = None, alpha: float = 0.8) -> None:
        fig.axes[0].scatter(x, y, color=color, s=size, label=label, alpha=alpha)

    def hline(self, fig: Any, y: float, color: Optional[str] = None,
              label: Optional[str] = None) -> None:
        fig.axes[0].axhline(y, color=color, linestyle="--", linewidth=1, label=label)

    def set_labels(self, fig: Any, xlabel: Optional[str] = None,
                   ylabel: Optional[str] = None, title: Optional[str] = None) -> None:
        ax = fig.axes[0]
        if xlabel:
            ax.set_xlabel(xlabel)
        if ylabel:
            ax.set_ylabel(ylabel)
        if title:
            ax.set_title(title)

    def add_legend(self, fig: Any, loc: str = "best") -> None:
        ax = fig.axes[0]
        if ax.get_legend_handles_labels()[0]:
            ax.legend(loc=loc)

    def finalize(self, fig: Any) -> Any:
        fig.tight_layout()
        return fig

    def save(self, fig: Any, path: Union[str, Path]) -> Path:
        import matplotlib.pyplot as plt

        path = Path(path).with_suffix(self.extension)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=get_theme_config()["dpi"], bbox_inches="tight")
        plt.close(fig)
        return path


class PlotlyBackend:
    """Interactive figures saved as standalone HTML."""

    extension = ".html"

    def create_figure(self, figsize: Tuple[float, float] = (8, 5), title: Optional[str] = None) -> Any:
        import plotly.graph_objects as go

        fig = go.Figure()
        fig.update_layout(title=title, width=figsize[0] * 100, height=figsize[1] * 100)
        return fig

    def line_plot(self, fig: Any, x: Sequence[float], y: Sequence[float],
                  label: Optional[str] = None, color: Optional[str] = None,
                  linewidth: float = 1.5, linestyle: str = "-") -> None:
        import plotly.graph_objects as go

        dash = "dash" if linestyle == "--" else None
        fig.add_trace(go.Scatter(x=list(x), y=list(y), mode="lines", name=label,
                                 line=dict(color=color, width=linewidth, dash=dash),
                                 showlegend=label is not None))

    def scatter_plot(self, fig: Any, x: Sequence[float], y: Sequence[float],
                     color: Optional[str] = None, size: float = 20,
                     label: Optional[str] = None, alpha: float = 0.8) -> None:
        import plotly.graph_objects as go

        fig.add_trace(go.Scatter(x=list(x), y=list(y), mode="markers", name=label,
                                 marker=dict(color=color, size=max(size / 4, 4), opacity=alpha),
                                 showlegend=label is not None))

    def hline(self, fig: Any, y: float, color: Optional[str] = None,
              label: Optional[str] = None) -> None:
        fig.add_hline(y=y, line_dash="dash", line_color=color, annotation_text=label)

    def set_labels(self, fig: Any, xlabel: Optional[str] = None,
                   ylabel: Optional[str] = None, title: Optional[str] = None) -> None:
        layout = {}
        if xlabel:
            layout["xaxis_title"] = xlabel
        if ylabel:
            layout["yaxis_title"] = ylabel
        if title:
            layout["title"] = title
        fig.update_layout(**layout)

    def add_legend(self, fig: Any, loc: str = "best") -> None:
        fig.update_layout(showlegend=True)

    def finalize(self, fig: Any) -> Any:
        fig.update_layout(template="plotly_white")
        return fig

    def save(self, fig: Any, path: Union[str, Path]) -> Path:
        path = Path(path).with_suffix(self.extension)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.write_html(str(path), include_plotlyjs="cdn")
        return path


_BACKENDS = {
    "matplotlib": MatplotlibBackend,
    "plotly": PlotlyBackend,
}

_current_backend = "matplotlib"


def available_backends() -> List[str]:
    return list(_BACKENDS)


def set_backend(name: str) -> None:
    """
    Select the plotting backend.

    Args:
        name: 'matplotlib' (PNG) or 'plotly' (HTML)
    """
    global _current_backend
    key = name.strip().lower()
    if key not in _BACKENDS:
        raise ValueError(f"Unknown backend: {name}. Available: {', '.join(_BACKENDS)}")
    _current_backend = key


def get_backend() -> str:
    return _current_backend


def _get_plotter() -> Union[MatplotlibBackend, PlotlyBackend]:
    return _BACKENDS[_current_backend]()
