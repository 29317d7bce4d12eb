"""
bedesign Visualization Themes

Color palettes and sizing shared by all plots.
"""

from __future__ import annotations

from typing import Any, Dict, List

# Colorblind-friendly palettes
THEMES: Dict[str, Dict[str, Any]] = {
    "default": {
        "colors": ["#2563EB", "#D97706", "#059669", "#DC2626", "#7C3AED", "#6B7280"],
        "line_width": 1.5,
        "marker_size": 5,
        "alpha_fill": 0.6,
        "figsize": (8, 5),
        "dpi": 150,
    },
    "print": {
        "colors": ["#000000", "#6B7280", "#9CA3AF", "#374151", "#D1D5DB", "#111827"],
        "line_width": 1.2,
        "marker_size": 4,
        "alpha_fill": 0.5,
        "figsize": (7, 4.5),
        "dpi": 300,
    },
}

# Fixed colors for the two formulations across every figure
FORMULATION_COLORS = {"R": 0, "T": 1}

_current_theme = "default"


def set_theme(name: str) -> None:
    """Select the active theme ('default' or 'print')."""
    global _current_theme
    if name not in THEMES:
        raise ValueError(f"Unknown theme: {name}. Available: {', '.join(THEMES)}")
    _current_theme = name


def get_theme_config() -> Dict[str, Any]:
    """Configuration of the active theme."""
    return THEMES[_current_theme]


def get_color(index: int) -> str:
    """Color at ``index`` of the active palette (wraps around)."""
    colors = get_theme_config()["colors"]
    return colors[index % len(colors)]


def get_colors(n: int) -> List[str]:
    """First ``n`` colors of the active palette."""
    return [get_color(i) for i in range(n)]


def formulation_color(label: str) -> str:
    """Color of a formulation label; unknown labels follow R and T."""
    index = FORMULATION_COLORS.get(str(label))
    if index is None:
        index = 2 + sum(ord(c) for c in str(label)) % 4
    return get_color(index)
