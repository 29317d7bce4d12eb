"""
Tests for bedesign visualization

Tests backends, themes and the study figures.
"""

import pytest
import pandas as pd


class TestBackends:
    """Test backend selection."""

    def test_default_backend(self):
        """Test matplotlib is the default backend."""
        from bedesign.viz import get_backend, available_backends

        assert get_backend() == "matplotlib"
        assert available_backends() == ["matplotlib", "plotly"]

    def test_set_backend(self):
        """Test backend names are case-insensitive and validated."""
        from bedesign.viz import set_backend, get_backend

        set_backend("Plotly")
        assert get_backend() == "plotly"
        with pytest.raises(ValueError):
            set_backend("bokeh")
        assert get_backend() == "plotly"


class TestThemes:
    """Test theme configuration."""

    def test_colors_wrap(self):
        """Test palette indices wrap around."""
        from bedesign.viz import get_color, get_colors

        assert get_color(0) == get_color(6)
        assert len(get_colors(3)) == 3

    def test_formulation_colors_fixed(self):
        """Test R and T keep their palette slots."""
        from bedesign.viz import formulation_color, get_color

        assert formulation_color("R") == get_color(0)
        assert formulation_color("T") == get_color(1)
        assert formulation_color("X") == formulation_color("X")

    def test_set_theme(self):
        """Test switching to the print theme."""
        from bedesign.viz import set_theme, get_theme_config

        set_theme("print")
        assert get_theme_config()["dpi"] == 300
        with pytest.raises(ValueError):
            set_theme("neon")


class TestDistributionPlots:
    """Test endpoint distribution figures."""

    def test_hist_and_box(self, parallel_df, tmp_path):
        """Test histogram and boxplot PNGs are written."""
        from bedesign.viz import plot_endpoint_distributions

        paths = plot_endpoint_distributions(parallel_df, "AUC", "parallel", tmp_path)

        assert paths["hist"] == tmp_path / "parallel_AUC_hist.png"
        assert paths["box"] == tmp_path / "parallel_AUC_boxplot.png"
        assert paths["hist"].stat().st_size > 0
        assert paths["box"].exists()

    def test_missing_endpoint(self, parallel_df, tmp_path):
        """Test a missing endpoint returns None without writing."""
        from bedesign.viz import plot_endpoint_distributions

        assert plot_endpoint_distributions(parallel_df, "Tmax", "parallel", tmp_path) is None
        assert list(tmp_path.iterdir()) == []

    def test_missing_formulation(self, tmp_path):
        """Test data without formulation raises FormulationError."""
        from bedesign.viz import plot_endpoint_distributions
        from bedesign.errors import FormulationError

        with pytest.raises(FormulationError):
            plot_endpoint_distributions(pd.DataFrame({"AUC": [1.0]}), "AUC", "x", tmp_path)

    def test_plotly_html(self, crossover_df, tmp_path):
        """Test the plotly backend writes HTML."""
        pytest.importorskip("plotly")
        from bedesign.viz import set_backend, plot_endpoint_distributions

        set_backend("plotly")
        paths = plot_endpoint_distributions(crossover_df, "Cmax", "crossover", tmp_path)

        assert paths["hist"].suffix == ".html"
        assert paths["box"].exists()


class TestPairedPlot:
    """Test the paired crossover figure."""

    def test_paired(self, crossover_df, tmp_path):
        """Test the paired plot is written for crossover data."""
        from bedesign.viz import plot_paired_crossover

        path = plot_paired_crossover(crossover_df, "AUC", "crossover", tmp_path)

        assert path == tmp_path / "crossover_paired_AUC.png"
        assert path.exists()

    def test_no_pairs(self, parallel_df, tmp_path):
        """Test parallel data has no subject with both formulations."""
        from bedesign.viz import plot_paired_crossover

        assert plot_paired_crossover(parallel_df, "AUC", "parallel", tmp_path) is None

    def test_missing_columns(self, tmp_path):
        """Test missing id returns None."""
        from bedesign.viz import plot_paired_crossover

        df = pd.DataFrame({"formulation": ["R", "T"], "AUC": [1.0, 2.0]})

        assert plot_paired_crossover(df, "AUC", "x", tmp_path) is None


class TestPowerCurve:
    """Test the planning power curve."""

    def test_curve(self, tmp_path):
        """Test one curve per search is drawn."""
        from bedesign.trial import find_sample_size
        from bedesign.viz import plot_power_curve

        searches = [
            ("Crossover", find_sample_size(0.8, 30.0, "crossover", nsim=500, rng=1)),
            ("Parallel", find_sample_size(0.8, 30.0, "parallel", nsim=500, rng=1)),
        ]
        path = plot_power_curve(searches, tmp_path)

        assert path == tmp_path / "planning_power_curve.png"
        assert path.exists()

    def test_no_trace(self, tmp_path):
        """Test nothing is drawn without traces."""
        from bedesign.viz import plot_power_curve

        assert plot_power_curve([], tmp_path) is None
