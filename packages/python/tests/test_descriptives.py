"""
Tests for bedesign descriptive statistics
"""

import math

import pytest
import numpy as np
import pandas as pd


class TestCvPercent:
    """Test CV% computation."""

    def test_basic(self):
        """Test CV% uses the sample SD."""
        from bedesign.nca import cv_percent

        x = [10.0, 12.0, 14.0]

        assert cv_percent(x) == pytest.approx(100.0 * np.std(x, ddof=1) / 12.0)

    def test_ignores_missing(self):
        """Test NaNs are dropped before computing CV%."""
        from bedesign.nca import cv_percent

        assert cv_percent([10.0, float("nan"), 14.0]) == pytest.approx(cv_percent([10.0, 14.0]))

    def test_degenerate(self):
        """Test single values and zero means give NaN."""
        from bedesign.nca import cv_percent

        assert math.isnan(cv_percent([5.0]))
        assert math.isnan(cv_percent([]))
        assert math.isnan(cv_percent([-1.0, 1.0]))


class TestSummarizeEndpoint:
    """Test per-formulation summaries."""

    def test_columns_and_order(self, parallel_df):
        """Test summary columns and formulation order."""
        from bedesign.nca import summarize_endpoint, SUMMARY_COLUMNS

        summary = summarize_endpoint(parallel_df, "AUC")

        assert list(summary.columns) == SUMMARY_COLUMNS
        assert summary["formulation"].tolist() == ["R", "T"]
        assert summary["n"].tolist() == [30, 30]

    def test_values(self):
        """Test mean, median, SD and CV% per formulation."""
        from bedesign.nca import summarize_endpoint

        df = pd.DataFrame({"formulation": ["T", "R", "T", "R", "T"],
                           "AUC": [10.0, 20.0, 12.0, 22.0, 14.0]})

        summary = summarize_endpoint(df, "AUC").set_index("formulation")

        assert summary.loc["T", "mean"] == pytest.approx(12.0)
        assert summary.loc["T", "median"] == pytest.approx(12.0)
        assert summary.loc["T", "sd"] == pytest.approx(2.0)
        assert summary.loc["T", "cv_pct"] == pytest.approx(100.0 * 2.0 / 12.0)
        assert summary.loc["R", "n"] == 2

    def test_missing_endpoint(self, parallel_df):
        """Test a missing endpoint raises EndpointNotFoundError."""
        from bedesign.nca import summarize_endpoint
        from bedesign.errors import EndpointNotFoundError

        with pytest.raises(EndpointNotFoundError) as exc:
            summarize_endpoint(parallel_df, "Tmax")
        assert str(exc.value) == "Endpoint Tmax not found."

    def test_missing_formulation(self):
        """Test data without formulation raises FormulationError."""
        from bedesign.nca import summarize_endpoint
        from bedesign.errors import FormulationError

        with pytest.raises(FormulationError):
            summarize_endpoint(pd.DataFrame({"AUC": [1.0, 2.0]}), "AUC")


class TestReferenceCv:
    """Test reference CV extraction."""

    def test_reference_row(self, crossover_df):
        """Test CV% of the reference formulation row."""
        from bedesign.nca import summarize_endpoint, reference_cv

        summary = summarize_endpoint(crossover_df, "AUC")
        cv = reference_cv(summary)

        assert cv == pytest.approx(summary.loc[summary["formulation"] == "R", "cv_pct"].iloc[0])
        assert cv > 0

    def test_unavailable(self):
        """Test None when the reference is absent, ambiguous or not finite."""
        from bedesign.nca import reference_cv

        assert reference_cv(pd.DataFrame({"formulation": ["T"], "cv_pct": [10.0]})) is None
        assert reference_cv(pd.DataFrame({"formulation": ["R", "R"], "cv_pct": [1.0, 2.0]})) is None
        assert reference_cv(pd.DataFrame({"formulation": ["R"], "cv_pct": [float("nan")]})) is None
        assert reference_cv(pd.DataFrame({"formulation": ["R"]})) is None
