"""Shared fixtures for bedesign tests."""

import matplotlib

matplotlib.use("Agg")

import pytest


@pytest.fixture
def parallel_df():
    """Packaged parallel study with formulation labels."""
    from bedesign.data import ensure_formulation, load_dataset

    return ensure_formulation(load_dataset("bioequivalence/parallel/FSL2015_5"))


@pytest.fixture
def crossover_df():
    """Packaged 2x2 crossover study with formulation labels derived from sequence/period."""
    from bedesign.data import ensure_formulation, load_dataset

    return ensure_formulation(load_dataset("bioequivalence/2x2/SLF2014_5"))


@pytest.fixture
def fast_config(tmp_path):
    """Project config writing below tmp_path with small Monte-Carlo sizes."""
    from bedesign.config import PowerConfig, ProjectConfig

    return ProjectConfig(root=tmp_path, power=PowerConfig(nsim=2000, search_nsim=1000, seed=11))


@pytest.fixture(autouse=True)
def _reset_viz():
    """Restore default backend and theme after each test."""
    yield
    from bedesign.viz import set_backend, set_theme

    set_backend("matplotlib")
    set_theme("default")
