"""
Tests for bedesign planning power

Tests the simulation-based ABE power functions including:
- Planning quantities (log variance, standard error, critical value)
- Parameter validation
- Monte-Carlo power estimation
- Sample size search
"""

import math

import pytest
import numpy as np


class TestPlanningQuantities:
    """Test the closed-form planning quantities."""

    def test_logvar_from_cv(self):
        """Test log variance of a log-normal CV."""
        from bedesign.trial import logvar_from_cv

        assert logvar_from_cv(0.0) == 0.0
        assert logvar_from_cv(30.0) == pytest.approx(math.log(1.09))
        assert logvar_from_cv(100.0) == pytest.approx(math.log(2.0))

    def test_planning_se_design_multiplier(self):
        """Test parallel SE is sqrt(2) times the crossover SE."""
        from bedesign.trial import planning_se

        se_x = planning_se(24, 30.0, "crossover")
        se_p = planning_se(24, 30.0, "parallel")

        assert se_x == pytest.approx(math.sqrt(2 * math.log(1.09) / 24))
        assert se_p / se_x == pytest.approx(math.sqrt(2.0))

    def test_critical_value_df_floor(self):
        """Test the t quantile uses max(n - 2, 1) degrees of freedom."""
        from scipy import stats
        from bedesign.trial import critical_value

        assert critical_value(20) == pytest.approx(stats.t.ppf(0.95, 18))
        assert critical_value(2) == pytest.approx(stats.t.ppf(0.95, 1))
        assert critical_value(1) == pytest.approx(stats.t.ppf(0.95, 1))

    def test_design_coercion(self):
        """Test design names are case-insensitive."""
        from bedesign.trial import Design, coerce_design
        from bedesign.errors import InvalidParameterError

        assert coerce_design("Crossover") is Design.CROSSOVER
        assert coerce_design(" parallel ") is Design.PARALLEL
        assert coerce_design(Design.PARALLEL) is Design.PARALLEL
        with pytest.raises(InvalidParameterError):
            coerce_design("replicate")

    def test_make_rng(self):
        """Test random source normalization."""
        from bedesign.trial import make_rng

        gen = np.random.default_rng(3)
        assert make_rng(gen) is gen
        assert make_rng(5).normal() == np.random.default_rng(5).normal()
        assert isinstance(make_rng(None), np.random.Generator)
        with pytest.raises(TypeError):
            make_rng("seed")


class TestSimulationParameters:
    """Test parameter validation."""

    def test_defaults(self):
        """Test default parameter values."""
        from bedesign.trial import SimulationParameters, Design

        params = SimulationParameters(n=24, cv_pct=25.0)

        assert params.gmr == 1.0
        assert params.design is Design.CROSSOVER
        assert params.alpha == 0.05
        assert params.nsim == 12000
        assert params.degrees_of_freedom == 22

    def test_validation(self):
        """Test invalid parameters are rejected."""
        from bedesign.trial import SimulationParameters
        from bedesign.errors import InvalidParameterError

        with pytest.raises(InvalidParameterError):
            SimulationParameters(n=0, cv_pct=25.0)
        with pytest.raises(InvalidParameterError):
            SimulationParameters(n=-4, cv_pct=25.0)
        with pytest.raises(InvalidParameterError):
            SimulationParameters(n=24.5, cv_pct=25.0)
        with pytest.raises(InvalidParameterError):
            SimulationParameters(n=24, cv_pct=-1.0)
        with pytest.raises(InvalidParameterError):
            SimulationParameters(n=24, cv_pct=float("nan"))
        with pytest.raises(InvalidParameterError):
            SimulationParameters(n=24, cv_pct=25.0, gmr=0.0)
        with pytest.raises(InvalidParameterError):
            SimulationParameters(n=24, cv_pct=25.0, alpha=1.0)
        with pytest.raises(InvalidParameterError):
            SimulationParameters(n=24, cv_pct=25.0, nsim=0)

    def test_invalid_parameters_are_value_errors(self):
        """Test InvalidParameterError can be caught as ValueError."""
        from bedesign.trial import estimate_power

        with pytest.raises(ValueError):
            estimate_power(n=0, cv_pct=20.0)


class TestEstimatePower:
    """Test Monte-Carlo power estimation."""

    @pytest.mark.parametrize("n,cv", [(2, 10.0), (8, 30.0), (24, 25.0), (200, 80.0)])
    def test_power_in_unit_interval(self, n, cv):
        """Test estimated power lies in [0, 1]."""
        from bedesign.trial import estimate_power

        p = estimate_power(n=n, cv_pct=cv, nsim=2000, rng=1)

        assert 0.0 <= p <= 1.0

    def test_reproducible_with_seed(self):
        """Test identical seeds give identical estimates."""
        from bedesign.trial import estimate_power

        p1 = estimate_power(n=24, cv_pct=30.0, nsim=5000, rng=42)
        p2 = estimate_power(n=24, cv_pct=30.0, nsim=5000, rng=42)

        assert p1 == p2

    def test_monotone_in_n(self):
        """Test median power does not decrease over the n ladder."""
        from bedesign.trial import estimate_power

        medians = []
        for n in (8, 20, 50, 100):
            runs = [estimate_power(n=n, cv_pct=30.0, nsim=3000, rng=seed) for seed in range(5)]
            medians.append(float(np.median(runs)))

        assert medians == sorted(medians)
        assert medians[0] < 0.05
        assert medians[-1] > 0.99

    def test_crossover_at_least_parallel(self):
        """Test crossover power >= parallel power for the same draws."""
        from bedesign.trial import estimate_power

        for n in (12, 24, 48, 96):
            p_x = estimate_power(n=n, cv_pct=35.0, design="crossover", nsim=4000, rng=9)
            p_p = estimate_power(n=n, cv_pct=35.0, design="parallel", nsim=4000, rng=9)
            assert p_x >= p_p

    def test_zero_cv_gives_full_power(self):
        """Test zero variability with GMR 1 always passes."""
        from bedesign.trial import estimate_power

        for n in (4, 10, 50):
            assert estimate_power(n=n, cv_pct=0.0, gmr=1.0, nsim=500, rng=0) == pytest.approx(1.0)

    def test_gmr_outside_limits_fails(self):
        """Test a true GMR outside the BE limits almost never passes."""
        from bedesign.trial import estimate_power

        p = estimate_power(n=100, cv_pct=20.0, gmr=1.40, nsim=4000, rng=3)

        assert p < 0.01

    def test_low_cv_parallel_scenario(self):
        """Test low CV with a GMR inside the limits gives power near 1."""
        from bedesign.trial import estimate_power

        p = estimate_power(n=60, cv_pct=6.0, gmr=1.09, design="parallel", nsim=20000, rng=1)

        assert p > 0.99

    def test_high_cv_crossover_scenario(self):
        """Test high CV with a small crossover gives power near 0."""
        from bedesign.trial import estimate_power

        p = estimate_power(n=18, cv_pct=51.0, gmr=0.92, design="crossover", nsim=20000, rng=1)

        assert p < 0.01

    def test_simulate_power_result(self):
        """Test the full PowerResult fields."""
        from bedesign.trial import SimulationParameters, simulate_power, planning_se

        params = SimulationParameters(n=24, cv_pct=25.0, design="parallel", nsim=4000)
        result = simulate_power(params, rng=7)

        assert result.method == "simulation"
        assert result.df == 22
        assert result.se == pytest.approx(planning_se(24, 25.0, "parallel"))
        assert result.mc_se == pytest.approx(math.sqrt(result.power * (1 - result.power) / 4000))
        assert result.params is params

    def test_large_nsim_chunks(self):
        """Test nsim above the chunk size is handled."""
        from bedesign.trial import estimate_power

        p = estimate_power(n=50, cv_pct=30.0, nsim=150_000, rng=5)

        assert 0.93 < p < 0.99


class TestFindSampleSize:
    """Test sample size search."""

    def test_found_for_moderate_cv(self):
        """Test 80% power is reached below 100 subjects at 30% CV."""
        from bedesign.trial import find_sample_size

        res = find_sample_size(target_power=0.80, cv_pct=30.0, design="crossover",
                               n_min=8, n_max=100, step=2, rng=7)

        assert res.found
        assert res.n % 2 == 0
        assert 8 <= res.n <= 100
        assert res.power >= 0.80
        assert res.trace[-1] == (res.n, res.power)
        assert all(p < 0.80 for _, p in res.trace[:-1])

    def test_not_found_for_extreme_cv(self):
        """Test an unreachable target is a result, not an error."""
        from bedesign.trial import find_sample_size

        res = find_sample_size(target_power=0.99, cv_pct=150.0, design="crossover",
                               n_min=8, n_max=100, step=2, nsim=2000, rng=7)

        assert not res.found
        assert res.n is None
        assert res.power is None
        assert len(res.trace) == 47
        assert "not found below max (100)" in res.describe()

    def test_parallel_needs_more_subjects(self):
        """Test parallel design needs at least as many subjects as crossover."""
        from bedesign.trial import find_sample_size

        res_x = find_sample_size(0.80, cv_pct=25.0, design="crossover", rng=1)
        res_p = find_sample_size(0.80, cv_pct=25.0, design="parallel", rng=1)

        assert res_x.found and res_p.found
        assert res_p.n > res_x.n

    def test_odd_n_min_rounded_up(self):
        """Test the scan starts at an even sample size."""
        from bedesign.trial import find_sample_size

        res = find_sample_size(0.80, cv_pct=10.0, n_min=7, n_max=40, nsim=1000, rng=2)

        assert res.n_min == 8
        assert all(n % 2 == 0 for n, _ in res.trace)

    def test_describe_found(self):
        """Test the one-line summary of a found sample size."""
        from bedesign.trial import find_sample_size

        res = find_sample_size(0.80, cv_pct=10.0, nsim=1000, rng=2)

        assert res.describe().startswith(f"n = {res.n} (crossover) reaches")

    def test_invalid_arguments(self):
        """Test invalid search arguments are rejected."""
        from bedesign.trial import find_sample_size
        from bedesign.errors import InvalidParameterError

        with pytest.raises(InvalidParameterError):
            find_sample_size(0.0, cv_pct=30.0)
        with pytest.raises(InvalidParameterError):
            find_sample_size(1.2, cv_pct=30.0)
        with pytest.raises(InvalidParameterError):
            find_sample_size(0.8, cv_pct=30.0, step=3)
        with pytest.raises(InvalidParameterError):
            find_sample_size(0.8, cv_pct=30.0, n_min=50, n_max=20)
        with pytest.raises(InvalidParameterError):
            find_sample_size(0.8, cv_pct=-5.0)
        with pytest.raises(InvalidParameterError):
            find_sample_size(0.8, cv_pct=30.0, gmr=-1.0)

    def test_range_without_even_n_rejected(self):
        """Test an odd n_min equal to n_max leaves nothing to scan."""
        from bedesign.trial import find_sample_size
        from bedesign.errors import InvalidParameterError

        with pytest.raises(InvalidParameterError):
            find_sample_size(0.8, cv_pct=30.0, n_min=1, n_max=1)
        with pytest.raises(InvalidParameterError):
            find_sample_size(0.8, cv_pct=30.0, n_min=25, n_max=25)

    def test_reproducible_with_seed(self):
        """Test identical seeds give identical searches."""
        from bedesign.trial import find_sample_size

        res1 = find_sample_size(0.80, cv_pct=30.0, nsim=2000, rng=13)
        res2 = find_sample_size(0.80, cv_pct=30.0, nsim=2000, rng=13)

        assert res1.n == res2.n
        assert res1.trace == res2.trace
