"""
Tests for CAPM regression utilities.
Synthetic returns where the true beta is known.
"""

import math

import numpy as np
import pytest

from analysis.calculations.capm import (
    capm_regression,
    security_market_line,
    CapmResult,
    CapmError
)


class TestCapmRegression:
    """Tests for capm_regression function."""

    def test_beta_matches_independent_ols_slope(self):
        """Beta equals the slope from numpy's least-squares fit."""
        rng = np.random.default_rng(42)
        benchmark = rng.normal(0, 0.01, 500)
        company = 2.0 * benchmark + rng.normal(0, 0.005, 500)

        result = capm_regression(company, benchmark)
        slope, intercept = np.polyfit(benchmark, company, 1)

        assert abs(result.beta - slope) < 1e-9
        assert abs(result.alpha - intercept) < 1e-9
        assert result.beta == pytest.approx(2.0, abs=0.1)

    def test_beta_equals_covariance_ratio(self):
        """Slope equals cov(company, benchmark) / var(benchmark)."""
        rng = np.random.default_rng(3)
        benchmark = rng.normal(0, 0.02, 100)
        company = -0.5 * benchmark + rng.normal(0, 0.01, 100)

        result = capm_regression(company, benchmark)
        expected = np.cov(company, benchmark, ddof=1)[0, 1] / np.var(benchmark, ddof=1)

        assert abs(result.beta - expected) < 1e-9

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_beta_recovers_1_5_scenario(self, seed):
        """Benchmark ~ N(0, 0.01), company = 1.5x + N(0, 0.001), 250 obs."""
        rng = np.random.default_rng(seed)
        benchmark = rng.normal(0, 0.01, 250)
        company = 1.5 * benchmark + rng.normal(0, 0.001, 250)

        result = capm_regression(company, benchmark)

        assert abs(result.beta - 1.5) < 0.1
        assert result.observations == 250

    def test_perfect_fit_r_squared(self):
        """Exact linear relation gives R-squared of 1."""
        benchmark = np.array([0.01, -0.02, 0.015, 0.0, -0.005])
        company = 0.001 + 1.2 * benchmark

        result = capm_regression(company, benchmark)

        assert result.beta == pytest.approx(1.2, abs=1e-12)
        assert result.alpha == pytest.approx(0.001, abs=1e-12)
        assert result.r_squared == pytest.approx(1.0, abs=1e-12)

    def test_zero_variance_benchmark_returns_nan(self):
        """Constant benchmark: beta undefined, no exception."""
        benchmark = np.full(50, 0.001)
        company = np.random.default_rng(0).normal(0, 0.01, 50)

        result = capm_regression(company, benchmark)

        assert isinstance(result, CapmResult)
        assert math.isnan(result.beta)
        assert math.isnan(result.alpha)
        assert math.isnan(result.r_squared)
        assert result.observations == 50

    def test_length_mismatch_raises(self):
        with pytest.raises(CapmError, match="equal length"):
            capm_regression([0.1, 0.2, 0.3], [0.1, 0.2])

    def test_nan_input_raises(self):
        with pytest.raises(CapmError, match="Non-finite"):
            capm_regression([0.1, float('nan'), 0.3], [0.1, 0.2, 0.3])


class TestSecurityMarketLine:
    """Tests for security_market_line function."""

    def test_expected_returns(self):
        """E[r] = rf + beta * (E[rm] - rf)."""
        result = security_market_line({'F': 1.0, 'TSLA': 2.0, 'TM': 0.0}, 0.0001, 0.0005)

        assert result['F'] == pytest.approx(0.0005)
        assert result['TSLA'] == pytest.approx(0.0009)
        assert result['TM'] == pytest.approx(0.0001)

    def test_nan_beta_passes_through(self):
        result = security_market_line({'GM': float('nan')}, 0.0001, 0.0005)
        assert math.isnan(result['GM'])
