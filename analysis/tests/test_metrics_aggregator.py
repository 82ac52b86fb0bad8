"""
Tests for metrics aggregator.
Each company statistic must match the standalone calculation.
"""

import math
from datetime import date, timedelta

import numpy as np
import pandas as pd
import pytest

from analysis.calculations.capm import capm_regression
from analysis.calculations.sharpe import sharpe_ratio, daily_risk_free
from analysis.calculations.value_at_risk import historical_var
from analysis.metrics_aggregator import (
    compute_company_statistics,
    compose_statistics,
    MetricsAggregatorError
)
from analysis.series import AlignedReturnTable


def make_table(n=250, seed=42, benchmark=None):
    """Four companies with known betas against a synthetic benchmark."""
    rng = np.random.default_rng(seed)
    if benchmark is None:
        benchmark = rng.normal(0, 0.01, n)
    index = pd.DatetimeIndex(
        [date(2025, 1, 1) + timedelta(days=i) for i in range(n)], name='date'
    )
    frame = pd.DataFrame({
        'F': 1.1 * benchmark + rng.normal(0, 0.01, n),
        'GM': 1.3 * benchmark + rng.normal(0, 0.01, n),
        'TSLA': 2.0 * benchmark + rng.normal(0, 0.03, n),
        'TM': 0.7 * benchmark + rng.normal(0, 0.005, n),
        '^GSPC': benchmark,
    }, index=index)
    return AlignedReturnTable('^GSPC', frame)


class TestComputeCompanyStatistics:
    """Tests for compute_company_statistics."""

    def test_matches_standalone_calculations(self):
        table = make_table()
        stats = compute_company_statistics(table, 'GM', risk_free_annual=0.02)

        gm = table.returns('GM')
        bench = table.benchmark_returns()

        assert stats.beta == capm_regression(gm, bench).beta
        assert stats.sharpe_ratio == sharpe_ratio(gm, daily_risk_free(0.02))
        assert stats.var_95 == historical_var(gm, 0.95)
        assert stats.observations == 250
        assert stats.ci_lower < stats.ci_upper

    def test_tsla_beta_near_two(self):
        stats = compute_company_statistics(make_table(), 'TSLA')
        assert stats.beta == pytest.approx(2.0, abs=0.5)

    def test_benchmark_is_not_a_company(self):
        with pytest.raises(MetricsAggregatorError, match="is the benchmark"):
            compute_company_statistics(make_table(), '^GSPC')

    def test_unknown_company(self):
        with pytest.raises(MetricsAggregatorError, match="not found"):
            compute_company_statistics(make_table(), 'HMC')

    def test_constant_benchmark_gives_nan_beta_only(self, caplog):
        """Degenerate benchmark affects beta; other statistics stay finite."""
        table = make_table(n=100, benchmark=np.full(100, 0.0005))

        stats = compute_company_statistics(table, 'F')

        assert math.isnan(stats.beta)
        assert math.isfinite(stats.sharpe_ratio)
        assert math.isfinite(stats.var_95)
        assert math.isfinite(stats.t_statistic)
        assert "Beta undefined for F" in caplog.text


class TestComposeStatistics:
    """Tests for compose_statistics."""

    def test_all_companies_in_table_order(self):
        result = compose_statistics(make_table())
        assert list(result.keys()) == ['F', 'GM', 'TSLA', 'TM']

    def test_subset(self):
        result = compose_statistics(make_table(), ['TM'])
        assert list(result.keys()) == ['TM']

    def test_companies_are_independent(self):
        """A company's statistics do not depend on which others are computed."""
        table = make_table()
        alone = compose_statistics(table, ['TSLA'])['TSLA']
        together = compose_statistics(table)['TSLA']
        assert alone == together
