"""
Tests for chart builders - rendered off-screen with the Agg backend.
"""

from dataclasses import replace
from datetime import date, timedelta

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from analysis.calculations.smoothing import smooth_returns
from analysis.metrics_aggregator import compose_statistics
from analysis.series import AlignedReturnTable
from reports.charts import (
    plot_cumulative_growth,
    plot_returns_with_rolling_mean,
    plot_security_market_line,
    plot_return_distribution,
    build_report_charts
)
from reports.path_policy import CHART_NAMES


@pytest.fixture
def table():
    rng = np.random.default_rng(12)
    n = 80
    market = rng.normal(0, 0.01, n)
    index = pd.DatetimeIndex(
        [date(2025, 1, 1) + timedelta(days=i) for i in range(n)], name='date'
    )
    frame = pd.DataFrame({
        'F': 1.1 * market + rng.normal(0, 0.01, n),
        'GM': 1.3 * market + rng.normal(0, 0.01, n),
        'TSLA': 2.0 * market + rng.normal(0, 0.02, n),
        '^GSPC': market,
    }, index=index)
    return AlignedReturnTable('^GSPC', frame)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


class TestPlots:
    """Each builder returns a figure without touching the filesystem."""

    def test_cumulative_growth_one_line_per_column(self, table):
        fig = plot_cumulative_growth(table)
        # four series plus the reference line at 1
        assert len(fig.axes[0].lines) == 5

    def test_rolling_panels(self, table):
        fig = plot_returns_with_rolling_mean(table, smooth_returns(table, 7), 7)
        assert len(fig.axes) == 4

    def test_security_market_line_skips_undefined_beta(self, table):
        statistics = compose_statistics(table)
        statistics['GM'] = replace(statistics['GM'], beta=float('nan'))

        fig = plot_security_market_line(statistics, 0.01 / 252, 0.0003)

        labels = [t.get_text() for t in fig.axes[0].texts]
        assert labels == ['F', 'TSLA']

    def test_return_distribution_hides_unused_panels(self, table):
        fig = plot_return_distribution(table, compose_statistics(table), 0.95)

        visible = [ax for ax in fig.axes if ax.get_visible()]
        assert len(visible) == 3


class TestBuildReportCharts:
    """Tests for build_report_charts."""

    def test_writes_every_chart(self, table, tmp_path):
        chart_paths = {name: tmp_path / 'charts' / f'{name}.png' for name in CHART_NAMES}

        written = build_report_charts(
            chart_paths,
            table,
            smooth_returns(table, 7),
            compose_statistics(table),
            window=7,
            risk_free_daily=0.01 / 252,
            var_confidence=0.95
        )

        assert set(written) == set(CHART_NAMES)
        for path in written.values():
            assert path.exists()
            assert path.read_bytes()[:4] == b'\x89PNG'

    def test_only_requested_charts(self, table, tmp_path):
        written = build_report_charts(
            {'cumulative_growth': tmp_path / 'growth.png'},
            table,
            smooth_returns(table, 7),
            compose_statistics(table),
            window=7,
            risk_free_daily=0.0,
            var_confidence=0.95
        )

        assert list(written) == ['cumulative_growth']
        assert not plt.get_fignums()
