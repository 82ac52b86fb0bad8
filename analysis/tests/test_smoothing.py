"""
Tests for rolling mean smoothing.
"""

import math
from datetime import date, timedelta

import numpy as np
import pandas as pd
import pytest

from analysis.calculations.smoothing import (
    rolling_mean,
    smooth_returns,
    SmoothingError,
    DEFAULT_WINDOW
)
from analysis.series import AlignedReturnTable


class TestRollingMean:
    """Tests for rolling_mean function."""

    def test_docstring_example(self):
        result = rolling_mean([1, 2, 3, 4], window=2)

        assert math.isnan(result[0])
        np.testing.assert_allclose(result[1:], [1.5, 2.5, 3.5])

    def test_default_window_is_seven(self):
        values = np.arange(1.0, 11.0)
        result = rolling_mean(values)

        assert DEFAULT_WINDOW == 7
        assert np.isnan(result[:6]).all()
        # mean of 1..7 and 4..10
        assert result[6] == pytest.approx(4.0)
        assert result[9] == pytest.approx(7.0)

    def test_output_length_matches_input(self):
        values = np.random.default_rng(1).normal(0, 0.01, 50)
        assert len(rolling_mean(values, 7)) == 50

    def test_window_of_one_is_identity(self):
        values = [0.01, -0.02, 0.03]
        np.testing.assert_allclose(rolling_mean(values, 1), values)

    def test_window_longer_than_series_is_all_nan(self):
        assert np.isnan(rolling_mean([0.1, 0.2, 0.3], 7)).all()

    @pytest.mark.parametrize("window", [0, -3, 2.5, True])
    def test_invalid_window(self, window):
        with pytest.raises(SmoothingError, match="positive integer"):
            rolling_mean([0.1, 0.2], window)


class TestSmoothReturns:
    """Tests for smooth_returns function."""

    def test_smooths_every_column(self):
        index = pd.DatetimeIndex(
            [date(2025, 1, 1) + timedelta(days=i) for i in range(10)], name='date'
        )
        rng = np.random.default_rng(3)
        frame = pd.DataFrame(
            {'F': rng.normal(0, 0.01, 10), '^GSPC': rng.normal(0, 0.01, 10)},
            index=index
        )
        table = AlignedReturnTable('^GSPC', frame)

        smoothed = smooth_returns(table, window=3)

        assert list(smoothed.columns) == ['F', '^GSPC']
        assert smoothed.index.equals(index)
        assert smoothed.iloc[:2].isna().all().all()
        assert smoothed['F'].iloc[2] == pytest.approx(frame['F'].iloc[:3].mean())

    def test_table_is_not_modified(self):
        index = pd.DatetimeIndex([date(2025, 1, 1), date(2025, 1, 2)], name='date')
        frame = pd.DataFrame({'F': [0.1, 0.2], '^GSPC': [0.0, 0.1]}, index=index)
        table = AlignedReturnTable('^GSPC', frame)

        smooth_returns(table, window=2)

        assert table.frame.isna().sum().sum() == 0
