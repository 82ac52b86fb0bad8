"""
Tests for sample-size guardrails.
"""

import warnings
from datetime import date, timedelta

import numpy as np
import pandas as pd
import pytest

from analysis.calculations.returns import InsufficientDataError
from analysis.guardrails import (
    validate_sufficient_observations,
    DataQualityWarning,
    DEFAULT_MIN_OBSERVATIONS
)
from analysis.series import AlignedReturnTable


def make_table(rows):
    index = pd.DatetimeIndex(
        [date(2025, 1, 1) + timedelta(days=i) for i in range(rows)], name='date'
    )
    rng = np.random.default_rng(rows)
    frame = pd.DataFrame(
        {'TM': rng.normal(0, 0.01, rows), '^GSPC': rng.normal(0, 0.01, rows)},
        index=index
    )
    return AlignedReturnTable('^GSPC', frame)


class TestValidateSufficientObservations:
    """Tests for validate_sufficient_observations."""

    def test_enough_observations_no_warning(self):
        table = make_table(DEFAULT_MIN_OBSERVATIONS)

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert validate_sufficient_observations(table) == DEFAULT_MIN_OBSERVATIONS

    def test_few_observations_warns(self):
        table = make_table(10)

        with pytest.warns(DataQualityWarning, match="Limited data"):
            count = validate_sufficient_observations(table, minimum=60)

        assert count == 10

    def test_two_observations_is_minimum(self):
        with pytest.warns(DataQualityWarning):
            assert validate_sufficient_observations(make_table(2)) == 2

    def test_single_observation_raises(self):
        with pytest.raises(InsufficientDataError, match="have 1 aligned returns"):
            validate_sufficient_observations(make_table(1))
