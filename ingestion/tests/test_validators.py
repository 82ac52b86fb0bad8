"""
Tests for price history validators.
"""

from datetime import date, timedelta

import pytest

from analysis.calculations.returns import InsufficientDataError
from analysis.series import PriceSeries
from ingestion.transforms.validators import validate_price_history, ValidationError


def make_series(ticker, n):
    dates = [date(2025, 1, 1) + timedelta(days=i) for i in range(n)]
    return PriceSeries(ticker, dates, [100.0 + i for i in range(n)])


class TestValidatePriceHistory:
    """Tests for validate_price_history function."""

    def test_valid_history(self):
        prices = {t: make_series(t, 5) for t in ['F', 'GM', '^GSPC']}
        validate_price_history(prices, ['F', 'GM', '^GSPC'])

    def test_missing_ticker(self):
        prices = {'F': make_series('F', 5)}
        with pytest.raises(ValidationError, match=r"Missing price series for: \['\^GSPC'\]"):
            validate_price_history(prices, ['F', '^GSPC'])

    def test_mislabelled_series(self):
        prices = {'F': make_series('GM', 5)}
        with pytest.raises(ValidationError, match="Series keyed F holds prices for GM"):
            validate_price_history(prices, ['F'])

    def test_single_price_is_insufficient(self):
        prices = {'F': make_series('F', 5), '^GSPC': make_series('^GSPC', 1)}
        with pytest.raises(InsufficientDataError, match=r"\^GSPC: have 1 prices"):
            validate_price_history(prices, ['F', '^GSPC'])

    def test_custom_minimum(self):
        prices = {'F': make_series('F', 5)}
        with pytest.raises(InsufficientDataError, match="need at least 10"):
            validate_price_history(prices, ['F'], min_observations=10)

    def test_extra_series_ignored(self):
        prices = {'F': make_series('F', 5), 'HMC': make_series('HMC', 1)}
        validate_price_history(prices, ['F'])
