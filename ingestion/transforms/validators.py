"""
Core validators for normalized price data.
Pure functions - no IO, network, or side effects.
"""

from typing import Mapping, Sequence

from analysis.calculations.returns import InsufficientDataError
from analysis.series import PriceSeries


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


def validate_price_history(
    prices: Mapping[str, PriceSeries],
    required: Sequence[str],
    min_observations: int = 2
) -> None:
    """
    Check that every required symbol is present with enough observations.

    Args:
        prices: Normalized price series keyed by ticker
        required: Tickers the report cannot run without
        min_observations: Minimum prices per series

    Raises:
        ValidationError: If a required ticker is missing or keyed under another name
        InsufficientDataError: If a series is shorter than min_observations
    """
    missing = [t for t in required if t not in prices]
    if missing:
        raise ValidationError(f"Missing price series for: {missing}")

    for ticker in required:
        series = prices[ticker]
        if series.ticker != ticker:
            raise ValidationError(f"Series keyed {ticker} holds prices for {series.ticker}")

        if len(series) < min_observations:
            raise InsufficientDataError(
                f"Insufficient data for {ticker}: have {len(series)} prices, "
                f"need at least {min_observations}"
            )

