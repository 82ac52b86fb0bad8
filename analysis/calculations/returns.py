"""
Returns calculation utilities.
Pure functions for daily log returns and date alignment across tickers.
"""

import logging
from typing import Dict, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from analysis.series import PriceSeries, ReturnSeries, AlignedReturnTable

logger = logging.getLogger(__name__)


class ReturnsError(Exception):
    """Raised when returns calculation fails."""
    pass


class InsufficientDataError(ReturnsError):
    """Raised when a series is too short for returns or statistics."""
    pass


def log_returns(prices: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    """
    Calculate log returns from price series.

    Formula: r_t = ln(P_t) - ln(P_{t-1})

    Args:
        prices: Prices in chronological order

    Returns:
        Numpy array of log returns (length = len(prices) - 1)

    Raises:
        InsufficientDataError: If fewer than 2 prices
        ReturnsError: If any price is zero or negative
    """
    if len(prices) < 2:
        raise InsufficientDataError("Insufficient data: need at least 2 prices")

    price_array = np.asarray(prices, dtype=float)

    if np.any(price_array <= 0):
        raise ReturnsError("Zero or negative prices not allowed")

    return np.diff(np.log(price_array))


def to_return_series(price_series: PriceSeries) -> ReturnSeries:
    """
    Derive the daily log-return series for one ticker.

    Each return is dated at the later date of its consecutive pair.

    Raises:
        InsufficientDataError: If the price series has fewer than 2 observations
    """
    if len(price_series) < 2:
        raise InsufficientDataError(
            f"Insufficient data for {price_series.ticker}: "
            f"have {len(price_series)} prices, need at least 2"
        )

    values = log_returns(price_series.prices)

    return ReturnSeries(
        ticker=price_series.ticker,
        dates=price_series.dates[1:],
        values=tuple(values)
    )


def align_returns(
    returns: Mapping[str, ReturnSeries],
    benchmark: str
) -> AlignedReturnTable:
    """
    Join return series on the intersection of their dates.

    Rows missing from any series are dropped (inner join). Company columns
    keep the mapping's order; the benchmark column is placed last.

    Args:
        returns: Return series keyed by ticker, benchmark included
        benchmark: Benchmark ticker

    Returns:
        AlignedReturnTable with no missing values

    Raises:
        ReturnsError: If the benchmark series is missing
        InsufficientDataError: If fewer than 2 dates are common to all series
    """
    if benchmark not in returns:
        raise ReturnsError(f"Benchmark {benchmark} missing from return series")

    companies = [t for t in returns if t != benchmark]
    if not companies:
        raise ReturnsError("At least one company series is required")

    columns = [returns[t].to_series().rename(t) for t in companies + [benchmark]]
    frame = pd.concat(columns, axis=1, join='inner').sort_index()

    # Series may carry NaN values of their own; the join policy excludes them too
    frame = frame.dropna(how='any')

    dropped = max(len(returns[t]) for t in returns) - len(frame)
    if dropped > 0:
        logger.info(f"Inner join on date dropped up to {dropped} rows not present in every series")

    if len(frame) < 2:
        raise InsufficientDataError(
            f"Insufficient aligned data: {len(frame)} common dates across {len(columns)} series"
        )

    return AlignedReturnTable(benchmark, frame)


def reconstruct_prices(initial_price: float, returns: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    """
    Rebuild prices from log returns: P_k = P_0 * exp(sum(r_1..r_k)).

    Returns:
        Array of len(returns) prices, excluding the initial price
    """
    if initial_price <= 0:
        raise ReturnsError("Initial price must be positive")

    return initial_price * np.exp(np.cumsum(np.asarray(returns, dtype=float)))


def returns_by_ticker(prices: Mapping[str, PriceSeries]) -> Dict[str, ReturnSeries]:
    """Convert every price series, preserving mapping order."""
    return {ticker: to_return_series(series) for ticker, series in prices.items()}
