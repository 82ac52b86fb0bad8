"""
Sharpe ratio utilities.
Daily excess mean return over the sample standard deviation of returns.
"""

import math
from typing import Sequence, Union

import numpy as np


TRADING_DAYS_PER_YEAR = 252


class SharpeError(Exception):
    """Raised when Sharpe ratio inputs are invalid."""
    pass


def daily_risk_free(annual_rate: float, periods: int = TRADING_DAYS_PER_YEAR) -> float:
    """
    Convert an annual risk-free rate to a per-period rate by simple division.

    Example:
        daily_risk_free(0.01) -> 0.01 / 252
    """
    if periods <= 0:
        raise SharpeError("periods must be positive")

    if not math.isfinite(annual_rate):
        raise SharpeError(f"annual_rate must be finite, got {annual_rate}")

    return annual_rate / periods


def sharpe_ratio(
    returns: Union[Sequence[float], np.ndarray],
    risk_free_daily: float = 0.0
) -> float:
    """
    Calculate the daily Sharpe ratio.

    Formula: (mean(r) - rf) / std(r, ddof=1)

    Args:
        returns: Daily returns
        risk_free_daily: Risk-free rate per day

    Returns:
        Sharpe ratio, or NaN when standard deviation is zero or undefined
    """
    r = np.asarray(returns, dtype=float)

    if np.any(~np.isfinite(r)):
        raise SharpeError("Non-finite values not allowed in returns")

    if len(r) < 2:
        return float('nan')

    # Constant series: np.std can round to a tiny non-zero value
    if np.ptp(r) == 0:
        return float('nan')

    return float((np.mean(r) - risk_free_daily) / np.std(r, ddof=1))


def annualize_sharpe(daily_sharpe: float, periods: int = TRADING_DAYS_PER_YEAR) -> float:
    """Scale a daily Sharpe ratio by sqrt(periods); NaN passes through."""
    return float(daily_sharpe * math.sqrt(periods))
