"""
Historical Value at Risk.
Empirical quantile of the daily-return distribution, reported as a return
(negative numbers are losses).
"""

from typing import Sequence, Union

import numpy as np


class ValueAtRiskError(Exception):
    """Raised when VaR inputs are invalid."""
    pass


def historical_var(
    returns: Union[Sequence[float], np.ndarray],
    confidence: float = 0.95
) -> float:
    """
    Empirical (1 - confidence) quantile of returns.

    Uses linear interpolation between order statistics, so 95% VaR is the
    5th percentile of the return distribution.

    Args:
        returns: Daily returns
        confidence: Confidence level in (0, 1)

    Returns:
        Loss threshold as a return (typically negative)

    Raises:
        ValueAtRiskError: If returns are empty/non-finite or confidence is out of range
    """
    r = _validate(returns, confidence)
    return float(np.quantile(r, 1.0 - confidence, method='linear'))


def expected_shortfall(
    returns: Union[Sequence[float], np.ndarray],
    confidence: float = 0.95
) -> float:
    """Mean of returns at or below the historical VaR threshold."""
    r = _validate(returns, confidence)
    threshold = np.quantile(r, 1.0 - confidence, method='linear')
    return float(r[r <= threshold].mean())


def _validate(returns: Union[Sequence[float], np.ndarray], confidence: float) -> np.ndarray:
    if not 0 < confidence < 1:
        raise ValueAtRiskError(f"confidence must be in (0, 1), got {confidence}")

    r = np.asarray(returns, dtype=float)
    if r.size == 0:
        raise ValueAtRiskError("Cannot compute VaR of an empty return series")

    if np.any(~np.isfinite(r)):
        raise ValueAtRiskError("Non-finite values not allowed in returns")

    return r
