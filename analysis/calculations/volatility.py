"""
Volatility calculation utilities.
Realized volatility of daily log returns, annualized.
"""

import math
from typing import Sequence, Union

import numpy as np


class VolatilityError(Exception):
    """Raised when volatility calculation fails."""
    pass


def annualized_volatility(
    log_ret: Union[Sequence[float], np.ndarray],
    annualize: int = 252
) -> float:
    """
    Calculate annualized realized volatility.

    Formula: σ = std(log_returns, ddof=1) × √annualize

    Args:
        log_ret: Daily log returns
        annualize: Annualization factor (252 for daily to annual)

    Returns:
        Annualized volatility as decimal (0.25 = 25%), NaN with fewer than 2 returns

    Raises:
        VolatilityError: If returns contain NaN or infinite values
    """
    r = np.asarray(log_ret, dtype=float)

    if np.any(np.isnan(r)):
        raise VolatilityError("NaN values not allowed in log returns")

    if np.any(np.isinf(r)):
        raise VolatilityError("Infinite values not allowed in log returns")

    if len(r) < 2:
        return float('nan')

    return float(np.std(r, ddof=1) * math.sqrt(annualize))
