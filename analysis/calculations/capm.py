"""
CAPM regression utilities.
Beta is the OLS slope of company returns on benchmark returns:
    r_company = alpha + beta * r_benchmark + e
"""

import math
from dataclasses import dataclass
from typing import Mapping, Dict, Sequence, Union

import numpy as np
import statsmodels.api as sm


class CapmError(Exception):
    """Raised when CAPM inputs are malformed."""
    pass


@dataclass(frozen=True)
class CapmResult:
    """Fitted single-factor regression."""
    alpha: float
    beta: float
    r_squared: float
    observations: int


def capm_regression(
    company_returns: Union[Sequence[float], np.ndarray],
    benchmark_returns: Union[Sequence[float], np.ndarray]
) -> CapmResult:
    """
    Fit company returns on benchmark returns by ordinary least squares.

    A benchmark with zero variance has no defined slope; alpha, beta and
    R-squared are reported as NaN instead of raising.

    Args:
        company_returns: Company daily returns
        benchmark_returns: Benchmark daily returns on the same dates

    Returns:
        CapmResult

    Raises:
        CapmError: If inputs differ in length or contain non-finite values
    """
    y = np.asarray(company_returns, dtype=float)
    x = np.asarray(benchmark_returns, dtype=float)

    if y.shape != x.shape or y.ndim != 1:
        raise CapmError(f"Return series must be 1-D and equal length, got {y.shape} and {x.shape}")

    if not (np.all(np.isfinite(y)) and np.all(np.isfinite(x))):
        raise CapmError("Non-finite values not allowed in return series")

    n = len(y)
    nan = float('nan')

    if n < 2 or np.ptp(x) == 0:
        return CapmResult(alpha=nan, beta=nan, r_squared=nan, observations=n)

    design = sm.add_constant(x, has_constant='add')
    model = sm.OLS(y, design).fit()

    alpha, beta = model.params
    # R-squared is undefined when the company series is itself constant
    r_squared = float(model.rsquared) if np.ptp(y) > 0 else nan

    return CapmResult(
        alpha=float(alpha),
        beta=float(beta),
        r_squared=r_squared,
        observations=n
    )


def security_market_line(
    betas: Mapping[str, float],
    risk_free_daily: float,
    market_mean: float
) -> Dict[str, float]:
    """
    Expected daily return implied by CAPM for each beta.

    Formula: E[r_i] = rf + beta_i * (E[r_m] - rf)

    NaN betas map to NaN expected returns.
    """
    premium = market_mean - risk_free_daily
    result = {}
    for ticker, beta in betas.items():
        if beta is None or math.isnan(beta):
            result[ticker] = float('nan')
        else:
            result[ticker] = risk_free_daily + beta * premium
    return result
