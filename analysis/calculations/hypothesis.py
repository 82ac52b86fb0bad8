"""
Two-sample hypothesis test comparing company and benchmark returns.
Welch (unequal-variance) t-test with a confidence interval on the mean difference.
"""

import math
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np
from scipy import stats


class HypothesisTestError(Exception):
    """Raised when test inputs are invalid."""
    pass


@dataclass(frozen=True)
class TTestResult:
    """Welch t-test for H0: mean(a) == mean(b)."""
    t_statistic: float
    p_value: float
    ci_lower: float
    ci_upper: float
    degrees_of_freedom: float
    mean_difference: float
    confidence: float


def welch_t_test(
    sample_a: Union[Sequence[float], np.ndarray],
    sample_b: Union[Sequence[float], np.ndarray],
    confidence: float = 0.95
) -> TTestResult:
    """
    Two-sided Welch t-test on mean(sample_a) - mean(sample_b).

    The confidence interval uses the Welch-Satterthwaite degrees of freedom.
    When both samples have zero variance the test is undefined and every
    statistic except the mean difference is NaN.

    Raises:
        HypothesisTestError: If a sample has fewer than 2 values or confidence is out of range
    """
    if not 0 < confidence < 1:
        raise HypothesisTestError(f"confidence must be in (0, 1), got {confidence}")

    a = np.asarray(sample_a, dtype=float)
    b = np.asarray(sample_b, dtype=float)

    if len(a) < 2 or len(b) < 2:
        raise HypothesisTestError("Each sample needs at least 2 observations")

    if np.any(~np.isfinite(a)) or np.any(~np.isfinite(b)):
        raise HypothesisTestError("Non-finite values not allowed in samples")

    mean_diff = float(np.mean(a) - np.mean(b))
    var_a = np.var(a, ddof=1) / len(a)
    var_b = np.var(b, ddof=1) / len(b)
    std_err = math.sqrt(var_a + var_b)

    nan = float('nan')
    if np.ptp(a) == 0 and np.ptp(b) == 0:
        return TTestResult(nan, nan, nan, nan, nan, mean_diff, confidence)

    result = stats.ttest_ind(a, b, equal_var=False)

    dof = (var_a + var_b) ** 2 / (
        var_a ** 2 / (len(a) - 1) + var_b ** 2 / (len(b) - 1)
    )
    t_crit = stats.t.ppf(1 - (1 - confidence) / 2, dof)
    margin = t_crit * std_err

    return TTestResult(
        t_statistic=float(result.statistic),
        p_value=float(result.pvalue),
        ci_lower=mean_diff - margin,
        ci_upper=mean_diff + margin,
        degrees_of_freedom=float(dof),
        mean_difference=mean_diff,
        confidence=confidence
    )
