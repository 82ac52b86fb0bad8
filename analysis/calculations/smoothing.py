"""
Trailing rolling means for charting return series.
Display only - statistics always use the unsmoothed returns.
"""

from typing import Sequence, Union

import numpy as np
import pandas as pd

from analysis.series import AlignedReturnTable


DEFAULT_WINDOW = 7


class SmoothingError(Exception):
    """Raised when smoothing parameters are invalid."""
    pass


def rolling_mean(
    values: Union[Sequence[float], np.ndarray],
    window: int = DEFAULT_WINDOW
) -> np.ndarray:
    """
    Trailing, right-aligned rolling mean.

    Output at position i is the mean of positions i-window+1..i inclusive.
    The first window-1 positions are NaN.

    Example:
        rolling_mean([1, 2, 3, 4], window=2) -> [nan, 1.5, 2.5, 3.5]
    """
    _validate_window(window)

    series = pd.Series(np.asarray(values, dtype=float))
    return series.rolling(window=window, min_periods=window).mean().to_numpy()


def smooth_returns(table: AlignedReturnTable, window: int = DEFAULT_WINDOW) -> pd.DataFrame:
    """
    Rolling mean of every column of the aligned table.

    Returns:
        New DataFrame with the table's index and columns; leading rows are NaN
    """
    _validate_window(window)

    return table.frame.rolling(window=window, min_periods=window).mean()


def _validate_window(window: int) -> None:
    if not isinstance(window, int) or isinstance(window, bool) or window < 1:
        raise SmoothingError(f"Window must be a positive integer, got {window}")
