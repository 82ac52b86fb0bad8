"""
Immutable value objects passed between pipeline stages.
PriceSeries -> ReturnSeries -> AlignedReturnTable -> CompanyStatistics.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Any, Tuple, Optional

import numpy as np
import pandas as pd


def _check_dates(ticker: str, dates: Tuple[date, ...]) -> None:
    for prev, curr in zip(dates, dates[1:]):
        if curr <= prev:
            raise ValueError(
                f"{ticker}: dates must be strictly increasing ({prev} then {curr})"
            )


@dataclass(frozen=True)
class PriceSeries:
    """Adjusted-close prices for one ticker, ordered by date."""
    ticker: str
    dates: Tuple[date, ...]
    prices: Tuple[float, ...]

    def __post_init__(self):
        # Accept lists from callers but store tuples
        object.__setattr__(self, 'dates', tuple(self.dates))
        object.__setattr__(self, 'prices', tuple(float(p) for p in self.prices))

        if not self.ticker or not isinstance(self.ticker, str):
            raise ValueError("ticker must be non-empty string")

        if len(self.dates) != len(self.prices):
            raise ValueError(
                f"{self.ticker}: {len(self.dates)} dates but {len(self.prices)} prices"
            )

        _check_dates(self.ticker, self.dates)

        for p in self.prices:
            if not math.isfinite(p) or p <= 0:
                raise ValueError(f"{self.ticker}: prices must be finite and positive, got {p}")

    def __len__(self) -> int:
        return len(self.prices)

    def to_series(self) -> pd.Series:
        return pd.Series(
            list(self.prices),
            index=pd.DatetimeIndex(list(self.dates), name='date'),
            name=self.ticker,
            dtype=float
        )


@dataclass(frozen=True)
class ReturnSeries:
    """Daily log returns for one ticker; each return is dated at the later day of its pair."""
    ticker: str
    dates: Tuple[date, ...]
    values: Tuple[float, ...]

    def __post_init__(self):
        object.__setattr__(self, 'dates', tuple(self.dates))
        object.__setattr__(self, 'values', tuple(float(v) for v in self.values))

        if len(self.dates) != len(self.values):
            raise ValueError(
                f"{self.ticker}: {len(self.dates)} dates but {len(self.values)} returns"
            )

        _check_dates(self.ticker, self.dates)

    def __len__(self) -> int:
        return len(self.values)

    def to_series(self) -> pd.Series:
        return pd.Series(
            list(self.values),
            index=pd.DatetimeIndex(list(self.dates), name='date'),
            name=self.ticker,
            dtype=float
        )


@dataclass(frozen=True, eq=False)
class AlignedReturnTable:
    """
    Date-indexed table of returns for every company plus the benchmark.

    Built by inner join on date, so every row has a value in every column.
    The underlying frame is never handed out directly; `frame` returns a copy.
    """
    benchmark: str
    _frame: pd.DataFrame = field(repr=False)

    def __post_init__(self):
        frame = self._frame
        if self.benchmark not in frame.columns:
            raise ValueError(f"Benchmark {self.benchmark} not in aligned table")

        if frame.isna().any().any():
            missing = frame.columns[frame.isna().any()].tolist()
            raise ValueError(f"Aligned table has missing values in columns: {missing}")

        if not frame.index.is_monotonic_increasing or frame.index.has_duplicates:
            raise ValueError("Aligned table index must be unique and increasing")

        object.__setattr__(self, '_frame', frame.copy())

    def __len__(self) -> int:
        return len(self._frame)

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    @property
    def companies(self) -> Tuple[str, ...]:
        return tuple(c for c in self._frame.columns if c != self.benchmark)

    @property
    def dates(self) -> Tuple[date, ...]:
        return tuple(ts.date() for ts in self._frame.index)

    def returns(self, ticker: str) -> np.ndarray:
        if ticker not in self._frame.columns:
            raise KeyError(f"No returns for ticker {ticker}")
        return self._frame[ticker].to_numpy(dtype=float, copy=True)

    def benchmark_returns(self) -> np.ndarray:
        return self.returns(self.benchmark)


def _json_float(value: float) -> Optional[float]:
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class CompanyStatistics:
    """
    Risk and performance statistics for one company, computed once per run.

    Degenerate inputs leave the affected statistic as NaN; the others stay valid.
    """
    ticker: str
    beta: float
    sharpe_ratio: float
    var_95: float
    t_statistic: float
    p_value: float
    ci_lower: float
    ci_upper: float
    alpha: float = float('nan')
    r_squared: float = float('nan')
    annualized_sharpe: float = float('nan')
    annualized_volatility: float = float('nan')
    expected_shortfall: float = float('nan')
    mean_return: float = float('nan')
    observations: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe mapping; NaN statistics become None."""
        result = {'ticker': self.ticker, 'observations': self.observations}
        for name in ('beta', 'alpha', 'r_squared', 'sharpe_ratio', 'annualized_sharpe',
                     'var_95', 'expected_shortfall', 'annualized_volatility', 'mean_return',
                     't_statistic', 'p_value', 'ci_lower', 'ci_upper'):
            result[name] = _json_float(getattr(self, name))
        return result
