"""
yfinance adapter - fetch price data from Yahoo Finance.
Network IO allowed here, but minimal business logic.
"""

import os
import time
import logging
import yfinance as yf
import pandas as pd
from datetime import date, timedelta
from typing import Dict, Any, List, Optional, Sequence
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

PRICE_FIELDS = ['Open', 'High', 'Low', 'Close', 'Adj Close', 'Volume']


class YFinanceError(Exception):
    """Raised when yfinance operations fail."""
    pass


class DataUnavailableError(YFinanceError):
    """Raised when a required symbol cannot be retrieved."""
    pass


def fetch_prices_window(
    ticker: str,
    start: date,
    end: date,
    *,
    timeout: Optional[float] = None,
    max_retries: Optional[int] = None
) -> List[Dict[str, Any]]:
    """
    Fetch price data for a ticker within date window.
    Returns raw data in provider format - no normalization.

    The provider call is retried at most max_retries times (default 1),
    each attempt bounded by timeout seconds. Provider errors and empty
    responses both count as failed attempts.

    Args:
        ticker: Stock or index symbol (e.g., 'GM', '^GSPC')
        start: Start date (inclusive)
        end: End date (inclusive)
        timeout: Per-attempt timeout in seconds (default FETCH_TIMEOUT_S or 10)
        max_retries: Retries after the first failure (default FETCH_RETRIES or 1)

    Returns:
        List of raw price dictionaries in yfinance format

    Raises:
        YFinanceError: If validation fails
        DataUnavailableError: If every attempt fails or returns no rows
    """
    # Validate inputs
    _validate_date_range(start, end)
    _validate_ticker(ticker)

    if timeout is None:
        timeout = float(os.getenv('FETCH_TIMEOUT_S', '10'))
    if max_retries is None:
        max_retries = int(os.getenv('FETCH_RETRIES', '1'))
    retry_pause = float(os.getenv('FETCH_RETRY_PAUSE_S', '1'))

    last_error = None
    for attempt in range(max_retries + 1):
        try:
            rows = _to_rows(_download(ticker, start, end, timeout))
            if not rows:
                raise YFinanceError(f"No price data returned for {ticker} ({start} to {end})")
            return rows
        except Exception as e:
            last_error = e
            logger.warning(f"Fetch attempt {attempt + 1} for {ticker} failed: {e}")
            if attempt < max_retries:
                time.sleep(retry_pause)

    raise DataUnavailableError(
        f"Failed to fetch prices for {ticker}: {last_error}"
    ) from last_error


def fetch_price_history(
    tickers: Sequence[str],
    start: date,
    end: date,
    *,
    timeout: Optional[float] = None,
    max_retries: Optional[int] = None
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Fetch every symbol in turn; any failure aborts the whole batch.

    Returns:
        Mapping of ticker to raw rows, in the order requested

    Raises:
        DataUnavailableError: If any symbol fails or returns no rows
    """
    results = {}
    for ticker in tickers:
        rows = fetch_prices_window(
            ticker,
            start,
            end,
            timeout=timeout,
            max_retries=max_retries
        )
        logger.info(f"Fetched {len(rows)} rows for {ticker}")
        results[ticker] = rows

    return results


def _download(ticker: str, start: date, end: date, timeout: float) -> pd.DataFrame:
    # yfinance uses exclusive end dates, so add 1 day
    yf_end = end + timedelta(days=1)

    # yf.download logs provider errors and returns an empty frame; history() can raise them
    return yf.Ticker(ticker).history(
        start=start.isoformat(),
        end=yf_end.isoformat(),
        auto_adjust=False,
        actions=False,
        timeout=timeout,
        raise_errors=True
    )


def _to_rows(data: Optional[pd.DataFrame]) -> List[Dict[str, Any]]:
    """Convert a yfinance frame to row dictionaries, keeping provider field names."""
    if data is None or data.empty:
        return []

    # Handle multi-level columns (when yfinance returns ticker-specific columns)
    if isinstance(data.columns, pd.MultiIndex):
        data = data.copy()
        data.columns = data.columns.get_level_values(0)

    rows = []
    for date_idx, row in data.iterrows():
        row_dict = {'Date': date_idx.strftime('%Y-%m-%d')}

        # Missing fields are left out; normalization decides what to drop
        for field in PRICE_FIELDS:
            if field in data.columns and pd.notna(row[field]):
                row_dict[field] = float(row[field]) if field != 'Volume' else int(row[field])

        rows.append(row_dict)

    return rows


def _validate_date_range(start: date, end: date) -> None:
    """
    Validate date range parameters.

    Args:
        start: Start date
        end: End date

    Raises:
        YFinanceError: If validation fails
    """
    if start > end:
        raise YFinanceError(f"start date ({start}) must be <= end date ({end})")

    # Don't allow future dates
    today = date.today()
    if start > today or end > today:
        raise YFinanceError("Future dates not allowed for historical data")

    # Reasonable range limit (prevent excessive API calls)
    max_days = 365 * 3  # 3 years
    if (end - start).days > max_days:
        raise YFinanceError(f"Date range too long (max {max_days} days)")


def _validate_ticker(ticker: str) -> None:
    """
    Basic ticker validation.

    Args:
        ticker: Stock or index symbol

    Raises:
        YFinanceError: If ticker is invalid
    """
    if not ticker or not isinstance(ticker, str):
        raise YFinanceError("Ticker must be non-empty string")

    if len(ticker) > 10:  # Reasonable limit
        raise YFinanceError("Ticker too long (max 10 characters)")

    # Alphanumeric plus common ticker chars; '^' and '=' for indices and futures
    allowed_chars = set('ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.-^=')
    if not set(ticker.upper()).issubset(allowed_chars):
        raise YFinanceError(f"Ticker contains invalid characters: {ticker}")
