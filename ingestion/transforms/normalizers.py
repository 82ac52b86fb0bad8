"""
Normalizers for transforming provider data to canonical shape.
Pure functions - no IO, network, or side effects.
"""

import math
import logging
from datetime import date
from typing import Dict, Any, List

from analysis.series import PriceSeries
from ingestion.providers.yfinance_adapter import DataUnavailableError

logger = logging.getLogger(__name__)


def normalize_prices(
    raw_rows: List[Dict[str, Any]],
    *,
    ticker: str
) -> PriceSeries:
    """
    Transform provider-native price rows into an adjusted-close PriceSeries.

    Minimal normalization:
    - Date strings to date objects
    - Rows without a finite, positive 'Adj Close' are dropped
    - Deduplication by date (keep last to handle corrections)
    - Ascending date order

    Args:
        raw_rows: List of provider-specific price dictionaries
        ticker: Stock ticker symbol

    Returns:
        PriceSeries for the ticker

    Raises:
        DataUnavailableError: If no usable row remains
    """
    by_date = {}
    dropped = 0

    for raw in raw_rows:
        adj_close = raw.get('Adj Close')
        if adj_close is None or not math.isfinite(adj_close) or adj_close <= 0:
            dropped += 1
            continue

        date_value = raw.get('Date', '')
        row_date = date.fromisoformat(date_value) if isinstance(date_value, str) else date_value

        by_date[row_date] = float(adj_close)

    if dropped:
        logger.warning(f"Dropped {dropped} rows without adjusted close for {ticker}")

    if not by_date:
        raise DataUnavailableError(f"No usable adjusted-close prices for {ticker}")

    dates = sorted(by_date)
    return PriceSeries(
        ticker=ticker,
        dates=tuple(dates),
        prices=tuple(by_date[d] for d in dates)
    )


def normalize_price_history(raw_history: Dict[str, List[Dict[str, Any]]]) -> Dict[str, PriceSeries]:
    """Normalize every ticker's rows, preserving mapping order."""
    return {
        ticker: normalize_prices(rows, ticker=ticker)
        for ticker, rows in raw_history.items()
    }
