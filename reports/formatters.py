"""
Display formatters for risk statistics.
Deterministic string formatting for percentages, ratios and p-values.
"""

import math
from datetime import datetime, date
from typing import Optional, Union


NOT_AVAILABLE = "Not available"


class FormatterError(Exception):
    """Raised when formatter input validation fails."""
    pass


def _is_missing(value: Optional[float]) -> bool:
    if value is None:
        return True

    if not isinstance(value, (int, float)):
        raise FormatterError(f"Value must be numeric, got {type(value)}")

    return math.isnan(value)


def format_percentage(value: Optional[float], decimal_places: int = 2) -> str:
    """
    Format decimal as percentage with specified precision.

    Args:
        value: Decimal value (0.0845 = 8.45%)
        decimal_places: Number of decimal places (default: 2)

    Returns:
        Formatted percentage string (e.g., "8.45%")
    """
    if _is_missing(value):
        return NOT_AVAILABLE

    return f"{value * 100:.{decimal_places}f}%"


def format_ratio(value: Optional[float], decimal_places: int = 3) -> str:
    """
    Format a unitless statistic (beta, Sharpe ratio, t-statistic).

    Returns:
        Formatted string (e.g., "1.245", "-0.031")
    """
    if _is_missing(value):
        return NOT_AVAILABLE

    return f"{value:.{decimal_places}f}"


def format_pvalue(value: Optional[float]) -> str:
    """
    Format a p-value; values below 0.001 are shown as "<0.001".
    """
    if _is_missing(value):
        return NOT_AVAILABLE

    if not 0 <= value <= 1:
        raise FormatterError(f"p-value must be in [0, 1], got {value}")

    if value < 0.001:
        return "<0.001"

    return f"{value:.3f}"


def format_interval(lower: Optional[float], upper: Optional[float], decimal_places: int = 5) -> str:
    """Format a confidence interval as "[lower, upper]"."""
    if _is_missing(lower) or _is_missing(upper):
        return NOT_AVAILABLE

    return f"[{lower:.{decimal_places}f}, {upper:.{decimal_places}f}]"


def format_date_display(date_input: Union[str, date, datetime]) -> str:
    """
    Format date as "Month DD, YYYY".

    Args:
        date_input: Date as string, date object, or datetime object

    Returns:
        Formatted date string (e.g., "July 15, 2025")
    """
    if date_input is None:
        return NOT_AVAILABLE

    if isinstance(date_input, str):
        try:
            date_obj = date.fromisoformat(date_input[:10])
        except ValueError:
            raise FormatterError(f"Invalid date string: {date_input}")
    elif isinstance(date_input, datetime):
        date_obj = date_input.date()
    elif isinstance(date_input, date):
        date_obj = date_input
    else:
        raise FormatterError(f"Date must be string, date, or datetime, got {type(date_input)}")

    return date_obj.strftime("%B %d, %Y")
