"""
Guardrails for the analysis engine - sample-size checks before statistics run.
"""

import warnings

from analysis.calculations.returns import InsufficientDataError
from analysis.series import AlignedReturnTable


DEFAULT_MIN_OBSERVATIONS = 60


class DataQualityWarning(UserWarning):
    """Raised when data quality issues should be noted but don't block execution."""
    pass


def validate_sufficient_observations(
    table: AlignedReturnTable,
    minimum: int = DEFAULT_MIN_OBSERVATIONS
) -> int:
    """
    Check the aligned table is large enough for meaningful statistics.

    Args:
        table: Aligned return table
        minimum: Observations below which results are flagged as unreliable

    Returns:
        Number of aligned observations

    Raises:
        InsufficientDataError: If fewer than 2 aligned observations
    """
    observations = len(table)

    if observations < 2:
        raise InsufficientDataError(
            f"Insufficient data for statistics: have {observations} aligned returns, need at least 2"
        )

    if observations < minimum:
        warnings.warn(
            f"Limited data for risk statistics: have {observations} aligned returns, "
            f"recommend at least {minimum} for reliable estimates.",
            DataQualityWarning
        )

    return observations
