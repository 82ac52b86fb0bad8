"""
Filename and path policy for report storage.
Deterministic path generation from the run timestamp.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, Any


CHART_NAMES = (
    'cumulative_growth',
    'rolling_returns',
    'security_market_line',
    'return_distribution',
)


class PathPolicyError(Exception):
    """Raised when path policy validation fails."""
    pass


def create_report_paths(
    run_timestamp: datetime,
    base_dir: Path = Path('./reports_output'),
    *,
    avoid_collisions: bool = False
) -> Dict[str, Any]:
    """
    Create all report-related paths for one run.

    Layout:
        base_dir/YYYY-MM-DD_HHMMSS/report.md
        base_dir/YYYY-MM-DD_HHMMSS/metrics.json
        base_dir/YYYY-MM-DD_HHMMSS/charts/<name>.png

    With avoid_collisions, a run directory that already exists on disk gets
    a numeric suffix (YYYY-MM-DD_HHMMSS_2, _3, ...).

    Args:
        run_timestamp: Local timestamp of the run
        base_dir: Base output directory
        avoid_collisions: Skip run directories that already exist

    Returns:
        Dictionary with report_path, metrics_path, run_dir, chart_paths, timestamp_str

    Raises:
        PathPolicyError: If inputs are invalid
    """
    if not isinstance(run_timestamp, datetime):
        raise PathPolicyError(f"run_timestamp must be datetime, got {type(run_timestamp)}")

    base_dir = Path(base_dir)
    if str(base_dir).strip() == '':
        raise PathPolicyError("base_dir must not be empty")

    # Sortable, no colons for Windows
    time_str = run_timestamp.strftime('%Y-%m-%d_%H%M%S')
    run_dir = base_dir / time_str
    if avoid_collisions:
        run_dir = _first_unused(run_dir)

    paths = run_layout(run_dir)
    paths['timestamp_str'] = time_str
    return paths


def run_layout(run_dir: Path) -> Dict[str, Any]:
    """Report, metrics and chart paths inside one run directory."""
    run_dir = Path(run_dir)
    chart_dir = run_dir / 'charts'

    return {
        'run_dir': run_dir,
        'report_path': run_dir / 'report.md',
        'metrics_path': run_dir / 'metrics.json',
        'chart_dir': chart_dir,
        'chart_paths': {name: chart_dir / f'{name}.png' for name in CHART_NAMES}
    }


def relative_to_report(path: Path, report_path: Path) -> str:
    """Path of an asset as linked from the report file (POSIX separators)."""
    try:
        return Path(path).relative_to(Path(report_path).parent).as_posix()
    except ValueError:
        raise PathPolicyError(f"{path} is not inside {Path(report_path).parent}")


def _first_unused(run_dir: Path) -> Path:
    candidate = run_dir
    suffix = 2
    while candidate.exists():
        candidate = run_dir.with_name(f'{run_dir.name}_{suffix}')
        suffix += 1
    return candidate
