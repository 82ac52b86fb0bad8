"""
Atomic file writer - ensures no partial writes or corrupted files.
Implements temp-write → fsync → rename pattern for durability, for single
files and for whole run directories.
"""

import os
import json
import math
import time
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Any, Iterator


class AtomicWriteError(Exception):
    """Raised when atomic write operations fail."""
    pass


def write_report_atomic(content: str, output_path: Path) -> Dict[str, Any]:
    """
    Write report content atomically to prevent partial files.

    Uses temp-write → fsync → rename pattern for atomicity.

    Args:
        content: Report content to write
        output_path: Final path for the report

    Returns:
        Dictionary with write results

    Raises:
        AtomicWriteError: If the write fails; no partial file is left behind
    """
    start_time = time.time()
    output_path = Path(output_path)
    temp_path = None

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)

        # Temp file in the same directory so the rename stays on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            suffix='.tmp',
            prefix=f'{output_path.stem}_',
            dir=output_path.parent
        )
        temp_path = Path(temp_path_str)

        with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())  # Force write to disk

        os.replace(temp_path, output_path)

    except OSError as e:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()
        raise AtomicWriteError(f"Failed to write {output_path}: {e}") from e

    return {
        'status': 'completed',
        'output_path': str(output_path),
        'bytes_written': len(content.encode('utf-8')),
        'duration_seconds': time.time() - start_time
    }


def write_metrics_sidecar(metrics: Dict[str, Any], output_path: Path) -> Dict[str, Any]:
    """
    Write metrics JSON sidecar atomically.

    NaN is not valid JSON; callers pass None for undefined statistics.

    Args:
        metrics: Metrics dictionary
        output_path: Path for metrics JSON file

    Returns:
        Dictionary with write results

    Raises:
        AtomicWriteError: If serialization or the write fails
    """
    try:
        # Serialize to JSON string first (catch serialization errors early)
        json_content = json.dumps(metrics, indent=2, default=str, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise AtomicWriteError(f'JSON serialization failed: {e}') from e

    return write_report_atomic(json_content, output_path)


def json_safe(value: Any) -> Any:
    """Recursively replace non-finite floats with None."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


@contextmanager
def atomic_directory(final_dir: Path) -> Iterator[Path]:
    """
    Stage a directory's contents and move it into place in one rename.

    Yields a hidden sibling of final_dir. If the block raises, the staging
    directory is removed and final_dir is never created. An existing
    non-empty final_dir is not overwritten.

    Raises:
        AtomicWriteError: If the staging directory cannot be moved into place
    """
    final_dir = Path(final_dir)
    final_dir.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=f'.{final_dir.name}_', dir=final_dir.parent))

    try:
        yield staging
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    try:
        os.replace(staging, final_dir)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise AtomicWriteError(f"Failed to move {staging} to {final_dir}: {e}") from e
