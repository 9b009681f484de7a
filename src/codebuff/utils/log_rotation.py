"""Log retention for per-run log directories."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

__all__ = [
    "cleanup_old_logs",
    "get_log_directories_by_age",
]

_RUN_DIR_PREFIX = "run_"
_TIMESTAMP_SLICE = slice(4, 19)  # run_YYYYMMDD_HHMMSS
_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
_DEFAULT_RETENTION_DAYS = 7


def cleanup_old_logs(
    logs_dir: Path, retention_days: int = _DEFAULT_RETENTION_DAYS
) -> int:
    """Remove log directories older than ``retention_days``."""
    if not logs_dir.exists():
        return 0

    cutoff_date = datetime.now(timezone.utc) - timedelta(days=retention_days)
    cleanup_count = 0

    for run_dir, timestamp in get_log_directories_by_age(logs_dir):
        if timestamp >= cutoff_date:
            break
        try:
            logger.info("Removing old log directory: %s", run_dir)
            shutil.rmtree(run_dir)
            cleanup_count += 1
        except OSError as exc:  # pragma: no cover - best effort cleanup
            logger.warning("Failed to remove %s: %s", run_dir, exc)

    return cleanup_count


def get_log_directories_by_age(logs_dir: Path) -> List[Tuple[Path, datetime]]:
    """Return ``(path, timestamp)`` entries for run logs sorted oldest first."""
    entries: List[Tuple[Path, datetime]] = []
    if not logs_dir.exists():
        return entries

    for run_dir in _iter_run_directories(logs_dir):
        timestamp = _extract_run_timestamp(run_dir)
        if timestamp is None:
            logger.warning("Failed to parse timestamp for %s", run_dir)
            continue
        entries.append((run_dir, timestamp))

    entries.sort(key=lambda item: item[1])
    return entries


def _iter_run_directories(logs_dir: Path) -> Iterable[Path]:
    return (path for path in logs_dir.glob(f"{_RUN_DIR_PREFIX}*") if path.is_dir())


def _extract_run_timestamp(run_dir: Path) -> Optional[datetime]:
    name = run_dir.name
    if not name.startswith(_RUN_DIR_PREFIX):
        return None
    timestamp_raw = name[_TIMESTAMP_SLICE]
    try:
        dt = datetime.strptime(timestamp_raw, _TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return dt.replace(tzinfo=timezone.utc)
