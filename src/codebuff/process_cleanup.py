"""Termination of child processes a previous run failed to stop.

The session layer records PIDs with :func:`record_stale_pid` when it cannot
reap a child; the next startup signals whatever is still alive.
"""

from __future__ import annotations

import json
import logging
import os
import signal
from pathlib import Path
from typing import List, Optional

from .utils.platform_utils import get_codebuff_home, is_process_alive

__all__ = ["cleanup_stale_processes", "record_stale_pid", "stale_pid_file"]

logger = logging.getLogger(__name__)


def stale_pid_file() -> Path:
    return get_codebuff_home() / "stale_pids.json"


def _read_pids(path: Path) -> List[int]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable PID file %s: %s", path, exc)
        return []
    if not isinstance(data, list):
        return []
    return [
        int(p)
        for p in data
        if not isinstance(p, bool) and (isinstance(p, int) or str(p).isdigit())
    ]


def record_stale_pid(pid: int, path: Optional[Path] = None) -> None:
    target = path or stale_pid_file()
    pids = _read_pids(target)
    if pid in pids:
        return
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(pids + [pid]), encoding="utf-8")


def cleanup_stale_processes(path: Optional[Path] = None) -> List[int]:
    """SIGTERM every recorded PID that is still alive, then clear the record.

    Returns the PIDs that were signalled.
    """
    target = path or stale_pid_file()
    signalled: List[int] = []
    for pid in _read_pids(target):
        if pid == os.getpid() or not is_process_alive(pid):
            continue
        try:
            os.kill(pid, signal.SIGTERM)
            signalled.append(pid)
            logger.info("Sent SIGTERM to stale process %d", pid)
        except ProcessLookupError:
            continue
        except PermissionError as exc:
            logger.warning("Cannot terminate stale process %d: %s", pid, exc)
    try:
        target.unlink()
    except FileNotFoundError:
        pass
    return signalled
