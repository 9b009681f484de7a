"""Cross-platform helpers for Codebuff."""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Dict

__all__ = [
    "get_codebuff_home",
    "get_platform_info",
    "is_process_alive",
    "is_windows",
]


def get_platform_info() -> Dict[str, object]:
    """Return basic identifiers for the current platform."""
    system = platform.system()
    return {
        "system": system,
        "machine": platform.machine(),
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "is_windows": system == "Windows",
        "is_macos": system == "Darwin",
        "is_linux": system == "Linux",
    }


def is_windows() -> bool:
    return platform.system() == "Windows"


def get_codebuff_home() -> Path:
    """Return the per-user state directory (``$CODEBUFF_HOME`` or ``~/.codebuff``)."""
    override = os.environ.get("CODEBUFF_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".codebuff"


def is_process_alive(pid: int) -> bool:
    """Return ``True`` when ``pid`` refers to a running process.

    On Windows signal 0 would terminate the target, so liveness is assumed.
    """
    if pid <= 0:
        return False
    if is_windows():
        return True
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but owned by someone else.
        return True
    return True
