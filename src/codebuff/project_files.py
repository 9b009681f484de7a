"""Project root discovery and the file context handed to the session."""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .exceptions import MalformedInput

__all__ = [
    "ProjectFileContext",
    "find_project_root",
    "load_ignore_patterns",
    "resolve_working_directory",
    "scan_project_files",
]

logger = logging.getLogger(__name__)

_ALWAYS_SKIPPED = {".git", "node_modules", "__pycache__", ".venv", "venv", ".mypy_cache"}
_MAX_FILES = 10_000


@dataclass
class ProjectFileContext:
    project_root: Path
    files: List[str] = field(default_factory=list)
    truncated: bool = False

    @property
    def file_count(self) -> int:
        return len(self.files)


def resolve_working_directory(cwd: Optional[str] = None) -> Path:
    """Return the absolute working directory, honoring ``--cwd``.

    Raises:
        MalformedInput: when ``cwd`` does not name an existing directory.
    """
    if not cwd:
        return Path.cwd()
    path = Path(cwd).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    if not path.is_dir():
        raise MalformedInput(f"Directory does not exist: {cwd}")
    return path.resolve()


def find_project_root(working_dir: Path) -> Path:
    """Nearest ancestor holding ``.git``; the working dir itself otherwise."""
    for candidate in (working_dir, *working_dir.parents):
        if (candidate / ".git").exists():
            return candidate
    return working_dir


def load_ignore_patterns(project_root: Path) -> List[str]:
    """Plain patterns from the root ``.gitignore`` (negations are not supported)."""
    path = project_root / ".gitignore"
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []
    patterns = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("!"):
            continue
        patterns.append(line.lstrip("/"))
    return patterns


def _ignored(rel_path: str, name: str, is_dir: bool, patterns: List[str]) -> bool:
    for pattern in patterns:
        if pattern.endswith("/"):
            if not is_dir:
                continue
            pattern = pattern[:-1]
        if fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(rel_path, pattern):
            return True
    return False


def scan_project_files(project_root: Path, max_files: int = _MAX_FILES) -> ProjectFileContext:
    """Walk ``project_root`` and collect relative file paths (POSIX separators)."""
    patterns = load_ignore_patterns(project_root)
    context = ProjectFileContext(project_root=project_root)
    for dirpath, dirnames, filenames in os.walk(project_root):
        rel_dir = Path(dirpath).relative_to(project_root)
        dirnames[:] = sorted(
            d
            for d in dirnames
            if d not in _ALWAYS_SKIPPED
            and not _ignored((rel_dir / d).as_posix(), d, True, patterns)
        )
        for name in sorted(filenames):
            rel = (rel_dir / name).as_posix()
            if _ignored(rel, name, False, patterns):
                continue
            if len(context.files) >= max_files:
                context.truncated = True
                logger.warning("File scan stopped at %d files", max_files)
                return context
            context.files.append(rel)
    return context
