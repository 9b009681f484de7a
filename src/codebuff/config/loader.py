"""Project-level config discovery and persistence."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..exceptions import ConfigError
from .defaults import (
    get_default_config,
    load_env_config,
    load_global_config,
    merge_config,
)

__all__ = [
    "PROJECT_CONFIG_NAMES",
    "build_cli_config",
    "load_config",
    "load_project_config",
    "project_config_path",
    "save_project_config",
]

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAMES = ("codebuff.json", "codebuff.yaml", "codebuff.yml")


def project_config_path(project_root: Path) -> Optional[Path]:
    for name in PROJECT_CONFIG_NAMES:
        candidate = project_root / name
        if candidate.exists():
            return candidate
    return None


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            if path.suffix == ".json":
                data = json.load(handle)
            else:
                data = yaml.safe_load(handle)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to read config {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"invalid config format (expected mapping): {path}")
    return data


def load_project_config(project_root: Path, strict: bool = False) -> Dict[str, Any]:
    """Load ``codebuff.json``/``codebuff.yaml`` from the project root.

    Rules:
    - No config file: return ``{}``.
    - Unreadable or malformed file: raise :class:`ConfigError` when ``strict``
      (callers that write the file back), otherwise warn and return ``{}``.
    """
    path = project_config_path(project_root)
    if path is None:
        return {}
    try:
        return _read_config_file(path)
    except ConfigError as exc:
        if strict:
            raise
        logger.warning("Ignoring project config: %s", exc)
        return {}


def save_project_config(project_root: Path, data: Dict[str, Any]) -> Path:
    """Write ``data`` back to the project config, creating ``codebuff.json``."""
    path = project_config_path(project_root) or project_root / "codebuff.json"
    if path.suffix == ".json":
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    logger.info("Saved project config to %s", path)
    return path


def build_cli_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Map the few CLI flags that double as config values."""
    cli: Dict[str, Any] = {}
    if getattr(args, "verbose", False):
        cli["logging"] = {"level": "DEBUG", "console": True}
    return cli


def load_config(
    project_root: Path, args: Optional[argparse.Namespace] = None
) -> Dict[str, Any]:
    """Load configuration from defaults, files, environment, and CLI."""
    return merge_config(
        cli_args=build_cli_config(args) if args is not None else {},
        env_config=load_env_config(),
        project_config=load_project_config(project_root),
        global_config=load_global_config(),
        defaults=get_default_config(),
    )
