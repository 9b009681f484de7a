"""Default configuration and layered config sources."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..utils.platform_utils import get_codebuff_home

__all__ = [
    "deep_merge",
    "get_default_config",
    "load_env_config",
    "load_global_config",
    "load_yaml_config",
    "merge_config",
]

logger = logging.getLogger(__name__)

# env var -> (section, key); section None means top level
_ENV_TO_CONFIG_KEY = {
    "CODEBUFF_MODEL_ENDPOINT": ("auth", "endpoint"),
    "CODEBUFF_BACKEND_URL": (None, "backend_url"),
    "CODEBUFF_TEMPLATES_URL": (None, "templates_url"),
    "CODEBUFF_LOG_LEVEL": ("logging", "level"),
    "CODEBUFF_LOGS_DIR": ("logging", "logs_dir"),
}


def merge_config(
    cli_args: Dict[str, Any],
    env_config: Dict[str, Any],
    project_config: Dict[str, Any],
    global_config: Dict[str, Any],
    defaults: Dict[str, Any],
) -> Dict[str, Any]:
    """Merge configuration dictionaries honoring precedence order."""
    merged = defaults.copy()
    deep_merge(merged, global_config)
    deep_merge(merged, project_config)
    deep_merge(merged, env_config)
    cli_filtered = {key: value for key, value in cli_args.items() if value is not None}
    deep_merge(merged, cli_filtered)
    return merged


def deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> None:
    """Recursively merge ``overlay`` into ``base`` in place."""
    for key, value in overlay.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            base[key] = dict(base[key])
            deep_merge(base[key], value)
        else:
            base[key] = value


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """Load a YAML (or JSON) mapping from ``path`` or return an empty dict."""
    if not path.exists():
        return {}

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (yaml.YAMLError, OSError) as exc:
        logger.warning("Failed to load %s: %s", path, exc)
        return {}

    return data if isinstance(data, dict) else {}


def load_global_config() -> Dict[str, Any]:
    """Load user-level configuration from standard locations."""
    try:
        candidates = (
            get_codebuff_home() / "config.yaml",
            Path.home() / ".config" / "codebuff" / "config.yaml",
        )
    except (OSError, RuntimeError):
        return {}

    for candidate in candidates:
        data = load_yaml_config(candidate)
        if data:
            return data
    return {}


def load_env_config(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Load supported ``CODEBUFF_*`` overrides from the environment."""
    env = os.environ if environ is None else environ
    config: Dict[str, Any] = {}
    for env_key, (section, key) in _ENV_TO_CONFIG_KEY.items():
        if env_key not in env:
            continue
        if section is None:
            config[key] = env[env_key]
        else:
            config.setdefault(section, {})[key] = env[env_key]
    return config


def get_default_config() -> Dict[str, Any]:
    """Return a fresh copy of the default configuration."""
    return {
        "backend_url": "https://www.codebuff.com",
        "templates_url": "https://github.com/CodebuffAI/codebuff-community",
        "auth": {
            "env_vars": ["GEMINI_API_KEY", "GOOGLE_API_KEY"],
            "endpoint": "https://generativelanguage.googleapis.com/v1beta/models",
            "max_attempts": 3,
            "retry_delay_seconds": 2.0,
            "prompt_attempts": 3,
            "request_timeout_seconds": 30,
        },
        "models": {
            "min_version": "2.5",
            "family": "gemini",
        },
        "logging": {
            "level": "INFO",
            "logs_dir": str(Path.home() / ".codebuff" / "logs"),
            "retention_days": 7,
        },
        "spawnableAgents": [],
    }
