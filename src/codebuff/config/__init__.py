"""Configuration loading, defaults, and validation."""

from codebuff.config.defaults import (
    deep_merge,
    get_default_config,
    load_env_config,
    load_global_config,
    load_yaml_config,
    merge_config,
)
from codebuff.config.loader import (
    build_cli_config,
    load_config,
    load_project_config,
    save_project_config,
)

__all__ = [
    "build_cli_config",
    "deep_merge",
    "get_default_config",
    "load_config",
    "load_env_config",
    "load_global_config",
    "load_project_config",
    "load_yaml_config",
    "merge_config",
    "save_project_config",
    "validate_full_config",
]


def validate_full_config(*args, **kwargs):
    """Lazily import validation to avoid pulling rich in at package import."""
    from codebuff.config.validation import validate_full_config as _vf

    return _vf(*args, **kwargs)
