"""Validation utilities for the merged configuration."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from rich.console import Console

from ..shared.config import parse_min_version

__all__ = ["collect_config_errors", "validate_full_config"]


def _add(
    errors: List[Tuple[str, str, str]], field: str, reason: str, example: str = ""
) -> None:
    errors.append((field, reason, example))


def _validate_auth(cfg: Dict[str, Any], errors: List[Tuple[str, str, str]]) -> None:
    auth = cfg.get("auth", {}) or {}
    for key, example in (("max_attempts", "3"), ("prompt_attempts", "3")):
        try:
            if int(auth.get(key, 3)) <= 0:
                _add(errors, f"auth.{key}", "must be > 0", example)
        except (TypeError, ValueError):
            _add(errors, f"auth.{key}", "must be an integer", example)
    try:
        if float(auth.get("retry_delay_seconds", 2.0)) < 0:
            _add(errors, "auth.retry_delay_seconds", "must be >= 0", "2.0")
    except (TypeError, ValueError):
        _add(errors, "auth.retry_delay_seconds", "must be a number", "2.0")
    env_vars = auth.get("env_vars", [])
    if not isinstance(env_vars, list) or not all(isinstance(v, str) for v in env_vars):
        _add(errors, "auth.env_vars", "must be a list of names", "[GEMINI_API_KEY]")
    if not str(auth.get("endpoint", "")).startswith(("http://", "https://")):
        _add(errors, "auth.endpoint", "must be an http(s) URL")


def _validate_models(cfg: Dict[str, Any], errors: List[Tuple[str, str, str]]) -> None:
    raw = (cfg.get("models", {}) or {}).get("min_version", "2.5")
    try:
        parse_min_version(raw)
    except ValueError:
        _add(errors, "models.min_version", "must be '<major>.<minor>'", "2.5")


def collect_config_errors(cfg: Dict[str, Any]) -> List[Tuple[str, str, str]]:
    errors: List[Tuple[str, str, str]] = []
    _validate_auth(cfg, errors)
    _validate_models(cfg, errors)
    spawnable = cfg.get("spawnableAgents", [])
    if not isinstance(spawnable, list):
        _add(errors, "spawnableAgents", "must be a list of agent ids", '["reviewer"]')
    return errors


def validate_full_config(console: Console, cfg: Dict[str, Any]) -> bool:
    """Print each problem as ``field: reason (example)``; return ``True`` if clean."""
    errors = collect_config_errors(cfg)
    if not errors:
        return True
    console.print("[red]Invalid configuration:[/red]")
    for field, reason, example in errors:
        hint = f" (example: {example})" if example else ""
        console.print(f"  • {field}: {reason}{hint}")
    return False
