"""Settings dataclasses derived from the merged configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

__all__ = ["AuthSettings", "ModelSettings", "parse_min_version"]


@dataclass(frozen=True)
class AuthSettings:
    """How credentials are discovered and validated."""

    env_vars: Tuple[str, ...] = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
    endpoint: str = "https://generativelanguage.googleapis.com/v1beta/models"
    max_attempts: int = 3  # per candidate
    retry_delay_seconds: float = 2.0
    prompt_attempts: int = 3
    request_timeout_seconds: float = 30.0

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "AuthSettings":
        auth = cfg.get("auth", {}) or {}
        defaults = cls()
        return cls(
            env_vars=tuple(auth.get("env_vars") or defaults.env_vars),
            endpoint=str(auth.get("endpoint") or defaults.endpoint),
            max_attempts=int(auth.get("max_attempts", defaults.max_attempts)),
            retry_delay_seconds=float(
                auth.get("retry_delay_seconds", defaults.retry_delay_seconds)
            ),
            prompt_attempts=int(auth.get("prompt_attempts", defaults.prompt_attempts)),
            request_timeout_seconds=float(
                auth.get("request_timeout_seconds", defaults.request_timeout_seconds)
            ),
        )


@dataclass(frozen=True)
class ModelSettings:
    min_version: Tuple[int, int] = (2, 5)
    family: Optional[str] = "gemini"  # None accepts any family

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "ModelSettings":
        models = cfg.get("models", {}) or {}
        return cls(
            min_version=parse_min_version(models.get("min_version", "2.5")),
            family=models.get("family", "gemini") or None,
        )


def parse_min_version(raw: Any) -> Tuple[int, int]:
    """Parse ``"<major>.<minor>"`` into an int tuple.

    Raises:
        ValueError: when the value is not two dot-separated integers.
    """
    major, _, minor = str(raw).strip().partition(".")
    return int(major), int(minor or 0)
