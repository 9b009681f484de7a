"""Codebuff bootstrap exception hierarchy."""

from __future__ import annotations

from typing import List

__all__ = [
    "AgentValidationError",
    "BootstrapError",
    "ConfigError",
    "CredentialsExhausted",
    "DeprecatedUsage",
    "HandlerError",
    "MalformedInput",
    "NoQualifyingModel",
]


class BootstrapError(Exception):
    """Base class for fatal startup errors."""


class CredentialsExhausted(BootstrapError):
    """Raised when no credential candidate could be validated."""


class NoQualifyingModel(BootstrapError):
    """Raised when the model catalog has nothing at or above the version floor."""


class MalformedInput(BootstrapError):
    """Raised for unusable command-line input."""


class DeprecatedUsage(BootstrapError):
    """Raised when a removed flag is used."""


class ConfigError(BootstrapError):
    """Raised when the merged configuration is invalid."""


class HandlerError(BootstrapError):
    """Raised when a non-session subcommand fails."""


class AgentValidationError(Exception):
    """Raised by the agent validator when definitions violate the schema.

    Not a ``BootstrapError``: agent loading runs as a readiness task and its
    failures degrade the session instead of aborting startup.
    """

    def __init__(self, problems: List[str]) -> None:
        super().__init__("; ".join(problems) or "invalid agent definitions")
        self.problems = problems
