"""Aggregated shared types.

Re-exports the dataclasses passed between bootstrap stages so callers can
import from one place.
"""

from .config import AuthSettings, ModelSettings, parse_min_version
from .types import (
    CostMode,
    Credential,
    CredentialSource,
    DeprecatedFlag,
    InitAgents,
    Invalid,
    InvocationSpec,
    ModelDescriptor,
    Publish,
    Route,
    SaveAgent,
    Scaffold,
    Session,
    SessionParams,
    Transient,
    Valid,
    ValidationOutcome,
)

__all__ = [
    "AuthSettings",
    "CostMode",
    "Credential",
    "CredentialSource",
    "DeprecatedFlag",
    "InitAgents",
    "Invalid",
    "InvocationSpec",
    "ModelDescriptor",
    "ModelSettings",
    "Publish",
    "Route",
    "SaveAgent",
    "Scaffold",
    "Session",
    "SessionParams",
    "Transient",
    "Valid",
    "ValidationOutcome",
    "parse_min_version",
]
