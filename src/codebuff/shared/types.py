"""Value types that flow between the bootstrap stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

__all__ = [
    "CostMode",
    "Credential",
    "CredentialSource",
    "DeprecatedFlag",
    "InitAgents",
    "Invalid",
    "InvocationSpec",
    "ModelDescriptor",
    "Publish",
    "Route",
    "SaveAgent",
    "Scaffold",
    "Session",
    "SessionParams",
    "Transient",
    "Valid",
    "ValidationOutcome",
]

CostMode = Literal["normal", "lite", "max", "experimental", "ask"]


class CredentialSource(str, Enum):
    ENVIRONMENT = "environment"
    INTERACTIVE_PROMPT = "interactive-prompt"


@dataclass(frozen=True)
class Credential:
    """A candidate API key and where it came from."""

    source: CredentialSource
    value: str = field(repr=False)
    origin: str = ""  # env var name or prompt attempt label

    @property
    def redacted(self) -> str:
        return f"{self.value[:4]}..."


# Validation outcomes: exactly one is produced per validation attempt.


@dataclass(frozen=True)
class Valid:
    catalog: List[Dict[str, Any]]


@dataclass(frozen=True)
class Invalid:
    status: int


@dataclass(frozen=True)
class Transient:
    error: str


ValidationOutcome = Union[Valid, Invalid, Transient]


@dataclass(frozen=True)
class ModelDescriptor:
    identifier: str
    display_name: str
    version: Tuple[int, int]

    @property
    def label(self) -> str:
        return f"{self.display_name} ({self.identifier})"


@dataclass(frozen=True)
class InvocationSpec:
    """Parsed command line. Unset options are absent from ``options``."""

    positionals: Tuple[str, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "positionals", tuple(self.positionals))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def has(self, name: str) -> bool:
        return name in self.options

    def get(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)


@dataclass(frozen=True)
class SessionParams:
    cost_mode: CostMode = "normal"
    git: Optional[Literal["stage"]] = None
    print_mode: bool = False
    cwd: Optional[str] = None
    trace: bool = False
    agent: Optional[str] = None
    params: Optional[Dict[str, Any]] = None
    initial_input: str = ""
    run_init_flow: bool = False


# Routes: the router resolves every invocation to exactly one of these.


@dataclass(frozen=True)
class Scaffold:
    template: str
    directory: str
    name: str


@dataclass(frozen=True)
class Publish:
    agent_names: Tuple[str, ...]


@dataclass(frozen=True)
class InitAgents:
    pass


@dataclass(frozen=True)
class SaveAgent:
    agent_ids: Tuple[str, ...]


@dataclass(frozen=True)
class DeprecatedFlag:
    flag: str
    message: str


@dataclass(frozen=True)
class Session:
    params: SessionParams


Route = Union[Scaffold, Publish, InitAgents, SaveAgent, DeprecatedFlag, Session]
