"""Classify an invocation into exactly one route.

``route`` is a pure function of the :class:`InvocationSpec`: it never prints,
reads the environment, or touches the network. Fatal input problems are
raised as :class:`MalformedInput` for the caller to report.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Tuple

from ..exceptions import MalformedInput
from ..shared import (
    CostMode,
    DeprecatedFlag,
    InitAgents,
    InvocationSpec,
    Publish,
    Route,
    SaveAgent,
    Scaffold,
    Session,
    SessionParams,
)

__all__ = [
    "COST_MODE_PRECEDENCE",
    "DEPRECATED_OPTIONS",
    "RESERVED_COMMANDS",
    "parse_agent_params",
    "resolve_cost_mode",
    "route",
    "strip_host_artifacts",
]

RESERVED_COMMANDS = ("publish", "init-agents", "save-agent")
COST_MODE_PRECEDENCE: Tuple[CostMode, ...] = ("lite", "max", "experimental", "ask")
DEPRECATED_OPTIONS: Dict[str, str] = {
    "pro": (
        "The --pro flag is deprecated. "
        "Please restart codebuff and use the --max option instead."
    ),
}

# Compiled single-file runtimes inject their own bundle path as argv[1].
_HOST_ARTIFACT_PREFIXES = ("/$bunfs",)


def strip_host_artifacts(positionals: Tuple[str, ...]) -> Tuple[str, ...]:
    if positionals and positionals[0].startswith(_HOST_ARTIFACT_PREFIXES):
        return positionals[1:]
    return positionals


def resolve_cost_mode(spec: InvocationSpec) -> CostMode:
    for mode in COST_MODE_PRECEDENCE:
        if spec.get(mode):
            return mode
    return "normal"


def parse_agent_params(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if raw is None:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedInput(f"Error parsing --params JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise MalformedInput("Error parsing --params JSON: expected a JSON object")
    return parsed


def _session_route(spec: InvocationSpec, positionals: Tuple[str, ...]) -> Session:
    print_mode = bool(spec.get("print"))
    raw_params = spec.get("params")
    if print_mode and not positionals and not raw_params:
        raise MalformedInput("Error: Print mode requires a prompt to be set")
    params = SessionParams(
        cost_mode=resolve_cost_mode(spec),
        git="stage" if spec.get("git") == "stage" else None,
        print_mode=print_mode,
        cwd=spec.get("cwd"),
        trace=bool(spec.get("trace")),
        agent=spec.get("agent"),
        params=parse_agent_params(raw_params),
        initial_input=" ".join(positionals),
        run_init_flow=bool(spec.get("init")),
    )
    return Session(params)


def route(spec: InvocationSpec) -> Route:
    positionals = strip_host_artifacts(spec.positionals)

    template = spec.get("create")
    if template:
        directory = positionals[0] if len(positionals) > 0 else "."
        name = positionals[1] if len(positionals) > 1 else template
        return Scaffold(template=template, directory=directory, name=name)

    command = positionals[0] if positionals else None
    if command == "publish":
        return Publish(agent_names=positionals[1:])
    if command == "init-agents":
        return InitAgents()
    if command == "save-agent":
        return SaveAgent(agent_ids=positionals[1:])

    for option, message in DEPRECATED_OPTIONS.items():
        if spec.get(option):
            return DeprecatedFlag(flag=f"--{option}", message=message)

    return _session_route(spec, positionals)
