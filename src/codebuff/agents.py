"""Local agent templates: loading, validation, and display.

Templates live under ``<project>/.agents/`` as JSON or YAML mappings, one
agent per file. Trace output written under ``.agents/traces`` is skipped.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from rich.console import Console
from rich.table import Table

from .exceptions import AgentValidationError

__all__ = [
    "AGENTS_DIRNAME",
    "EXAMPLE_AGENT",
    "display_loaded_agents",
    "load_local_agents",
    "validate_agent_definitions",
]

logger = logging.getLogger(__name__)

AGENTS_DIRNAME = ".agents"
_TEMPLATE_SUFFIXES = {".json", ".yaml", ".yml"}
_SKIPPED_DIRS = {"traces"}
_AGENT_ID = re.compile(r"^[a-z0-9][a-z0-9-]*$")

EXAMPLE_AGENT: Dict[str, Any] = {
    "id": "my-reviewer",
    "displayName": "My Reviewer",
    "model": "models/gemini-2.5-pro",
    "spawnableAgents": [],
    "instructionsPrompt": "Review the latest changes and point out bugs.",
}


def _iter_template_files(agents_dir: Path) -> Iterable[Path]:
    for path in sorted(agents_dir.rglob("*")):
        if not path.is_file() or path.suffix not in _TEMPLATE_SUFFIXES:
            continue
        if any(part in _SKIPPED_DIRS for part in path.relative_to(agents_dir).parts):
            continue
        yield path


def load_local_agents(project_root: Path) -> Dict[str, Dict[str, Any]]:
    """Return ``{agent_id: definition}`` for every readable template.

    Unreadable files and files without an ``id`` are logged and skipped; a
    later file with a duplicate id replaces the earlier one.
    """
    agents_dir = project_root / AGENTS_DIRNAME
    agents: Dict[str, Dict[str, Any]] = {}
    if not agents_dir.is_dir():
        return agents
    for path in _iter_template_files(agents_dir):
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle)
        except (yaml.YAMLError, OSError) as exc:
            logger.warning("Failed to load agent template %s: %s", path, exc)
            continue
        if not isinstance(data, dict) or not data.get("id"):
            logger.warning("Agent template %s has no id; skipping", path)
            continue
        agent_id = str(data["id"])
        if agent_id in agents:
            logger.warning("Duplicate agent id %s in %s", agent_id, path)
        agents[agent_id] = data
    logger.info("Loaded %d local agents", len(agents))
    return agents


def _problems_for(definition: Dict[str, Any]) -> List[str]:
    agent_id = str(definition.get("id", ""))
    problems: List[str] = []
    if not _AGENT_ID.match(agent_id):
        problems.append(f"{agent_id or '<missing>'}: id must be lowercase letters, digits, or '-'")
    if not isinstance(definition.get("displayName"), str) or not definition.get("displayName"):
        problems.append(f"{agent_id}: displayName is required")
    if "model" in definition and not isinstance(definition["model"], str):
        problems.append(f"{agent_id}: model must be a string")
    spawnable = definition.get("spawnableAgents", [])
    if not isinstance(spawnable, list) or not all(isinstance(s, str) for s in spawnable):
        problems.append(f"{agent_id}: spawnableAgents must be a list of agent ids")
    return problems


def validate_agent_definitions(
    definitions: Iterable[Dict[str, Any]], authenticated: bool = True
) -> None:
    """Raise :class:`AgentValidationError` listing every schema violation.

    Validation only applies in authenticated mode.
    """
    if not authenticated:
        return
    problems: List[str] = []
    for definition in definitions:
        problems.extend(_problems_for(definition))
    if problems:
        raise AgentValidationError(problems)


def display_loaded_agents(
    console: Console,
    agents: Dict[str, Dict[str, Any]],
    spawnable: Optional[Iterable[str]] = None,
) -> None:
    if not agents:
        return
    spawnable_ids = set(spawnable or [])
    table = Table(title="Loaded agents", show_header=True)
    table.add_column("Agent")
    table.add_column("Name")
    table.add_column("Spawnable", justify="center")
    for agent_id, definition in sorted(agents.items()):
        table.add_row(
            agent_id,
            str(definition.get("displayName", "")),
            "✓" if agent_id in spawnable_ids else "",
        )
    console.print(table)
