"""Handlers for the non-session commands (publish, init-agents, save-agent, --create).

Each handler returns an exit code on success and raises :class:`HandlerError`
on failure so the bootstrap reports every fatal path the same way.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Sequence

import aiohttp
from rich.console import Console

from ..agents import AGENTS_DIRNAME, EXAMPLE_AGENT, load_local_agents
from ..config import load_project_config, save_project_config
from ..exceptions import ConfigError, HandlerError
from ..shared import Credential

__all__ = [
    "create_template_project",
    "handle_init_agents",
    "handle_publish",
    "handle_save_agent",
]

logger = logging.getLogger(__name__)

_AGENTS_README = """# Local agents

Each `*.json` or `*.yaml` file in this directory defines one agent.
Required fields: `id` (lowercase, digits, '-') and `displayName`.

Run `codebuff save-agent <id>` to make an agent spawnable, or
`codebuff publish <id>` to share it.
"""


def _load_config_for_update(project_root: Path) -> Dict[str, Any]:
    try:
        return load_project_config(project_root, strict=True)
    except ConfigError as exc:
        raise HandlerError(f"Refusing to overwrite project config: {exc}") from exc


async def handle_publish(
    agent_names: Sequence[str],
    *,
    project_root: Path,
    credential: Credential,
    backend_url: str,
    console: Console,
    timeout_seconds: float = 30.0,
) -> int:
    if not agent_names:
        raise HandlerError("Usage: codebuff publish <agent-id> [<agent-id> ...]")
    agents = load_local_agents(project_root)
    missing = [name for name in agent_names if name not in agents]
    if missing:
        raise HandlerError(f"Agent(s) not found in {AGENTS_DIRNAME}: {', '.join(missing)}")

    url = f"{backend_url.rstrip('/')}/api/agents/publish"
    payload = {"data": [agents[name] for name in agent_names]}
    try:
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=timeout_seconds)
        ) as session:
            async with session.post(
                url, json=payload, headers={"x-api-key": credential.value}
            ) as resp:
                if resp.status >= 300:
                    text = await resp.text()
                    raise HandlerError(f"Publish failed (HTTP {resp.status}): {text[:200]}")
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise HandlerError(f"Publish failed: {exc}") from exc

    for name in agent_names:
        console.print(f"[green]Published {name}[/green]")
    logger.info("Published agents: %s", ", ".join(agent_names))
    return 0


async def handle_init_agents(project_root: Path, console: Console) -> int:
    agents_dir = project_root / AGENTS_DIRNAME
    agents_dir.mkdir(parents=True, exist_ok=True)
    created = []
    files = {
        "README.md": _AGENTS_README,
        f"{EXAMPLE_AGENT['id']}.json": json.dumps(EXAMPLE_AGENT, indent=2) + "\n",
    }
    for filename, content in files.items():
        target = agents_dir / filename
        if target.exists():
            console.print(f"[yellow]Skipped {target} (already exists)[/yellow]")
            continue
        target.write_text(content, encoding="utf-8")
        created.append(target)
        console.print(f"[green]Created {target}[/green]")
    logger.info("init-agents created %d files", len(created))
    return 0


async def handle_save_agent(
    agent_ids: Sequence[str], project_root: Path, console: Console
) -> int:
    if not agent_ids:
        raise HandlerError("Usage: codebuff save-agent <agent-id> [<agent-id> ...]")
    config = _load_config_for_update(project_root)
    spawnable = config.get("spawnableAgents") or []
    if not isinstance(spawnable, list):
        raise HandlerError("spawnableAgents in the project config must be a list")
    added = [a for a in dict.fromkeys(agent_ids) if a not in spawnable]
    config["spawnableAgents"] = spawnable + added
    save_project_config(project_root, config)
    if added:
        console.print(f"[green]Added to spawnable agents: {', '.join(added)}[/green]")
    else:
        console.print("[yellow]All agents were already spawnable.[/yellow]")
    return 0


async def create_template_project(
    template: str,
    directory: str,
    name: str,
    *,
    working_dir: Path,
    templates_url: str,
    console: Console,
) -> int:
    target = (working_dir / directory).resolve()
    if target.exists() and any(target.iterdir()):
        raise HandlerError(f"Target directory is not empty: {target}")
    source = f"{templates_url.rstrip('/')}/{template}"
    console.print(f"Creating {name} from template [cyan]{template}[/cyan]...")
    try:
        proc = await asyncio.create_subprocess_exec(
            "git",
            "clone",
            "--depth",
            "1",
            source,
            str(target),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _out, err = await proc.communicate()
    except OSError as exc:
        raise HandlerError(f"Could not run git: {exc}") from exc
    if proc.returncode != 0:
        raise HandlerError(
            f"Failed to fetch template '{template}': {err.decode(errors='replace').strip()}"
        )
    config = _load_config_for_update(target)
    config["name"] = name
    save_project_config(target, config)
    console.print(f"[green]Created {name} in {target}[/green]")
    return 0
