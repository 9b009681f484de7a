"""The three startup subsystems run by the readiness orchestrator."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console

from ..agents import display_loaded_agents, load_local_agents, validate_agent_definitions
from ..config import load_project_config
from ..process_cleanup import cleanup_stale_processes
from ..project_files import ProjectFileContext, scan_project_files
from .readiness import TaskFactory

__all__ = [
    "AGENT_LOAD_TASK",
    "FILE_CONTEXT_TASK",
    "PROCESS_CLEANUP_TASK",
    "build_readiness_tasks",
    "init_project_file_context",
    "load_and_validate_agents",
    "run_process_cleanup",
]

logger = logging.getLogger(__name__)

FILE_CONTEXT_TASK = "file-context-init"
PROCESS_CLEANUP_TASK = "process-cleanup"
AGENT_LOAD_TASK = "agent-load-and-validate"


async def init_project_file_context(project_root: Path) -> ProjectFileContext:
    context = await asyncio.to_thread(scan_project_files, project_root)
    logger.info("Indexed %d project files under %s", context.file_count, project_root)
    return context


async def run_process_cleanup(pid_file: Optional[Path] = None) -> List[int]:
    return await asyncio.to_thread(cleanup_stale_processes, pid_file)


async def load_and_validate_agents(
    project_root: Path,
    console: Console,
    *,
    show: bool = True,
    authenticated: bool = True,
) -> Dict[str, Dict[str, Any]]:
    """Load templates, validate them, and list them when no agent was chosen."""
    agents = await asyncio.to_thread(load_local_agents, project_root)
    validate_agent_definitions(agents.values(), authenticated=authenticated)
    if show:
        spawnable = load_project_config(project_root).get("spawnableAgents") or []
        display_loaded_agents(console, agents, spawnable)
    return agents


def build_readiness_tasks(
    project_root: Path,
    console: Console,
    *,
    agent: Optional[str] = None,
    pid_file: Optional[Path] = None,
) -> Dict[str, TaskFactory]:
    return {
        FILE_CONTEXT_TASK: lambda: init_project_file_context(project_root),
        PROCESS_CLEANUP_TASK: lambda: run_process_cleanup(pid_file),
        AGENT_LOAD_TASK: lambda: load_and_validate_agents(
            project_root, console, show=agent is None
        ),
    }
