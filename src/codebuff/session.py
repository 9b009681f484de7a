"""Hand-off point to the session engine.

The conversation engine itself lives outside this package. It receives the
readiness signal unresolved, so it can render its first prompt while the
startup tasks are still running.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, List, Protocol

from rich.console import Console

from .display.print_mode import print_mode_log
from .orchestration.readiness import TaskOutcome, degraded_tasks
from .shared import Credential, ModelDescriptor, SessionParams

__all__ = ["ConsoleSessionLauncher", "SessionContext", "SessionLauncher"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    credential: Credential
    model: ModelDescriptor
    project_root: Path
    working_dir: Path
    run_id: str


class SessionLauncher(Protocol):
    async def launch(
        self,
        ready: Awaitable[List[TaskOutcome]],
        params: SessionParams,
        context: SessionContext,
    ) -> int: ...


class ConsoleSessionLauncher:
    """Default launcher: waits for readiness and reports what the engine gets."""

    def __init__(self, console: Console) -> None:
        self.console = console

    async def launch(
        self,
        ready: Awaitable[List[TaskOutcome]],
        params: SessionParams,
        context: SessionContext,
    ) -> int:
        if not params.print_mode:
            self.console.print(
                f"[bold]Codebuff[/bold] in {context.working_dir} "
                f"([cyan]{context.model.identifier}[/cyan], {params.cost_mode} mode)"
            )
        outcomes = await ready
        failed = degraded_tasks(outcomes)
        if failed and not params.print_mode:
            self.console.print(
                f"[yellow]Some startup tasks failed ({', '.join(failed)}); "
                "continuing with reduced context.[/yellow]"
            )
        logger.info(
            "Session ready",
            extra={
                "run_id": context.run_id,
                "model": context.model.identifier,
                "cost_mode": params.cost_mode,
                "agent": params.agent,
                "degraded": failed,
            },
        )
        print_mode_log(
            "session",
            params.initial_input,
            model=context.model.identifier,
            agent=params.agent,
            degraded=failed,
        )
        return 0
