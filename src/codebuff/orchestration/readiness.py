"""Concurrent startup tasks joined into a single readiness signal.

Every task is launched before any is awaited. A failing task is logged and
resolves to a degraded :class:`TaskOutcome`; siblings keep running and the
join always resolves once each task has finished.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Mapping, Optional

__all__ = [
    "ReadinessHandle",
    "ReadinessOrchestrator",
    "TaskFactory",
    "TaskOutcome",
    "degraded_tasks",
]

logger = logging.getLogger(__name__)

TaskFactory = Callable[[], Awaitable[Any]]


@dataclass
class TaskOutcome:
    """Result of one readiness task."""

    name: str
    value: Any = None
    error: Optional[BaseException] = None
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ReadinessHandle:
    names: List[str]
    tasks: List["asyncio.Task[TaskOutcome]"] = field(default_factory=list)

    def done(self) -> bool:
        return all(t.done() for t in self.tasks)


async def _run_isolated(name: str, factory: TaskFactory) -> TaskOutcome:
    started = time.monotonic()
    try:
        value = await factory()
    except Exception as exc:
        logger.exception(
            "Readiness task %s failed; continuing degraded",
            name,
            extra={"task": name},
        )
        return TaskOutcome(
            name=name, error=exc, duration_seconds=time.monotonic() - started
        )
    elapsed = time.monotonic() - started
    logger.debug("Readiness task %s finished in %.3fs", name, elapsed)
    return TaskOutcome(name=name, value=value, duration_seconds=elapsed)


class ReadinessOrchestrator:
    """Start independent tasks together and join them in submission order."""

    def start(self, tasks: Mapping[str, TaskFactory]) -> ReadinessHandle:
        """Launch every task now. Must be called with a running event loop."""
        handle = ReadinessHandle(names=list(tasks))
        for name, factory in tasks.items():
            handle.tasks.append(
                asyncio.create_task(_run_isolated(name, factory), name=name)
            )
        logger.info("Started readiness tasks: %s", ", ".join(handle.names))
        return handle

    async def wait(self, handle: ReadinessHandle) -> List[TaskOutcome]:
        """Resolve once all tasks resolved; outcomes keep submission order."""
        outcomes = list(await asyncio.gather(*handle.tasks))
        failed = degraded_tasks(outcomes)
        if failed:
            logger.warning("Startup ready with degraded subsystems: %s", ", ".join(failed))
        else:
            logger.info("All readiness tasks completed")
        return outcomes


def degraded_tasks(outcomes: List[TaskOutcome]) -> List[str]:
    return [o.name for o in outcomes if not o.ok]
