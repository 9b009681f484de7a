from __future__ import annotations

import asyncio
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from codebuff.orchestration import ReadinessOrchestrator, degraded_tasks
from codebuff.orchestration.tasks import (
    AGENT_LOAD_TASK,
    FILE_CONTEXT_TASK,
    PROCESS_CLEANUP_TASK,
    build_readiness_tasks,
)


@pytest.mark.asyncio
async def test_tasks_start_before_any_is_awaited() -> None:
    started: list[str] = []
    gate = asyncio.Event()

    async def task(name: str) -> str:
        started.append(name)
        await gate.wait()
        return name

    orch = ReadinessOrchestrator()
    handle = orch.start({n: (lambda n=n: task(n)) for n in ("a", "b", "c")})
    await asyncio.sleep(0)
    assert sorted(started) == ["a", "b", "c"]
    assert not handle.done()

    gate.set()
    outcomes = await orch.wait(handle)
    assert [o.value for o in outcomes] == ["a", "b", "c"]
    assert handle.done()


@pytest.mark.asyncio
async def test_failure_is_isolated_and_siblings_complete() -> None:
    async def boom() -> None:
        raise RuntimeError("index failed")

    async def slow() -> int:
        await asyncio.sleep(0.01)
        return 42

    orch = ReadinessOrchestrator()
    outcomes = await orch.wait(orch.start({"index": boom, "agents": slow}))

    assert [o.name for o in outcomes] == ["index", "agents"]
    assert isinstance(outcomes[0].error, RuntimeError)
    assert outcomes[1].ok and outcomes[1].value == 42
    assert degraded_tasks(outcomes) == ["index"]


@pytest.mark.asyncio
async def test_join_resolves_when_every_task_fails() -> None:
    def sync_raise():
        raise ValueError("not even awaitable")

    async def async_raise() -> None:
        raise OSError("disk")

    orch = ReadinessOrchestrator()
    outcomes = await asyncio.wait_for(
        orch.wait(orch.start({"x": sync_raise, "y": async_raise})), timeout=1
    )
    assert degraded_tasks(outcomes) == ["x", "y"]


@pytest.mark.asyncio
async def test_build_readiness_tasks_runs_all_three(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("print('hi')\n", encoding="utf-8")
    (tmp_path / ".agents").mkdir()
    (tmp_path / ".agents" / "bad.json").write_text('{"id": "Bad Id"}', encoding="utf-8")
    console = Console(file=StringIO(), force_terminal=False, color_system=None)

    tasks = build_readiness_tasks(
        tmp_path, console, agent="reviewer", pid_file=tmp_path / "pids.json"
    )
    assert list(tasks) == [FILE_CONTEXT_TASK, PROCESS_CLEANUP_TASK, AGENT_LOAD_TASK]

    orch = ReadinessOrchestrator()
    outcomes = {o.name: o for o in await orch.wait(orch.start(tasks))}

    assert "src/app.py" in outcomes[FILE_CONTEXT_TASK].value.files
    assert outcomes[PROCESS_CLEANUP_TASK].value == []
    assert not outcomes[AGENT_LOAD_TASK].ok
