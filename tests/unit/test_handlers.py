from __future__ import annotations

import json
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from codebuff.agents import load_local_agents, validate_agent_definitions
from codebuff.cli import handlers
from codebuff.exceptions import AgentValidationError, HandlerError
from codebuff.shared import Credential, CredentialSource


def _console() -> Console:
    return Console(file=StringIO(), force_terminal=False, color_system=None)


@pytest.mark.asyncio
async def test_init_agents_creates_valid_example_without_overwriting(tmp_path: Path) -> None:
    assert await handlers.handle_init_agents(tmp_path, _console()) == 0
    readme = tmp_path / ".agents" / "README.md"
    readme.write_text("custom", encoding="utf-8")

    assert await handlers.handle_init_agents(tmp_path, _console()) == 0
    assert readme.read_text(encoding="utf-8") == "custom"

    agents = load_local_agents(tmp_path)
    assert list(agents) == ["my-reviewer"]
    validate_agent_definitions(agents.values())


@pytest.mark.asyncio
async def test_save_agent_appends_unique_ids(tmp_path: Path) -> None:
    (tmp_path / "codebuff.json").write_text(
        json.dumps({"spawnableAgents": ["a"], "other": 1}), encoding="utf-8"
    )
    rc = await handlers.handle_save_agent(["a", "b", "b", "c"], tmp_path, _console())

    assert rc == 0
    saved = json.loads((tmp_path / "codebuff.json").read_text(encoding="utf-8"))
    assert saved == {"spawnableAgents": ["a", "b", "c"], "other": 1}


@pytest.mark.asyncio
async def test_save_agent_requires_ids(tmp_path: Path) -> None:
    with pytest.raises(HandlerError):
        await handlers.handle_save_agent([], tmp_path, _console())


@pytest.mark.asyncio
async def test_publish_rejects_unknown_agents(tmp_path: Path) -> None:
    cred = Credential(CredentialSource.ENVIRONMENT, "k")
    with pytest.raises(HandlerError, match="missing-agent"):
        await handlers.handle_publish(
            ["missing-agent"],
            project_root=tmp_path,
            credential=cred,
            backend_url="http://127.0.0.1:9",
            console=_console(),
        )


def test_agent_loader_skips_traces_and_broken_files(tmp_path: Path) -> None:
    agents_dir = tmp_path / ".agents"
    (agents_dir / "traces").mkdir(parents=True)
    (agents_dir / "traces" / "t.json").write_text('{"id": "trace"}', encoding="utf-8")
    (agents_dir / "broken.yaml").write_text("id: [unclosed", encoding="utf-8")
    (agents_dir / "noid.json").write_text('{"displayName": "x"}', encoding="utf-8")
    (agents_dir / "ok.yaml").write_text("id: helper\ndisplayName: Helper\n", encoding="utf-8")

    assert list(load_local_agents(tmp_path)) == ["helper"]


def test_validator_collects_every_problem() -> None:
    with pytest.raises(AgentValidationError) as info:
        validate_agent_definitions(
            [
                {"id": "Bad Id", "displayName": "x"},
                {"id": "ok", "spawnableAgents": "nope"},
            ]
        )
    assert len(info.value.problems) == 3


def test_validator_skips_unauthenticated_mode() -> None:
    validate_agent_definitions([{"id": "Bad Id"}], authenticated=False)


@pytest.mark.asyncio
async def test_save_agent_keeps_tab_indented_json_config(tmp_path: Path) -> None:
    config = tmp_path / "codebuff.json"
    config.write_text(
        '{\n\t"name": "my-app",\n\t"spawnableAgents": ["a"]\n}', encoding="utf-8"
    )

    assert await handlers.handle_save_agent(["b"], tmp_path, _console()) == 0
    saved = json.loads(config.read_text(encoding="utf-8"))
    assert saved == {"name": "my-app", "spawnableAgents": ["a", "b"]}


@pytest.mark.asyncio
async def test_save_agent_refuses_to_overwrite_unreadable_config(tmp_path: Path) -> None:
    config = tmp_path / "codebuff.json"
    original = '{"name": "my-app", "spawnableAgents": ["a"],'
    config.write_text(original, encoding="utf-8")

    with pytest.raises(HandlerError, match="Refusing to overwrite"):
        await handlers.handle_save_agent(["b"], tmp_path, _console())
    assert config.read_text(encoding="utf-8") == original
