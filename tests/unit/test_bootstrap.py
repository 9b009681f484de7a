from __future__ import annotations

import json
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List

import pytest
from rich.console import Console

from codebuff.cli import bootstrap
from codebuff.cli.parser import create_parser
from codebuff.display import print_mode
from codebuff.exceptions import NoQualifyingModel
from codebuff.shared import Credential, CredentialSource, ModelDescriptor

CRED = Credential(CredentialSource.ENVIRONMENT, "AIza-key", origin="GEMINI_API_KEY")
MODEL = ModelDescriptor("models/gemini-2.5-pro", "Gemini 2.5 Pro", (2, 5))
_REAL_ACQUIRE = bootstrap._acquire


def _console() -> Console:
    return Console(file=StringIO(), force_terminal=False, color_system=None)


def _output(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


class RecordingLauncher:
    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    async def launch(self, ready, params, context) -> int:
        outcomes = await ready
        self.calls.append({"params": params, "context": context, "outcomes": outcomes})
        return 0


@pytest.fixture
def patched(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Dict[str, Any]:
    state: Dict[str, Any] = {"acquired": 0}

    async def fake_acquire(console, config, prompt, chooser):
        state["acquired"] += 1
        return CRED, MODEL

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CODEBUFF_HOME", str(tmp_path / "home"))
    monkeypatch.setattr(bootstrap, "setup_logging", lambda *a, **k: None)
    monkeypatch.setattr(bootstrap, "_acquire", fake_acquire)
    yield state
    print_mode.set_print_mode(False)


def _args(*argv: str):
    return create_parser().parse_intermixed_args(list(argv))


@pytest.mark.asyncio
async def test_session_route_starts_readiness_and_launches(patched, tmp_path: Path) -> None:
    launcher = RecordingLauncher()
    rc = await bootstrap.run(
        _console(), _args("explain", "--max", "--agent", "helper"), launcher=launcher
    )

    assert rc == 0
    assert patched["acquired"] == 1
    (call,) = launcher.calls
    assert call["params"].cost_mode == "max"
    assert call["params"].initial_input == "explain"
    assert call["context"].model == MODEL
    assert call["context"].project_root.resolve() == tmp_path.resolve()
    assert [o.name for o in call["outcomes"]] == [
        "file-context-init",
        "process-cleanup",
        "agent-load-and-validate",
    ]


@pytest.mark.asyncio
async def test_print_mode_without_prompt_fails_before_network(
    patched, capsys: pytest.CaptureFixture
) -> None:
    launcher = RecordingLauncher()
    console = _console()
    rc = await bootstrap.run(console, _args("--print"), launcher=launcher)

    assert rc == 1
    assert patched["acquired"] == 0
    assert launcher.calls == []
    assert "Print mode requires a prompt" in _output(console)
    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["type"] == "error"


@pytest.mark.asyncio
async def test_malformed_params_fail_before_network(patched) -> None:
    console = _console()
    rc = await bootstrap.run(console, _args("hi", "--params", "{oops"))
    assert rc == 1
    assert patched["acquired"] == 0
    assert "Error parsing --params JSON" in _output(console)


@pytest.mark.asyncio
async def test_deprecated_flag_reports_and_exits(patched, caplog) -> None:
    console = _console()
    rc = await bootstrap.run(console, _args("--pro"))
    assert rc == 1
    assert patched["acquired"] == 0
    assert "Warning: The --pro flag is deprecated" in _output(console)
    assert any(r.getMessage() == "Deprecated flag used" for r in caplog.records)


@pytest.mark.asyncio
async def test_subcommands_bypass_readiness(patched, monkeypatch) -> None:
    seen: List[Any] = []

    async def fake_publish(names, **kwargs) -> int:
        seen.append((tuple(names), kwargs["credential"]))
        return 0

    def no_readiness(*a, **k):
        raise AssertionError("readiness must not start for subcommands")

    monkeypatch.setattr(bootstrap.handlers, "handle_publish", fake_publish)
    monkeypatch.setattr(bootstrap, "build_readiness_tasks", no_readiness)

    rc = await bootstrap.run(_console(), _args("publish", "a", "b"))
    assert rc == 0
    assert seen == [(("a", "b"), CRED)]


@pytest.mark.asyncio
async def test_credential_errors_become_exit_code_one(patched, monkeypatch) -> None:
    async def failing_acquire(*a, **k):
        raise NoQualifyingModel("No valid Gemini 2.5 or newer models found.")

    monkeypatch.setattr(bootstrap, "_acquire", failing_acquire)
    launcher = RecordingLauncher()
    console = _console()

    rc = await bootstrap.run(console, _args("hello"), launcher=launcher)
    assert rc == 1
    assert launcher.calls == []
    assert "No valid Gemini 2.5" in _output(console)


@pytest.mark.asyncio
async def test_missing_cwd_is_fatal(patched) -> None:
    console = _console()
    rc = await bootstrap.run(console, _args("--cwd", "does-not-exist", "hi"))
    assert rc == 1
    assert patched["acquired"] == 0


@pytest.mark.asyncio
async def test_closed_stdin_in_print_mode_emits_error_record(
    patched, monkeypatch, capsys: pytest.CaptureFixture
) -> None:
    def closed_prompt(message: str) -> str:
        raise EOFError

    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setattr(bootstrap, "_acquire", _REAL_ACQUIRE)
    console = _console()

    rc = await bootstrap.run(console, _args("-p", "hi"), prompt=closed_prompt)

    assert rc == 1
    assert "standard input is closed" in _output(console)
    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record == {
        "type": "error",
        "message": "No API key available: standard input is closed",
    }
