"""Top-level startup sequence: config, routing, credentials, then dispatch.

Routing runs first because it is pure and cheap, so malformed input and
deprecated flags fail before any network request. Every route needs a
validated credential and model. Only the session route starts the readiness
tasks.
"""

from __future__ import annotations

import argparse
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from rich.console import Console

from ..auth import CredentialStore, CredentialValidator, acquire_credential
from ..auth.store import PromptFn
from ..config import load_config, validate_full_config
from ..display.print_mode import print_mode_log, set_print_mode
from ..exceptions import BootstrapError, DeprecatedUsage
from ..models.selection import ChooseFn, ModelSelector
from ..orchestration import ReadinessOrchestrator, build_readiness_tasks
from ..project_files import find_project_root, resolve_working_directory
from ..session import ConsoleSessionLauncher, SessionContext, SessionLauncher
from ..shared import (
    AuthSettings,
    Credential,
    DeprecatedFlag,
    InitAgents,
    InvocationSpec,
    ModelDescriptor,
    ModelSettings,
    Publish,
    Route,
    SaveAgent,
    Scaffold,
    Session,
)
from ..utils.log_rotation import cleanup_old_logs
from ..utils.platform_utils import get_platform_info
from ..utils.structured_logging import setup_structured_logging
from . import handlers
from .parser import invocation_from_namespace
from .router import route as route_invocation

__all__ = ["BootstrapEnv", "run", "setup_logging"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BootstrapEnv:
    working_dir: Path
    project_root: Path
    config: Dict[str, Any]
    run_id: str


def _make_run_id() -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"run_{ts}_{uuid.uuid4().hex[:8]}"


def _prepare(spec: InvocationSpec, args: argparse.Namespace, run_id: str) -> BootstrapEnv:
    working_dir = resolve_working_directory(spec.get("cwd"))
    project_root = find_project_root(working_dir)
    return BootstrapEnv(
        working_dir=working_dir,
        project_root=project_root,
        config=load_config(project_root, args),
        run_id=run_id,
    )


def setup_logging(config: Dict[str, Any], args: argparse.Namespace, run_id: str) -> None:
    """Configure structured logging and prune old run directories."""
    logging_cfg = config.get("logging", {}) or {}
    logs_dir = Path(str(logging_cfg.get("logs_dir"))).expanduser()
    try:
        setup_structured_logging(
            logs_dir=logs_dir,
            run_id=run_id,
            level=str(logging_cfg.get("level", "INFO")),
            console=bool(getattr(args, "verbose", False)),
        )
        cleanup_old_logs(logs_dir, int(logging_cfg.get("retention_days", 7)))
    except OSError as exc:
        # Startup continues without a log file.
        logger.warning("Could not set up log directory %s: %s", logs_dir, exc)


async def _acquire(
    console: Console,
    config: Dict[str, Any],
    prompt: Optional[PromptFn],
    chooser: Optional[ChooseFn],
) -> Tuple[Credential, ModelDescriptor]:
    settings = AuthSettings.from_config(config)
    store = CredentialStore(
        settings.env_vars,
        prompt=prompt,
        prompt_attempts=settings.prompt_attempts,
        console=console,
    )
    async with CredentialValidator(
        settings.endpoint, settings.request_timeout_seconds
    ) as validator:
        acquired = await acquire_credential(store, validator, settings, console)

    model_settings = ModelSettings.from_config(config)
    selector = ModelSelector(
        model_settings.min_version,
        family=model_settings.family,
        choose=chooser,
        console=console,
    )
    return acquired.credential, selector.select(acquired.catalog)


async def _launch_session(
    console: Console,
    session: Session,
    env: BootstrapEnv,
    credential: Credential,
    model: ModelDescriptor,
    launcher: SessionLauncher,
) -> int:
    params = session.params
    if params.trace:
        (env.project_root / ".agents" / "traces").mkdir(parents=True, exist_ok=True)
    orchestrator = ReadinessOrchestrator()
    handle = orchestrator.start(
        build_readiness_tasks(env.project_root, console, agent=params.agent)
    )
    context = SessionContext(
        credential=credential,
        model=model,
        project_root=env.project_root,
        working_dir=env.working_dir,
        run_id=env.run_id,
    )
    return await launcher.launch(orchestrator.wait(handle), params, context)


async def _dispatch(
    console: Console,
    resolved: Route,
    env: BootstrapEnv,
    credential: Credential,
    model: ModelDescriptor,
    launcher: SessionLauncher,
) -> int:
    if isinstance(resolved, Scaffold):
        return await handlers.create_template_project(
            resolved.template,
            resolved.directory,
            resolved.name,
            working_dir=env.working_dir,
            templates_url=str(env.config.get("templates_url")),
            console=console,
        )
    if isinstance(resolved, Publish):
        return await handlers.handle_publish(
            resolved.agent_names,
            project_root=env.project_root,
            credential=credential,
            backend_url=str(env.config.get("backend_url")),
            console=console,
        )
    if isinstance(resolved, InitAgents):
        return await handlers.handle_init_agents(env.project_root, console)
    if isinstance(resolved, SaveAgent):
        return await handlers.handle_save_agent(
            resolved.agent_ids, env.project_root, console
        )
    if isinstance(resolved, Session):
        return await _launch_session(console, resolved, env, credential, model, launcher)
    raise TypeError(f"unroutable: {resolved!r}")


def _report_fatal(console: Console, exc: BootstrapError) -> int:
    message = str(exc)
    console.print(f"[red]{message}[/red]")
    logger.error(
        "Startup failed: %s",
        message,
        extra={"errorMessage": message, "error_type": type(exc).__name__},
    )
    print_mode_log("error", message)
    return 1


def _report_deprecated(console: Console, exc: DeprecatedUsage) -> int:
    message = str(exc)
    console.print(f"[red]Warning: {message}[/red]")
    logger.error("Deprecated flag used", extra={"errorMessage": message})
    print_mode_log("error", message)
    return 1


async def run(
    console: Console,
    args: argparse.Namespace,
    *,
    launcher: Optional[SessionLauncher] = None,
    prompt: Optional[PromptFn] = None,
    chooser: Optional[ChooseFn] = None,
) -> int:
    run_id = _make_run_id()
    spec = invocation_from_namespace(args)
    set_print_mode(bool(spec.get("print")))
    try:
        env = _prepare(spec, args, run_id)
        if not validate_full_config(console, env.config):
            return 1
        setup_logging(env.config, args, run_id)
        logger.info("Starting run %s in %s", run_id, env.working_dir)
        logger.debug("Platform: %s", get_platform_info())

        resolved = route_invocation(spec)
        if isinstance(resolved, DeprecatedFlag):
            raise DeprecatedUsage(resolved.message)
        logger.info("Resolved route %s", type(resolved).__name__)

        credential, model = await _acquire(console, env.config, prompt, chooser)
        return await _dispatch(
            console,
            resolved,
            env,
            credential,
            model,
            launcher or ConsoleSessionLauncher(console),
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        return 130
    except DeprecatedUsage as exc:
        return _report_deprecated(console, exc)
    except BootstrapError as exc:
        return _report_fatal(console, exc)
