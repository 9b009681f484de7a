"""CLI parser builder for Codebuff.

Argument groups are added by small helpers; ``invocation_from_namespace``
turns the parsed namespace into the immutable :class:`InvocationSpec` the
router works on.
"""

from __future__ import annotations

import argparse
from typing import Any, Dict

from ..shared import InvocationSpec
from ..version import __version__

__all__ = ["create_parser", "invocation_from_namespace"]

_POSITIONAL_DEST = "args"


def _epilog() -> str:
    return (
        "Examples:\n"
        "  $ codebuff                                  # Start in current directory\n"
        '  $ codebuff -p "tell me about the codebase"  # Print mode (non-interactive)\n'
        "  $ codebuff --cwd my-project                 # Start in specific directory\n"
        "  $ codebuff --trace                          # Write subagent traces to .agents/traces\n"
        "  $ codebuff --create nextjs my-app           # Create and scaffold a new Next.js project\n"
        "  $ codebuff init-agents                      # Create example agent files in .agents\n"
        "  $ codebuff save-agent my-agent-id           # Add agent ID to spawnable agents list\n"
        "  $ codebuff publish my-agent                 # Publish agent template to store\n"
        '  $ codebuff --agent file-picker "find relevant files for authentication"\n'
        "  $ codebuff --agent reviewer --params '{\"focus\": \"security\"}' \"review this code\"\n"
    )


def add_positional(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        _POSITIONAL_DEST,
        nargs="*",
        metavar="ARGS",
        help="Initial prompt, or a command: publish | init-agents | save-agent",
    )


def add_session_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Session")
    g.add_argument("--agent", metavar="ID", help="Run a specific agent")
    g.add_argument(
        "--params", metavar="JSON", help="JSON object of parameters for --agent"
    )
    g.add_argument(
        "-p",
        "--print",
        action="store_true",
        help="Print mode: run the prompt non-interactively and exit",
    )
    g.add_argument("--cwd", metavar="PATH", help="Working directory")
    g.add_argument("--trace", action="store_true", help="Log subagent traces")
    g.add_argument(
        "--git", metavar="MODE", help="Git integration; only 'stage' is supported"
    )
    g.add_argument("--init", action="store_true", help="Run the project init flow")


def add_cost_mode_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Cost mode")
    g.add_argument("--lite", action="store_true", help="Cheaper, faster responses")
    g.add_argument("--max", action="store_true", help="Most capable responses")
    g.add_argument(
        "--experimental", action="store_true", help="Try unreleased behavior"
    )
    g.add_argument("--ask", action="store_true", help="Answer questions only")
    g.add_argument("--pro", action="store_true", help=argparse.SUPPRESS)


def add_project_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Project")
    g.add_argument(
        "--create",
        metavar="TEMPLATE",
        help="Scaffold a project from TEMPLATE: --create TEMPLATE [DIR] [NAME]",
    )


def add_diag_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Diagnostics")
    g.add_argument(
        "--verbose", action="store_true", help="Mirror debug logs to stderr"
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codebuff",
        description="AI coding assistant for your terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_epilog(),
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    add_positional(parser)
    add_session_args(parser)
    add_cost_mode_args(parser)
    add_project_args(parser)
    add_diag_args(parser)
    return parser


def invocation_from_namespace(args: argparse.Namespace) -> InvocationSpec:
    """Build an :class:`InvocationSpec`; unset options are left out entirely."""
    options: Dict[str, Any] = {}
    for key, value in vars(args).items():
        if key == _POSITIONAL_DEST or value is None or value is False or value == "":
            continue
        options[key] = value
    return InvocationSpec(
        positionals=tuple(getattr(args, _POSITIONAL_DEST, None) or ()),
        options=options,
    )
