"""CLI layer for the Codebuff command-line interface."""

__all__ = [
    "bootstrap",
    "handlers",
    "main",
    "parser",
    "router",
]
