"""Codebuff CLI startup orchestration.

Only the entry point and version are public; everything else is internal.
"""

from .version import __version__

__all__ = ["__version__", "main"]


def main() -> None:
    from .cli.main import main as _main

    _main()
