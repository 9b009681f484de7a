#!/usr/bin/env python3
"""Codebuff CLI entrypoint.

A thin shell: parse, pick the console, run the async bootstrap, exit with
its return code. This is the only place that calls ``sys.exit``.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Final, List, Optional

from rich.console import Console

from .bootstrap import run
from .parser import create_parser

__all__: Final = ["main"]


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entrypoint."""
    parser = create_parser()
    args = parser.parse_intermixed_args(argv)
    # Print mode keeps stdout for NDJSON; human output goes to stderr.
    console = Console(stderr=bool(args.print))
    try:
        rc = asyncio.run(run(console, args))
    except KeyboardInterrupt:
        rc = 130
    sys.exit(int(rc))


if __name__ == "__main__":
    main()
