"""NDJSON output for non-interactive print mode."""

from __future__ import annotations

import json
import sys
from typing import Any, Optional, TextIO

__all__ = ["print_mode_log", "set_print_mode"]

_enabled = False


def set_print_mode(enabled: bool) -> None:
    global _enabled
    _enabled = bool(enabled)


def print_mode_log(
    record_type: str, message: str, stream: Optional[TextIO] = None, **fields: Any
) -> None:
    """Emit one ``{"type", "message", ...}`` line when print mode is on."""
    if not _enabled:
        return
    payload = {"type": record_type, "message": message, **fields}
    print(json.dumps(payload, separators=(",", ":")), file=stream or sys.stdout)
