"""Model catalog filtering and selection.

Identifiers follow ``<family>-<major>.<minor>[-suffix]`` (for example
``models/gemini-2.5-flash``). Versions compare as integer tuples, so
``2.10`` sorts above ``2.9``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from ..exceptions import NoQualifyingModel
from ..shared import ModelDescriptor

__all__ = [
    "ChooseFn",
    "ModelSelector",
    "describe_catalog",
    "filter_catalog",
    "make_console_chooser",
    "parse_model_version",
]

logger = logging.getLogger(__name__)

ChooseFn = Callable[[Sequence[ModelDescriptor]], ModelDescriptor]

_VERSION_PATTERN = re.compile(
    r"(?<![A-Za-z0-9])(?P<family>[A-Za-z][A-Za-z0-9]*)-(?P<major>\d+)\.(?P<minor>\d+)(?!\d)"
)


def parse_model_version(
    identifier: str, family: Optional[str] = None
) -> Optional[Tuple[int, int]]:
    """Return ``(major, minor)`` for the first ``<family>-<d>.<d>`` match.

    With ``family`` set, only that family counts (case-insensitive).
    """
    for match in _VERSION_PATTERN.finditer(identifier or ""):
        if family and match.group("family").lower() != family.lower():
            continue
        return int(match.group("major")), int(match.group("minor"))
    return None


def describe_catalog(
    catalog: Iterable[Dict[str, Any]], family: Optional[str] = None
) -> List[ModelDescriptor]:
    descriptors: List[ModelDescriptor] = []
    for entry in catalog:
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            continue
        version = parse_model_version(name, family)
        if version is None:
            continue
        descriptors.append(
            ModelDescriptor(
                identifier=name,
                display_name=str(entry.get("displayName") or name),
                version=version,
            )
        )
    return descriptors


def filter_catalog(
    catalog: Iterable[Dict[str, Any]],
    min_version: Tuple[int, int],
    family: Optional[str] = None,
) -> List[ModelDescriptor]:
    """Catalog entries at or above ``min_version``, in catalog order."""
    return [d for d in describe_catalog(catalog, family) if d.version >= min_version]


def make_console_chooser(console: Console) -> ChooseFn:
    def _choose(models: Sequence[ModelDescriptor]) -> ModelDescriptor:
        table = Table(title="Available models", show_header=True)
        table.add_column("#", justify="right")
        table.add_column("Model")
        for i, model in enumerate(models, start=1):
            table.add_row(str(i), model.label)
        console.print(table)
        choice = Prompt.ask(
            "Please select a Gemini model to use",
            console=console,
            choices=[str(i) for i in range(1, len(models) + 1)],
            default="1",
        )
        return models[int(choice) - 1]

    return _choose


class ModelSelector:
    """Pick a usable model from a validated catalog."""

    def __init__(
        self,
        min_version: Tuple[int, int] = (2, 5),
        *,
        family: Optional[str] = "gemini",
        choose: Optional[ChooseFn] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.min_version = min_version
        self.family = family
        self._choose = choose or make_console_chooser(console or Console())

    def select(self, catalog: Iterable[Dict[str, Any]]) -> ModelDescriptor:
        """Return the chosen descriptor.

        A single qualifying model is picked without prompting.

        Raises:
            NoQualifyingModel: when nothing meets the version floor.
        """
        survivors = filter_catalog(catalog, self.min_version, self.family)
        if not survivors:
            major, minor = self.min_version
            family = f"{self.family.capitalize()} " if self.family else ""
            raise NoQualifyingModel(
                f"No valid {family}{major}.{minor} or newer models found."
            )
        if len(survivors) == 1:
            logger.info("Auto-selected model %s", survivors[0].identifier)
            return survivors[0]
        chosen = self._choose(survivors)
        logger.info("Selected model %s", chosen.identifier)
        return chosen
