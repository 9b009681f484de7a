"""Credential candidates in source-priority order."""

from __future__ import annotations

import logging
import os
from typing import Callable, Iterator, List, Mapping, Optional, Sequence

from rich.console import Console
from rich.prompt import Prompt

from ..exceptions import CredentialsExhausted
from ..shared import Credential, CredentialSource

__all__ = ["CredentialStore", "PromptFn", "make_console_prompt"]

logger = logging.getLogger(__name__)

PromptFn = Callable[[str], str]

_PROMPT_MESSAGE = "Please enter your Google AI API key"


def make_console_prompt(console: Console) -> PromptFn:
    """Return a masked-input prompt bound to ``console``."""

    def _ask(message: str) -> str:
        return Prompt.ask(message, console=console, password=True)

    return _ask


class CredentialStore:
    """Read candidate credentials from the environment, then the user.

    Environment variables are read eagerly in their configured order. The
    interactive prompt is only shown when iteration actually reaches it.
    """

    def __init__(
        self,
        env_vars: Sequence[str],
        *,
        prompt: Optional[PromptFn] = None,
        prompt_attempts: int = 3,
        environ: Optional[Mapping[str, str]] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.env_vars = tuple(env_vars)
        self.prompt_attempts = prompt_attempts
        self._environ = os.environ if environ is None else environ
        self._console = console or Console()
        self._prompt = prompt or make_console_prompt(self._console)

    def environment_candidates(self) -> List[Credential]:
        candidates: List[Credential] = []
        seen = set()
        for name in self.env_vars:
            value = (self._environ.get(name) or "").strip()
            if not value or value in seen:
                continue
            seen.add(value)
            candidates.append(
                Credential(CredentialSource.ENVIRONMENT, value, origin=name)
            )
        return candidates

    def prompt_candidates(self) -> Iterator[Credential]:
        """Yield up to ``prompt_attempts`` keys typed by the user.

        Blank answers use up an attempt without producing a candidate.

        Raises:
            CredentialsExhausted: when standard input is closed.
        """
        for attempt in range(1, self.prompt_attempts + 1):
            try:
                answer = self._prompt(_PROMPT_MESSAGE)
            except EOFError as exc:
                raise CredentialsExhausted(
                    "No API key available: standard input is closed"
                ) from exc
            value = (answer or "").strip()
            if not value:
                self._console.print("[yellow]No API key entered.[/yellow]")
                logger.info("Blank API key at prompt attempt %d", attempt)
                continue
            yield Credential(
                CredentialSource.INTERACTIVE_PROMPT, value, origin=f"prompt#{attempt}"
            )

    def candidates(self) -> Iterator[Credential]:
        yield from self.environment_candidates()
        yield from self.prompt_candidates()
