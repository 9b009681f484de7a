"""Credential acquisition: a pure retry state machine plus the async driver.

Each candidate starts in an :class:`AttemptState`. :func:`transition` consumes
one :class:`ValidationOutcome` and says what happens next; the driver in
:func:`acquire_credential` only performs the I/O the step asks for.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from rich.console import Console

from ..exceptions import CredentialsExhausted
from ..shared import (
    AuthSettings,
    Credential,
    CredentialSource,
    Invalid,
    Valid,
    ValidationOutcome,
)
from .store import CredentialStore

__all__ = [
    "AcquiredCredential",
    "AttemptState",
    "Step",
    "StepKind",
    "acquire_credential",
    "transition",
]

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


class _Validator(Protocol):
    async def validate(self, candidate: Credential) -> ValidationOutcome: ...


class StepKind(str, Enum):
    ACCEPT = "accept"
    RETRY = "retry"  # same candidate, after the fixed delay
    ADVANCE = "advance"  # next candidate, no delay
    FATAL = "fatal"


@dataclass(frozen=True)
class AttemptState:
    candidate_index: int
    attempts_remaining: int
    fatal_on_exhaustion: bool = False


@dataclass(frozen=True)
class Step:
    kind: StepKind
    state: AttemptState
    catalog: Optional[List[Dict[str, Any]]] = None
    reason: str = ""


@dataclass(frozen=True)
class AcquiredCredential:
    credential: Credential
    catalog: List[Dict[str, Any]]


def transition(state: AttemptState, outcome: ValidationOutcome) -> Step:
    if isinstance(outcome, Valid):
        return Step(StepKind.ACCEPT, state=state, catalog=outcome.catalog)
    if isinstance(outcome, Invalid):
        return Step(
            StepKind.ADVANCE, state, reason=f"rejected (HTTP {outcome.status})"
        )
    remaining = state.attempts_remaining - 1
    if remaining > 0:
        return Step(
            StepKind.RETRY,
            state=replace(state, attempts_remaining=remaining),
            reason=outcome.error,
        )
    if state.fatal_on_exhaustion:
        return Step(StepKind.FATAL, state, reason=outcome.error)
    return Step(StepKind.ADVANCE, state, reason=outcome.error)


async def acquire_credential(
    store: CredentialStore,
    validator: _Validator,
    settings: AuthSettings,
    console: Console,
    *,
    sleep: SleepFn = asyncio.sleep,
) -> AcquiredCredential:
    """Validate candidates one at a time until one is accepted.

    Raises:
        CredentialsExhausted: when the last environment key keeps failing
            transiently, or every candidate (prompts included) is used up.
    """
    env_candidates = store.environment_candidates()
    last_env_index = len(env_candidates) - 1
    candidates = itertools.chain(env_candidates, store.prompt_candidates())

    for index, candidate in enumerate(candidates):
        state = AttemptState(
            candidate_index=index,
            attempts_remaining=settings.max_attempts,
            fatal_on_exhaustion=(
                candidate.source is CredentialSource.ENVIRONMENT
                and index == last_env_index
            ),
        )
        while True:
            outcome = await validator.validate(candidate)
            step = transition(state, outcome)
            if step.kind is StepKind.ACCEPT:
                _report_accepted(console, candidate)
                return AcquiredCredential(candidate, step.catalog or [])
            if step.kind is StepKind.FATAL:
                raise CredentialsExhausted(
                    f"Error validating API key after {settings.max_attempts} "
                    f"attempts: {step.reason}"
                )
            if step.kind is StepKind.ADVANCE:
                _report_advance(console, candidate, outcome, step)
                break
            state = step.state
            console.print(
                f"[yellow]Error validating API key, retrying in "
                f"{settings.retry_delay_seconds:g} seconds... "
                f"({state.attempts_remaining} retries left)[/yellow]"
            )
            logger.info(
                "Retrying %s from %s: %s",
                candidate.redacted,
                candidate.origin,
                step.reason,
            )
            await sleep(settings.retry_delay_seconds)

    raise CredentialsExhausted(
        "No valid API key found. Set GEMINI_API_KEY or GOOGLE_API_KEY, "
        "or enter a valid key when prompted."
    )


def _report_accepted(console: Console, candidate: Credential) -> None:
    if candidate.source is CredentialSource.ENVIRONMENT:
        console.print("[green]Using a valid API key from environment variables.[/green]")
    logger.info("Accepted API key from %s", candidate.origin)


def _report_advance(
    console: Console, candidate: Credential, outcome: ValidationOutcome, step: Step
) -> None:
    if candidate.source is CredentialSource.ENVIRONMENT:
        problem = (
            "is invalid"
            if isinstance(outcome, Invalid)
            else "could not be validated"
        )
        console.print(
            f"[yellow]API key starting with {candidate.redacted} {problem}. "
            "Trying next key.[/yellow]"
        )
    else:
        console.print("[yellow]The provided API key is invalid. Please try again.[/yellow]")
    logger.warning(
        "API key %s from %s not accepted: %s",
        candidate.redacted,
        candidate.origin,
        step.reason,
    )
