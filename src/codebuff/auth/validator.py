"""
HTTP validation of API keys against the model catalog endpoint.

A successful response doubles as the model catalog so the selector does not
need a second round trip.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from ..shared import Credential, Invalid, Transient, Valid, ValidationOutcome

__all__ = ["CredentialValidator", "INVALID_STATUSES"]

logger = logging.getLogger(__name__)

# Statuses that mean the key itself was rejected; anything else may be retried.
INVALID_STATUSES = frozenset({400, 401, 403})


class CredentialValidator:
    """Async client that classifies a key as valid, invalid, or transiently failing."""

    def __init__(self, endpoint: str, timeout_seconds: float = 30.0):
        """
        Initialize the validator.

        Args:
            endpoint: Model catalog URL (GET, key in ``x-goog-api-key``)
            timeout_seconds: Total per-request timeout
        """
        self.endpoint = endpoint
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._session:
            await self._session.close()
            self._session = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active session."""
        if not self._session:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def validate(self, candidate: Credential) -> ValidationOutcome:
        """
        Issue one authenticated catalog request.

        Returns:
            ``Valid(catalog)`` on 2xx with a ``models`` list, ``Invalid`` when the
            provider rejects the key, ``Transient`` for everything else
        """
        try:
            session = await self._ensure_session()
            async with session.get(
                self.endpoint, headers={"x-goog-api-key": candidate.value}
            ) as resp:
                if resp.status in INVALID_STATUSES:
                    logger.info(
                        "Key %s rejected with HTTP %s", candidate.redacted, resp.status
                    )
                    return Invalid(resp.status)
                if resp.status >= 300:
                    return Transient(f"HTTP {resp.status}")
                body = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning("Validation request failed: %s", e)
            return Transient(str(e) or type(e).__name__)

        models = body.get("models") if isinstance(body, dict) else None
        if not isinstance(models, list):
            return Transient("response did not contain a models list")
        return Valid([m for m in models if isinstance(m, dict)])
