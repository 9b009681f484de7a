"""Credential discovery, validation, and the acquisition protocol."""

from .protocol import AcquiredCredential, acquire_credential, transition
from .store import CredentialStore
from .validator import CredentialValidator

__all__ = [
    "AcquiredCredential",
    "CredentialStore",
    "CredentialValidator",
    "acquire_credential",
    "transition",
]
