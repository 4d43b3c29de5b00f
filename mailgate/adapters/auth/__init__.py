"""Credential verification adapters."""

from mailgate.adapters.auth.base import AbstractCredentialVerifier
from mailgate.adapters.auth.static import StaticCredentialVerifier

__all__ = [
    "AbstractCredentialVerifier",
    "StaticCredentialVerifier",
]
