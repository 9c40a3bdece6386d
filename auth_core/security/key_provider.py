"""
Key Provider - Source of the token signing secret

Module: security.key_provider
Date: 2026-10-19
Version: 0.1.0

The signing secret is owned outside this package. A KeyProvider hands
it over once, at AuthSystem construction; rotation is not supported.
"""

import os
from abc import ABC, abstractmethod
from typing import Union

from ..core.constants import ENV_SIGNING_SECRET, MIN_SIGNING_SECRET_BYTES


class KeyProviderError(Exception):
    """Signing secret unavailable or unusable"""
    pass


def _as_bytes(secret: Union[str, bytes]) -> bytes:
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    if not isinstance(secret, (bytes, bytearray)):
        raise KeyProviderError("Signing secret must be str or bytes")
    if len(secret) < MIN_SIGNING_SECRET_BYTES:
        raise KeyProviderError(
            f"Signing secret must be at least {MIN_SIGNING_SECRET_BYTES} bytes"
        )
    return bytes(secret)


class KeyProvider(ABC):
    """Supplies the single active signing secret"""

    @abstractmethod
    def signing_secret(self) -> bytes:
        """Return the signing secret"""


class StaticKeyProvider(KeyProvider):
    """Secret passed in directly"""

    def __init__(self, secret: Union[str, bytes]):
        self._secret = _as_bytes(secret)

    def signing_secret(self) -> bytes:
        return self._secret

    def __repr__(self) -> str:
        return "StaticKeyProvider(secret=<redacted>)"


class EnvKeyProvider(KeyProvider):
    """Secret read from an environment variable"""

    def __init__(self, variable: str = ENV_SIGNING_SECRET):
        self.variable = variable

    def signing_secret(self) -> bytes:
        value = os.getenv(self.variable)
        if not value:
            raise KeyProviderError(f"Environment variable {self.variable} is not set")
        return _as_bytes(value)
