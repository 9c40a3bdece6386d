"""
Password Hasher - Salted one-way hashing of secrets

Module: security.password_hasher
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - bcrypt hashing with per-call salt
  - Constant-time verification against stored salt/cost parameters
  - Configurable cost factor
  - SecretHasher capability interface

ARCHITECTURE:
hash() returns (digest, params) where params is the bcrypt salt/cost
prefix ("$2b$<cost>$<salt>") and digest is the full bcrypt output.
verify() recomputes bcrypt with params and compares the result to the
stored digest with hmac.compare_digest.

SECURITY NOTES:
- Fresh salt on every hash() call
- verify() never raises; any failure is a mismatch
- Secrets longer than 72 bytes are rejected, not truncated
"""

import hmac
import logging
from typing import Protocol, Tuple

import bcrypt

from ..core.constants import DEFAULT_HASH_COST, MAX_HASH_COST, MAX_SECRET_BYTES, MIN_HASH_COST
from ..core.errors import EmptySecretError, InvalidInputError


class SecretHasher(Protocol):
    """Anything that can hash and verify secrets"""

    def hash(self, secret: str) -> Tuple[bytes, bytes]:
        ...

    def verify(self, secret: str, credential_hash: bytes, hash_parameters: bytes) -> bool:
        ...


def _encode_secret(secret: str) -> bytes:
    if not isinstance(secret, str):
        raise InvalidInputError("Secret must be a string")
    if not secret:
        raise EmptySecretError("Secret must not be empty")

    encoded = secret.encode("utf-8")
    if len(encoded) > MAX_SECRET_BYTES:
        raise InvalidInputError(f"Secret must be at most {MAX_SECRET_BYTES} bytes")
    if b"\x00" in encoded:
        raise InvalidInputError("Secret must not contain NUL characters")
    return encoded


class PasswordHasher:
    """
    bcrypt-based SecretHasher.

    Stateless apart from the cost factor, so one instance can be shared
    across threads.
    """

    def __init__(self, cost: int = DEFAULT_HASH_COST):
        """
        Initialize hasher

        Args:
            cost: bcrypt log2 work factor (higher = slower, stronger)

        Raises:
            ValueError: If cost is outside bcrypt's supported range
        """
        if not MIN_HASH_COST <= cost <= MAX_HASH_COST:
            raise ValueError(
                f"Hash cost must be between {MIN_HASH_COST} and {MAX_HASH_COST}"
            )
        self.logger = logging.getLogger("security.password_hasher")
        self.cost = cost

    def hash(self, secret: str) -> Tuple[bytes, bytes]:
        """
        Hash a secret with a fresh salt

        Args:
            secret: Plaintext secret

        Returns:
            (credential_hash, hash_parameters)

        Raises:
            EmptySecretError: If secret is empty
            InvalidInputError: If secret is not a usable string
        """
        encoded = _encode_secret(secret)
        params = bcrypt.gensalt(rounds=self.cost)
        digest = bcrypt.hashpw(encoded, params)
        return digest, params

    def verify(self, secret: str, credential_hash: bytes, hash_parameters: bytes) -> bool:
        """
        Check a secret against stored hash material

        Args:
            secret: Plaintext secret
            credential_hash: Digest returned by hash()
            hash_parameters: Parameters returned by hash()

        Returns:
            True if secret matches, False otherwise
        """
        try:
            encoded = _encode_secret(secret)
        except InvalidInputError:
            encoded = None

        # Unusable secrets still pay for one bcrypt round trip
        try:
            candidate = bcrypt.hashpw(encoded or b"\x01", bytes(hash_parameters))
        except (ValueError, TypeError):
            return False

        if encoded is None:
            return False
        return hmac.compare_digest(candidate, bytes(credential_hash))
