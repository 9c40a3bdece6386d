"""
Auth System - Registration, login and token verification

Module: core.auth_system
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Principal registration with hashed secrets
  - Login issuing signed bearer tokens
  - Token verification with collapsed failure reporting
  - Secret change and deregistration for authenticated principals
  - AuthConfig with environment overrides

ARCHITECTURE:
AuthSystem composes:
  - CredentialStore (where principals live)
  - SecretHasher (how secrets are hashed and checked)
  - TokenCodec (how tokens are signed and verified)
  - AuditLogger (optional operator trail)
and translates their errors into the public taxonomy in core.errors.

SECURITY NOTES:
- Unknown identifier and wrong secret both raise InvalidCredentialsError,
  and an unknown identifier is checked against a decoy hash so both
  paths cost one bcrypt computation
- Token failures all raise InvalidTokenError; the sub-cause only goes
  to the debug log and the audit trail
- Secrets, hashes and the signing secret never reach logs or errors
"""

import logging
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

from .constants import (
    DEFAULT_CLOCK_SKEW_SECONDS,
    DEFAULT_HASH_COST,
    DEFAULT_TOKEN_TTL_SECONDS,
    ENV_CLOCK_SKEW_SECONDS,
    ENV_HASH_COST,
    ENV_TOKEN_TTL_SECONDS,
    MAX_IDENTIFIER_LENGTH,
    TOKEN_ALGORITHM,
)
from .errors import (
    InvalidCredentialsError,
    InvalidInputError,
    InvalidTokenError,
    UserAlreadyExistsError,
)
from ..persistence.audit_store import AuditLogger
from ..persistence.credential_store import (
    AlreadyExistsError,
    CredentialStore,
    InMemoryCredentialStore,
    NotFoundError,
    PrincipalRecord,
)
from ..security.key_provider import KeyProvider, StaticKeyProvider
from ..security.password_hasher import PasswordHasher, SecretHasher
from ..security.token_codec import TokenClaims, TokenCodec, TokenError


@dataclass
class AuthConfig:
    """Authentication configuration"""
    token_ttl: timedelta = timedelta(seconds=DEFAULT_TOKEN_TTL_SECONDS)
    hash_cost: int = DEFAULT_HASH_COST
    clock_skew_tolerance: timedelta = timedelta(seconds=DEFAULT_CLOCK_SKEW_SECONDS)
    algorithm: str = TOKEN_ALGORITHM
    max_identifier_length: int = MAX_IDENTIFIER_LENGTH

    @classmethod
    def from_env(cls) -> "AuthConfig":
        """
        Build config from environment variables, falling back to defaults

        Raises:
            ValueError: If a variable is set but not an integer
        """
        return cls(
            token_ttl=timedelta(
                seconds=int(os.getenv(ENV_TOKEN_TTL_SECONDS, DEFAULT_TOKEN_TTL_SECONDS))
            ),
            hash_cost=int(os.getenv(ENV_HASH_COST, DEFAULT_HASH_COST)),
            clock_skew_tolerance=timedelta(
                seconds=int(os.getenv(ENV_CLOCK_SKEW_SECONDS, DEFAULT_CLOCK_SKEW_SECONDS))
            ),
        )


def _loggable(identifier: object) -> str:
    """Bounded repr of an untrusted identifier for log lines"""
    text = repr(identifier)
    return text if len(text) <= 64 else text[:61] + "..."


class AuthSystem:
    """
    Credential authentication core.

    Typical usage:
        auth = AuthSystem(StaticKeyProvider(secret))
        auth.register("alice", "correct horse")
        token = auth.login("alice", "correct horse")
        claims = auth.verify_token(token)
    """

    def __init__(
        self,
        key_provider: Union[KeyProvider, str, bytes],
        store: Optional[CredentialStore] = None,
        hasher: Optional[SecretHasher] = None,
        config: Optional[AuthConfig] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize auth system

        Args:
            key_provider: Source of the signing secret (or the secret itself)
            store: Credential store (defaults to in-memory)
            hasher: Secret hasher (defaults to bcrypt at config.hash_cost)
            config: Authentication configuration
            audit_logger: Optional audit trail
            clock: Current-UTC-time source for token timestamps

        Raises:
            KeyProviderError: If the signing secret is unavailable
            ValueError: If configuration is invalid
        """
        self.logger = logging.getLogger("core.auth_system")
        self.config = config or AuthConfig()

        if not isinstance(key_provider, KeyProvider):
            key_provider = StaticKeyProvider(key_provider)

        self.store = store if store is not None else InMemoryCredentialStore()
        self.hasher = hasher if hasher is not None else PasswordHasher(self.config.hash_cost)
        codec_kwargs = {"clock": clock} if clock is not None else {}
        self.codec = TokenCodec(
            key_provider.signing_secret(),
            default_ttl=self.config.token_ttl,
            clock_skew_tolerance=self.config.clock_skew_tolerance,
            algorithm=self.config.algorithm,
            **codec_kwargs,
        )
        self.audit_logger = audit_logger

        # Checked against when the identifier is unknown
        self._decoy = self.hasher.hash(secrets.token_urlsafe(32))

        self.logger.info(
            f"AuthSystem initialized (store={type(self.store).__name__}, "
            f"hasher={type(self.hasher).__name__})"
        )

    def register(self, identifier: str, secret: str) -> None:
        """
        Register a new principal

        Args:
            identifier: Unique principal identifier
            secret: Plaintext secret

        Raises:
            InvalidInputError: If identifier or secret unusable
            EmptySecretError: If secret is empty
            UserAlreadyExistsError: If identifier already registered
        """
        self._check_identifier(identifier)
        credential_hash, hash_parameters = self.hasher.hash(secret)

        try:
            self.store.register(identifier, credential_hash, hash_parameters)
        except AlreadyExistsError:
            self.logger.info(f"Registration rejected, already exists: {_loggable(identifier)}")
            if self.audit_logger:
                self.audit_logger.log_registration_rejected(identifier, "already_exists")
            raise UserAlreadyExistsError(f"Principal {identifier!r} already exists") from None

        if self.audit_logger:
            self.audit_logger.log_registered(identifier)
        self.logger.info(f"Principal registered: {_loggable(identifier)}")

    def login(self, identifier: str, secret: str) -> str:
        """
        Authenticate and issue an access token

        Args:
            identifier: Principal identifier
            secret: Plaintext secret

        Returns:
            Signed token string

        Raises:
            InvalidCredentialsError: Unknown identifier or wrong secret
        """
        record = self._authenticate(identifier, secret)
        token = self.codec.issue(record.identifier)

        if self.audit_logger:
            self.audit_logger.log_login_success(record.identifier)
        self.logger.info(f"Login succeeded: {_loggable(identifier)}")
        return token

    def verify_token(self, token: str) -> TokenClaims:
        """
        Verify a token issued by login()

        Args:
            token: Token string

        Returns:
            TokenClaims

        Raises:
            InvalidTokenError: Token malformed, badly signed or expired
        """
        try:
            return self.codec.verify(token)
        except TokenError as e:
            self.logger.debug(f"Token rejected ({e.reason})")
            if self.audit_logger:
                self.audit_logger.log_token_rejected(e.reason)
            raise InvalidTokenError() from None

    def change_secret(self, identifier: str, current_secret: str, new_secret: str) -> None:
        """
        Replace a principal's secret after checking the current one

        Raises:
            InvalidCredentialsError: Unknown identifier or wrong current secret
            InvalidInputError: If new secret unusable
            EmptySecretError: If new secret is empty
        """
        self._authenticate(identifier, current_secret)
        credential_hash, hash_parameters = self.hasher.hash(new_secret)

        try:
            self.store.replace(identifier, credential_hash, hash_parameters)
        except NotFoundError:
            raise InvalidCredentialsError() from None

        if self.audit_logger:
            self.audit_logger.log_secret_changed(identifier)
        self.logger.info(f"Secret changed: {_loggable(identifier)}")

    def deregister(self, identifier: str, secret: str) -> None:
        """
        Remove a principal after checking its secret

        Raises:
            InvalidCredentialsError: Unknown identifier or wrong secret
        """
        self._authenticate(identifier, secret)

        try:
            self.store.remove(identifier)
        except NotFoundError:
            raise InvalidCredentialsError() from None

        if self.audit_logger:
            self.audit_logger.log_removed(identifier)
        self.logger.info(f"Principal deregistered: {_loggable(identifier)}")

    def _authenticate(self, identifier: str, secret: str) -> PrincipalRecord:
        # Unusable identifiers are treated like unknown ones
        try:
            self._check_identifier(identifier)
        except InvalidInputError:
            record = None
        else:
            record = self.store.lookup(identifier)

        if record is None:
            self.hasher.verify(secret, *self._decoy)
            authenticated = False
        else:
            authenticated = self.hasher.verify(
                secret, record.credential_hash, record.hash_parameters
            )

        if not authenticated:
            self.logger.warning(f"Authentication failed: {_loggable(identifier)}")
            if self.audit_logger and isinstance(identifier, str):
                self.audit_logger.log_login_failed(identifier[: self.config.max_identifier_length])
            raise InvalidCredentialsError()
        return record

    def _check_identifier(self, identifier: str) -> None:
        if not isinstance(identifier, str) or not identifier.strip():
            raise InvalidInputError("Identifier must be a non-empty string")
        if len(identifier) > self.config.max_identifier_length:
            raise InvalidInputError(
                f"Identifier must be at most {self.config.max_identifier_length} characters"
            )
        if not identifier.isprintable():
            raise InvalidInputError("Identifier must not contain control characters")
