"""
Token Codec - Signed, expiring bearer tokens

Module: security.token_codec
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - JWT issuance with HS256 (HMAC-SHA256)
  - Verification classified as malformed / bad signature / expired
  - Injectable clock and clock-skew tolerance

[2026-10-20 v0.1.1] Parsing and expiry fixes
  - Header and claims are JSON-decoded and checked before the signature
  - exp rounded up so sub-second TTLs are not expired on issue

ARCHITECTURE:
TokenCodec is stateless apart from the signing secret:
  - issue() builds {sub, iat, exp, jti} and signs it
  - verify() parses header and claims, then checks signature, then expiry
  - Expiry is evaluated against the injected clock, not PyJWT's own,
    so "now > exp + tolerance" is the single expiry rule

SECURITY NOTES:
- Only HS256 is accepted on decode (no algorithm confusion, no "none")
- A token issued in the apparent future is accepted until it expires
- The signing secret is never logged or put in an exception message
"""

import binascii
import json
import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt
from jwt.utils import base64url_decode, base64url_encode

from ..core.constants import (
    DEFAULT_CLOCK_SKEW_SECONDS,
    DEFAULT_TOKEN_TTL_SECONDS,
    MAX_TOKEN_LENGTH,
    MIN_SIGNING_SECRET_BYTES,
    TOKEN_ALGORITHM,
)


class TokenError(Exception):
    """Base token verification error"""
    reason = "invalid"


class TokenMalformedError(TokenError):
    """Token cannot be parsed or lacks required claims"""
    reason = "malformed"


class TokenBadSignatureError(TokenError):
    """Signature does not match the claims"""
    reason = "bad_signature"


class TokenExpiredError(TokenError):
    """Token is past its expiry"""
    reason = "expired"


@dataclass(frozen=True)
class TokenClaims:
    """Verified token claims"""
    subject: str
    issued_at: datetime
    expires_at: datetime
    token_id: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp(payload: Dict[str, Any], claim: str) -> datetime:
    value = payload.get(claim)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TokenMalformedError(f"Claim '{claim}' must be a numeric timestamp")
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise TokenMalformedError(f"Claim '{claim}' out of range") from e


REQUIRED_CLAIMS = ("sub", "iat", "exp", "jti")


def _decode_segment(segment: str) -> bytes:
    try:
        raw = segment.encode("ascii")
        decoded = base64url_decode(raw)
    except (UnicodeEncodeError, binascii.Error, ValueError) as e:
        raise TokenMalformedError("Segment is not base64url") from e
    # Rejects alternate spellings that decode to the same bytes
    if base64url_encode(decoded) != raw:
        raise TokenMalformedError("Segment is not canonical base64url")
    return decoded


def _decode_json_segment(segment: str, name: str) -> Dict[str, Any]:
    try:
        value = json.loads(_decode_segment(segment))
    except ValueError as e:
        raise TokenMalformedError(f"Token {name} is not JSON") from e
    if not isinstance(value, dict):
        raise TokenMalformedError(f"Token {name} must be a JSON object")
    return value


def _parse(token: str) -> Dict[str, Any]:
    """
    Parse header, claims and signature segments without checking the signature.

    Returns the claims. Anything that would not yield usable claims is
    rejected here, before the signature is compared.
    """
    segments = token.split(".")
    if len(segments) != 3 or not all(segments):
        raise TokenMalformedError("Token must have three segments")
    header_segment, claims_segment, signature_segment = segments

    _decode_json_segment(header_segment, "header")
    claims = _decode_json_segment(claims_segment, "claims")
    _decode_segment(signature_segment)

    missing = [claim for claim in REQUIRED_CLAIMS if claim not in claims]
    if missing:
        raise TokenMalformedError(f"Missing claims: {', '.join(missing)}")
    subject = claims["sub"]
    if not isinstance(subject, str) or not subject:
        raise TokenMalformedError("Claim 'sub' must be a non-empty string")
    if not isinstance(claims["jti"], str):
        raise TokenMalformedError("Claim 'jti' must be a string")
    _timestamp(claims, "iat")
    _timestamp(claims, "exp")
    return claims


class TokenCodec:
    """
    Issues and verifies HS256 JWTs carrying a subject claim.

    Token format: base64url(header).base64url(claims).base64url(signature)
    """

    def __init__(
        self,
        secret: bytes,
        default_ttl: timedelta = timedelta(seconds=DEFAULT_TOKEN_TTL_SECONDS),
        clock_skew_tolerance: timedelta = timedelta(seconds=DEFAULT_CLOCK_SKEW_SECONDS),
        clock: Callable[[], datetime] = _utcnow,
        algorithm: str = TOKEN_ALGORITHM,
    ):
        """
        Initialize codec

        Args:
            secret: Signing secret (32+ bytes)
            default_ttl: Lifetime used when issue() gets no ttl
            clock_skew_tolerance: Grace period applied to the expiry check
            clock: Returns the current UTC time
            algorithm: HMAC JWT algorithm

        Raises:
            ValueError: If secret too short or durations invalid
        """
        if not isinstance(secret, (bytes, bytearray)) or len(secret) < MIN_SIGNING_SECRET_BYTES:
            raise ValueError(
                f"Signing secret must be at least {MIN_SIGNING_SECRET_BYTES} bytes"
            )
        if default_ttl <= timedelta(0):
            raise ValueError("Token TTL must be positive")
        if clock_skew_tolerance < timedelta(0):
            raise ValueError("Clock skew tolerance must not be negative")
        if not algorithm.startswith("HS"):
            raise ValueError("Only HMAC algorithms are supported")

        self.logger = logging.getLogger("security.token_codec")
        self._secret = bytes(secret)
        self.default_ttl = default_ttl
        self.clock_skew_tolerance = clock_skew_tolerance
        self.algorithm = algorithm
        self._clock = clock

        self.logger.info(
            f"TokenCodec initialized (algo={algorithm}, "
            f"ttl={int(default_ttl.total_seconds())}s, "
            f"skew={int(clock_skew_tolerance.total_seconds())}s)"
        )

    def issue(self, subject: str, ttl: Optional[timedelta] = None) -> str:
        """
        Issue a signed token for subject

        Args:
            subject: Principal identifier
            ttl: Lifetime (defaults to default_ttl)

        Returns:
            Encoded token string

        Raises:
            ValueError: If subject empty or ttl not positive
        """
        if not subject or not isinstance(subject, str):
            raise ValueError("subject required")
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= timedelta(0):
            raise ValueError("Token TTL must be positive")

        now = self._clock()
        claims = {
            "sub": subject,
            "iat": int(now.timestamp()),
            # Rounded up so the token lives at least ttl
            "exp": math.ceil((now + ttl).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        token = jwt.encode(claims, self._secret, algorithm=self.algorithm)

        self.logger.info(f"Token issued for {subject} (jti={claims['jti'][:8]}...)")
        return token

    def verify(self, token: str) -> TokenClaims:
        """
        Verify token structure, signature and expiry

        Args:
            token: Encoded token string

        Returns:
            TokenClaims

        Raises:
            TokenMalformedError: Wrong structure, truncated, missing claims
            TokenBadSignatureError: Signature mismatch
            TokenExpiredError: now > exp + clock_skew_tolerance
        """
        if not isinstance(token, str) or not token:
            raise TokenMalformedError("Token must be a non-empty string")
        if len(token) > MAX_TOKEN_LENGTH:
            raise TokenMalformedError("Token too long")
        claims = _parse(token)

        try:
            jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": list(REQUIRED_CLAIMS),
                },
            )
        except jwt.InvalidSignatureError as e:
            raise TokenBadSignatureError("Signature verification failed") from e
        except jwt.InvalidAlgorithmError as e:
            raise TokenBadSignatureError("Unexpected signing algorithm") from e
        except jwt.InvalidTokenError as e:
            raise TokenMalformedError(f"Cannot decode token: {e}") from e

        expires_at = _timestamp(claims, "exp")
        if self._clock() - self.clock_skew_tolerance > expires_at:
            raise TokenExpiredError("Token expired")

        return TokenClaims(
            subject=claims["sub"],
            issued_at=_timestamp(claims, "iat"),
            expires_at=expires_at,
            token_id=claims["jti"],
        )
