"""
Integration Tests - AuthSystem

Module: tests.test_auth_system
Date: 2026-10-19
Version: 0.1.0

Scenarios:
1. Register then login returns a token
2. Wrong secret and unknown identifier fail identically
3. Duplicate registration is rejected without changing the store
4. Token verifies until expiry, then is rejected
5. Tampered tokens are rejected with an uninformative error
6. Concurrent registration of one identifier has one winner
7. Secret change, deregistration, audit trail, file-backed store
"""

import os
import shutil
import tempfile
import threading
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from auth_core import (
    AuditLogger,
    AuthConfig,
    AuthSystem,
    EmptySecretError,
    EnvKeyProvider,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidTokenError,
    JSONCredentialStore,
    StaticKeyProvider,
    UserAlreadyExistsError,
)
from auth_core.persistence.audit_store import EventType
from auth_core.security.key_provider import KeyProviderError

SECRET = "test-secret-key-at-least-32-characters-long!!!!"
START = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock"""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def fast_config(**overrides) -> AuthConfig:
    """Low bcrypt cost so the suite stays quick"""
    return AuthConfig(hash_cost=4, **overrides)


class TestAuthSystem(unittest.TestCase):
    """Integration tests for AuthSystem with the in-memory store"""

    def setUp(self):
        """Setup before each test"""
        self.clock = FakeClock()
        self.auth = AuthSystem(
            StaticKeyProvider(SECRET),
            config=fast_config(),
            clock=self.clock,
        )

    # ========================================================================
    # Registration and login
    # ========================================================================

    def test_register_then_login(self):
        """Registered pair logs in and the token names the principal"""
        self.auth.register("alice", "correct horse")
        token = self.auth.login("alice", "correct horse")

        claims = self.auth.verify_token(token)
        self.assertEqual(claims.subject, "alice")

    def test_wrong_secret_and_unknown_identifier_match(self):
        """Both failure modes raise the same error with the same message"""
        self.auth.register("alice", "correct horse")

        with self.assertRaises(InvalidCredentialsError) as wrong:
            self.auth.login("alice", "battery staple")
        with self.assertRaises(InvalidCredentialsError) as unknown:
            self.auth.login("bob", "battery staple")

        self.assertIs(type(wrong.exception), type(unknown.exception))
        self.assertEqual(str(wrong.exception), str(unknown.exception))

    def test_unknown_identifier_still_hashes(self):
        """Unknown identifier costs one verify, like a wrong secret"""
        with patch.object(self.auth.hasher, "verify", wraps=self.auth.hasher.verify) as spy:
            with self.assertRaises(InvalidCredentialsError):
                self.auth.login("nobody", "whatever")
        self.assertEqual(spy.call_count, 1)

    def test_invalid_login_input_collapses(self):
        """Unusable identifiers or secrets on login are just bad credentials"""
        self.auth.register("alice", "correct horse")
        for identifier, secret in [("", "x"), (None, "x"), ("alice", ""), ("alice", "x" * 200)]:
            with self.subTest(identifier=identifier, secret=secret[:10]):
                with self.assertRaises(InvalidCredentialsError):
                    self.auth.login(identifier, secret)

    def test_duplicate_registration(self):
        """Second registration fails and the first record is untouched"""
        self.auth.register("alice", "first secret")
        before = self.auth.store.lookup("alice")

        with self.assertRaises(UserAlreadyExistsError):
            self.auth.register("alice", "second secret")

        self.assertEqual(self.auth.store.lookup("alice"), before)
        self.auth.login("alice", "first secret")
        with self.assertRaises(InvalidCredentialsError):
            self.auth.login("alice", "second secret")

    def test_empty_secret_rejected_without_side_effect(self):
        """Empty secret raises before anything is stored"""
        with self.assertRaises(EmptySecretError):
            self.auth.register("alice", "")
        self.assertNotIn("alice", self.auth.store)

    def test_invalid_identifier_rejected(self):
        """Empty, overlong or control-character identifiers rejected"""
        for identifier in ["", "   ", "a" * 257, "bad\nname", 42]:
            with self.subTest(identifier=repr(identifier)[:20]):
                with self.assertRaises(InvalidInputError):
                    self.auth.register(identifier, "secret")
        self.assertEqual(len(self.auth.store), 0)

    def test_store_never_holds_plaintext(self):
        """Stored record does not contain the secret"""
        self.auth.register("alice", "correct horse")
        record = self.auth.store.lookup("alice")
        self.assertNotIn(b"correct horse", record.credential_hash)
        self.assertNotIn(b"correct horse", record.hash_parameters)

    # ========================================================================
    # Tokens
    # ========================================================================

    def test_token_expires(self):
        """Token valid until ttl elapses, invalid after"""
        self.auth.register("alice", "correct horse")
        token = self.auth.login("alice", "correct horse")

        self.clock.advance(3600)
        self.assertEqual(self.auth.verify_token(token).subject, "alice")

        self.clock.advance(1)
        with self.assertRaises(InvalidTokenError):
            self.auth.verify_token(token)

    def test_configured_ttl(self):
        """config.token_ttl sets the token lifetime"""
        auth = AuthSystem(
            SECRET,
            config=fast_config(token_ttl=timedelta(minutes=5)),
            clock=self.clock,
        )
        auth.register("alice", "pw")
        claims = auth.verify_token(auth.login("alice", "pw"))
        self.assertEqual(claims.expires_at - claims.issued_at, timedelta(minutes=5))

    def test_signature_flip_rejected(self):
        """Flipping any signature character yields InvalidTokenError"""
        self.auth.register("alice", "correct horse")
        token = self.auth.login("alice", "correct horse")
        head, _, signature = token.rpartition(".")

        for i, char in enumerate(signature):
            replacement = "A" if char != "A" else "B"
            tampered = head + "." + signature[:i] + replacement + signature[i + 1:]
            with self.subTest(position=i):
                with self.assertRaises(InvalidTokenError):
                    self.auth.verify_token(tampered)

    def test_token_errors_are_uninformative(self):
        """Malformed, foreign and expired tokens look the same to callers"""
        self.auth.register("alice", "correct horse")
        token = self.auth.login("alice", "correct horse")
        foreign = AuthSystem(
            "another-secret-that-is-also-32-bytes-long!!",
            config=fast_config(),
            clock=self.clock,
        )
        foreign.register("alice", "pw")
        foreign_token = foreign.login("alice", "pw")

        errors = []
        for bad in ["garbage", foreign_token]:
            with self.assertRaises(InvalidTokenError) as ctx:
                self.auth.verify_token(bad)
            errors.append(ctx.exception)

        self.clock.advance(7200)
        with self.assertRaises(InvalidTokenError) as ctx:
            self.auth.verify_token(token)
        errors.append(ctx.exception)

        self.assertEqual(len({str(e) for e in errors}), 1)
        for error in errors:
            self.assertIsNone(error.__cause__)
            self.assertTrue(error.__suppress_context__)

    def test_token_from_other_secret_rejected(self):
        """Tokens are bound to the signing secret"""
        other = AuthSystem(
            "another-secret-that-is-also-32-bytes-long!!",
            config=fast_config(),
            clock=self.clock,
        )
        other.register("alice", "pw")
        with self.assertRaises(InvalidTokenError):
            self.auth.verify_token(other.login("alice", "pw"))

    # ========================================================================
    # Concurrency
    # ========================================================================

    def test_concurrent_registration_single_winner(self):
        """One concurrent registration wins, the rest see UserAlreadyExists"""
        workers = 6
        barrier = threading.Barrier(workers)
        outcomes = []
        outcomes_lock = threading.Lock()

        def attempt(n):
            barrier.wait()
            try:
                self.auth.register("alice", f"secret-{n}")
                outcome = n
            except UserAlreadyExistsError:
                outcome = None
            with outcomes_lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=attempt, args=(n,)) for n in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        winners = [o for o in outcomes if o is not None]
        self.assertEqual(len(winners), 1)
        self.assertEqual(len(self.auth.store), 1)
        self.auth.login("alice", f"secret-{winners[0]}")

    # ========================================================================
    # Secret change and deregistration
    # ========================================================================

    def test_change_secret(self):
        """New secret works and old one stops working"""
        self.auth.register("alice", "old secret")
        self.auth.change_secret("alice", "old secret", "new secret")

        self.auth.login("alice", "new secret")
        with self.assertRaises(InvalidCredentialsError):
            self.auth.login("alice", "old secret")

    def test_change_secret_requires_current(self):
        """Wrong current secret leaves the record unchanged"""
        self.auth.register("alice", "old secret")
        before = self.auth.store.lookup("alice")

        with self.assertRaises(InvalidCredentialsError):
            self.auth.change_secret("alice", "wrong", "new secret")
        self.assertEqual(self.auth.store.lookup("alice"), before)

    def test_change_secret_rejects_empty_new_secret(self):
        """Empty new secret raises and keeps the old one"""
        self.auth.register("alice", "old secret")
        with self.assertRaises(EmptySecretError):
            self.auth.change_secret("alice", "old secret", "")
        self.auth.login("alice", "old secret")

    def test_deregister(self):
        """Deregistered principal cannot log in and can register again"""
        self.auth.register("alice", "secret")
        self.auth.deregister("alice", "secret")

        with self.assertRaises(InvalidCredentialsError):
            self.auth.login("alice", "secret")
        self.auth.register("alice", "another")
        self.auth.login("alice", "another")

    def test_deregister_requires_secret(self):
        """Wrong secret does not remove the principal"""
        self.auth.register("alice", "secret")
        with self.assertRaises(InvalidCredentialsError):
            self.auth.deregister("alice", "wrong")
        self.assertIn("alice", self.auth.store)

    # ========================================================================
    # Redaction
    # ========================================================================

    def test_logs_never_contain_secrets(self):
        """No log line carries the secret or signing key"""
        with self.assertLogs(level="DEBUG") as captured:
            self.auth.register("alice", "correct horse")
            token = self.auth.login("alice", "correct horse")
            with self.assertRaises(InvalidCredentialsError):
                self.auth.login("alice", "battery staple")
            with self.assertRaises(InvalidTokenError):
                self.auth.verify_token(token + "x")

        output = "\n".join(captured.output)
        self.assertNotIn("correct horse", output)
        self.assertNotIn("battery staple", output)
        self.assertNotIn(SECRET, output)


class TestAuthSystemPersistence(unittest.TestCase):
    """AuthSystem with JSONCredentialStore and AuditLogger"""

    def setUp(self):
        """Setup before each test"""
        self.test_dir = tempfile.mkdtemp()
        self.clock = FakeClock()

    def tearDown(self):
        """Cleanup after each test"""
        if os.path.exists(self.test_dir):
            shutil.rmtree(self.test_dir)

    def make_auth(self, audit=None):
        return AuthSystem(
            SECRET,
            store=JSONCredentialStore(self.test_dir),
            config=fast_config(),
            audit_logger=audit,
            clock=self.clock,
        )

    def test_principals_survive_restart(self):
        """A new AuthSystem on the same directory authenticates old principals"""
        self.make_auth().register("alice", "correct horse")

        restarted = self.make_auth()
        token = restarted.login("alice", "correct horse")
        self.assertEqual(restarted.verify_token(token).subject, "alice")

    def test_audit_trail(self):
        """Audit trail records outcomes without secrets"""
        audit = AuditLogger(self.test_dir)
        auth = self.make_auth(audit)

        auth.register("alice", "correct horse")
        with self.assertRaises(UserAlreadyExistsError):
            auth.register("alice", "other")
        token = auth.login("alice", "correct horse")
        with self.assertRaises(InvalidCredentialsError):
            auth.login("alice", "battery staple")
        with self.assertRaises(InvalidCredentialsError):
            auth.login("nobody", "battery staple")
        self.clock.advance(7200)
        with self.assertRaises(InvalidTokenError):
            auth.verify_token(token)

        failed = audit.query_by_event_type(EventType.LOGIN_FAILED)
        self.assertEqual({e.reason for e in failed}, {"invalid_credentials"})
        self.assertEqual(len(failed), 2)

        rejected = audit.query_by_event_type(EventType.TOKEN_REJECTED)
        self.assertEqual([e.reason for e in rejected], ["expired"])

        self.assertEqual(len(audit.query_by_event_type(EventType.REGISTRATION_REJECTED)), 1)
        self.assertEqual(len(audit.query_by_event_type(EventType.LOGIN_SUCCESS)), 1)

        with open(audit.audit_file, encoding="utf-8") as f:
            raw = f.read()
        self.assertNotIn("correct horse", raw)
        self.assertNotIn("battery staple", raw)


class TestConfiguration(unittest.TestCase):
    """AuthConfig and key providers"""

    def test_config_from_env(self):
        """Environment overrides defaults"""
        env = {
            "AUTH_TOKEN_TTL_SECONDS": "600",
            "AUTH_HASH_COST": "5",
            "AUTH_CLOCK_SKEW_SECONDS": "15",
        }
        with patch.dict(os.environ, env):
            config = AuthConfig.from_env()

        self.assertEqual(config.token_ttl, timedelta(seconds=600))
        self.assertEqual(config.hash_cost, 5)
        self.assertEqual(config.clock_skew_tolerance, timedelta(seconds=15))

    def test_config_defaults(self):
        """Defaults: one hour TTL, no skew"""
        config = AuthConfig()
        self.assertEqual(config.token_ttl, timedelta(hours=1))
        self.assertEqual(config.clock_skew_tolerance, timedelta(0))

    def test_env_key_provider(self):
        """EnvKeyProvider reads AUTH_SIGNING_SECRET"""
        with patch.dict(os.environ, {"AUTH_SIGNING_SECRET": SECRET}):
            auth = AuthSystem(EnvKeyProvider(), config=fast_config())
        auth.register("alice", "pw")
        auth.verify_token(auth.login("alice", "pw"))

    def test_env_key_provider_missing(self):
        """Unset variable raises KeyProviderError"""
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(KeyProviderError):
                EnvKeyProvider().signing_secret()

    def test_short_secret_rejected(self):
        """Signing secrets under 32 bytes rejected"""
        with self.assertRaises(KeyProviderError):
            StaticKeyProvider("too-short")

    def test_key_provider_repr_redacted(self):
        """StaticKeyProvider repr hides the secret"""
        self.assertNotIn(SECRET, repr(StaticKeyProvider(SECRET)))


if __name__ == "__main__":
    unittest.main(verbosity=2)
