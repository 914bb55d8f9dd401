import unittest
from datetime import datetime, timedelta, timezone

from jose import jwt

from rent_tracker.core.config import settings
from rent_tracker.core.exceptions import (
    AuthError,
    ExpiredCredentialError,
    InvalidCredentialError,
    StaleSessionError,
    ValidationError,
)
from rent_tracker.core.security import (
    SessionEpoch,
    hash_password,
    issue_credential,
    validate_credential,
    verify_password,
)


class TestCredentials(unittest.TestCase):
    def setUp(self):
        self.epoch = SessionEpoch.generate()

    def test_valid_token_returns_claims(self):
        token = issue_credential(7, "alice@example.com", self.epoch)

        claims = validate_credential(token, self.epoch)

        self.assertEqual(claims["sub"], "7")
        self.assertEqual(claims["email"], "alice@example.com")
        self.assertEqual(claims["epoch"], self.epoch.value)

    def test_token_from_previous_process_is_stale(self):
        token = issue_credential(7, "alice@example.com", self.epoch)
        restarted = SessionEpoch.generate()

        with self.assertRaises(StaleSessionError) as ctx:
            validate_credential(token, restarted)

        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(ctx.exception.detail, "Session expired due to server restart.")

    def test_epochs_are_unique(self):
        self.assertNotEqual(SessionEpoch.generate().value, SessionEpoch.generate().value)

    def test_expired_token(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=25)
        token = issue_credential(7, "alice@example.com", self.epoch, now=issued)

        with self.assertRaises(ExpiredCredentialError) as ctx:
            validate_credential(token, self.epoch)

        self.assertIsInstance(ctx.exception, InvalidCredentialError)
        self.assertNotIsInstance(ctx.exception, StaleSessionError)

    def test_expired_token_from_previous_process_reports_expiry(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = issue_credential(7, "alice@example.com", self.epoch, now=issued, ttl=timedelta(hours=1))

        with self.assertRaises(ExpiredCredentialError):
            validate_credential(token, SessionEpoch.generate())

    def test_wrong_signature(self):
        claims = {
            "sub": "7",
            "epoch": self.epoch.value,
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        }
        forged = jwt.encode(claims, "not-the-secret", algorithm=settings.JWT_ALGO)

        with self.assertRaises(InvalidCredentialError):
            validate_credential(forged, self.epoch)

    def test_garbage_token(self):
        for token in ["", "abc", "a.b.c"]:
            with self.assertRaises(InvalidCredentialError):
                validate_credential(token, self.epoch)

    def test_token_without_epoch_is_stale(self):
        claims = {"sub": "7", "exp": datetime.now(timezone.utc) + timedelta(hours=1)}
        token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGO)

        with self.assertRaises(StaleSessionError):
            validate_credential(token, self.epoch)

    def test_token_without_subject(self):
        claims = {"epoch": self.epoch.value, "exp": datetime.now(timezone.utc) + timedelta(hours=1)}
        token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGO)

        with self.assertRaises(InvalidCredentialError):
            validate_credential(token, self.epoch)

    def test_auth_errors_carry_bearer_challenge(self):
        err = InvalidCredentialError()

        self.assertIsInstance(err, AuthError)
        self.assertEqual(err.headers, {"WWW-Authenticate": "Bearer"})


class TestPasswords(unittest.TestCase):
    def test_hash_and_verify(self):
        hashed = hash_password("hunter22")

        self.assertNotEqual(hashed, "hunter22")
        self.assertTrue(verify_password("hunter22", hashed))
        self.assertFalse(verify_password("hunter23", hashed))

    def test_missing_hash_never_verifies(self):
        self.assertFalse(verify_password("anything", None))
        self.assertFalse(verify_password("anything", ""))

    def test_overlong_password(self):
        with self.assertRaises(ValidationError):
            hash_password("x" * 73)

        self.assertFalse(verify_password("x" * 73, hash_password("x" * 72)))
