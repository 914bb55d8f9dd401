import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import bcrypt
from fastapi import Request
from jose import jwt, JWTError, ExpiredSignatureError

from rent_tracker.core.config import settings
from rent_tracker.core.exceptions import (
    InvalidCredentialError,
    ExpiredCredentialError,
    StaleSessionError,
    ValidationError,
)

BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    raw = password.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        raise ValidationError("Password is too long")
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    raw = password.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(raw, hashed.encode("utf-8"))


@dataclass(frozen=True)
class SessionEpoch:
    """
    Identity of one server process lifetime.

    Generated once at startup and embedded into every credential issued by
    that process. It is never persisted, so after a restart every token
    carries a foreign epoch and is rejected as stale.
    """

    value: str
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def generate(cls) -> "SessionEpoch":
        return cls(value=uuid.uuid4().hex)


def issue_credential(
    user_id: int,
    email: str,
    epoch: SessionEpoch,
    *,
    now: datetime | None = None,
    ttl: timedelta | None = None,
) -> str:
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + (ttl or timedelta(hours=settings.ACCESS_TOKEN_TTL_HOURS))

    claims = {
        "sub": str(user_id),
        "email": email,
        "epoch": epoch.value,
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGO)


def validate_credential(token: str, epoch: SessionEpoch) -> dict:
    """
    Verify signature and expiry, then check the token belongs to this
    process lifetime. Returns the decoded claims.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGO])
    except ExpiredSignatureError:
        raise ExpiredCredentialError()
    except JWTError:
        raise InvalidCredentialError()

    if payload.get("sub") is None:
        raise InvalidCredentialError()

    if payload.get("epoch") != epoch.value:
        raise StaleSessionError()

    return payload


def get_bearer_token(request: Request) -> str:
    auth = request.headers.get("Authorization")
    if not auth or not auth.startswith("Bearer "):
        raise InvalidCredentialError("Access denied. No token provided.")
    return auth.split(" ", 1)[1]
