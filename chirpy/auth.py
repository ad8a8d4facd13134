"""Password hashing and JSON Web Token helpers."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

ISSUER = "chirpy"
_BCRYPT_COST = 10
_ALGORITHM = "HS256"


class TokenError(Exception):
    """Raised when a token fails validation."""


def hash_password(password: str) -> str:
    """Return a bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=_BCRYPT_COST)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")


def check_password_hash(password: str, hashed: str) -> None:
    """Raise ``ValueError`` unless ``hashed`` is the bcrypt hash of ``password``."""
    try:
        matches = bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError as exc:
        raise ValueError(f"invalid password hash: {exc}") from exc
    if not matches:
        raise ValueError("hashed password is not the hash of the given password")


def make_jwt(user_id: uuid.UUID, token_secret: str, expires_in: timedelta) -> str:
    """Issue an HS256-signed token whose subject is ``user_id``."""
    now = datetime.now(timezone.utc)
    claims = {
        "iss": ISSUER,
        "sub": str(user_id),
        "exp": int((now + expires_in).timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(claims, token_secret, algorithm=_ALGORITHM)


def validate_jwt(token_string: str, token_secret: str) -> uuid.UUID:
    """Check a token's signature and expiry and return the user id it names."""
    try:
        claims = jwt.decode(
            token_string,
            token_secret,
            algorithms=[_ALGORITHM],
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("token has invalid claims: token is expired") from exc
    except jwt.InvalidSignatureError as exc:
        raise TokenError("token signature is invalid: signature is invalid") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError(str(exc)) from exc

    subject = claims.get("sub", "")
    if not isinstance(subject, str):
        raise TokenError(f"invalid subject: {subject!r}")
    try:
        return uuid.UUID(subject)
    except ValueError as exc:
        raise TokenError(f"invalid subject: {subject!r}") from exc