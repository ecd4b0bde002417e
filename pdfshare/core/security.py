"""
Password hashing and JSON Web Tokens.

Passwords and refresh tokens are stored as bcrypt hashes. Access and refresh
tokens are HS256 JWTs signed with separate secrets and distinguished by the
``type`` claim.
"""

from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Literal

import bcrypt
import jwt

from pdfshare.server.core.config import settings

from .errors import AuthenticationError

TokenType = Literal["access", "refresh"]

# bcrypt ignores everything past 72 bytes
_BCRYPT_MAX_BYTES = 72


def _secret_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_secret(plain: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    return bcrypt.hashpw(_secret_bytes(plain), bcrypt.gensalt()).decode("utf-8")


def verify_secret(plain: str, hashed: str | None) -> bool:
    """Check ``plain`` against a stored bcrypt hash; a missing hash never matches."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_secret_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        return False


def hash_token(token: str) -> str:
    """Hash a long token (refresh JWT) for storage.

    JWTs of one user share a long common prefix, so the token is digested
    first to keep every byte significant for bcrypt.
    """
    return hash_secret(hashlib.sha256(token.encode("utf-8")).hexdigest())


def verify_token_hash(token: str, hashed: str | None) -> bool:
    return verify_secret(hashlib.sha256(token.encode("utf-8")).hexdigest(), hashed)


def _encode(user_id: int, email: str, token_type: TokenType, lifetime: timedelta, secret: str) -> str:
    now = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(claims, secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, email: str) -> str:
    """Issue a short-lived access token."""
    return _encode(
        user_id,
        email,
        "access",
        timedelta(minutes=settings.jwt_access_expires_minutes),
        settings.jwt_secret,
    )


def create_refresh_token(user_id: int, email: str) -> str:
    """Issue a long-lived refresh token."""
    return _encode(
        user_id,
        email,
        "refresh",
        timedelta(days=settings.jwt_refresh_expires_days),
        settings.jwt_refresh_secret,
    )


def decode_token(token: str, expected_type: TokenType = "access") -> Dict[str, Any]:
    """Verify a token and return its claims.

    Args:
        token: Encoded JWT
        expected_type: ``access`` or ``refresh``; selects the signing secret

    Returns:
        Decoded claims

    Raises:
        AuthenticationError: On expiry, bad signature, malformed token or wrong type
    """
    secret = settings.jwt_secret if expected_type == "access" else settings.jwt_refresh_secret
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp", "type"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid token") from e
    if claims.get("type") != expected_type:
        raise AuthenticationError("Invalid token")
    return claims
