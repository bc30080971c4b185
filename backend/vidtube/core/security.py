"""
Password hashing and JWT access/refresh token handling.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from vidtube.core.config import get_settings

settings = get_settings()

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Raised when a token cannot be decoded or has the wrong type."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not password or not hashed:
        return False
    return pwd_context.verify(password, hashed)


def _encode(claims: Dict[str, Any], secret: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        # jti keeps two tokens minted in the same second distinct
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)


def create_access_token(user) -> str:
    return _encode(
        {
            "sub": str(user.id),
            "type": ACCESS,
            "username": user.username,
            "email": user.email,
            "fullName": user.full_name,
        },
        settings.access_token_secret,
        timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(user) -> str:
    return _encode(
        {"sub": str(user.id), "type": REFRESH},
        settings.refresh_token_secret,
        timedelta(days=settings.refresh_token_expire_days),
    )


def decode_token(token: str, token_type: str) -> Dict[str, Any]:
    """Verify signature, expiry and type; return the claims."""
    secret = settings.access_token_secret if token_type == ACCESS else settings.refresh_token_secret
    try:
        claims = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as e:
        raise TokenError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise TokenError("Invalid token") from e

    if claims.get("type") != token_type:
        raise TokenError("Invalid token type")
    try:
        claims["sub"] = uuid.UUID(str(claims.get("sub")))
    except ValueError as e:
        raise TokenError("Invalid token subject") from e
    return claims
