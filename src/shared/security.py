# src/shared/security.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union
from uuid import UUID

import jwt
from passlib.context import CryptContext

from src.shared.config import get_settings
from src.shared.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"
PASSWORD_RESET = "password_reset"

# Password hashing context - prefer Argon2id, fallback to bcrypt
pwd_context = CryptContext(
    schemes=["argon2", "bcrypt"],
    deprecated="auto",
    argon2__memory_cost=65536,
    argon2__time_cost=3,
    argon2__parallelism=4,
)


def hash_password(plain_password: str) -> str:
    """
    Hash a plain text password using Argon2id (preferred) or bcrypt.

    Raises:
        ValueError: If password is empty or None
    """
    if not plain_password:
        raise ValueError("Password cannot be empty")
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain text password against a stored hash. Malformed hashes never match."""
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.error(f"Password verification error: {e}")
        return False


def _encode(payload: Dict[str, Any], secret: str, lifetime: timedelta) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    claims = {**payload, "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, secret, algorithm=settings.jwt_algorithm)


def create_access_token(
    sub: Union[str, UUID],
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Access token carrying the identity claims the auth dependency needs."""
    settings = get_settings()
    return _encode(
        {"sub": str(sub), "email": email, "role": role, "typ": ACCESS},
        settings.jwt_secret,
        expires_delta or timedelta(minutes=settings.access_token_exp_minutes),
    )


def create_refresh_token(sub: Union[str, UUID], expires_delta: Optional[timedelta] = None) -> str:
    """Refresh token, signed with the separate refresh secret."""
    settings = get_settings()
    return _encode(
        {"sub": str(sub), "typ": REFRESH},
        settings.jwt_refresh_secret,
        expires_delta or timedelta(minutes=settings.refresh_token_exp_minutes),
    )


def create_password_reset_token(sub: Union[str, UUID], expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    return _encode(
        {"sub": str(sub), "typ": PASSWORD_RESET},
        settings.jwt_secret,
        expires_delta or timedelta(minutes=settings.password_reset_exp_minutes),
    )


def decode_token(token: str, *, expected_type: str = ACCESS) -> Dict[str, Any]:
    """
    Decode and verify a JWT token of the given type.

    Raises:
        AuthenticationError: If token is invalid, expired, malformed or of another type
    """
    settings = get_settings()
    secret = settings.jwt_refresh_secret if expected_type == REFRESH else settings.jwt_secret
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm], options={"verify_exp": True})
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired", code="expired_token")
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(f"Invalid token: {e}", code="invalid_token")
    if payload.get("typ") != expected_type:
        raise AuthenticationError("Invalid token type", code="invalid_token")
    return payload


def extract_user_id(payload: Dict[str, Any]) -> UUID:
    try:
        return UUID(payload["sub"])
    except (ValueError, KeyError, TypeError):
        raise AuthenticationError("Invalid user ID in token", code="invalid_token")
