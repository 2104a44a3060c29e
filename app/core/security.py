# app/core/security.py
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from app.core.config import settings

# 1. Configuration
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)
ALGORITHM = "HS256"


# 2. Password Handling
def _pre_hash_password(password: str) -> str:
    """
    Handle the 'bcrypt 72-byte limit' safely.
    If a password is longer than 72 bytes, we hash it first using SHA-256.
    This ensures the entire password matters, regardless of length.
    """
    if len(password.encode('utf-8')) <= 72:
        return password

    # SHA-256 hexdigest is 64 chars, which fits inside 72 bytes.
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


def hash_password(password: str) -> str:
    return pwd_context.hash(_pre_hash_password(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # bcrypt comparison is constant-time
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(_pre_hash_password(plain_password), hashed_password)
    except ValueError:
        # Unknown or malformed hash format
        return False


# 3. Session Tokens
class SessionPayload(BaseModel):
    user_id: UUID
    email: str
    expires: datetime


def create_access_token(
    user_id: UUID,
    email: str,
    expires_delta: Optional[timedelta] = None,
) -> tuple[str, datetime]:
    """Sign a session token. Returns the token and its expiry."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "sub": str(user_id),
        "email": email,
        "exp": expire,
        "iat": now,
        "nbf": now,
    }
    token = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
    return token, expire


def decode_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[ALGORITHM],
        options={"verify_exp": True, "require": ["sub", "exp"]},
    )


def validate_session(token: Optional[str]) -> Optional[SessionPayload]:
    """
    Verify signature and expiry. Any failure (bad signature, malformed
    payload, expired token) is treated as anonymous and returns None.
    """
    if not token:
        return None
    try:
        payload = decode_token(token)
        return SessionPayload(
            user_id=payload["sub"],
            email=payload.get("email", ""),
            expires=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (jwt.PyJWTError, ValidationError, KeyError, TypeError, ValueError):
        return None
