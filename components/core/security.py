"""Security utilities for reading the caller identity from JWT tokens."""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from components.core.config import get_settings


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a new JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """Verify a JWT token and return its payload."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def actor_from_token(token: Optional[str]) -> Optional[str]:
    """Return the `name` claim of a valid token, used as the audit actor."""
    if not token:
        return None
    payload = verify_token(token)
    if payload is None:
        return None
    return payload.get("name") or payload.get("sub")
