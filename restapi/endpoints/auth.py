"""Caller identity for the audit trail."""

from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from components.core.security import actor_from_token

SYSTEM_ACTOR = "system"

# Tokens are issued by the external auth service; they are optional here.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


async def get_current_actor(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """Name of the caller from a valid bearer token, if one was sent."""
    return actor_from_token(token)


def resolve_actor(token_actor: Optional[str], *fallbacks: Optional[str]) -> str:
    """Pick the audit name: token identity, then body fields, then `system`."""
    for candidate in (token_actor, *fallbacks):
        if candidate and candidate.strip():
            return candidate.strip()
    return SYSTEM_ACTOR
