"""Supabase access-token authentication."""
from typing import Optional

from fastapi import Header, HTTPException
from pydantic import BaseModel

from storefront.errors import ERROR_NOT_AUTHENTICATED
from storefront.logging import get_logger
from storefront.services.database import get_database_async

logger = get_logger(__name__)


class AuthUser(BaseModel):
    """Authenticated caller as resolved from the access token."""
    id: str
    email: Optional[str] = None


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1]:
        return parts[1]
    return None


async def _resolve(token: str) -> Optional[AuthUser]:
    db = await get_database_async()
    user = await db.get_auth_user(token)
    if user is None:
        return None
    return AuthUser(id=str(user.id), email=getattr(user, "email", None))


async def verify_user(authorization: str = Header(None, alias="Authorization")) -> AuthUser:
    """
    Require `Authorization: Bearer <supabase access token>`.

    Raises 401 when the header is missing or the token is rejected.
    """
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail=ERROR_NOT_AUTHENTICATED)
    user = await _resolve(token)
    if user is None:
        raise HTTPException(status_code=401, detail=ERROR_NOT_AUTHENTICATED)
    return user


async def optional_user(authorization: str = Header(None, alias="Authorization")) -> Optional[AuthUser]:
    """Signed-in caller if a valid token was sent, else None (guest)."""
    token = _bearer_token(authorization)
    if not token:
        return None
    return await _resolve(token)
