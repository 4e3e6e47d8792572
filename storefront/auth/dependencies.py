"""FastAPI Dependencies for User Context.

Request-scoped profile cache so admin checks and handlers that both need
the caller's profile hit the database once.
"""

from contextvars import ContextVar

from fastapi import Depends, HTTPException

from storefront.auth.supabase import AuthUser, verify_user
from storefront.services.database import get_database_async
from storefront.services.models import Profile

_profile_cache: ContextVar[dict[str, Profile] | None] = ContextVar("_profile_cache", default=None)


def _get_profile_cache() -> dict[str, Profile]:
    cache = _profile_cache.get()
    if cache is None:
        cache = {}
        _profile_cache.set(cache)
    return cache


async def get_profile(user: AuthUser = Depends(verify_user)) -> Profile:
    """Caller's profile row (404 when the auth user has no profile)."""
    cache = _get_profile_cache()
    if user.id in cache:
        return cache[user.id]

    db = await get_database_async()
    profile = await db.profiles.get_by_id(user.id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")

    cache[user.id] = profile
    return profile
