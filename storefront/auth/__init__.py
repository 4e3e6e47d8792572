"""Authentication package."""
from .admin import verify_admin
from .dependencies import get_profile
from .supabase import AuthUser, optional_user, verify_user

__all__ = [
    "AuthUser",
    "get_profile",
    "optional_user",
    "verify_admin",
    "verify_user",
]
