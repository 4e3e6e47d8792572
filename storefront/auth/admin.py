"""Admin checks."""
from fastapi import Depends, HTTPException

from storefront.auth.dependencies import get_profile
from storefront.errors import ERROR_FORBIDDEN
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.models import Profile

logger = get_logger(__name__)


async def verify_admin(profile: Profile = Depends(get_profile)) -> Profile:
    """
    Require an authenticated caller whose profile has is_admin.

    401 comes from verify_user when unauthenticated; 403 here otherwise.
    """
    if not profile.is_admin:
        logger.warning("Non-admin %s denied admin route", sanitize_id_for_logging(profile.id))
        raise HTTPException(status_code=403, detail=ERROR_FORBIDDEN)
    return profile
