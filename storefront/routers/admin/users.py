"""
Admin Users & Reviews Router
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.auth import verify_admin
from storefront.errors import NotFoundError
from storefront.routers.deps import get_moderation_service
from storefront.routers.models import ReviewModerationRequest, SetAdminRequest

router = APIRouter(tags=["admin-users"])


# ==================== USERS ====================

@router.get("/users")
async def admin_list_users(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin=Depends(verify_admin),
    moderation=Depends(get_moderation_service),
):
    return {"users": await moderation.list_users(limit, offset)}


@router.patch("/users/{user_id}/admin")
async def admin_set_admin(
    user_id: str,
    request: SetAdminRequest,
    admin=Depends(verify_admin),
    moderation=Depends(get_moderation_service),
):
    """Grant or revoke admin. Admins cannot revoke themselves."""
    if user_id == admin.id and not request.is_admin:
        raise HTTPException(status_code=400, detail="You cannot remove your own admin access")
    try:
        profile = await moderation.set_admin(user_id, request.is_admin)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "user": profile}


# ==================== REVIEWS ====================

@router.get("/reviews")
async def admin_list_reviews(
    approved: Optional[bool] = None,
    admin=Depends(verify_admin),
    moderation=Depends(get_moderation_service),
):
    return {"reviews": await moderation.list_reviews(approved)}


@router.patch("/reviews/{review_id}")
async def admin_moderate_review(
    review_id: str,
    request: ReviewModerationRequest,
    admin=Depends(verify_admin),
    moderation=Depends(get_moderation_service),
):
    try:
        review = await moderation.approve_review(review_id, request.is_approved)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "review": review}


@router.delete("/reviews/{review_id}")
async def admin_delete_review(review_id: str, admin=Depends(verify_admin), moderation=Depends(get_moderation_service)):
    try:
        await moderation.delete_review(review_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}
