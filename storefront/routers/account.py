"""
Account Router

Profile, saved addresses, order history and wishlist for the signed-in customer.
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.auth import AuthUser, verify_user
from storefront.errors import NotFoundError
from storefront.routers.deps import get_account_service, get_wishlist_service
from storefront.routers.models import (
    AddressRequest,
    AddressUpdateRequest,
    ProfileUpdateRequest,
    WishlistRequest,
)

router = APIRouter(tags=["account"])


# ==================== PROFILE ====================

@router.get("/api/account/profile")
async def get_profile(user: AuthUser = Depends(verify_user), account=Depends(get_account_service)):
    try:
        profile = await account.get_profile(user.id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {**profile, "email": user.email}


@router.patch("/api/account/profile")
async def update_profile(
    request: ProfileUpdateRequest, user: AuthUser = Depends(verify_user), account=Depends(get_account_service)
):
    try:
        return await account.update_profile(user.id, request.model_dump(exclude_none=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")


# ==================== ADDRESSES ====================

@router.get("/api/account/addresses")
async def list_addresses(user: AuthUser = Depends(verify_user), account=Depends(get_account_service)):
    return {"addresses": await account.list_addresses(user.id)}


@router.post("/api/account/addresses")
async def create_address(
    request: AddressRequest, user: AuthUser = Depends(verify_user), account=Depends(get_account_service)
):
    return await account.create_address(user.id, request.model_dump())


@router.patch("/api/account/addresses/{address_id}")
async def update_address(
    address_id: str,
    request: AddressUpdateRequest,
    user: AuthUser = Depends(verify_user),
    account=Depends(get_account_service),
):
    try:
        return await account.update_address(user.id, address_id, request.model_dump(exclude_none=True))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/api/account/addresses/{address_id}")
async def delete_address(
    address_id: str, user: AuthUser = Depends(verify_user), account=Depends(get_account_service)
):
    try:
        await account.delete_address(user.id, address_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}


# ==================== ORDERS ====================

@router.get("/api/account/orders")
async def list_orders(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: AuthUser = Depends(verify_user),
    account=Depends(get_account_service),
):
    return {"orders": await account.list_orders(user.id, limit, offset)}


# ==================== WISHLIST ====================

@router.get("/api/wishlist")
async def get_wishlist(user: AuthUser = Depends(verify_user), wishlist=Depends(get_wishlist_service)):
    return {"items": await wishlist.list(user.id)}


@router.post("/api/wishlist")
async def add_to_wishlist(
    request: WishlistRequest, user: AuthUser = Depends(verify_user), wishlist=Depends(get_wishlist_service)
):
    """Adding an already-saved product is a no-op success."""
    try:
        added = await wishlist.add(user.id, request.product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "already_saved": not added}


@router.delete("/api/wishlist/{product_id}")
async def remove_from_wishlist(
    product_id: str, user: AuthUser = Depends(verify_user), wishlist=Depends(get_wishlist_service)
):
    removed = await wishlist.remove(user.id, product_id)
    return {"success": True, "removed": removed}
