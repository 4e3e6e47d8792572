"""
Cart Router

Server-side cart for signed-in customers.
"""
from fastapi import APIRouter, Depends, HTTPException

from storefront.auth import AuthUser, verify_user
from storefront.errors import NotFoundError
from storefront.routers.deps import get_cart_service
from storefront.routers.models import AddToCartRequest, MergeCartRequest, UpdateCartItemRequest

router = APIRouter(tags=["cart"])


@router.get("/api/cart")
async def get_cart(user: AuthUser = Depends(verify_user), cart=Depends(get_cart_service)):
    return await cart.get_cart(user.id)


@router.post("/api/cart")
async def add_to_cart(
    request: AddToCartRequest, user: AuthUser = Depends(verify_user), cart=Depends(get_cart_service)
):
    try:
        return await cart.add_item(user.id, request.product_id, request.quantity, request.size, request.color)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/api/cart/{item_id}")
async def update_cart_item(
    item_id: str,
    request: UpdateCartItemRequest,
    user: AuthUser = Depends(verify_user),
    cart=Depends(get_cart_service),
):
    """Set a line's quantity (0 removes it)."""
    try:
        return await cart.update_quantity(user.id, item_id, request.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/api/cart/{item_id}")
async def remove_cart_item(item_id: str, user: AuthUser = Depends(verify_user), cart=Depends(get_cart_service)):
    try:
        return await cart.remove_item(user.id, item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api/cart/merge")
async def merge_cart(
    request: MergeCartRequest, user: AuthUser = Depends(verify_user), cart=Depends(get_cart_service)
):
    """Fold the browser-stored guest cart into the account cart after login."""
    return await cart.merge_guest_cart(user.id, [item.model_dump() for item in request.items])
