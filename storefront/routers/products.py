"""
Products Router

Public catalog, special offers, reviews, back-in-stock, newsletter signups
and the homepage banners and brand list.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.auth import AuthUser, optional_user, verify_user
from storefront.errors import NotFoundError
from storefront.routers.deps import (
    get_banner_service,
    get_brand_service,
    get_catalog_service,
    get_marketing_service,
    get_offer_service,
)
from storefront.routers.models import EmailRequest, ReviewRequest

router = APIRouter(tags=["products"])


def _valid_email(email: str) -> str:
    email = (email or "").strip()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise HTTPException(status_code=400, detail="Valid email is required")
    return email


# ==================== CATALOG ====================

@router.get("/api/products")
async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = Query("newest", pattern="^(newest|price_asc|price_desc)$"),
    limit: int = Query(24, ge=1, le=100),
    offset: int = Query(0, ge=0),
    catalog=Depends(get_catalog_service),
):
    products = await catalog.list_products(category, search, sort, limit, offset)
    return {"products": products, "count": len(products)}


@router.get("/api/products/{product_id}")
async def get_product(product_id: str, catalog=Depends(get_catalog_service)):
    """Product with variants, bulk tiers and approved reviews."""
    try:
        return await catalog.get_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api/products/{product_id}/reviews")
async def submit_review(
    product_id: str,
    request: ReviewRequest,
    user: AuthUser = Depends(verify_user),
    catalog=Depends(get_catalog_service),
):
    try:
        review = await catalog.submit_review(user.id, product_id, request.rating, request.comment)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "review": review, "message": "Review submitted for moderation"}


@router.post("/api/products/{product_id}/back-in-stock")
async def back_in_stock_signup(
    product_id: str,
    request: EmailRequest,
    user: Optional[AuthUser] = Depends(optional_user),
    catalog=Depends(get_catalog_service),
):
    email = _valid_email(request.email)
    try:
        created = await catalog.subscribe_back_in_stock(product_id, email, user.id if user else None)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "already_subscribed": not created}


# ==================== NEWSLETTER ====================

@router.post("/api/newsletter")
async def newsletter_signup(request: EmailRequest, marketing=Depends(get_marketing_service)):
    state = await marketing.subscribe_newsletter(_valid_email(request.email))
    return {"success": True, "status": state}


# ==================== SPECIAL OFFERS ====================

@router.get("/api/special-offers")
async def list_offers(offers=Depends(get_offer_service)):
    return {"offers": await offers.list_active()}


@router.get("/api/special-offers/{offer_id}")
async def get_offer(offer_id: str, offers=Depends(get_offer_service)):
    try:
        return await offers.get(offer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ==================== HOMEPAGE CONTENT ====================

@router.get("/api/banners")
async def storefront_banners(banners=Depends(get_banner_service)):
    """Hero slides, category tiles and the two featured ad banners."""
    return await banners.storefront()


@router.get("/api/brands")
async def list_brands(brands=Depends(get_brand_service)):
    return {"brands": await brands.list_canonical()}
