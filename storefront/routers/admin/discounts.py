"""
Admin Promotions Router

Discount codes (with optional subscriber announcement) and special offers.
"""
from fastapi import APIRouter, Depends, HTTPException

from storefront.auth import verify_admin
from storefront.errors import NotFoundError
from storefront.logging import get_logger
from storefront.routers.deps import get_marketing_service, get_moderation_service, get_offer_service
from storefront.routers.models import (
    DiscountRequest,
    DiscountUpdateRequest,
    OfferRequest,
    OfferUpdateRequest,
)

logger = get_logger(__name__)

router = APIRouter(tags=["admin-promotions"])


# ==================== DISCOUNT CODES ====================

@router.get("/discounts")
async def admin_list_discounts(admin=Depends(verify_admin), moderation=Depends(get_moderation_service)):
    return {"discounts": await moderation.list_discounts()}


@router.post("/discounts")
async def admin_create_discount(
    request: DiscountRequest,
    admin=Depends(verify_admin),
    moderation=Depends(get_moderation_service),
    marketing=Depends(get_marketing_service),
):
    """Create a code; with announce=true it is emailed to newsletter subscribers."""
    data = request.model_dump(mode="json", exclude={"announce"}, exclude_none=True)
    discount = await moderation.create_discount(data)

    announced = 0
    if request.announce and discount.is_active:
        try:
            announced = await marketing.announce_discount(discount)
        except Exception:
            logger.error("Discount announcement failed for %s", discount.code, exc_info=True)
    return {"success": True, "discount": discount.model_dump(mode="json"), "announced": announced}


@router.patch("/discounts/{discount_id}")
async def admin_update_discount(
    discount_id: str,
    request: DiscountUpdateRequest,
    admin=Depends(verify_admin),
    moderation=Depends(get_moderation_service),
):
    try:
        discount = await moderation.update_discount(discount_id, request.model_dump(mode="json", exclude_none=True))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "discount": discount}


@router.delete("/discounts/{discount_id}")
async def admin_delete_discount(
    discount_id: str, admin=Depends(verify_admin), moderation=Depends(get_moderation_service)
):
    try:
        await moderation.delete_discount(discount_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}


# ==================== SPECIAL OFFERS ====================

@router.get("/special-offers")
async def admin_list_offers(admin=Depends(verify_admin), offers=Depends(get_offer_service)):
    return {"offers": await offers.list_all()}


@router.post("/special-offers")
async def admin_create_offer(request: OfferRequest, admin=Depends(verify_admin), offers=Depends(get_offer_service)):
    data = request.model_dump(mode="json", exclude={"product_ids"}, exclude_none=True)
    try:
        offer = await offers.create(data, request.product_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "offer": offer}


@router.patch("/special-offers/{offer_id}")
async def admin_update_offer(
    offer_id: str,
    request: OfferUpdateRequest,
    admin=Depends(verify_admin),
    offers=Depends(get_offer_service),
):
    data = request.model_dump(mode="json", exclude={"product_ids"}, exclude_none=True)
    try:
        offer = await offers.update(offer_id, data, request.product_ids)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "offer": offer}


@router.delete("/special-offers/{offer_id}")
async def admin_delete_offer(offer_id: str, admin=Depends(verify_admin), offers=Depends(get_offer_service)):
    try:
        await offers.delete(offer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}
