"""
Admin Marketing Router

Back-in-stock alerts and the new-arrivals newsletter.
"""
from fastapi import APIRouter, Depends, HTTPException

from storefront.auth import verify_admin
from storefront.errors import NotFoundError
from storefront.routers.deps import get_marketing_service
from storefront.routers.models import BackInStockSendRequest, NewArrivalsRequest

router = APIRouter(tags=["admin-marketing"])


@router.post("/back-in-stock/send")
async def admin_send_back_in_stock(
    request: BackInStockSendRequest, admin=Depends(verify_admin), marketing=Depends(get_marketing_service)
):
    """Email waiting subscribers of a product that is back in stock."""
    try:
        sent = await marketing.send_back_in_stock(request.product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "count": sent}


@router.post("/newsletter/new-arrivals")
async def admin_send_new_arrivals(
    request: NewArrivalsRequest, admin=Depends(verify_admin), marketing=Depends(get_marketing_service)
):
    try:
        sent = await marketing.send_new_arrivals(request.product_ids, request.since_days, request.limit)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "count": sent}
