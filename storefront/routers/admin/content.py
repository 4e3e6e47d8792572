"""
Admin Content Router - homepage banners and the brand list
"""
from fastapi import APIRouter, Depends, HTTPException

from storefront.auth import verify_admin
from storefront.errors import NotFoundError
from storefront.routers.deps import get_banner_service, get_brand_service
from storefront.routers.models import (
    BannerRequest,
    BrandMergeRequest,
    BrandRemoveRequest,
    BrandRequest,
    FeaturedAdsRequest,
    ReorderRequest,
)
from storefront.services.domains.content import BrandExistsError

router = APIRouter(tags=["admin-content"])


# ==================== BANNERS ====================

@router.put("/banners/ad/featured")
async def admin_set_featured_ads(
    request: FeaturedAdsRequest,
    admin=Depends(verify_admin),
    banners=Depends(get_banner_service),
):
    """Put exactly two ad banners in the homepage featured slots."""
    try:
        featured = await banners.set_featured_ads(request.ids)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "featured": featured}


@router.get("/banners/{kind}")
async def admin_list_banners(kind: str, admin=Depends(verify_admin), banners=Depends(get_banner_service)):
    try:
        return {"banners": await banners.list_banners(kind)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/banners/{kind}")
async def admin_create_banner(
    kind: str,
    request: BannerRequest,
    admin=Depends(verify_admin),
    banners=Depends(get_banner_service),
):
    try:
        banner = await banners.create(kind, request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "banner": banner}


@router.post("/banners/{kind}/reorder")
async def admin_reorder_banners(
    kind: str,
    request: ReorderRequest,
    admin=Depends(verify_admin),
    banners=Depends(get_banner_service),
):
    try:
        ordered = await banners.reorder(kind, request.ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "banners": ordered}


@router.patch("/banners/{kind}/{banner_id}")
async def admin_update_banner(
    kind: str,
    banner_id: str,
    request: BannerRequest,
    admin=Depends(verify_admin),
    banners=Depends(get_banner_service),
):
    try:
        banner = await banners.update(kind, banner_id, request.model_dump(exclude_unset=True))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "banner": banner}


@router.delete("/banners/{kind}/{banner_id}")
async def admin_delete_banner(
    kind: str,
    banner_id: str,
    admin=Depends(verify_admin),
    banners=Depends(get_banner_service),
):
    try:
        await banners.delete(kind, banner_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True}


# ==================== BRANDS ====================

@router.get("/brands")
async def admin_brand_overview(admin=Depends(verify_admin), brands=Depends(get_brand_service)):
    """Canonical list plus product counts for every brand value in use."""
    return {"canonical": await brands.list_canonical(), "in_use": await brands.stats()}


@router.post("/brands")
async def admin_add_brand(request: BrandRequest, admin=Depends(verify_admin), brands=Depends(get_brand_service)):
    try:
        name = await brands.add_canonical(request.name)
    except BrandExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "name": name}


@router.post("/brands/merge")
async def admin_merge_brand(
    request: BrandMergeRequest,
    admin=Depends(verify_admin),
    brands=Depends(get_brand_service),
):
    try:
        updated = await brands.merge(request.from_name, request.into)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "updated": updated}


@router.post("/brands/remove")
async def admin_remove_brand(
    request: BrandRemoveRequest,
    admin=Depends(verify_admin),
    brands=Depends(get_brand_service),
):
    return {"success": True, "updated": await brands.remove(request.name)}


@router.post("/brands/normalize")
async def admin_normalize_brands(admin=Depends(verify_admin), brands=Depends(get_brand_service)):
    return {"success": True, "changed": await brands.normalize_all()}
