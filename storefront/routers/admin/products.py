"""
Admin Products Router

Product CRUD with bulk tiers, automated variant generation and export.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import JSONResponse

from storefront.auth import verify_admin
from storefront.errors import NotFoundError
from storefront.logging import get_logger
from storefront.routers.deps import get_product_admin_service
from storefront.routers.models import GenerateVariantsRequest, ProductRequest, ProductUpdateRequest
from storefront.services.domains.products import VariantsExistError, VariantValidationError
from storefront.services.domains.variants import VariantOptions

logger = get_logger(__name__)

router = APIRouter(tags=["admin-products"])


def _tiers(tiers) -> list[dict] | None:
    if tiers is None:
        return None
    return [t.model_dump() for t in tiers]


@router.get("/products")
async def admin_list_products(admin=Depends(verify_admin), products=Depends(get_product_admin_service)):
    """All products, including inactive ones."""
    return {"products": await products.list_products()}


@router.post("/products")
async def admin_create_product(
    request: ProductRequest, admin=Depends(verify_admin), products=Depends(get_product_admin_service)
):
    data = request.model_dump(exclude={"bulk_tiers"}, exclude_none=True)
    product = await products.create_product(data, _tiers(request.bulk_tiers))
    return {"success": True, "product": product}


@router.patch("/products/{product_id}")
async def admin_update_product(
    product_id: str,
    request: ProductUpdateRequest,
    admin=Depends(verify_admin),
    products=Depends(get_product_admin_service),
):
    data = request.model_dump(exclude={"bulk_tiers"}, exclude_none=True)
    try:
        product = await products.update_product(product_id, data, _tiers(request.bulk_tiers))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "product": product}


@router.delete("/products/{product_id}")
async def admin_delete_product(
    product_id: str, admin=Depends(verify_admin), products=Depends(get_product_admin_service)
):
    try:
        await products.delete_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}


@router.post("/products/{product_id}/variants/generate")
async def admin_generate_variants(
    product_id: str,
    request: GenerateVariantsRequest | None = None,
    admin=Depends(verify_admin),
    products=Depends(get_product_admin_service),
):
    """Build the size x colour grid. 409 when active variants already exist."""
    options = VariantOptions(**(request or GenerateVariantsRequest()).model_dump())
    try:
        result = await products.generate_variants(product_id, options)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except VariantValidationError as e:
        return JSONResponse({"error": "Validation failed", "details": e.errors}, status_code=400)
    except VariantsExistError as e:
        return JSONResponse(
            {"error": str(e), "existingVariantsCount": e.existing_count}, status_code=409
        )
    return {"success": True, **result}


@router.get("/products/export")
async def admin_export_products(
    format: str = Query("csv"),
    admin=Depends(verify_admin),
    products=Depends(get_product_admin_service),
):
    """One row per variant as CSV, or the raw rows with format=json."""
    try:
        exported = await products.export(format)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if format == "json":
        return {"products": exported}
    filename = f"products-export-{datetime.now(timezone.utc).date().isoformat()}.csv"
    return Response(
        content=exported,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
