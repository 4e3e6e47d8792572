"""
Admin API Router

Admin-only endpoints for orders, products, discounts, offers, reviews,
users, marketing sends, homepage banners and brands. Every route
depends on verify_admin.
"""
from fastapi import APIRouter

from .content import router as content_router
from .discounts import router as discounts_router
from .marketing import router as marketing_router
from .orders import router as orders_router
from .products import router as products_router
from .users import router as users_router

router = APIRouter(tags=["admin"])

router.include_router(orders_router)
router.include_router(products_router)
router.include_router(discounts_router)
router.include_router(users_router)
router.include_router(marketing_router)
router.include_router(content_router)

__all__ = ["router"]
