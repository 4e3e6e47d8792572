"""API routers, one per storefront area."""
from .account import router as account_router
from .admin import router as admin_router
from .cart import router as cart_router
from .checkout import router as checkout_router
from .orders import router as orders_router
from .payments import router as payments_router
from .products import router as products_router
from .webhooks import router as webhooks_router

__all__ = [
    "account_router",
    "admin_router",
    "cart_router",
    "checkout_router",
    "orders_router",
    "payments_router",
    "products_router",
    "webhooks_router",
]
