"""Domain services wrapping repositories."""
from .account import AccountService
from .cart import CartService
from .checkout import CheckoutService
from .content import BannerService, BrandService
from .engagement import ModerationService, OfferService, WishlistService
from .marketing import MarketingService
from .products import CatalogService, ProductAdminService

__all__ = [
    "AccountService",
    "BannerService",
    "BrandService",
    "CartService",
    "CatalogService",
    "CheckoutService",
    "MarketingService",
    "ModerationService",
    "OfferService",
    "ProductAdminService",
    "WishlistService",
]
