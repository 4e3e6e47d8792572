"""
Repository Pattern for Database Operations

- OrderRepository: orders, order items
- CartRepository: cart items (per user)
- ProductRepository: catalog, variants, bulk tiers
- ProfileRepository / AddressRepository: accounts
- DiscountRepository: discount codes
- WishlistRepository, ReviewRepository, SubscriptionRepository, OfferRepository
- BannerRepository, BrandRepository: storefront banners, canonical brands
"""
from .order_repo import OrderRepository
from .cart_repo import CartRepository
from .product_repo import ProductRepository
from .user_repo import AddressRepository, ProfileRepository
from .discount_repo import DiscountRepository
from .content_repo import BannerRepository, BrandRepository
from .engagement_repo import (
    OfferRepository,
    ReviewRepository,
    SubscriptionRepository,
    WishlistRepository,
)

__all__ = [
    "OrderRepository",
    "CartRepository",
    "ProductRepository",
    "ProfileRepository",
    "AddressRepository",
    "DiscountRepository",
    "WishlistRepository",
    "ReviewRepository",
    "SubscriptionRepository",
    "OfferRepository",
    "BannerRepository",
    "BrandRepository",
]
