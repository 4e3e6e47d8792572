"""
Shared Dependencies for Routers

Lazy-loaded singletons plus per-request service factories. Routes take
services through Depends so tests can swap them with dependency_overrides.
"""

from typing import Optional, TYPE_CHECKING

from fastapi import Depends

from storefront.logging import get_logger
from storefront.services.database import Database, get_database_async

if TYPE_CHECKING:
    from storefront.services.notifications import NotificationService
    from storefront.services.payments import PaymentService

logger = get_logger(__name__)


# ==================== LAZY SINGLETONS ====================

_notification_service: Optional["NotificationService"] = None
_payment_service: Optional["PaymentService"] = None


def get_notification_service() -> "NotificationService":
    """Get or create NotificationService singleton (lazy loaded)"""
    global _notification_service
    if _notification_service is None:
        from storefront.services.notifications import NotificationService
        _notification_service = NotificationService()
    return _notification_service


def get_payment_service() -> "PaymentService":
    """Get or create PaymentService singleton (lazy loaded)"""
    global _payment_service
    if _payment_service is None:
        from storefront.services.payments import PaymentService
        _payment_service = PaymentService()
    return _payment_service


async def get_db() -> Database:
    return await get_database_async()


# ==================== SERVICE FACTORIES ====================

def get_status_service(db: Database = Depends(get_db), notifications=Depends(get_notification_service)):
    from storefront.orders import OrderStatusService
    return OrderStatusService(db, notifications)


def get_checkout_service(db: Database = Depends(get_db), payments=Depends(get_payment_service)):
    from storefront.services.domains import CheckoutService
    return CheckoutService(db, payments)


def get_cart_service(db: Database = Depends(get_db)):
    from storefront.services.domains import CartService
    return CartService(db)


def get_catalog_service(db: Database = Depends(get_db)):
    from storefront.services.domains import CatalogService
    return CatalogService(db)


def get_product_admin_service(db: Database = Depends(get_db)):
    from storefront.services.domains import ProductAdminService
    return ProductAdminService(db)


def get_account_service(db: Database = Depends(get_db)):
    from storefront.services.domains import AccountService
    return AccountService(db)


def get_wishlist_service(db: Database = Depends(get_db)):
    from storefront.services.domains import WishlistService
    return WishlistService(db)


def get_offer_service(db: Database = Depends(get_db)):
    from storefront.services.domains import OfferService
    return OfferService(db)


def get_moderation_service(db: Database = Depends(get_db)):
    from storefront.services.domains import ModerationService
    return ModerationService(db)


def get_marketing_service(db: Database = Depends(get_db), notifications=Depends(get_notification_service)):
    from storefront.services.domains import MarketingService
    return MarketingService(db, notifications)


def get_banner_service(db: Database = Depends(get_db)):
    from storefront.services.domains import BannerService
    return BannerService(db)


def get_brand_service(db: Database = Depends(get_db)):
    from storefront.services.domains import BrandService
    return BrandService(db)


# ==================== SHUTDOWN HELPERS ====================

async def shutdown_services():
    """Cleanly close singleton services (http clients, etc.)."""
    global _payment_service, _notification_service
    if _payment_service is not None:
        try:
            await _payment_service.aclose()
        except Exception as e:
            logger.warning("Failed to close payment service: %s", e)
        _payment_service = None
    if _notification_service is not None:
        try:
            await _notification_service.aclose()
        except Exception as e:
            logger.warning("Failed to close notification service: %s", e)
        _notification_service = None
