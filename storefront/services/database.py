"""
Supabase Database Service

Provides the Database class: one async service-role client plus a
repository per table group.

Usage:
    from storefront.services.database import get_database

    # In async context (after init_database() called at startup):
    db = get_database()
    order = await db.orders.get_by_id(order_id, user_id=user.id)

    # At FastAPI startup (lifespan):
    await init_database()
"""

import asyncio
import os
from typing import Any, Optional

from supabase._async.client import AsyncClient
from supabase._async.client import create_client as acreate_client

from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.repositories import (
    AddressRepository,
    BannerRepository,
    BrandRepository,
    CartRepository,
    DiscountRepository,
    OfferRepository,
    OrderRepository,
    ProductRepository,
    ProfileRepository,
    ReviewRepository,
    SubscriptionRepository,
    WishlistRepository,
)

logger = get_logger(__name__)


class Database:
    """
    Supabase database client with all repositories.

    IMPORTANT: This class uses the async Supabase client (AsyncClient).
    Must be initialized via async factory method `create()` or `init_database()`.
    """

    def __init__(self, client: AsyncClient):
        """Private constructor. Use Database.create() or init_database() instead."""
        self.client = client

        self.orders = OrderRepository(client)
        self.carts = CartRepository(client)
        self.products = ProductRepository(client)
        self.profiles = ProfileRepository(client)
        self.addresses = AddressRepository(client)
        self.discounts = DiscountRepository(client)
        self.wishlist = WishlistRepository(client)
        self.reviews = ReviewRepository(client)
        self.subscriptions = SubscriptionRepository(client)
        self.offers = OfferRepository(client)
        self.banners = BannerRepository(client)
        self.brands = BrandRepository(client)

    @classmethod
    async def create(cls) -> "Database":
        """Async factory method: build the service-role client and repositories."""
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        client = await acreate_client(url, key)
        return cls(client)

    # ==================== AUTH (identity provider) ====================

    async def get_auth_user(self, access_token: str) -> Optional[Any]:
        """Resolve a Supabase access token to its auth user, or None if invalid."""
        try:
            response = await self.client.auth.get_user(access_token)
        except Exception as e:
            logger.warning("Access token rejected: %s", type(e).__name__)
            return None
        return response.user if response else None

    async def get_user_email(self, user_id: str) -> Optional[str]:
        """Look up a customer's email address via the auth admin API."""
        try:
            response = await self.client.auth.admin.get_user_by_id(user_id)
        except Exception:
            logger.warning(
                "Auth lookup failed for user %s", sanitize_id_for_logging(user_id), exc_info=True
            )
            return None
        user = response.user if response else None
        return user.email if user else None


# ==================== SINGLETON ====================

_db: Database | None = None
_db_lock: Optional[asyncio.Lock] = None


def _get_lock() -> asyncio.Lock:
    """Get or create async lock for initialization."""
    global _db_lock
    if _db_lock is None:
        _db_lock = asyncio.Lock()
    return _db_lock


async def init_database() -> Database:
    """Initialize async database singleton.

    Called at FastAPI startup (lifespan) or lazily on first use.
    """
    global _db
    if _db is not None:
        return _db

    async with _get_lock():
        if _db is None:
            logger.info("Initializing async Supabase client...")
            _db = await Database.create()
            logger.info("Async Supabase client initialized successfully")
    return _db


async def close_database() -> None:
    """Drop the singleton. Called at FastAPI shutdown (lifespan).

    The service-role client holds no user session, so there is nothing to
    sign out; the next get_database_async() builds a fresh client.
    """
    global _db
    if _db is None:
        return
    _db = None
    logger.info("Supabase client released")


async def get_database_async() -> Database:
    """Get database instance with lazy async initialization (serverless functions)."""
    if _db is None:
        return await init_database()
    return _db


def get_database() -> Database:
    """Get database instance (sync accessor).

    Raises:
        RuntimeError: If init_database() has not run yet
    """
    if _db is None:
        raise RuntimeError(
            "Database not initialized. Call init_database() at startup or use get_database_async()."
        )
    return _db


def set_database(db: Optional[Database]) -> None:
    """Install a Database instance directly (tests, scripts)."""
    global _db
    _db = db
