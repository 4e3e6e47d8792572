"""
Apparel Cast Storefront - Main FastAPI Application

Single entry point for the storefront API, payment webhooks and admin
routes (Vercel serverless function).
"""
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Vercel runs this file directly; make the repo root importable
_base_path = Path(__file__).parent.parent
if str(_base_path) not in sys.path:
    sys.path.insert(0, str(_base_path))

from storefront.logging import get_logger  # noqa: E402
from storefront.routers import (  # noqa: E402
    account_router,
    admin_router,
    cart_router,
    checkout_router,
    orders_router,
    payments_router,
    products_router,
    webhooks_router,
)
from storefront.routers.deps import shutdown_services  # noqa: E402
from storefront.services.database import close_database, init_database  # noqa: E402

logger = get_logger(__name__)


# ==================== FASTAPI APP ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    try:
        await init_database()
    except ValueError as e:
        # Routes that need the database fail on first use instead
        logger.error("Database not initialised at startup: %s", e)
    yield
    await shutdown_services()
    await close_database()


app = FastAPI(
    title="Apparel Cast Storefront",
    description="Clothing storefront API with Yoco and Paystack payments",
    version="1.0.0",
    lifespan=lifespan,
)

_origins = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(products_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(account_router)
app.include_router(orders_router)
app.include_router(payments_router)
app.include_router(webhooks_router)
app.include_router(admin_router, prefix="/api/admin")


# ==================== HEALTH CHECK ====================

@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "storefront"}
