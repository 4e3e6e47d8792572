"""
API Request Models

Pydantic bodies for the storefront and admin endpoints.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ==================== PAYMENT MODELS ====================

class PaymentInitRequest(BaseModel):
    """Body for /api/yoco/initialize and /api/paystack/initialize (amount in cents)."""
    email: Optional[str] = None
    amount: Optional[int] = None
    order_id: Optional[str] = Field(None, alias="orderId")
    order_number: Optional[str] = Field(None, alias="orderNumber")

    class Config:
        populate_by_name = True


class ConfirmPaymentRequest(BaseModel):
    payment_reference: str


class NotifyOrderRequest(BaseModel):
    order_id: Optional[str] = Field(None, alias="orderId")
    status: Optional[str] = Field(None, alias="newStatus")

    class Config:
        populate_by_name = True


# ==================== CART MODELS ====================

class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1
    size: Optional[str] = None
    color: Optional[str] = None


class UpdateCartItemRequest(BaseModel):
    quantity: int  # 0 removes the line


class GuestCartItem(BaseModel):
    product_id: str
    quantity: int = 1
    size: Optional[str] = None
    color: Optional[str] = None


class MergeCartRequest(BaseModel):
    items: list[GuestCartItem] = []


# ==================== CHECKOUT MODELS ====================

class GuestDetails(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None


class CheckoutRequest(BaseModel):
    delivery_method: str
    address_id: Optional[str] = None
    discount_code: Optional[str] = None
    payment_gateway: Optional[str] = None
    guest: Optional[GuestDetails] = None
    items: list[GuestCartItem] = []


class DiscountValidateRequest(BaseModel):
    code: str
    subtotal: float


# ==================== ACCOUNT MODELS ====================

class ProfileUpdateRequest(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None


class AddressRequest(BaseModel):
    full_name: str
    phone: Optional[str] = None
    street_address: str
    city: str
    province: str
    postal_code: str
    is_default: bool = False


class AddressUpdateRequest(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    is_default: Optional[bool] = None


class WishlistRequest(BaseModel):
    product_id: str


# ==================== CATALOG MODELS ====================

class ReviewRequest(BaseModel):
    rating: int
    comment: Optional[str] = None


class EmailRequest(BaseModel):
    email: str


# ==================== ADMIN MODELS ====================

class OrderStatusUpdateRequest(BaseModel):
    status: str
    tracking_code: Optional[str] = None
    tracking_url: Optional[str] = None
    notify: bool = True


class BulkTierRequest(BaseModel):
    min_quantity: int
    max_quantity: Optional[int] = None
    discount_type: str = "percentage"
    discount_value: float


class ProductRequest(BaseModel):
    name: str
    description: Optional[str] = None
    price: float
    category: Optional[str] = None
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    material: Optional[str] = None
    image_url: Optional[str] = None
    sizes: list[str] = []
    colors: list[str] = []
    stock_quantity: int = 0
    is_active: bool = True
    is_featured: bool = False
    enable_bulk_pricing: bool = False
    min_bulk_quantity: Optional[int] = None
    bulk_discount_note: Optional[str] = None
    bulk_tiers: Optional[list[BulkTierRequest]] = None


class ProductUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    material: Optional[str] = None
    image_url: Optional[str] = None
    sizes: Optional[list[str]] = None
    colors: Optional[list[str]] = None
    stock_quantity: Optional[int] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    enable_bulk_pricing: Optional[bool] = None
    min_bulk_quantity: Optional[int] = None
    bulk_discount_note: Optional[str] = None
    bulk_tiers: Optional[list[BulkTierRequest]] = None


class GenerateVariantsRequest(BaseModel):
    default_quantity_per_variant: int = 10
    distribute_stock_evenly: bool = True
    generate_skus: bool = False
    price_adjustments: dict[str, float] = {}


class DiscountRequest(BaseModel):
    code: str
    description: Optional[str] = None
    discount_type: str = "percentage"
    discount_value: float
    minimum_order_amount: float = 0
    max_discount_amount: Optional[float] = None
    usage_limit: Optional[int] = None
    is_active: bool = True
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    announce: bool = False


class DiscountUpdateRequest(BaseModel):
    code: Optional[str] = None
    description: Optional[str] = None
    discount_type: Optional[str] = None
    discount_value: Optional[float] = None
    minimum_order_amount: Optional[float] = None
    max_discount_amount: Optional[float] = None
    usage_limit: Optional[int] = None
    is_active: Optional[bool] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None


class OfferRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    special_price: Optional[float] = None
    original_price: Optional[float] = None
    valid_until: Optional[datetime] = None
    banner_image_url: Optional[str] = None
    is_active: bool = True
    product_ids: list[str] = []


class OfferUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    special_price: Optional[float] = None
    original_price: Optional[float] = None
    valid_until: Optional[datetime] = None
    banner_image_url: Optional[str] = None
    is_active: Optional[bool] = None
    product_ids: Optional[list[str]] = None


class ReviewModerationRequest(BaseModel):
    is_approved: bool = True


class SetAdminRequest(BaseModel):
    is_admin: bool


class BackInStockSendRequest(BaseModel):
    product_id: str


class NewArrivalsRequest(BaseModel):
    product_ids: Optional[list[str]] = None
    since_days: int = 7
    limit: int = 8


# ==================== CONTENT MODELS ====================

class BannerRequest(BaseModel):
    """Hero, category and ad banner fields; which ones apply depends on the banner type."""
    title: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    background_image_url: Optional[str] = None
    cta_text: Optional[str] = None
    cta_link: Optional[str] = None
    background_overlay_opacity: Optional[int] = None
    text_color: Optional[str] = None
    is_active: Optional[bool] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class ReorderRequest(BaseModel):
    ids: list[str]


class FeaturedAdsRequest(BaseModel):
    ids: list[str]


class BrandRequest(BaseModel):
    name: str


class BrandMergeRequest(BaseModel):
    from_name: Optional[str] = None  # None merges unbranded products
    into: str


class BrandRemoveRequest(BaseModel):
    name: str
