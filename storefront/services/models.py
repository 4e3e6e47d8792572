"""Database Models - Pydantic models for storefront tables."""
from decimal import Decimal
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator

from storefront.services.money import to_decimal as _to_decimal


class Profile(BaseModel):
    """Customer profile (one per auth user, same id)."""
    id: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        extra = "ignore"


class Product(BaseModel):
    """Catalog product."""
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
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
    created_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("sizes", "colors", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0


class BulkPricingTier(BaseModel):
    """Quantity break for a product."""
    id: str
    product_id: str
    min_quantity: int
    max_quantity: Optional[int] = None
    discount_type: str = "percentage"  # percentage | fixed_amount | fixed_price
    discount_value: Decimal = Decimal("0")

    class Config:
        extra = "ignore"

    @field_validator("discount_value", mode="before")
    @classmethod
    def convert_value_to_decimal(cls, v):
        return _to_decimal(v)


class Order(BaseModel):
    """Order model.

    user_id is None for guest checkouts; guest_* columns carry contact details.
    """
    id: str
    order_number: str
    user_id: Optional[str] = None
    total_amount: Decimal
    delivery_fee: Decimal = Decimal("0")
    delivery_method: Optional[str] = None
    address_id: Optional[str] = None
    discount_code_id: Optional[str] = None
    discount_amount: Decimal = Decimal("0")
    status: str = "pending"
    payment_status: str = "pending"
    payment_reference: Optional[str] = None
    payment_gateway: Optional[str] = None
    tracking_code: Optional[str] = None
    tracking_url: Optional[str] = None
    shipped_at: Optional[datetime] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_first_name: Optional[str] = None
    guest_last_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("total_amount", "delivery_fee", "discount_amount", mode="before")
    @classmethod
    def convert_amount_to_decimal(cls, v):
        return _to_decimal(v)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"

    @property
    def is_guest(self) -> bool:
        return self.user_id is None


class OrderItem(BaseModel):
    """Order line; price is a snapshot taken at checkout."""
    id: str
    order_id: str
    product_id: str
    quantity: int = 1
    price: Decimal
    size: Optional[str] = None
    color: Optional[str] = None
    is_bulk_order: bool = False
    bulk_tier_id: Optional[str] = None
    bulk_price: Optional[Decimal] = None
    bulk_savings: Decimal = Decimal("0")
    original_price: Optional[Decimal] = None

    class Config:
        extra = "ignore"

    @field_validator("price", "bulk_savings", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("bulk_price", "original_price", mode="before")
    @classmethod
    def convert_optional_to_decimal(cls, v):
        return _to_decimal(v) if v is not None else None


class CartItem(BaseModel):
    """Row in cart_items."""
    id: str
    user_id: str
    product_id: str
    quantity: int = 1
    size: Optional[str] = None
    color: Optional[str] = None
    is_bulk_order: bool = False
    bulk_tier_id: Optional[str] = None
    bulk_price: Optional[Decimal] = None
    bulk_savings: Decimal = Decimal("0")
    original_price: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("bulk_savings", mode="before")
    @classmethod
    def convert_savings_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("bulk_price", "original_price", mode="before")
    @classmethod
    def convert_optional_to_decimal(cls, v):
        return _to_decimal(v) if v is not None else None


class Address(BaseModel):
    """Saved delivery address."""
    id: str
    user_id: str
    full_name: str
    phone: Optional[str] = None
    street_address: str
    city: str
    province: str
    postal_code: str
    is_default: bool = False

    class Config:
        extra = "ignore"


class DiscountCode(BaseModel):
    """Checkout discount code."""
    id: str
    code: str
    description: Optional[str] = None
    discount_type: str = "percentage"  # percentage | fixed
    discount_value: Decimal
    minimum_order_amount: Decimal = Decimal("0")
    max_discount_amount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    usage_count: int = 0
    is_active: bool = True
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("discount_value", "minimum_order_amount", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("max_discount_amount", mode="before")
    @classmethod
    def convert_optional_to_decimal(cls, v):
        return _to_decimal(v) if v is not None else None


class SpecialOffer(BaseModel):
    """Time-limited bundle price over a set of products."""
    id: str
    title: str
    description: Optional[str] = None
    special_price: Decimal
    original_price: Decimal
    discount_percentage: int = 0
    valid_until: Optional[datetime] = None
    banner_image_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("special_price", "original_price", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return _to_decimal(v)


class Review(BaseModel):
    """Product review (hidden until approved)."""
    id: str
    product_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    is_approved: bool = False
    created_at: Optional[datetime] = None

    class Config:
        extra = "ignore"
