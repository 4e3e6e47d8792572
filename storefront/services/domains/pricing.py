"""Pricing rules: bulk quantity tiers and discount codes.

Pure functions over models; callers fetch tiers/codes and pass them in.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Sequence

from storefront.services.models import BulkPricingTier, DiscountCode
from storefront.services.money import format_money, round_money, to_decimal


# ==================== BULK TIERS ====================


def tier_unit_price(base_price: Decimal, tier: BulkPricingTier) -> Decimal:
    """Unit price under a tier.

    percentage -> base * (1 - v/100); fixed_amount -> max(0, base - v);
    fixed_price -> v. Unknown types fall back to the base price.
    """
    base = to_decimal(base_price)
    value = to_decimal(tier.discount_value)
    if tier.discount_type == "percentage":
        return round_money(base * (Decimal("1") - value / Decimal("100")))
    if tier.discount_type == "fixed_amount":
        return round_money(max(Decimal("0"), base - value))
    if tier.discount_type == "fixed_price":
        return round_money(value)
    return round_money(base)


def select_tier(tiers: Sequence[BulkPricingTier], quantity: int) -> Optional[BulkPricingTier]:
    """Tier with the highest min_quantity the quantity reaches (respecting max_quantity)."""
    best: Optional[BulkPricingTier] = None
    for tier in tiers:
        if quantity < tier.min_quantity:
            continue
        if tier.max_quantity is not None and quantity > tier.max_quantity:
            continue
        if best is None or tier.min_quantity > best.min_quantity:
            best = tier
    return best


@dataclass
class LinePrice:
    """Price snapshot for one cart/order line."""

    unit_price: Decimal
    original_price: Decimal
    quantity: int
    tier: Optional[BulkPricingTier] = None

    @property
    def is_bulk_order(self) -> bool:
        return self.tier is not None and self.unit_price < self.original_price

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def savings(self) -> Decimal:
        return (self.original_price - self.unit_price) * self.quantity if self.is_bulk_order else Decimal("0")

    def as_row(self) -> dict:
        """Bulk columns shared by cart_items and order_items."""
        return {
            "is_bulk_order": self.is_bulk_order,
            "bulk_tier_id": self.tier.id if self.is_bulk_order else None,
            "bulk_price": str(self.unit_price) if self.is_bulk_order else None,
            "bulk_savings": str(self.savings),
            "original_price": str(self.original_price),
        }


def price_line(
    base_price: Decimal,
    quantity: int,
    tiers: Sequence[BulkPricingTier] = (),
    bulk_enabled: bool = True,
) -> LinePrice:
    """Price a line, applying the matching bulk tier when the product allows it."""
    base = round_money(base_price)
    tier = select_tier(tiers, quantity) if bulk_enabled else None
    if tier is None:
        return LinePrice(unit_price=base, original_price=base, quantity=quantity)
    return LinePrice(unit_price=tier_unit_price(base, tier), original_price=base, quantity=quantity, tier=tier)


# ==================== DISCOUNT CODES ====================


@dataclass
class DiscountResult:
    """Outcome of validating a code against a subtotal."""

    valid: bool
    amount: Decimal = Decimal("0")
    error: Optional[str] = None
    code: Optional[DiscountCode] = None

    def as_dict(self) -> dict:
        if not self.valid:
            return {"valid": False, "error": self.error}
        return {
            "valid": True,
            "code": self.code.code,
            "code_id": self.code.id,
            "type": self.code.discount_type,
            "value": float(self.code.discount_value),
            "amount": float(self.amount),
        }


def evaluate_discount(
    code: Optional[DiscountCode], subtotal: Decimal, now: Optional[datetime] = None
) -> DiscountResult:
    """
    Validate a discount code and compute its amount.

    Checks run in order: exists and active, usage limit, validity window,
    minimum order. Percentage discounts are capped by max_discount_amount and
    no discount ever exceeds the subtotal.
    """
    if code is None or not code.is_active:
        return DiscountResult(False, error="This discount code is not valid.")

    if code.usage_limit and code.usage_count >= code.usage_limit:
        return DiscountResult(False, error="This discount code has reached its usage limit.")

    now = now or datetime.now(timezone.utc)
    if code.valid_from and _aware(code.valid_from) > now:
        return DiscountResult(False, error="This discount code is not yet active.")
    if code.valid_until and _aware(code.valid_until) < now:
        return DiscountResult(False, error="This discount code has expired.")

    subtotal = to_decimal(subtotal)
    minimum = to_decimal(code.minimum_order_amount)
    if minimum and subtotal < minimum:
        return DiscountResult(
            False, error=f"Minimum order amount of {format_money(minimum)} required."
        )

    if code.discount_type == "percentage":
        amount = subtotal * to_decimal(code.discount_value) / Decimal("100")
        if code.max_discount_amount:
            amount = min(amount, to_decimal(code.max_discount_amount))
    else:
        amount = to_decimal(code.discount_value)

    amount = round_money(min(amount, subtotal))
    return DiscountResult(True, amount=amount, code=code)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
