"""Product variants: automated generation and catalogue export.

Generation builds one variant per size x colour. Stock is either spread
evenly over the grid (remainder to the first variants) or set to a fixed
quantity per variant.
"""

import csv
import io
import time
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from storefront.services.money import round_money, to_decimal

DEFAULT_QUANTITY_PER_VARIANT = 10

EXPORT_HEADERS = [
    "Product ID",
    "Product Name",
    "Category",
    "Subcategory",
    "Brand",
    "Base Price (R)",
    "Stock Quantity",
    "Material",
    "Sizes",
    "Colors",
    "Is Featured",
    "Bulk Pricing Enabled",
    "Min Bulk Quantity",
    "Bulk Discount Note",
    "Created Date",
    "Variant ID",
    "Variant Size",
    "Variant Color",
    "Variant Stock",
    "Variant Price Adjustment",
    "Variant Active",
    "Final Variant Price (R)",
]


@dataclass
class VariantOptions:
    default_quantity_per_variant: int = DEFAULT_QUANTITY_PER_VARIANT
    distribute_stock_evenly: bool = True
    generate_skus: bool = False
    price_adjustments: dict[str, float] = field(default_factory=dict)


def validate_for_generation(sizes: Optional[list], colors: Optional[list], stock_quantity: Any) -> list[str]:
    """Reasons a product cannot get generated variants (empty list when fine)."""
    errors = []
    if not sizes:
        errors.append("Product must have at least one size specified")
    if not colors:
        errors.append("Product must have at least one color specified")
    if not isinstance(stock_quantity, int) or stock_quantity < 0:
        errors.append("Product must have a valid stock quantity (0 or greater)")
    if sizes and any(not str(s).strip() for s in sizes):
        errors.append("All sizes must be non-empty strings")
    if colors and any(not str(c).strip() for c in colors):
        errors.append("All colors must be non-empty strings")
    return errors


def variant_sku(product_id: str, size: str, color: str, now_ms: Optional[int] = None) -> str:
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{product_id[-8:].upper()}-{size[:2].upper()}{color[:3].upper()}-{str(ms)[-4:]}"


def generate_variants(
    product_id: str,
    sizes: list[str],
    colors: list[str],
    total_stock: int,
    options: Optional[VariantOptions] = None,
) -> list[dict[str, Any]]:
    """Rows for product_variants, sizes outer / colours inner."""
    options = options or VariantOptions()
    combinations = len(sizes) * len(colors)
    if combinations == 0:
        return []

    if options.distribute_stock_evenly and total_stock > 0:
        per_variant, remainder = divmod(total_stock, combinations)
    else:
        per_variant, remainder = options.default_quantity_per_variant, 0

    adjustments = options.price_adjustments or {}
    variants = []
    index = 0
    for size in sizes:
        for color in colors:
            adjustment = to_decimal(adjustments.get(f"size_{size}", 0)) + to_decimal(
                adjustments.get(f"color_{color}", 0)
            )
            variant = {
                "product_id": product_id,
                "size": size.strip(),
                "color": color.strip(),
                "stock_quantity": per_variant + (1 if index < remainder else 0),
                "price_adjustment": float(adjustment),
                "is_active": True,
            }
            if options.generate_skus:
                variant["sku"] = variant_sku(product_id, size.strip(), color.strip())
            variants.append(variant)
            index += 1
    return variants


# ==================== EXPORT ====================


def _yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def _join(values: Any) -> str:
    if isinstance(values, list):
        return "; ".join(str(v) for v in values)
    return str(values or "")


def _created(value: Any) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return str(value)


def _product_columns(product: dict) -> list[str]:
    return [
        product.get("id") or "",
        product.get("name") or "",
        product.get("category") or "",
        product.get("subcategory") or "",
        product.get("brand") or "",
        str(product.get("price") or 0),
        str(product.get("stock_quantity") or 0),
        product.get("material") or "",
        _join(product.get("sizes")),
        _join(product.get("colors")),
        _yes_no(product.get("is_featured")),
        _yes_no(product.get("enable_bulk_pricing")),
        str(product.get("min_bulk_quantity") or ""),
        product.get("bulk_discount_note") or "",
        _created(product.get("created_at")),
    ]


def products_to_csv(products: list[dict]) -> str:
    """One row per variant; products without variants get a single row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for product in products:
        base = to_decimal(product.get("price"))
        columns = _product_columns(product)
        variants = product.get("product_variants") or []
        if not variants:
            writer.writerow(columns + ["", "", "", "", "", "", f"{round_money(base):.2f}"])
            continue
        for variant in variants:
            adjustment = to_decimal(variant.get("price_adjustment"))
            writer.writerow(
                columns
                + [
                    variant.get("id") or "",
                    variant.get("size") or "",
                    variant.get("color") or "",
                    str(variant.get("stock_quantity") or 0),
                    str(variant.get("price_adjustment") or 0),
                    _yes_no(variant.get("is_active")),
                    f"{round_money(base + adjustment):.2f}",
                ]
            )
    return buffer.getvalue()


def variant_price(base_price: Any, variant: dict) -> Decimal:
    return round_money(to_decimal(base_price) + to_decimal(variant.get("price_adjustment")))
