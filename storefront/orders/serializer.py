"""Order response serializers."""
from typing import Any, Dict, List, Optional

from storefront.services.models import Order
from storefront.services.money import to_float
from storefront.services.notifications import calculate_bulk_savings


def build_order_payload(order: Order) -> Dict[str, Any]:
    """Order summary for API responses (amounts as floats)."""
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_gateway": order.payment_gateway,
        "total_amount": to_float(order.total_amount),
        "delivery_fee": to_float(order.delivery_fee),
        "delivery_method": order.delivery_method,
        "discount_amount": to_float(order.discount_amount),
        "tracking_code": order.tracking_code,
        "tracking_url": order.tracking_url,
        "shipped_at": order.shipped_at.isoformat() if order.shipped_at else None,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }


def build_item_payload(item: Dict[str, Any]) -> Dict[str, Any]:
    """Order item with the embedded product name/image flattened."""
    product = item.get("products") if isinstance(item.get("products"), dict) else {}
    return {
        "id": item.get("id"),
        "product_id": item.get("product_id"),
        "product_name": product.get("name"),
        "image_url": product.get("image_url"),
        "quantity": item.get("quantity", 1),
        "size": item.get("size"),
        "color": item.get("color"),
        "price": to_float(item.get("price")),
        "is_bulk_order": bool(item.get("is_bulk_order")),
        "bulk_price": to_float(item["bulk_price"]) if item.get("bulk_price") is not None else None,
        "original_price": to_float(item["original_price"]) if item.get("original_price") is not None else None,
    }


def build_order_detail(
    row: Dict[str, Any], items: List[Dict[str, Any]], address: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Full order: summary, delivery address, items and bulk savings."""
    payload = build_order_payload(Order(**row))
    payload["address"] = address if address is not None else row.get("addresses")
    if row.get("user_id") is None:
        payload["guest"] = {
            "email": row.get("guest_email"),
            "phone": row.get("guest_phone"),
            "first_name": row.get("guest_first_name"),
            "last_name": row.get("guest_last_name"),
        }
    payload["items"] = [build_item_payload(i) for i in items]
    payload["bulk_savings"] = to_float(calculate_bulk_savings(items))
    return payload
