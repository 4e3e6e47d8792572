"""Order processing module."""
from .serializer import (
    build_item_payload,
    build_order_detail,
    build_order_payload,
)
from .status_service import ConfirmationResult, OrderStatusService

__all__ = [
    "build_item_payload",
    "build_order_detail",
    "build_order_payload",
    "ConfirmationResult",
    "OrderStatusService",
]
