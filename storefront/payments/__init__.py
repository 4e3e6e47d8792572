"""Payment processing module."""
from .constants import (
    PaymentGateway,
    PaymentStatus,
    OrderStatus,
    ORDER_STATUSES,
    ADMIN_SETTABLE_STATES,
    FULFILMENT_STATES,
    GATEWAY_ALIASES,
    normalize_gateway,
)
from .config import (
    get_app_url,
    get_default_gateway,
    get_gateway_config,
    is_gateway_configured,
    validate_gateway_config,
)

__all__ = [
    "PaymentGateway",
    "PaymentStatus",
    "OrderStatus",
    "ORDER_STATUSES",
    "ADMIN_SETTABLE_STATES",
    "FULFILMENT_STATES",
    "GATEWAY_ALIASES",
    "normalize_gateway",
    "get_app_url",
    "get_default_gateway",
    "get_gateway_config",
    "is_gateway_configured",
    "validate_gateway_config",
]
