"""Payment and order constants, enums, and aliases."""
from enum import Enum
from typing import Set


class PaymentGateway(str, Enum):
    """Supported payment gateways."""
    YOCO = "yoco"
    PAYSTACK = "paystack"


class PaymentStatus(str, Enum):
    """Payment state of an order.

    Once an order is `paid` it never goes back to `pending`.
    """
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class OrderStatus(str, Enum):
    """
    Order fulfilment lifecycle.

    Flow:
        pending -> confirmed -> processing -> shipped -> delivered
                -> cancelled

    - pending: Created at checkout, awaiting payment
    - confirmed: Payment received
    - processing: Being picked and packed
    - shipped: Handed to courier (tracking code attached)
    - delivered: Received by the customer
    - cancelled: Cancelled by admin
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ORDER_STATUSES: Set[str] = {s.value for s in OrderStatus}

# Statuses the admin may set on a paid order
ADMIN_SETTABLE_STATES: Set[str] = {
    OrderStatus.CONFIRMED.value,
    OrderStatus.PROCESSING.value,
    OrderStatus.SHIPPED.value,
    OrderStatus.DELIVERED.value,
    OrderStatus.CANCELLED.value,
}

# Statuses after confirmation; a late provider callback must not pull these back
FULFILMENT_STATES: Set[str] = {
    OrderStatus.PROCESSING.value,
    OrderStatus.SHIPPED.value,
    OrderStatus.DELIVERED.value,
    OrderStatus.CANCELLED.value,
}

# Yoco checkout states
YOCO_PAYMENT_SUCCEEDED_EVENT = "payment.succeeded"
YOCO_SUCCESSFUL = "successful"

# Paystack transaction states
PAYSTACK_SUCCESS = "success"
PAYSTACK_FAILED_STATES: Set[str] = {"failed", "abandoned", "reversed"}

GATEWAY_ALIASES: dict[str, str] = {
    "yoco": PaymentGateway.YOCO.value,
    "paystack": PaymentGateway.PAYSTACK.value,
    "pay_stack": PaymentGateway.PAYSTACK.value,
}


def normalize_gateway(gateway: str | None) -> str:
    """
    Normalize gateway name to canonical form.

    Example:
        normalize_gateway("Yoco") -> "yoco"
        normalize_gateway(None) -> "yoco"
    """
    if not gateway:
        return PaymentGateway.YOCO.value

    normalized = gateway.lower().strip()
    return GATEWAY_ALIASES.get(normalized, normalized)
