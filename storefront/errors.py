"""
Common Error Constants

Centralized error messages shared by routers and services.
"""

# Auth errors
ERROR_FORBIDDEN = "Forbidden"
ERROR_NOT_AUTHENTICATED = "Not authenticated"

# Order errors
ERROR_ORDER_NOT_FOUND = "Order not found"
ERROR_ORDER_UPDATE_FAILED = "Failed to update order"
ERROR_INVALID_STATUS = "Invalid order status"
ERROR_TRACKING_REQUIRED = "Tracking code is required for shipped orders"
ERROR_USER_EMAIL_NOT_FOUND = "User email not found"

# Cart / checkout errors
ERROR_CART_EMPTY = "Cart is empty"
ERROR_CART_ITEM_NOT_FOUND = "Cart item not found"
ERROR_ADDRESS_REQUIRED = "Delivery address is required"
ERROR_GUEST_DETAILS_REQUIRED = "Guest contact and address details are required"
ERROR_INVALID_DELIVERY_METHOD = "Invalid delivery method"

# Product errors
ERROR_PRODUCT_NOT_FOUND = "Product not found"
ERROR_OUT_OF_STOCK = "Product is still out of stock"
ERROR_PRODUCT_UNAVAILABLE = "Product is out of stock"
ERROR_PEP_SEND_BULK = "PEP Send is not available for bulk orders. Courier delivery required."
ERROR_INVALID_QUANTITY = "Quantity must be at least 1"

# Payment errors
ERROR_MISSING_FIELDS = "Missing required fields"
ERROR_PAYMENT_NOT_CONFIGURED = "Payment service not configured"
ERROR_PAYMENT_INIT_FAILED = "Payment initialization failed"
ERROR_PAYMENT_VERIFY_FAILED = "Payment verification failed"
ERROR_NO_SIGNATURE = "No signature provided"
ERROR_INVALID_SIGNATURE = "Invalid signature"
ERROR_WEBHOOK_SECRET_MISSING = "Webhook secret not configured"
ERROR_NO_ORDER_IN_METADATA = "No order ID in metadata"
ERROR_NO_PAYMENT_ID = "No payment ID in webhook payload"
ERROR_WEBHOOK_UNPARSEABLE = "Could not parse webhook data"

# Generic errors
ERROR_NOT_FOUND = "Not found"


class PaymentProviderError(Exception):
    """Payment provider rejected a request or could not be reached.

    Carries the HTTP status the provider answered with so routes can
    pass it through to the caller.
    """

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PaymentNotConfiguredError(Exception):
    """Required gateway credentials are missing from the environment."""


class NotFoundError(LookupError):
    """Row does not exist, or is not visible to the caller."""


class OrderNotFoundError(NotFoundError):
    """Order does not exist, or is not visible to the caller."""
