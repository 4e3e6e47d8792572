"""Payment gateway configuration and validation."""
import os
import logging
from typing import Dict, Optional, Tuple

from storefront.errors import PaymentNotConfiguredError
from .constants import PaymentGateway, normalize_gateway

logger = logging.getLogger(__name__)

DEFAULT_APP_URL = "http://localhost:3000"

YOCO_API_URL = "https://payments.yoco.com/api"
PAYSTACK_API_URL = "https://api.paystack.co"

GATEWAY_ENV_REQUIREMENTS: Dict[str, Tuple[str, ...]] = {
    PaymentGateway.YOCO.value: ("YOCO_SECRET_KEY",),
    PaymentGateway.PAYSTACK.value: ("PAYSTACK_SECRET_KEY",),
}

GATEWAY_NAMES: Dict[str, str] = {
    PaymentGateway.YOCO.value: "Yoco",
    PaymentGateway.PAYSTACK.value: "Paystack",
}


def get_app_url() -> str:
    """Public base URL of the storefront (used for provider redirects and email links)."""
    return os.environ.get("APP_URL", DEFAULT_APP_URL).rstrip("/")


def get_gateway_config(gateway: str) -> Dict[str, Optional[str]]:
    """
    Get the environment values for a gateway.

    Returns dict of config keys to their values (None if not set).
    """
    gateway = normalize_gateway(gateway)

    if gateway == PaymentGateway.YOCO.value:
        return {
            "secret_key": os.environ.get("YOCO_SECRET_KEY"),
            "webhook_secret": os.environ.get("YOCO_WEBHOOK_SECRET"),
            # Success/cancel pages live on the storefront; override for tunnels in dev
            "callback_url": os.environ.get("YOCO_CALLBACK_URL") or get_app_url(),
            "api_url": os.environ.get("YOCO_API_URL", YOCO_API_URL),
        }
    elif gateway == PaymentGateway.PAYSTACK.value:
        return {
            "secret_key": os.environ.get("PAYSTACK_SECRET_KEY"),
            "callback_url": get_app_url(),
            "api_url": os.environ.get("PAYSTACK_API_URL", PAYSTACK_API_URL),
        }
    return {}


def validate_gateway_config(gateway: str) -> str:
    """
    Validate that a gateway has the credentials it needs to create payments.

    Returns:
        Normalized gateway name

    Raises:
        PaymentNotConfiguredError: unknown gateway or missing secret key
    """
    gateway = normalize_gateway(gateway)
    if gateway not in GATEWAY_ENV_REQUIREMENTS:
        raise PaymentNotConfiguredError(f"Unknown payment gateway: {gateway}")

    config = get_gateway_config(gateway)
    name = GATEWAY_NAMES.get(gateway, gateway)

    if not config.get("secret_key"):
        env_vars = GATEWAY_ENV_REQUIREMENTS[gateway]
        logger.error("Payment gateway %s not configured. Missing: %s", name, ", ".join(env_vars))
        raise PaymentNotConfiguredError(f"{name} not configured")

    return gateway


def is_gateway_configured(gateway: str) -> bool:
    """Check if a gateway is configured without raising."""
    try:
        validate_gateway_config(gateway)
    except PaymentNotConfiguredError:
        return False
    return True


def get_default_gateway() -> str:
    """Get the default payment gateway from environment."""
    default = os.environ.get("DEFAULT_PAYMENT_GATEWAY", PaymentGateway.YOCO.value)
    return normalize_gateway(default)
