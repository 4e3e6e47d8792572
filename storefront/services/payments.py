"""Payment Service - Yoco and Paystack integration.

Both providers use a Bearer secret key and return JSON. Provider rejections
become PaymentProviderError carrying the provider's HTTP status so routes
can pass it through unchanged.
"""

import hashlib
import hmac
from typing import Any, Optional

import httpx

from storefront.errors import (
    ERROR_PAYMENT_INIT_FAILED,
    ERROR_PAYMENT_VERIFY_FAILED,
    PaymentProviderError,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.payments.config import get_gateway_config, validate_gateway_config
from storefront.payments.constants import PaymentGateway, normalize_gateway
from storefront.services.money import CURRENCY

logger = get_logger(__name__)


class PaymentService:
    """Payment service for the Yoco and Paystack gateways."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        # HTTP client (lazy init unless injected)
        self._http_client: httpx.AsyncClient | None = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(10.0, connect=5.0, read=10.0, write=10.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._http_client

    async def _request(
        self,
        method: str,
        url: str,
        secret_key: str,
        fallback_error: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Call a provider endpoint and return its JSON body.

        Raises:
            PaymentProviderError: non-2xx answer (provider status and message)
                or network failure (502)
        """
        headers = {"Authorization": f"Bearer {secret_key}", "Accept": "application/json"}
        client = await self._get_http_client()
        try:
            response = await client.request(method, url, headers=headers, json=payload)
        except httpx.RequestError as e:
            logger.exception("Payment provider network error: %s", url)
            raise PaymentProviderError(f"Failed to reach payment provider: {e!s}", 502)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_error:
            message = data.get("message") or fallback_error
            logger.error("Payment provider error %s from %s: %s", response.status_code, url, message)
            raise PaymentProviderError(message, response.status_code)

        return data

    # ==================== YOCO ====================

    async def create_yoco_checkout(
        self, order_id: str, order_number: str, amount_cents: int, email: str
    ) -> dict[str, Any]:
        """
        Create a Yoco hosted checkout.

        Endpoint: POST {api}/checkouts
        Response: id, redirectUrl, status

        Returns:
            Dict with checkout_id, redirect_url, status
        """
        validate_gateway_config(PaymentGateway.YOCO.value)
        config = get_gateway_config(PaymentGateway.YOCO.value)
        callback = config["callback_url"]

        payload = {
            "amount": int(round(amount_cents)),
            "currency": CURRENCY,
            "successUrl": f"{callback}/checkout/success?orderId={order_id}",
            "cancelUrl": f"{callback}/checkout?cancelled=true",
            "metadata": {
                "order_id": order_id,
                "order_number": order_number,
                "customer_email": email,
            },
        }

        logger.info(
            "Yoco checkout creation for order %s: amount=%s cents",
            sanitize_id_for_logging(order_id),
            payload["amount"],
        )
        data = await self._request(
            "POST", f"{config['api_url']}/checkouts", config["secret_key"], ERROR_PAYMENT_INIT_FAILED, payload
        )

        redirect_url = data.get("redirectUrl")
        if not redirect_url:
            logger.error("Yoco: redirectUrl not in response. Keys: %s", list(data.keys()))
            raise PaymentProviderError(ERROR_PAYMENT_INIT_FAILED, 502)

        logger.info("Yoco checkout created: order=%s, checkout_id=%s", sanitize_id_for_logging(order_id), data.get("id"))
        return {
            "checkout_id": data.get("id"),
            "redirect_url": redirect_url,
            "status": data.get("status"),
        }

    async def get_yoco_checkout(self, checkout_id: str) -> dict[str, Any]:
        """Fetch a Yoco checkout (paymentStatus, metadata, id)."""
        validate_gateway_config(PaymentGateway.YOCO.value)
        config = get_gateway_config(PaymentGateway.YOCO.value)
        return await self._request(
            "GET",
            f"{config['api_url']}/checkouts/{checkout_id}",
            config["secret_key"],
            ERROR_PAYMENT_VERIFY_FAILED,
        )

    @staticmethod
    def verify_yoco_signature(raw_body: bytes, signature: str, secret: str) -> bool:
        """Check X-Yoco-Signature: hex HMAC-SHA256 of the raw body."""
        expected = hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()
        return hmac.compare_digest(signature.strip().lower(), expected)

    # ==================== PAYSTACK ====================

    async def initialize_paystack_transaction(
        self, order_id: str, order_number: str, amount_cents: int, email: str
    ) -> dict[str, Any]:
        """
        Initialize a Paystack transaction; the order number is the reference.

        Returns:
            Dict with authorization_url, access_code, reference
        """
        validate_gateway_config(PaymentGateway.PAYSTACK.value)
        config = get_gateway_config(PaymentGateway.PAYSTACK.value)

        payload = {
            "email": email,
            "amount": int(round(amount_cents)),
            "reference": order_number,
            "callback_url": (
                f"{config['callback_url']}/checkout/success?order_id={order_id}&reference={order_number}"
            ),
            "metadata": {"order_id": order_id, "order_number": order_number},
        }

        logger.info("Paystack initialization for order %s", sanitize_id_for_logging(order_id))
        data = await self._request(
            "POST",
            f"{config['api_url']}/transaction/initialize",
            config["secret_key"],
            ERROR_PAYMENT_INIT_FAILED,
            payload,
        )

        tx = data.get("data") or {}
        if not tx.get("authorization_url"):
            logger.error("Paystack: authorization_url not in response")
            raise PaymentProviderError(data.get("message") or ERROR_PAYMENT_INIT_FAILED, 502)

        return {
            "authorization_url": tx["authorization_url"],
            "access_code": tx.get("access_code"),
            "reference": tx.get("reference", order_number),
        }

    async def verify_paystack_transaction(self, reference: str) -> dict[str, Any]:
        """Verify a Paystack transaction; returns the `data` object (status, amount, metadata, customer)."""
        validate_gateway_config(PaymentGateway.PAYSTACK.value)
        config = get_gateway_config(PaymentGateway.PAYSTACK.value)
        data = await self._request(
            "GET",
            f"{config['api_url']}/transaction/verify/{reference}",
            config["secret_key"],
            ERROR_PAYMENT_VERIFY_FAILED,
        )
        return data.get("data") or {}

    # ==================== MAIN API ====================

    async def create_payment(
        self,
        gateway: str,
        order_id: str,
        order_number: str,
        amount_cents: int,
        email: str,
    ) -> dict[str, Any]:
        """
        Start a payment with the chosen gateway.

        Returns:
            Dict with gateway, redirect_url, reference
        """
        gateway = normalize_gateway(gateway)
        if gateway == PaymentGateway.PAYSTACK.value:
            result = await self.initialize_paystack_transaction(order_id, order_number, amount_cents, email)
            return {
                "gateway": gateway,
                "redirect_url": result["authorization_url"],
                "reference": result["reference"],
            }

        result = await self.create_yoco_checkout(order_id, order_number, amount_cents, email)
        return {
            "gateway": gateway,
            "redirect_url": result["redirect_url"],
            "reference": result["checkout_id"],
        }

    async def aclose(self) -> None:
        """Close http client if created."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
