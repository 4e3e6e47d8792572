"""
NotificationService Base Module

Core class and helpers for all email notification types.
Emails go out through the Resend HTTP API; every send returns a
{"success": bool, "error": str | None} dict and never raises.
"""

import html
import os
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from storefront.logging import get_logger, mask_email
from storefront.payments.config import get_app_url

logger = get_logger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
STORE_NAME = "Apparel Cast"

ERROR_EMAIL_NOT_CONFIGURED = "Email service not configured"
ERROR_EMAIL_SEND_FAILED = "Failed to send email"


def sender_orders() -> str:
    return os.environ.get("EMAIL_FROM_ORDERS", f"{STORE_NAME} <orders@apparelcast.shop>")


def sender_alerts() -> str:
    return os.environ.get("EMAIL_FROM_ALERTS", f"{STORE_NAME} <alerts@apparelcast.shop>")


def sender_news() -> str:
    return os.environ.get("EMAIL_FROM_NEWS", f"{STORE_NAME} <news@apparelcast.shop>")


def esc(value: Any) -> str:
    """HTML-escape a value for interpolation into email bodies."""
    return html.escape(str(value if value is not None else ""), quote=True)


def button(href: str, label: str, background: str = "#FADADD", color: str = "#1a1a1a") -> str:
    return (
        f'<a href="{esc(href)}" style="display: inline-block; background-color: {background}; '
        f"color: {color}; padding: 12px 30px; text-decoration: none; border-radius: 6px; "
        f'font-weight: 500;">{esc(label)}</a>'
    )


def render_layout(title: str, body: str) -> str:
    """Wrap body HTML in the branded email shell."""
    year = datetime.now(timezone.utc).year
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{esc(title)}</title>
  </head>
  <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background-color: #FADADD; padding: 30px; text-align: center; border-radius: 8px 8px 0 0;">
      <h1 style="margin: 0; font-family: Georgia, serif; font-size: 32px; color: #1a1a1a;">{STORE_NAME}</h1>
    </div>
    <div style="background-color: #ffffff; padding: 30px; border: 1px solid #E8D5D0; border-top: none; border-radius: 0 0 8px 8px;">
      {body}
    </div>
    <div style="text-align: center; margin-top: 30px; color: #999; font-size: 12px;">
      <p>&copy; {year} {STORE_NAME}. All rights reserved.</p>
    </div>
  </body>
</html>"""


class NotificationServiceBase:
    """Base class for NotificationService.

    Owns the Resend HTTP client. Mixins build subject + HTML and call send_email().
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self._http_client: httpx.AsyncClient | None = http_client

    @property
    def app_url(self) -> str:
        return get_app_url()

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(10.0, connect=5.0))
        return self._http_client

    async def send_email(
        self, to: str, subject: str, html_body: str, sender: Optional[str] = None
    ) -> dict[str, Any]:
        """Send one email via Resend.

        Returns:
            {"success": True, "id": ...} or {"success": False, "error": ...}
        """
        api_key = os.environ.get("RESEND_API_KEY")
        if not api_key:
            logger.error("Resend API key not configured")
            return {"success": False, "error": ERROR_EMAIL_NOT_CONFIGURED}

        payload = {
            "from": sender or sender_orders(),
            "to": [to],
            "subject": subject,
            "html": html_body,
        }
        headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}

        client = await self._get_http_client()
        try:
            response = await client.post(RESEND_API_URL, headers=headers, json=payload)
        except httpx.HTTPError:
            logger.exception("Email send error to %s", mask_email(to))
            return {"success": False, "error": ERROR_EMAIL_SEND_FAILED}

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            logger.error("Resend email error %s: %s", response.status_code, message)
            return {"success": False, "error": message or ERROR_EMAIL_SEND_FAILED}

        logger.info("Email '%s' sent to %s", subject, mask_email(to))
        return {"success": True, "id": data.get("id") if isinstance(data, dict) else None}

    async def aclose(self) -> None:
        """Close http client if created."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
