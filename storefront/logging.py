"""
Logging setup for the storefront.

Every module does:
    from storefront.logging import get_logger
    logger = get_logger(__name__)

Customer data (order ids, emails, free-text fields) goes through the
sanitize_* / mask_email helpers before it reaches a log line.
"""

import logging
import os
import sys
from functools import cache
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# Vercel stamps each line itself
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# supabase-py and the payment/email clients all sit on httpx (and h2 via hpack)
QUIET_LOGGERS = ("httpx", "httpcore", "hpack")

_CONTROL_CHARS = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": ""}


def _level_from_env() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[int] = None) -> None:
    """Attach a stdout handler to the root logger unless one is already there."""
    root = logging.getLogger()
    if root.handlers:
        return

    level = level if level is not None else _level_from_env()
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    on_vercel = os.environ.get("VERCEL") == "1"
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if on_vercel else LOG_FORMAT))

    root.setLevel(level)
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    """Module logger (pass __name__)."""
    return logging.getLogger(name)


def _neutralize(value: str) -> str:
    """Escape CR/LF/TAB and drop NULs so user input cannot forge log lines (CWE-117)."""
    for char, replacement in _CONTROL_CHARS.items():
        value = value.replace(char, replacement)
    return value


def sanitize_id_for_logging(id_value: Optional[str]) -> str:
    """First 8 characters of an id, neutralized; "N/A" when empty."""
    if not id_value:
        return "N/A"
    return _neutralize(str(id_value))[:8]


def sanitize_string_for_logging(value: Optional[str], max_length: int = 50) -> str:
    """Neutralized free text, cut at max_length with a trailing ellipsis."""
    if not value:
        return "N/A"
    safe = _neutralize(str(value))
    return safe if len(safe) <= max_length else safe[:max_length] + "..."


def mask_email(email: Optional[str]) -> str:
    """thandi@example.com -> t***@example.com"""
    if not email or "@" not in email:
        return "N/A"
    local, _, domain = email.partition("@")
    return f"{_neutralize(local[:1])}***@{_neutralize(domain)}"


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "configure_logging",
    "get_logger",
    "mask_email",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
