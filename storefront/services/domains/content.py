"""Content Domain Service.

Homepage banners (hero slides, category tiles, ad banners with two
featured slots) and brand housekeeping: the canonical brand list that
product brands are merged into.
"""

import re
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Optional

from storefront.errors import NotFoundError
from storefront.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging

logger = get_logger(__name__)

BANNER_KINDS = ("hero", "category", "ad")
MEDIA_TYPES = ("image", "video")
TEXT_COLORS = {
    "hero": ("white", "black"),
    "category": ("white", "black", "gray"),
}
REQUIRED_FIELDS = {
    "hero": ("title", "media_url"),
    "category": ("category", "title", "background_image_url"),
    "ad": ("media_url",),
}
# Blank strings from the admin form are stored as NULL
OPTIONAL_TEXT_FIELDS = ("subtitle", "description", "cta_text", "cta_link", "start_date", "end_date")
FEATURED_SLOTS = 2

ERROR_BANNER_NOT_FOUND = "Banner not found"
ERROR_UNKNOWN_BANNER_KIND = "Unknown banner type"
ERROR_FEATURED_COUNT = "Select exactly two banners for the featured slots"
ERROR_REORDER_IDS = "Reorder list must contain each banner of this type once"
ERROR_OVERLAY_OPACITY = "Overlay opacity must be between 0 and 100"
ERROR_BRAND_NOT_CANONICAL = "Brand must be selected from the canonical list"
ERROR_BRAND_EXISTS = "Brand is already in the canonical list"

BRAND_NAME_PATTERN = re.compile(r"^[A-Za-z0-9 &\-'/.]+$")


class BrandExistsError(ValueError):
    def __init__(self, name: str):
        super().__init__(ERROR_BRAND_EXISTS)
        self.name = name


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def is_scheduled_now(banner: dict, now: Optional[datetime] = None) -> bool:
    """True when now falls inside the banner's optional start/end window."""
    now = now or datetime.now(timezone.utc)
    start = _parse_timestamp(banner.get("start_date"))
    end = _parse_timestamp(banner.get("end_date"))
    return (start is None or start <= now) and (end is None or end >= now)


def normalize_brand_name(name: str) -> str:
    """Collapse whitespace and title-case each word and hyphenated segment: 'nIKE  air-max' -> 'Nike Air-Max'."""
    words = " ".join(name.split()).split(" ")
    return " ".join(
        "-".join(seg[:1].upper() + seg[1:].lower() for seg in word.split("-"))
        for word in words
    )


def validate_brand_name(name: str) -> Optional[str]:
    """Error message for an unacceptable brand name, None when it is fine."""
    trimmed = (name or "").strip()
    if not trimmed:
        return "Brand name is required"
    if len(trimmed) < 2:
        return "Brand name must be at least 2 characters"
    if len(trimmed) > 64:
        return "Brand name must be 64 characters or fewer"
    if not BRAND_NAME_PATTERN.match(trimmed):
        return "Only letters, numbers, spaces, - & ' . / are allowed"
    return None


class BannerService:
    """Banner CRUD for admins and the active set for the storefront."""

    def __init__(self, db) -> None:
        self.db = db

    @staticmethod
    def _check_kind(kind: str) -> None:
        if kind not in BANNER_KINDS:
            raise ValueError(ERROR_UNKNOWN_BANNER_KIND)

    @staticmethod
    def _clean(kind: str, data: dict[str, Any], partial: bool) -> dict[str, Any]:
        row = dict(data)
        for key in OPTIONAL_TEXT_FIELDS:
            if key in row and row[key] == "":
                row[key] = None

        required = REQUIRED_FIELDS[kind]
        if partial:
            missing = [k for k in required if k in row and not row[k]]
        else:
            missing = [k for k in required if not row.get(k)]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        if "media_type" in row and row["media_type"] not in MEDIA_TYPES:
            raise ValueError("Media type must be 'image' or 'video'")
        colors = TEXT_COLORS.get(kind)
        if colors and "text_color" in row and row["text_color"] not in colors:
            raise ValueError(f"Text color must be one of: {', '.join(colors)}")
        opacity = row.get("background_overlay_opacity")
        if opacity is not None and not 0 <= opacity <= 100:
            raise ValueError(ERROR_OVERLAY_OPACITY)
        return row

    async def list_banners(self, kind: str) -> list[dict]:
        self._check_kind(kind)
        return await self.db.banners.get_all(kind)

    async def get(self, kind: str, banner_id: str) -> dict:
        self._check_kind(kind)
        banner = await self.db.banners.get_by_id(kind, banner_id)
        if banner is None:
            raise NotFoundError(ERROR_BANNER_NOT_FOUND)
        return banner

    async def create(self, kind: str, data: dict[str, Any]) -> dict:
        """New banners go to the end of the display order."""
        self._check_kind(kind)
        row = self._clean(kind, data, partial=False)
        existing = await self.db.banners.get_all(kind)
        row["display_order"] = max((int(b.get("display_order") or 0) for b in existing), default=0) + 1
        row.setdefault("is_active", True)
        if kind != "category":
            row.setdefault("media_type", "image")
        banner = await self.db.banners.create(kind, row)
        logger.info("Created %s banner %s", kind, sanitize_id_for_logging(banner.get("id")))
        return banner

    async def update(self, kind: str, banner_id: str, data: dict[str, Any]) -> dict:
        self._check_kind(kind)
        changes = self._clean(kind, data, partial=True)
        if not changes:
            return await self.get(kind, banner_id)
        banner = await self.db.banners.update(kind, banner_id, changes)
        if banner is None:
            raise NotFoundError(ERROR_BANNER_NOT_FOUND)
        return banner

    async def delete(self, kind: str, banner_id: str) -> None:
        self._check_kind(kind)
        if not await self.db.banners.delete(kind, banner_id):
            raise NotFoundError(ERROR_BANNER_NOT_FOUND)

    async def reorder(self, kind: str, banner_ids: list[str]) -> list[dict]:
        """Rewrite display_order to follow banner_ids (1-based)."""
        self._check_kind(kind)
        existing = {b["id"] for b in await self.db.banners.get_all(kind)}
        if len(banner_ids) != len(set(banner_ids)) or set(banner_ids) != existing:
            raise ValueError(ERROR_REORDER_IDS)
        for position, banner_id in enumerate(banner_ids, start=1):
            await self.db.banners.update(kind, banner_id, {"display_order": position})
        return await self.db.banners.get_all(kind)

    async def set_featured_ads(self, banner_ids: list[str]) -> list[dict]:
        """Give two ad banners featured slots 1 and 2; every other ad loses its slot."""
        if len(banner_ids) != FEATURED_SLOTS or len(set(banner_ids)) != FEATURED_SLOTS:
            raise ValueError(ERROR_FEATURED_COUNT)
        for banner_id in banner_ids:
            if await self.db.banners.get_by_id("ad", banner_id) is None:
                raise NotFoundError(ERROR_BANNER_NOT_FOUND)

        await self.db.banners.clear_featured()
        for rank, banner_id in enumerate(banner_ids, start=1):
            await self.db.banners.update("ad", banner_id, {"featured_rank": rank})
        return await self.db.banners.get_featured_ads()

    async def storefront(self) -> dict[str, list[dict]]:
        """Active hero slides in their schedule window, category tiles and featured ads."""
        now = datetime.now(timezone.utc)
        hero = [b for b in await self.db.banners.get_all("hero", active_only=True) if is_scheduled_now(b, now)]
        return {
            "hero": hero,
            "categories": await self.db.banners.get_all("category", active_only=True),
            "ads": await self.db.banners.get_featured_ads(),
        }


class BrandService:
    """Canonical brand list and clean-up of the free-text product brands."""

    def __init__(self, db) -> None:
        self.db = db

    async def list_canonical(self) -> list[str]:
        return await self.db.brands.get_canonical()

    async def stats(self) -> list[dict[str, Any]]:
        """Product count per brand as stored (None = unbranded), most used first."""
        counts = Counter(await self.db.brands.get_product_brands())
        return [
            {"name": name, "count": count}
            for name, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0] or ""))
        ]

    async def add_canonical(self, name: str) -> str:
        message = validate_brand_name(name)
        if message:
            raise ValueError(message)
        normalized = normalize_brand_name(name)
        existing = {b.strip().lower() for b in await self.db.brands.get_canonical()}
        if normalized.lower() in existing:
            raise BrandExistsError(normalized)
        await self.db.brands.add_canonical(normalized)
        return normalized

    async def merge(self, old_name: Optional[str], canonical: str) -> int:
        """Point every product branded old_name (None = unbranded) at a canonical brand."""
        canonical = (canonical or "").strip()
        if canonical not in await self.db.brands.get_canonical():
            raise ValueError(ERROR_BRAND_NOT_CANONICAL)
        updated = await self.db.brands.set_product_brand(old_name, canonical)
        logger.info(
            "Merged brand %s into %s (%d products)",
            sanitize_string_for_logging(old_name),
            sanitize_string_for_logging(canonical),
            updated,
        )
        return updated

    async def remove(self, name: str) -> int:
        """Clear a brand from every product carrying it."""
        return await self.db.brands.set_product_brand(name, None)

    async def normalize_all(self) -> int:
        """Rewrite each distinct product brand to its normalized form; returns brands changed."""
        changed = 0
        for name in {b for b in await self.db.brands.get_product_brands() if b}:
            normalized = normalize_brand_name(name)
            if normalized != name:
                await self.db.brands.set_product_brand(name, normalized)
                changed += 1
        return changed
