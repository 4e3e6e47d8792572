"""Pytest configuration and fixtures.

FakeSupabase is an in-memory stand-in for the async PostgREST query
builder: enough of select/insert/update/upsert/delete, filters and embedded
relations for the repositories to run unchanged against it.
"""
import asyncio
import os
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Optional
from unittest.mock import AsyncMock, Mock

import pytest

# Set test environment variables
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test_key")
os.environ.setdefault("APP_URL", "https://shop.test")

from storefront.services.database import Database  # noqa: E402

# (table, embed) -> (kind, local column, remote table, remote column)
RELATIONS = {
    ("orders", "profiles"): ("one", "user_id", "profiles", "id"),
    ("orders", "addresses"): ("one", "address_id", "addresses", "id"),
    ("order_items", "products"): ("one", "product_id", "products", "id"),
    ("cart_items", "products"): ("one", "product_id", "products", "id"),
    ("wishlist", "products"): ("one", "product_id", "products", "id"),
    ("reviews", "products"): ("one", "product_id", "products", "id"),
    ("reviews", "profiles"): ("one", "user_id", "profiles", "id"),
    ("special_offer_products", "products"): ("one", "product_id", "products", "id"),
    ("products", "product_variants"): ("many", "id", "product_variants", "product_id"),
    ("special_offers", "special_offer_products"): ("many", "id", "special_offer_products", "special_offer_id"),
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _split_columns(columns: str) -> list[str]:
    parts, depth, current = [], 0, ""
    for ch in columns:
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        depth += ch == "("
        depth -= ch == ")"
        current += ch
    if current.strip():
        parts.append(current.strip())
    return parts


class _Result:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class _Query:
    def __init__(self, store: "FakeSupabase", table: str):
        self.store = store
        self.table_name = table
        self.op = "select"
        self.columns = "*"
        self.count = None
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.filters: list = []
        self.orders: list = []
        self.bounds: Optional[tuple] = None
        self.max_rows: Optional[int] = None

    # ---- operations ----
    def select(self, *columns, count=None):
        self.op, self.count = "select", count
        self.columns = ", ".join(columns) if columns else "*"
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    # ---- filters ----
    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda r: r.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda r: r.get(column) in values)
        return self

    def is_(self, column, value):
        expected = None if value in ("null", None) else value
        self.filters.append(lambda r: r.get(column) is expected)
        return self

    def gte(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r.get(column) >= value)
        return self

    def lte(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r.get(column) <= value)
        return self

    def ilike(self, column, pattern):
        needle = pattern.strip("%").lower()
        self.filters.append(lambda r: needle in str(r.get(column) or "").lower())
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def range(self, start, end):
        self.bounds = (start, end)
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    # ---- execution ----
    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def _project(self, table, row, columns):
        parts = _split_columns(columns)
        out = dict(row) if "*" in parts else {}
        for part in parts:
            if part == "*":
                continue
            if "(" in part:
                name, inner = part.split("(", 1)
                name, inner = name.strip(), inner[:-1]
                kind, local, remote, remote_col = RELATIONS[(table, name)]
                related = [r for r in self.store.tables.get(remote, []) if r.get(remote_col) == row.get(local)]
                projected = [self._project(remote, r, inner) for r in related]
                out[name] = projected if kind == "many" else (projected[0] if projected else None)
            else:
                out[part] = row.get(part)
        return out

    async def execute(self):
        if self.store.interleave:
            # Hand control back so concurrent callers interleave between round trips
            await asyncio.sleep(0)
        self.store.calls.append((self.table_name, self.op))
        if (self.table_name, self.op) in self.store.failures:
            raise self.store.failures[(self.table_name, self.op)]

        rows = self.store.tables.setdefault(self.table_name, [])

        if self.op in ("insert", "upsert"):
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            written = []
            keys = [k.strip() for k in self.on_conflict.split(",")] if self.on_conflict else None
            for item in payload:
                existing = None
                if keys:
                    existing = next((r for r in rows if all(r.get(k) == item.get(k) for k in keys)), None)
                if existing is not None:
                    existing.update(item)
                    written.append(dict(existing))
                    continue
                row = {"id": str(uuid.uuid4()), "created_at": _now(), **item}
                rows.append(row)
                written.append(dict(row))
            return _Result(written)

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for r in matched:
                r.update(self.payload)
            return _Result([dict(r) for r in matched])

        if self.op == "delete":
            self.store.tables[self.table_name] = [r for r in rows if not self._matches(r)]
            return _Result([dict(r) for r in matched])

        for column, desc in reversed(self.orders):
            matched.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
        total = len(matched)
        if self.bounds:
            matched = matched[self.bounds[0]: self.bounds[1] + 1]
        if self.max_rows is not None:
            matched = matched[: self.max_rows]
        data = [self._project(self.table_name, r, self.columns) for r in matched]
        return _Result(data, count=total if self.count else None)


class FakeSupabase:
    """In-memory AsyncClient replacement (tables + auth)."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        self.interleave = False
        self.tokens: dict[str, SimpleNamespace] = {}
        self.emails: dict[str, str] = {}
        self.auth = SimpleNamespace(
            get_user=AsyncMock(side_effect=self._get_user),
            admin=SimpleNamespace(get_user_by_id=AsyncMock(side_effect=self._get_user_by_id)),
        )

    def table(self, name: str) -> _Query:
        return _Query(self, name)

    def seed(self, table: str, *rows: dict) -> list[dict]:
        stored = [{"created_at": _now(), **row} for row in rows]
        self.tables.setdefault(table, []).extend(stored)
        return stored

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])

    def fail(self, table: str, op: str, error: Optional[Exception] = None) -> None:
        self.failures[(table, op)] = error or RuntimeError(f"{table} {op} failed")

    def add_user(self, token: str, user_id: str, email: Optional[str] = None) -> None:
        self.tokens[token] = SimpleNamespace(id=user_id, email=email)
        if email:
            self.emails[user_id] = email

    async def _get_user(self, token):
        if token not in self.tokens:
            raise ValueError("invalid JWT")
        return SimpleNamespace(user=self.tokens[token])

    async def _get_user_by_id(self, user_id):
        email = self.emails.get(user_id)
        return SimpleNamespace(user=SimpleNamespace(id=user_id, email=email) if email else None)


# ==================== FIXTURES ====================

@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def db(fake_supabase) -> Database:
    return Database(fake_supabase)


@pytest.fixture
def notifications():
    """Notification service double; every send succeeds unless a test says otherwise."""
    service = Mock()
    service.app_url = "https://shop.test"
    ok = {"success": True, "id": "email-1"}
    for name in (
        "send_order_confirmation",
        "send_order_status_notification",
        "send_back_in_stock",
        "send_new_arrivals",
        "send_discount_announcement",
    ):
        setattr(service, name, AsyncMock(return_value=ok))
    return service


@pytest.fixture
def sample_product():
    return {
        "id": "prod-0001-tee",
        "name": "Classic Tee",
        "description": "Heavyweight cotton tee",
        "price": "250.00",
        "category": "tops",
        "sizes": ["S", "M", "L"],
        "colors": ["Black", "White"],
        "stock_quantity": 20,
        "is_active": True,
        "enable_bulk_pricing": True,
    }


@pytest.fixture
def sample_order():
    return {
        "id": "order-123",
        "order_number": "ORD-1700000000000-ABCDEFGHI",
        "user_id": "user-1",
        "total_amount": "599.00",
        "delivery_fee": "99.00",
        "delivery_method": "courier_guy",
        "status": "pending",
        "payment_status": "pending",
        "payment_gateway": "yoco",
        "discount_amount": "0",
    }
