"""Tests for the catalog, variant generation and product export."""
import csv
import io

import pytest

from storefront.errors import NotFoundError
from storefront.services.domains.products import (
    ERROR_ALREADY_REVIEWED,
    ERROR_INVALID_RATING,
    CatalogService,
    ProductAdminService,
    VariantsExistError,
    VariantValidationError,
)
from storefront.services.domains.variants import (
    EXPORT_HEADERS,
    VariantOptions,
    generate_variants,
    products_to_csv,
    validate_for_generation,
    variant_sku,
)


# ==================== GENERATION ====================


def test_generate_distributes_stock_with_remainder():
    variants = generate_variants("p1", ["S", "M"], ["Black", "White"], 10)

    assert [(v["size"], v["color"]) for v in variants] == [
        ("S", "Black"),
        ("S", "White"),
        ("M", "Black"),
        ("M", "White"),
    ]
    assert [v["stock_quantity"] for v in variants] == [3, 3, 2, 2]
    assert all(v["is_active"] for v in variants)
    assert "sku" not in variants[0]


def test_generate_fixed_quantity_when_not_distributing():
    options = VariantOptions(default_quantity_per_variant=4, distribute_stock_evenly=False)

    variants = generate_variants("p1", ["S"], ["Red", "Blue"], 100, options)

    assert [v["stock_quantity"] for v in variants] == [4, 4]


def test_generate_zero_stock_uses_default_quantity():
    variants = generate_variants("p1", ["S"], ["Red"], 0)

    assert variants[0]["stock_quantity"] == 10


def test_generate_price_adjustments_and_skus():
    options = VariantOptions(generate_skus=True, price_adjustments={"size_XL": 20, "color_Gold": 15.5})

    variants = generate_variants("prod-abcdef12", ["M", "XL"], ["Gold"], 2, options)

    assert [v["price_adjustment"] for v in variants] == [15.5, 35.5]
    assert variants[1]["sku"].startswith("ABCDEF12-XLGOL-")


def test_variant_sku_format():
    assert variant_sku("0000-1111-2222-deadbeef", "Large", "Navy", now_ms=1700000001234) == "DEADBEEF-LANAV-1234"


def test_validate_for_generation():
    assert validate_for_generation(["S"], ["Black"], 5) == []
    errors = validate_for_generation([], [" "], -1)
    assert "Product must have at least one size specified" in errors
    assert "Product must have a valid stock quantity (0 or greater)" in errors
    assert "All colors must be non-empty strings" in errors


# ==================== EXPORT ====================


def test_products_to_csv_rows():
    products = [
        {
            "id": "p1",
            "name": 'Tee "Classic"',
            "price": "250",
            "stock_quantity": 5,
            "sizes": ["S", "M"],
            "colors": ["Black"],
            "is_featured": True,
            "created_at": "2026-03-01T10:00:00+00:00",
            "product_variants": [
                {"id": "v1", "size": "S", "color": "Black", "stock_quantity": 2, "price_adjustment": 0, "is_active": True},
                {"id": "v2", "size": "M", "color": "Black", "stock_quantity": 3, "price_adjustment": 25, "is_active": False},
            ],
        },
        {"id": "p2", "name": "Cap", "price": "99.9", "product_variants": []},
    ]

    rows = list(csv.reader(io.StringIO(products_to_csv(products))))

    assert rows[0] == EXPORT_HEADERS
    assert len(rows) == 4
    assert rows[1][1] == 'Tee "Classic"'
    assert rows[1][8] == "S; M"
    assert rows[1][10] == "Yes"
    assert rows[1][14] == "2026-03-01"
    assert rows[2][-1] == "275.00"
    assert rows[2][-2] == "No"
    assert rows[3][15:] == ["", "", "", "", "", "", "99.90"]


def test_csv_quotes_every_field():
    text = products_to_csv([{"id": "p1", "name": "Cap", "price": "10"}])

    assert text.splitlines()[0].startswith('"Product ID","Product Name"')


# ==================== ADMIN SERVICE ====================


@pytest.fixture
def admin(db, fake_supabase, sample_product):
    fake_supabase.seed("products", sample_product)
    return ProductAdminService(db)


@pytest.mark.asyncio
async def test_admin_generate_variants(admin, fake_supabase):
    result = await admin.generate_variants("prod-0001-tee")

    assert result["summary"] == {"count": 6, "total_stock": 20, "min_price": 250.0, "max_price": 250.0}
    assert len(fake_supabase.rows("product_variants")) == 6


@pytest.mark.asyncio
async def test_admin_generate_refuses_when_variants_exist(admin, fake_supabase):
    fake_supabase.seed("product_variants", {"id": "v1", "product_id": "prod-0001-tee", "size": "S", "color": "Black", "is_active": True})

    with pytest.raises(VariantsExistError) as exc:
        await admin.generate_variants("prod-0001-tee")
    assert exc.value.existing_count == 1


@pytest.mark.asyncio
async def test_admin_generate_validation(admin, fake_supabase):
    fake_supabase.rows("products")[0]["sizes"] = []

    with pytest.raises(VariantValidationError) as exc:
        await admin.generate_variants("prod-0001-tee")
    assert exc.value.errors == ["Product must have at least one size specified"]


@pytest.mark.asyncio
async def test_admin_generate_missing_product(admin):
    with pytest.raises(NotFoundError):
        await admin.generate_variants("nope")


@pytest.mark.asyncio
async def test_admin_update_replaces_tiers(admin, fake_supabase):
    fake_supabase.seed("bulk_pricing_tiers", {"id": "old", "product_id": "prod-0001-tee", "min_quantity": 5})

    payload = await admin.update_product(
        "prod-0001-tee",
        {"price": "199.00"},
        [{"min_quantity": 10, "discount_type": "percentage", "discount_value": "10"}],
    )

    assert payload["price"] == 199.0
    tiers = fake_supabase.rows("bulk_pricing_tiers")
    assert [t["min_quantity"] for t in tiers] == [10]


@pytest.mark.asyncio
async def test_admin_update_without_tiers_keeps_them(admin, fake_supabase):
    fake_supabase.seed("bulk_pricing_tiers", {"id": "keep", "product_id": "prod-0001-tee", "min_quantity": 5})

    await admin.update_product("prod-0001-tee", {"name": "Classic Tee v2"})

    assert len(fake_supabase.rows("bulk_pricing_tiers")) == 1


@pytest.mark.asyncio
async def test_admin_export_formats(admin):
    rows = await admin.export("json")
    assert rows[0]["id"] == "prod-0001-tee"
    assert rows[0]["product_variants"] == []

    text = await admin.export("csv")
    assert text.startswith('"Product ID"')

    with pytest.raises(ValueError):
        await admin.export("xml")


# ==================== CATALOG ====================


@pytest.fixture
def catalog(db, fake_supabase, sample_product):
    fake_supabase.seed(
        "products",
        sample_product,
        {**sample_product, "id": "prod-0002-hoodie", "name": "Zip Hoodie", "price": "550", "category": "outerwear"},
        {**sample_product, "id": "prod-0003-old", "name": "Old Tee", "is_active": False},
    )
    fake_supabase.seed("profiles", {"id": "user-1", "full_name": "Thandi"})
    return CatalogService(db)


@pytest.mark.asyncio
async def test_catalog_lists_active_products(catalog):
    products = await catalog.list_products(sort="price_desc")

    assert [p["id"] for p in products] == ["prod-0002-hoodie", "prod-0001-tee"]
    assert products[0]["price"] == 550.0
    assert products[0]["in_stock"] is True


@pytest.mark.asyncio
async def test_catalog_filters(catalog):
    assert [p["id"] for p in await catalog.list_products(category="outerwear")] == ["prod-0002-hoodie"]
    assert [p["id"] for p in await catalog.list_products(search="classic")] == ["prod-0001-tee"]


@pytest.mark.asyncio
async def test_product_detail(catalog, fake_supabase):
    fake_supabase.seed(
        "product_variants",
        {"id": "v1", "product_id": "prod-0001-tee", "size": "L", "color": "Black", "price_adjustment": 20, "is_active": True},
    )
    fake_supabase.seed(
        "bulk_pricing_tiers",
        {"id": "t1", "product_id": "prod-0001-tee", "min_quantity": 10, "discount_type": "percentage", "discount_value": "10"},
    )
    fake_supabase.seed(
        "reviews",
        {"id": "r1", "product_id": "prod-0001-tee", "user_id": "user-1", "rating": 5, "is_approved": True},
        {"id": "r2", "product_id": "prod-0001-tee", "user_id": "user-2", "rating": 4, "is_approved": True},
        {"id": "r3", "product_id": "prod-0001-tee", "user_id": "user-3", "rating": 1, "is_approved": False},
    )

    detail = await catalog.get_product("prod-0001-tee")

    assert detail["variants"][0]["final_price"] == 270.0
    assert detail["bulk_tiers"][0]["unit_price"] == 225.0
    assert detail["review_count"] == 2
    assert detail["average_rating"] == 4.5


@pytest.mark.asyncio
async def test_inactive_product_not_found(catalog):
    with pytest.raises(NotFoundError):
        await catalog.get_product("prod-0003-old")


@pytest.mark.asyncio
async def test_submit_review_pending_moderation(catalog, fake_supabase):
    review = await catalog.submit_review("user-1", "prod-0001-tee", 4, "  Great fit  ")

    assert review["is_approved"] is False
    assert review["comment"] == "Great fit"

    with pytest.raises(ValueError, match=ERROR_ALREADY_REVIEWED):
        await catalog.submit_review("user-1", "prod-0001-tee", 5)


@pytest.mark.asyncio
async def test_submit_review_rating_bounds(catalog):
    with pytest.raises(ValueError, match=ERROR_INVALID_RATING):
        await catalog.submit_review("user-1", "prod-0001-tee", 6)


@pytest.mark.asyncio
async def test_back_in_stock_signup_idempotent(catalog, fake_supabase):
    assert await catalog.subscribe_back_in_stock("prod-0001-tee", " Fan@Example.com ") is True
    assert await catalog.subscribe_back_in_stock("prod-0001-tee", "fan@example.com") is False

    rows = fake_supabase.rows("back_in_stock_subscriptions")
    assert len(rows) == 1
    assert rows[0]["email"] == "fan@example.com"
