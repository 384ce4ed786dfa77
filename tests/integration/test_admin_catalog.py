"""Integration tests for admin catalog endpoints."""

import pytest
from services.shop_service.models import AuditEntityType, ShopAuditLog
from sqlalchemy import select
from tests.factories import ProductFactory, ProductTypeFactory


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_product(client, db_session, admin_headers):
    response = await client.post(
        "/admin/products",
        headers=admin_headers,
        json={"name": "  Brake disc ", "price": 18000, "discount_percent": 5},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["name"] == "Brake disc"
    assert data["active"] is True
    assert data["types"] == []


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "body",
    [
        {"name": "Disc", "price": -1},
        {"name": "Disc", "price": 100, "discount_percent": 101},
        {"name": "Disc", "price": "abc"},
        {"name": "   ", "price": 100},
    ],
)
async def test_create_product_validation(client, db_session, admin_headers, body):
    response = await client.post("/admin/products", headers=admin_headers, json=body)
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_customer_cannot_manage_catalog(client, db_session, auth_headers):
    response = await client.post(
        "/admin/products", headers=auth_headers, json={"name": "Disc", "price": 100}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_list_includes_inactive(client, db_session, admin_headers):
    db_session.add_all(
        [ProductFactory.create(active=True), ProductFactory.create(active=False)]
    )
    await db_session.commit()

    response = await client.get("/admin/products", headers=admin_headers)
    assert response.status_code == 200
    assert sorted(p["active"] for p in response.json()) == [False, True]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_price_change_is_audited(client, db_session, admin, admin_headers):
    product = ProductFactory.create(price=10000)
    db_session.add(product)
    await db_session.commit()

    response = await client.patch(
        f"/admin/products/{product.id}",
        headers=admin_headers,
        json={"price": 12000},
    )
    assert response.status_code == 200, response.text
    assert response.json()["price"] == 12000

    audit = (
        await db_session.execute(
            select(ShopAuditLog).where(
                ShopAuditLog.entity_type == AuditEntityType.PRODUCT,
                ShopAuditLog.entity_id == product.id,
            )
        )
    ).scalar_one()
    assert audit.action == "price_changed"
    assert audit.old_value == {"price": 10000}
    assert audit.new_value == {"price": 12000}
    assert audit.performed_by == admin.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_non_price_update(client, db_session, admin_headers):
    product = ProductFactory.create()
    db_session.add(product)
    await db_session.commit()

    response = await client.patch(
        f"/admin/products/{product.id}",
        headers=admin_headers,
        json={"active": False, "discount_percent": 10},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["active"] is False
    assert data["discount_percent"] == 10

    action = await db_session.scalar(
        select(ShopAuditLog.action).where(ShopAuditLog.entity_id == product.id)
    )
    assert action == "updated"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_rejects_blank_name(client, db_session, admin_headers):
    product = ProductFactory.create(name="Brake disc")
    db_session.add(product)
    await db_session.commit()

    response = await client.patch(
        f"/admin/products/{product.id}", headers=admin_headers, json={"name": "   "}
    )
    assert response.status_code == 422

    renamed = await client.patch(
        f"/admin/products/{product.id}", headers=admin_headers, json={"name": " Rotor "}
    )
    assert renamed.json()["name"] == "Rotor"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_missing_product(client, db_session, admin_headers):
    response = await client.patch(
        "/admin/products/9999", headers=admin_headers, json={"price": 1}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_and_delete_product_type(client, db_session, admin_headers):
    product = ProductFactory.create()
    db_session.add(product)
    await db_session.commit()

    response = await client.post(
        f"/admin/products/{product.id}/types",
        headers=admin_headers,
        json={"name": "Toyota Camry 40", "image_url": "https://cdn.example.com/c40.jpg"},
    )
    assert response.status_code == 201, response.text
    type_id = response.json()["id"]
    assert response.json()["product_id"] == product.id

    response = await client.delete(
        f"/admin/product-types/{type_id}", headers=admin_headers
    )
    assert response.status_code == 204

    response = await client.delete(
        f"/admin/product-types/{type_id}", headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_type_for_missing_product(client, db_session, admin_headers):
    response = await client.post(
        "/admin/products/9999/types", headers=admin_headers, json={"name": "Front"}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_types_listed_with_product(client, db_session, admin_headers):
    product = ProductFactory.create()
    product.types.append(ProductTypeFactory.create(name="Front"))
    db_session.add(product)
    await db_session.commit()

    response = await client.get("/admin/products", headers=admin_headers)
    (data,) = response.json()
    assert data["types"][0]["name"] == "Front"
