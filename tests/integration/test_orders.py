"""Integration tests for customer order endpoints."""

import pytest
from services.shop_service.models import Order
from sqlalchemy import func, select
from tests.factories import (
    CustomerFactory,
    ProductFactory,
    ProductTypeFactory,
    bearer,
)


async def _pads(db_session, **overrides):
    """Brake pads at 10000 with 20% off and two types."""
    product = ProductFactory.create(
        name="Brake pads", price=10000, discount_percent=20, **overrides
    )
    product.types.append(ProductTypeFactory.create(name="Front"))
    product.types.append(ProductTypeFactory.create(name="Rear"))
    db_session.add(product)
    await db_session.commit()
    return product


async def _filter(db_session, **overrides):
    product = ProductFactory.create(name="Oil filter", price=2500, **overrides)
    db_session.add(product)
    await db_session.commit()
    return product


# ---------------------------------------------------------------------------
# Catalog and profile
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_products_lists_only_active(client, db_session, auth_headers):
    pads = await _pads(db_session)
    await _filter(db_session, active=False)

    response = await client.get("/products", headers=auth_headers)
    assert response.status_code == 200, response.text
    data = response.json()
    assert [p["id"] for p in data] == [pads.id]
    assert [t["name"] for t in data[0]["types"]] == ["Front", "Rear"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_products_require_token(client, db_session):
    response = await client.get("/products")
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_customer_token_rejected(client, db_session):
    response = await client.get("/me", headers=bearer(9999))
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_me_exposes_discount(client, db_session):
    customer = CustomerFactory.create(discount_percent=5, orders_count=10)
    db_session.add(customer)
    await db_session.commit()

    response = await client.get("/me", headers=bearer(customer.id))
    assert response.status_code == 200
    data = response.json()
    assert data["discount"] == 5
    assert data["discount_percent"] == 5
    assert data["orders_count"] == 10
    assert data["is_admin"] is False


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_submit_order_prices_on_server(client, db_session):
    """10000 at 20% off, x3, 10% loyalty, installment -> 24840."""
    customer = CustomerFactory.create(discount_percent=10)
    db_session.add(customer)
    await db_session.commit()
    pads = await _pads(db_session)
    front = pads.types[0]

    response = await client.post(
        "/orders",
        headers=bearer(customer.id),
        json={
            "items": [{"product_id": pads.id, "type_id": front.id, "quantity": 3}],
            "payment_method": "installment",
            # Client-side totals are not trusted
            "final_amount": 1,
        },
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["status"] == "pending"
    assert data["user_order_number"] == 1
    assert data["total_amount"] == 30000
    assert data["product_discount_amount"] == 6000
    assert data["discount_percent"] == 10
    assert data["customer_discount_amount"] == 2400
    assert data["installment_fee"] == 3240
    assert data["final_amount"] == 24840

    (item,) = data["items"]
    assert item["product_name"] == "Brake pads"
    assert item["original_price"] == 10000
    assert item["price"] == 8000
    assert item["line_total"] == 24000
    assert item["type"]["name"] == "Front"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_repeated_lines_are_merged(client, db_session, auth_headers):
    oil = await _filter(db_session)

    response = await client.post(
        "/orders",
        headers=auth_headers,
        json={
            "items": [
                {"product_id": oil.id, "quantity": 1},
                {"product_id": oil.id, "quantity": 2},
            ]
        },
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["payment_method"] == "cash"
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 3
    assert data["final_amount"] == 7500


@pytest.mark.asyncio
@pytest.mark.integration
async def test_empty_cart_rejected(client, db_session, auth_headers):
    response = await client.post("/orders", headers=auth_headers, json={"items": []})
    assert response.status_code == 400
    assert response.json()["detail"] == "Cart is empty"

    count = await db_session.scalar(select(func.count()).select_from(Order))
    assert count == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_inactive_product_rejected(client, db_session, auth_headers):
    oil = await _filter(db_session, active=False)

    response = await client.post(
        "/orders",
        headers=auth_headers,
        json={"items": [{"product_id": oil.id, "quantity": 1}]},
    )
    assert response.status_code == 400
    assert "not available" in response.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_type_selection_required(client, db_session, auth_headers):
    pads = await _pads(db_session)

    response = await client.post(
        "/orders",
        headers=auth_headers,
        json={"items": [{"product_id": pads.id, "quantity": 1}]},
    )
    assert response.status_code == 400
    assert "Select a type" in response.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_zero_quantity_is_a_request_error(client, db_session, auth_headers):
    oil = await _filter(db_session)

    response = await client.post(
        "/orders",
        headers=auth_headers,
        json={"items": [{"product_id": oil.id, "quantity": 0}]},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_order_items_keep_name_after_catalog_change(
    client, db_session, auth_headers
):
    oil = await _filter(db_session)
    response = await client.post(
        "/orders",
        headers=auth_headers,
        json={"items": [{"product_id": oil.id, "quantity": 1}]},
    )
    order_id = response.json()["id"]

    oil.name = "Oil filter (discontinued)"
    oil.price = 9999
    await db_session.commit()

    response = await client.get(f"/orders/{order_id}", headers=auth_headers)
    item = response.json()["items"][0]
    assert item["product_name"] == "Oil filter"
    assert item["original_price"] == 2500


# ---------------------------------------------------------------------------
# Quote
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_quote_does_not_store_anything(client, db_session):
    customer = CustomerFactory.create(discount_percent=10)
    db_session.add(customer)
    await db_session.commit()
    pads = await _pads(db_session)

    response = await client.post(
        "/orders/quote",
        headers=bearer(customer.id),
        json={
            "items": [
                {"product_id": pads.id, "type_id": pads.types[1].id, "quantity": 3}
            ],
            "payment_method": "installment",
        },
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["final_payable"] == 24840
    assert data["installment_fee"] == 3240
    assert data["lines"][0]["price"] == 8000

    response = await client.get("/orders", headers=bearer(customer.id))
    assert response.json() == []


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_order_history_is_per_customer(client, db_session, auth_headers):
    oil = await _filter(db_session)
    other = CustomerFactory.create()
    db_session.add(other)
    await db_session.commit()

    body = {"items": [{"product_id": oil.id, "quantity": 1}]}
    first = (await client.post("/orders", headers=auth_headers, json=body)).json()
    second = (await client.post("/orders", headers=auth_headers, json=body)).json()
    foreign = (await client.post("/orders", headers=bearer(other.id), json=body)).json()

    assert second["user_order_number"] == 2
    assert foreign["user_order_number"] == 1

    response = await client.get("/orders", headers=auth_headers)
    assert [o["id"] for o in response.json()] == [second["id"], first["id"]]

    response = await client.get(f"/orders/{foreign['id']}", headers=auth_headers)
    assert response.status_code == 404
