"""Integration tests for admin order reports."""

from datetime import datetime, timezone

import pytest
from services.shop_service.models import OrderStatus, PaymentMethod
from tests.factories import CustomerFactory, OrderFactory


def _at(day, hour=12):
    return datetime(2026, 3, day, hour, tzinfo=timezone.utc)


async def _seed(db_session):
    aidos = CustomerFactory.create(name="Aidos", car_brand="Camry")
    dana = CustomerFactory.create(name="Dana", car_brand="Lada")
    db_session.add_all([aidos, dana])
    await db_session.commit()

    db_session.add_all(
        [
            OrderFactory.create(aidos.id, 1, created_at=_at(1, 0)),
            OrderFactory.create(
                aidos.id,
                2,
                created_at=_at(2),
                status=OrderStatus.APPROVED,
                payment_method=PaymentMethod.INSTALLMENT,
                total_amount=20000,
                installment_fee=3000,
                final_amount=23000,
            ),
            OrderFactory.create(dana.id, 1, created_at=_at(3, 23)),
            OrderFactory.create(dana.id, 2, created_at=_at(4)),
        ]
    )
    await db_session.commit()
    return aidos, dana


@pytest.mark.asyncio
@pytest.mark.integration
async def test_orders_report_window_is_inclusive(client, db_session, admin_headers):
    await _seed(db_session)

    response = await client.get(
        "/admin/reports/orders",
        headers=admin_headers,
        params={"date_from": "2026-03-01", "date_to": "2026-03-03"},
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert [r["user_order_number"] for r in data["rows"]] == [1, 2, 1]
    assert data["summary"] == {
        "orders": 3,
        "total_amount": 40000,
        "final_amount": 43000,
        "approved_final_amount": 23000,
    }
    assert data["rows"][1]["installment_fee"] == 3000
    assert data["rows"][0]["items_count"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_client_report(client, db_session, admin_headers):
    aidos, dana = await _seed(db_session)

    response = await client.get(
        f"/admin/reports/client/{dana.id}",
        headers=admin_headers,
        params={"date_from": "2026-03-01", "date_to": "2026-03-31"},
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["user_id"] == dana.id
    assert {r["user_name"] for r in data["rows"]} == {"Dana"}
    assert data["summary"]["orders"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_client_report_unknown_customer(client, db_session, admin_headers):
    response = await client.get(
        "/admin/reports/client/9999",
        headers=admin_headers,
        params={"date_from": "2026-03-01", "date_to": "2026-03-31"},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reversed_range_rejected(client, db_session, admin_headers):
    response = await client.get(
        "/admin/reports/orders",
        headers=admin_headers,
        params={"date_from": "2026-03-10", "date_to": "2026-03-01"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reports_are_admin_only(client, db_session, auth_headers):
    response = await client.get(
        "/admin/reports/orders",
        headers=auth_headers,
        params={"date_from": "2026-03-01", "date_to": "2026-03-31"},
    )
    assert response.status_code == 403
