"""Admin reports router: order rows and totals for a date window."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from libs.db.session import get_async_db
from services.shop_service.models import Customer, Order, OrderStatus
from services.shop_service.routers._helpers import get_admin_customer
from services.shop_service.schemas import (
    ReportParams,
    ReportResponse,
    ReportRow,
    ReportSummary,
)
from services.shop_service.services import order_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-reports"])


def _report_row(order: Order) -> ReportRow:
    return ReportRow(
        order_id=order.id,
        user_order_number=order.user_order_number,
        user_id=order.user_id,
        user_name=order.customer.name,
        user_phone=order.customer.phone,
        user_car=order.customer.car_brand,
        created_at=order.created_at,
        payment_method=order.payment_method,
        status=order.status,
        items_count=sum(item.quantity for item in order.items),
        total_amount=order.total_amount,
        discount_percent=order.discount_percent,
        installment_fee=order.installment_fee,
        final_amount=order.final_amount,
    )


async def _build_report(db: AsyncSession, params: ReportParams) -> ReportResponse:
    orders = await order_service.report_orders(db, params)
    rows = [_report_row(o) for o in orders]
    summary = ReportSummary(
        orders=len(rows),
        total_amount=sum(r.total_amount for r in rows),
        final_amount=sum(r.final_amount for r in rows),
        approved_final_amount=sum(
            r.final_amount for r in rows if r.status is OrderStatus.APPROVED
        ),
    )
    return ReportResponse(
        date_from=params.date_from,
        date_to=params.date_to,
        user_id=params.user_id,
        rows=rows,
        summary=summary,
    )


@router.get("/reports/orders", response_model=ReportResponse)
async def orders_report(
    params: Annotated[ReportParams, Query()],
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """All orders created between ``date_from`` and ``date_to`` inclusive."""
    return await _build_report(db, params)


@router.get("/reports/client/{user_id}", response_model=ReportResponse)
async def client_report(
    user_id: int,
    params: Annotated[ReportParams, Query()],
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Same report restricted to one customer."""
    if await db.get(Customer, user_id) is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    scoped = params.model_copy(update={"user_id": user_id})
    return await _build_report(db, scoped)
