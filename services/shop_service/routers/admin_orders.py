"""Admin orders router: listing, counters, approve/reject."""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from libs.db.session import get_async_db
from services.shop_service.models import Customer
from services.shop_service.routers._helpers import get_admin_customer
from services.shop_service.schemas import (
    AdminOrderResponse,
    OrderCountsResponse,
    OrderListParams,
    OrderListResponse,
)
from services.shop_service.services import order_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-shop"])


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    params: Annotated[OrderListParams, Query()],
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """List orders with search, status filter and pagination."""
    orders, total = await order_service.list_orders(db, params)
    return OrderListResponse(
        items=[AdminOrderResponse.from_order(o) for o in orders],
        total=total,
        page=params.page,
        limit=params.limit,
        pages=math.ceil(total / params.limit) if total else 0,
    )


# Must stay above /orders/{order_id}
@router.get("/orders/count", response_model=OrderCountsResponse)
async def count_orders(
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Per-status counters for the admin tabs."""
    return OrderCountsResponse(**await order_service.count_orders_by_status(db))


@router.get("/orders/{order_id}", response_model=AdminOrderResponse)
async def get_order(
    order_id: int,
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_service.get_order(db, order_id)
    return AdminOrderResponse.from_order(order)


@router.patch("/orders/{order_id}/approve", response_model=AdminOrderResponse)
async def approve_order(
    order_id: int,
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Approve a pending order and credit the customer's loyalty count."""
    order = await order_service.approve_order(db, order_id, admin_id=current_user.id)
    return AdminOrderResponse.from_order(order)


@router.patch("/orders/{order_id}/reject", response_model=AdminOrderResponse)
async def reject_order(
    order_id: int,
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Reject a pending order."""
    order = await order_service.reject_order(db, order_id, admin_id=current_user.id)
    return AdminOrderResponse.from_order(order)
